"""
Token issuance: signed access JWTs plus opaque, hashed refresh secrets.

The refresh secret is random text with no structure; the server keeps only its
argon2 hash in a :class:`~contacts_auth.models.session.RefreshSession` row.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from contacts_auth.core.security import SecretHasher
from contacts_auth.repositories.session import SessionRepository
from contacts_auth.services._shared.ports import TokenProvider
from contacts_auth.services.auth.dto import AuthTokenConfig, TokenPairOut

logger = logging.getLogger(__name__)

DEFAULT_DURATION = timedelta(minutes=15)

_UNITS: dict[str, timedelta] = {
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
}


def parse_duration(value: str | int | timedelta) -> timedelta:
    """
    Convert a compact duration string such as ``"15m"`` or ``"7d"`` to a timedelta.

    The last character is the unit (``s``, ``m``, ``h`` or ``d``) and the rest
    an integer amount. Integers are read as seconds. Anything that does not
    parse yields :data:`DEFAULT_DURATION` and a warning.

    :param value: Duration string, number of seconds, or a timedelta.
    :type value: str | int | timedelta
    :returns: Parsed duration.
    :rtype: timedelta
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return timedelta(seconds=value)

    text = str(value).strip()
    unit = _UNITS.get(text[-1:].lower())
    amount = text[:-1].strip()
    if unit is None or not amount.isdecimal():
        logger.warning(
            "Unrecognized duration %r; using %s",
            value,
            DEFAULT_DURATION,
        )
        return DEFAULT_DURATION
    return int(amount) * unit


@dataclass(frozen=True, slots=True)
class PreparedRefresh:
    """A freshly generated refresh secret together with its hash."""

    secret: str
    secret_hash: str


class TokenIssuer:
    """
    Issue access/refresh pairs for an account.

    :param token_provider: Adapter that signs access JWTs.
    :param hasher: Hasher applied to refresh secrets before persistence.
    :param token_cfg: Access/refresh lifetimes.
    """

    REFRESH_SECRET_BYTES = 48

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        hasher: SecretHasher,
        token_cfg: AuthTokenConfig,
    ) -> None:
        self.tokens = token_provider
        self.hasher = hasher
        self.cfg = token_cfg

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        *,
        token_provider: TokenProvider,
        hasher: SecretHasher,
    ) -> TokenIssuer:
        """Build an issuer reading ``ACCESS_TOKEN_TTL`` / ``REFRESH_TOKEN_TTL``."""
        token_cfg = AuthTokenConfig(
            access_expires=parse_duration(config.get("ACCESS_TOKEN_TTL", "15m")),
            refresh_expires=parse_duration(config.get("REFRESH_TOKEN_TTL", "7d")),
        )
        return cls(token_provider=token_provider, hasher=hasher, token_cfg=token_cfg)

    # ------------------------------------------------------------------ #
    # Building blocks
    # ------------------------------------------------------------------ #

    @classmethod
    def new_refresh_secret(cls) -> str:
        """Return a URL-safe random secret (384 bits of entropy)."""
        return secrets.token_urlsafe(cls.REFRESH_SECRET_BYTES)

    def prepare_refresh(self) -> PreparedRefresh:
        """
        Generate and hash a refresh secret.

        Call this before opening a write transaction so the argon2 cost is not
        paid while row locks are held.
        """
        secret = self.new_refresh_secret()
        return PreparedRefresh(secret=secret, secret_hash=self.hasher.hash(secret))

    def access_token_for(self, *, account_id: str, email: str) -> str:
        """
        Sign an access JWT for ``account_id``.

        :param account_id: Subject (``sub`` claim).
        :type account_id: str
        :param email: Value of the ``email`` claim.
        :type email: str
        :returns: Encoded JWT.
        :rtype: str
        """
        return self.tokens.create_access_token(
            identity=str(account_id),
            additional_claims={"email": email},
            expires_delta=self.cfg.access_expires,
        )

    # ------------------------------------------------------------------ #
    # Issuance
    # ------------------------------------------------------------------ #

    def issue(
        self,
        sessions: SessionRepository,
        *,
        account_id: str,
        email: str,
        now: datetime,
        prepared: PreparedRefresh | None = None,
    ) -> TokenPairOut:
        """
        Persist a new active session and return the token pair.

        Must run inside the caller's write Unit of Work so the session row
        commits or rolls back together with the rest of the use-case.

        :param sessions: Session repository bound to the current UoW.
        :type sessions: SessionRepository
        :param account_id: Owning account id.
        :type account_id: str
        :param email: Account email for the access-token claim.
        :type email: str
        :param now: Issuance instant; the session expires at ``now + refresh TTL``.
        :type now: datetime
        :param prepared: Secret/hash pair from :meth:`prepare_refresh`.
        :type prepared: PreparedRefresh | None
        :returns: Access JWT and plaintext refresh secret.
        :rtype: TokenPairOut
        """
        prepared = prepared or self.prepare_refresh()
        session = sessions.create(
            owner_id=account_id,
            secret_hash=prepared.secret_hash,
            expires_at=now + self.cfg.refresh_expires,
        )
        logger.info(
            "Refresh session issued",
            extra={"account_id": account_id, "session_id": session.id},
        )
        return TokenPairOut(
            access_token=self.access_token_for(account_id=account_id, email=email),
            refresh_token=prepared.secret,
        )
