# contacts_auth/services/auth/service.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError

from contacts_auth.core.security import SecretHasher
from contacts_auth.models.account import Account
from contacts_auth.models.base import as_utc
from contacts_auth.models.session import RefreshSession
from contacts_auth.repositories.account import AccountRepository
from contacts_auth.repositories.session import SessionRepository
from contacts_auth.services._shared.base import BaseService
from contacts_auth.services._shared.errors import (
    EmailAlreadyInUse,
    InvalidCredentials,
    InvalidRefreshToken,
    RefreshTokenExpired,
    violates,
)
from contacts_auth.services.accounts.service import to_public
from contacts_auth.services.auth.dto import (
    AuthResultOut,
    LoginIn,
    LogoutIn,
    LogoutOut,
    RefreshIn,
    RegisterIn,
    TokenPairOut,
)
from contacts_auth.services.auth.tokens import TokenIssuer

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _SessionCandidate:
    """Detached copy of a session row taken during a scan."""

    id: str
    owner_id: str
    owner_email: str
    secret_hash: str
    expires_at: datetime
    revoked: bool

    @classmethod
    def of(cls, session: RefreshSession) -> _SessionCandidate:
        return cls(
            id=session.id,
            owner_id=session.owner_id,
            owner_email=session.owner.email,
            secret_hash=session.secret_hash,
            expires_at=as_utc(session.expires_at),
            revoked=session.is_revoked,
        )


class AuthService(BaseService):
    """
    Authentication lifecycle service (register / login / refresh / logout).

    Refresh tokens are opaque random secrets. Only their argon2 hashes are
    stored, so a presented token is matched by scanning candidate sessions
    and verifying each hash. Rotation revokes the matched session with a
    compare-and-swap ``UPDATE`` before issuing the replacement, which makes
    concurrent refreshes of one token yield exactly one new pair.

    Hashing never runs inside a write transaction: secrets are hashed and
    stored hashes verified before the write Unit of Work opens.
    """

    # Scans must see one consistent set of rows.
    SCAN_ISOLATION = "REPEATABLE READ"

    def __init__(self, *, hasher: SecretHasher, issuer: TokenIssuer) -> None:
        """
        Initialize the service with its dependencies.

        :param hasher: argon2 hasher for passwords and refresh secrets.
        :param issuer: Token issuer (access JWT + refresh session).
        """
        super().__init__()
        self.hasher = hasher
        self.issuer = issuer

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> AuthResultOut:
        """
        Create an account and sign it in.

        :param dto: Registration input.
        :type dto: RegisterIn
        :returns: Public account data and a token pair.
        :rtype: AuthResultOut
        :raises EmailAlreadyInUse: If the email (case-insensitive) is taken.
        """
        password_hash = self.hasher.hash(dto.password)
        prepared = self.issuer.prepare_refresh()

        with self.rw_uow() as uow:
            accounts: AccountRepository = uow.accounts
            if accounts.exists_by_email(dto.email):
                raise EmailAlreadyInUse()

            try:
                account = accounts.add(
                    Account(
                        display_name=dto.display_name,
                        email=dto.email,
                        password_hash=password_hash,
                    )
                )
            except IntegrityError as exc:
                # Lost a race against a concurrent registration
                if violates(exc, "uq_accounts_email", "accounts.email"):
                    raise EmailAlreadyInUse() from exc
                raise

            pair = self.issuer.issue(
                uow.sessions,
                account_id=account.id,
                email=account.email,
                now=self.now_utc(),
                prepared=prepared,
            )
            result = AuthResultOut(
                account=to_public(account),
                access_token=pair.access_token,
                refresh_token=pair.refresh_token,
            )

        logger.info("Account registered", extra={"account_id": result.account.id})
        return result

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> AuthResultOut:
        """
        Authenticate credentials and issue a fresh token pair.

        Unknown email and wrong password are indistinguishable to the caller,
        both in the error raised and in the hashing work done.

        :param dto: Login input.
        :type dto: LoginIn
        :returns: Public account data and a token pair.
        :rtype: AuthResultOut
        :raises InvalidCredentials: If credentials do not match an account.
        """
        with self.ro_uow() as uow:
            account = uow.accounts.get_by_email(dto.email)
            stored = (account.id, account.password_hash) if account is not None else None

        if stored is None:
            self.hasher.verify_dummy(dto.password)
            logger.info("Login failed")
            raise InvalidCredentials()

        account_id, password_hash = stored
        if not self.hasher.verify(password_hash, dto.password):
            logger.info("Login failed", extra={"account_id": account_id})
            raise InvalidCredentials()

        new_hash = None
        if self.hasher.needs_rehash(password_hash):
            new_hash = self.hasher.hash(dto.password)
        prepared = self.issuer.prepare_refresh()

        with self.rw_uow() as uow:
            accounts: AccountRepository = uow.accounts
            account = accounts.get(account_id)
            if account is None:
                # Deleted between verification and issuance
                raise InvalidCredentials()
            if new_hash is not None:
                accounts.set_password_hash(account, new_hash)

            pair = self.issuer.issue(
                uow.sessions,
                account_id=account.id,
                email=account.email,
                now=self.now_utc(),
                prepared=prepared,
            )
            result = AuthResultOut(
                account=to_public(account),
                access_token=pair.access_token,
                refresh_token=pair.refresh_token,
            )

        logger.info("Login succeeded", extra={"account_id": account_id})
        return result

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Rotate a refresh token and emit a new token pair.

        Security
        --------
        - Only active sessions are candidates; a revoked (rotated or logged
          out) token never matches.
        - An expired match is deleted and reported as expired.
        - The revoke is conditional on the row still being active, so the
          loser of a concurrent rotation gets ``InvalidRefreshToken``.

        :param dto: Refresh input.
        :type dto: RefreshIn
        :returns: New access/refresh pair.
        :rtype: TokenPairOut
        :raises InvalidRefreshToken: If no active session matches.
        :raises RefreshTokenExpired: If the matching session has expired.
        """
        with self.ro_uow(isolation=self.SCAN_ISOLATION) as uow:
            sessions: SessionRepository = uow.sessions
            candidates = [_SessionCandidate.of(s) for s in sessions.list_active()]

        match = self._find_match(candidates, dto.refresh_token)
        if match is None:
            logger.info("Refresh rejected", extra={"scanned": len(candidates)})
            raise InvalidRefreshToken()

        now = self.now_utc()
        if match.expires_at <= now:
            with self.rw_uow() as uow:
                uow.sessions.delete_by_id(match.id)
            # Raised after the UoW commits so the deletion sticks.
            logger.info(
                "Refresh session expired",
                extra={"account_id": match.owner_id, "session_id": match.id},
            )
            raise RefreshTokenExpired()

        prepared = self.issuer.prepare_refresh()
        with self.rw_uow() as uow:
            if not uow.sessions.revoke_if_active(match.id, now=now):
                logger.info(
                    "Refresh lost rotation race",
                    extra={"account_id": match.owner_id, "session_id": match.id},
                )
                raise InvalidRefreshToken()
            pair = self.issuer.issue(
                uow.sessions,
                account_id=match.owner_id,
                email=match.owner_email,
                now=now,
                prepared=prepared,
            )

        logger.info(
            "Refresh session rotated",
            extra={"account_id": match.owner_id, "session_id": match.id},
        )
        return pair

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> LogoutOut:
        """
        Revoke the session matching the presented refresh token, if any.

        Always acknowledges, whether the token matched an active session, a
        revoked one, or nothing at all. Other sessions are never touched.

        :param dto: Logout input.
        :type dto: LogoutIn
        :returns: Acknowledgment.
        :rtype: LogoutOut
        """
        with self.ro_uow(isolation=self.SCAN_ISOLATION) as uow:
            candidates = [_SessionCandidate.of(s) for s in uow.sessions.list_all()]

        match = self._find_match(candidates, dto.refresh_token)
        if match is not None and not match.revoked:
            with self.rw_uow() as uow:
                uow.sessions.revoke_if_active(match.id, now=self.now_utc())
            logger.info(
                "Refresh session revoked",
                extra={"account_id": match.owner_id, "session_id": match.id},
            )

        return LogoutOut()

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def _find_match(
        self, candidates: list[_SessionCandidate], presented: str
    ) -> _SessionCandidate | None:
        """Return the first candidate whose stored hash verifies ``presented``."""
        for candidate in candidates:
            if self.hasher.verify(candidate.secret_hash, presented):
                return candidate
        return None
