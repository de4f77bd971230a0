from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, Protocol


class TokenProvider(Protocol):
    """
    Signs and reads access tokens for an account id.

    Implementations provide :meth:`create_access_token` and :meth:`decode`;
    the claim accessors below work on top of ``decode``.
    """

    def create_access_token(
        self,
        *,
        identity: str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str: ...

    def decode(self, token: str) -> dict[str, Any]: ...

    def get_subject(self, token: str) -> str:
        return str(self.decode(token)["sub"])

    def get_expires_at(self, token: str) -> datetime:
        return datetime.fromtimestamp(int(self.decode(token)["exp"]), tz=UTC)


class StubTokenProvider(TokenProvider):
    """In-memory provider: tokens are ``access.<id>.<n>`` and claims are kept in a dict."""

    def __init__(self) -> None:
        self._claims: dict[str, dict[str, Any]] = {}

    def create_access_token(
        self,
        *,
        identity: str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        issued = datetime.now(tz=UTC)
        expires = issued + (expires_delta or timedelta(minutes=15))
        token = f"access.{identity}.{len(self._claims) + 1}"
        self._claims[token] = {
            "sub": identity,
            "type": "access",
            "iat": int(issued.timestamp()),
            "exp": int(expires.timestamp()),
            **(additional_claims or {}),
        }
        return token

    def decode(self, token: str) -> dict[str, Any]:
        return self._claims[token]
