# contacts_auth/infra/jwt/flask_jwt_token_provider.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, cast

from flask_jwt_extended import create_access_token, decode_token

from contacts_auth.services._shared.ports import TokenProvider


@dataclass(slots=True)
class JWTTokenProvider(TokenProvider):
    """
    Access tokens signed by Flask-JWT-Extended with ``JWT_SECRET_KEY``.

    Needs an application context. ``decode`` raises PyJWT errors
    (``ExpiredSignatureError``, ``InvalidSignatureError``...) unchanged.
    """

    def create_access_token(
        self,
        *,
        identity: str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        extra: dict[str, Any] = {}
        if expires_delta is not None:
            # omitted means JWT_ACCESS_TOKEN_EXPIRES
            extra["expires_delta"] = expires_delta
        return cast(
            str,
            create_access_token(identity=identity, additional_claims=dict(additional_claims or {}), **extra),
        )

    def decode(self, token: str) -> dict[str, Any]:
        return cast(dict[str, Any], decode_token(token))
