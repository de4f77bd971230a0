"""Service wiring and small view helpers shared by the v1 blueprints."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, jsonify, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from contacts_auth.core.security import SecretHasher
from contacts_auth.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
from contacts_auth.services import AccountService, AuthService, TokenIssuer

F = TypeVar("F", bound=Callable[..., Any])


def get_hasher() -> SecretHasher:
    """Return the app-wide :class:`SecretHasher` built from ``ARGON2_*`` config."""

    hasher = current_app.extensions.get("secret_hasher")
    if hasher is None:
        hasher = SecretHasher.from_config(current_app.config)
        current_app.extensions["secret_hasher"] = hasher
    return cast(SecretHasher, hasher)


def get_auth_service() -> AuthService:
    """Wire an :class:`AuthService` against the current app configuration."""

    hasher = get_hasher()
    issuer = TokenIssuer.from_config(
        current_app.config,
        token_provider=JWTTokenProvider(),
        hasher=hasher,
    )
    return AuthService(hasher=hasher, issuer=issuer)


def get_account_service() -> AccountService:
    return AccountService(hasher=get_hasher())


def require_auth(func: F) -> F:
    """Reject the request with 401 unless it carries a valid access token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_account_id() -> str:
    """Return the ``sub`` claim of the verified access token."""

    return str(get_jwt_identity())


def json_response(payload: Any, *, status: int = 200) -> Response:
    """``application/json`` response with ``status``."""
    response = jsonify(payload)
    response.status_code = status
    return response


def empty_response(status: int = 204) -> Response:
    """Return a body-less response (``204 No Content`` by default)."""

    return Response(status=status)


def timing(func: F) -> F:
    """Log handler duration at DEBUG with ``endpoint`` and ``elapsed_ms``."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            current_app.logger.debug(
                "Handled request",
                extra={
                    "endpoint": request.endpoint,
                    "elapsed_ms": round((time.perf_counter() - start) * 1000, 2),
                },
            )

    return wrapper  # type: ignore[return-value]
