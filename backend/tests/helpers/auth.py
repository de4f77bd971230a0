"""Access-token helpers for API tests (need an app context)."""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from flask_jwt_extended import create_access_token


def issue_token(account_id: str, expires_delta: timedelta | None = None) -> str:
    """Sign an access token for ``account_id``; default lifetime from config."""
    kwargs: dict[str, Any] = {} if expires_delta is None else {"expires_delta": expires_delta}
    return create_access_token(identity=account_id, **kwargs)


def expired_token(account_id: str) -> str:
    return issue_token(account_id, timedelta(seconds=-1))


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
