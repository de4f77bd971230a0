"""Endpoints for the authenticated account (``/users/me``)."""

from __future__ import annotations

from flask import Blueprint, request

from contacts_auth.api.deps import (
    current_account_id,
    empty_response,
    get_account_service,
    json_response,
    require_auth,
    timing,
)
from contacts_auth.schemas import AccountSchema, PasswordChangeSchema, ProfileUpdateSchema
from contacts_auth.services import PasswordChangeIn, ProfileUpdateIn

bp = Blueprint("users", __name__)

account_schema = AccountSchema()
profile_update_schema = ProfileUpdateSchema()
password_change_schema = PasswordChangeSchema()


@bp.get("/me")
@require_auth
@timing
def get_me():
    """Return the authenticated account's profile."""

    account = get_account_service().get_profile(current_account_id())
    return json_response({"data": account_schema.dump(account)})


@bp.patch("/me")
@require_auth
@timing
def update_me():
    """Update display name and/or email."""

    data = profile_update_schema.load(request.get_json(silent=True) or {})
    account = get_account_service().update_profile(current_account_id(), ProfileUpdateIn(**data))
    return json_response({"data": account_schema.dump(account)})


@bp.patch("/me/password")
@require_auth
@timing
def change_password():
    """Change the password after checking the current one."""

    data = password_change_schema.load(request.get_json(silent=True) or {})
    get_account_service().change_password(current_account_id(), PasswordChangeIn(**data))
    return empty_response()


@bp.delete("/me")
@require_auth
@timing
def delete_me():
    """Delete the account and every refresh session it owns."""

    get_account_service().delete_account(current_account_id())
    return empty_response()
