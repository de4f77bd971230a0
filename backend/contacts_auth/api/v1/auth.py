"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, request

from contacts_auth.api.deps import get_auth_service, json_response, timing
from contacts_auth.schemas import (
    AuthResultSchema,
    LoginSchema,
    MessageSchema,
    RefreshTokenSchema,
    RegisterSchema,
    TokenPairSchema,
)
from contacts_auth.services import LoginIn, LogoutIn, RefreshIn, RegisterIn

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_token_schema = RefreshTokenSchema()
auth_result_schema = AuthResultSchema()
token_pair_schema = TokenPairSchema()
message_schema = MessageSchema()


@bp.post("/register")
@timing
def register():
    """Register a new account and sign it in."""

    data = register_schema.load(request.get_json(silent=True) or {})
    result = get_auth_service().register(RegisterIn(**data))
    return json_response({"data": auth_result_schema.dump(result)}, status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue an access/refresh pair."""

    data = login_schema.load(request.get_json(silent=True) or {})
    result = get_auth_service().login(LoginIn(**data))
    return json_response({"data": auth_result_schema.dump(result)})


@bp.post("/refresh")
@timing
def refresh():
    """Rotate a refresh token."""

    data = refresh_token_schema.load(request.get_json(silent=True) or {})
    pair = get_auth_service().refresh(RefreshIn(refresh_token=data["refresh_token"]))
    return json_response({"data": token_pair_schema.dump(pair)})


@bp.post("/logout")
@timing
def logout():
    """Revoke a refresh token; always acknowledges."""

    data = refresh_token_schema.load(request.get_json(silent=True) or {})
    ack = get_auth_service().logout(LogoutIn(refresh_token=data["refresh_token"]))
    return json_response({"data": message_schema.dump(ack)})
