"""Convenience exports for application schemas."""

from __future__ import annotations

from .account import AccountSchema, PasswordChangeSchema, ProfileUpdateSchema
from .auth import (
    AuthResultSchema,
    LoginSchema,
    MessageSchema,
    RefreshTokenSchema,
    RegisterSchema,
    TokenPairSchema,
)

__all__ = [
    "AccountSchema",
    "ProfileUpdateSchema",
    "PasswordChangeSchema",
    "RegisterSchema",
    "LoginSchema",
    "RefreshTokenSchema",
    "TokenPairSchema",
    "AuthResultSchema",
    "MessageSchema",
]
