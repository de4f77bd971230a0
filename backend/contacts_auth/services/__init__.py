"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`contacts_auth.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``contacts_auth.services._shared.base``)
    * :class:`BaseService`

- Auth services (from ``contacts_auth.services.auth``)
    * :class:`AuthService`, :class:`TokenIssuer`, :class:`SessionMaintenanceService`
    * DTOs: :class:`RegisterIn`, :class:`LoginIn`, :class:`RefreshIn`,
      :class:`LogoutIn`, :class:`TokenPairOut`, :class:`AuthResultOut`,
      :class:`LogoutOut`, :class:`AuthTokenConfig`

- Account service (from ``contacts_auth.services.accounts``)
    * :class:`AccountService`
    * DTOs: :class:`ProfileUpdateIn`, :class:`PasswordChangeIn`,
      :class:`AccountPublicOut`
"""

from __future__ import annotations

from ._shared.base import BaseService
from .accounts.dto import AccountPublicOut, PasswordChangeIn, ProfileUpdateIn
from .accounts.service import AccountService
from .auth.dto import (
    AuthResultOut,
    AuthTokenConfig,
    LoginIn,
    LogoutIn,
    LogoutOut,
    RefreshIn,
    RegisterIn,
    TokenPairOut,
)
from .auth.maintenance import SessionMaintenanceService
from .auth.service import AuthService
from .auth.tokens import TokenIssuer, parse_duration

__all__ = [
    # Base
    "BaseService",
    # Auth
    "AuthService",
    "TokenIssuer",
    "SessionMaintenanceService",
    "parse_duration",
    "RegisterIn",
    "LoginIn",
    "RefreshIn",
    "LogoutIn",
    "TokenPairOut",
    "AuthResultOut",
    "LogoutOut",
    "AuthTokenConfig",
    # Accounts
    "AccountService",
    "ProfileUpdateIn",
    "PasswordChangeIn",
    "AccountPublicOut",
]
