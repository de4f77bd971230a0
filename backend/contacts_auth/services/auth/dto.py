# contacts_auth/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from contacts_auth.services.accounts.dto import AccountPublicOut

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for account registration.

    :param display_name: Name shown in the contacts UI.
    :type display_name: str
    :param email: Login email (normalized by the model).
    :type email: str
    :param password: Raw password (hashed before persistence).
    :type password: str
    """

    display_name: str
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: Account email (compared case-insensitively).
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Opaque refresh secret returned at issuance.
    :type refresh_token: str
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param refresh_token: Opaque refresh secret to revoke.
    :type refresh_token: str
    """

    refresh_token: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Signed access JWT.
    :type access_token: str
    :param refresh_token: Opaque refresh secret (shown once).
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class AuthResultOut:
    """
    Output DTO for register/login: the account profile plus a token pair.

    :param account: Public account data (never the password hash).
    :type account: AccountPublicOut
    :param access_token: Signed access JWT.
    :type access_token: str
    :param refresh_token: Opaque refresh secret (shown once).
    :type refresh_token: str
    """

    account: AccountPublicOut
    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class LogoutOut:
    message: str = "Logged out successfully"


# ------------------------ Config DTO ------------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token emission configuration.

    :param access_expires: Access token lifetime.
    :type access_expires: timedelta
    :param refresh_expires: Refresh session lifetime.
    :type refresh_expires: timedelta
    """

    access_expires: timedelta
    refresh_expires: timedelta
