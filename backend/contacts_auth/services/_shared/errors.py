"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP directly. They serve as stable contracts between repositories,
domain models, and application services.

Each error carries an :class:`ErrorKind` tag; the translation to HTTP
responses (RFC 7807) is a single kind → status table in
``contacts_auth/core/errors.py``.
"""

from __future__ import annotations

from enum import Enum

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str, *columns: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_accounts_email').
    *columns : str
        ``table.column`` markers for dialects that report the column instead
        of the constraint name (SQLite: ``UNIQUE constraint failed: accounts.email``).

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.
    """
    # PostgreSQL includes the constraint name in the error message
    message = str(exc.orig).lower() if exc.orig else ""
    return any(marker.lower() in message for marker in (constraint_name, *columns))


class ErrorKind(str, Enum):
    """Stable, machine-readable tag of a service failure."""

    EMAIL_ALREADY_IN_USE = "email_already_in_use"
    INVALID_CREDENTIALS = "invalid_credentials"
    INVALID_REFRESH_TOKEN = "invalid_refresh_token"
    REFRESH_TOKEN_EXPIRED = "refresh_token_expired"
    ACCOUNT_NOT_FOUND = "account_not_found"


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - Subclasses pin :attr:`kind` and a default user-facing message.
    - The HTTP boundary maps :attr:`kind` to a status code.
    """

    kind: ErrorKind
    default_message: str = "Service error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(ServiceError):
    """Raised when an entity is not found in the repository."""


class ConflictError(ServiceError):
    """Raised when a unique constraint or business rule conflict occurs."""


class AuthenticationError(ServiceError):
    """Raised when presented credentials or tokens are not acceptable."""


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


class EmailAlreadyInUse(ConflictError):
    kind = ErrorKind.EMAIL_ALREADY_IN_USE
    default_message = "Email already registered"


class InvalidCredentials(AuthenticationError):
    """Unknown email or wrong password; the two are never distinguished."""

    kind = ErrorKind.INVALID_CREDENTIALS
    default_message = "Invalid credentials"


class InvalidRefreshToken(AuthenticationError):
    kind = ErrorKind.INVALID_REFRESH_TOKEN
    default_message = "Invalid refresh token"


class RefreshTokenExpired(AuthenticationError):
    kind = ErrorKind.REFRESH_TOKEN_EXPIRED
    default_message = "Refresh token expired"


class AccountNotFound(NotFoundError):
    kind = ErrorKind.ACCOUNT_NOT_FOUND
    default_message = "Account not found"
