"""
DTOs for AccountService.

Data Transfer Objects (DTOs) isolate the service layer from ORM models,
ensuring clear input/output contracts and type safety. No DTO here ever
carries a password hash.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class ProfileUpdateIn:
    """
    Input DTO for updating profile fields.

    :param display_name: Optional new display name.
    :type display_name: str | None
    :param email: Optional new login email.
    :type email: str | None
    """

    display_name: str | None = None
    email: str | None = None


@dataclass(frozen=True, slots=True)
class PasswordChangeIn:
    """
    Input DTO for changing an account's password.

    :param current_password: Password the caller claims is current.
    :type current_password: str
    :param new_password: New password (raw).
    :type new_password: str
    """

    current_password: str
    new_password: str


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class AccountPublicOut:
    """
    Output DTO representing public-safe account data.

    :param id: Account identifier.
    :type id: str
    :param display_name: Display name.
    :type display_name: str
    :param email: Login email.
    :type email: str
    :param created_at: Creation timestamp.
    :type created_at: datetime | None
    :param updated_at: Last update timestamp.
    :type updated_at: datetime | None
    """

    id: str
    display_name: str
    email: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
