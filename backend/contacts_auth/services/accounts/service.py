"""
AccountService
==============

Application service for an authenticated account managing itself:
- Profile retrieval and update (display name, email)
- Password change (requires the current password)
- Account deletion (removes every refresh session in the same transaction)
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from contacts_auth.core.security import SecretHasher
from contacts_auth.models.account import Account
from contacts_auth.repositories.account import AccountRepository
from contacts_auth.services._shared.base import BaseService
from contacts_auth.services._shared.errors import (
    AccountNotFound,
    EmailAlreadyInUse,
    InvalidCredentials,
    violates,
)
from contacts_auth.services.accounts.dto import (
    AccountPublicOut,
    PasswordChangeIn,
    ProfileUpdateIn,
)

logger = logging.getLogger(__name__)


def to_public(account: Account) -> AccountPublicOut:
    """Project an :class:`Account` onto its public, hash-free DTO."""
    return AccountPublicOut(
        id=account.id,
        display_name=account.display_name,
        email=account.email,
        created_at=account.created_at,
        updated_at=account.updated_at,
    )


class AccountService(BaseService):
    """
    Application service for the `Account` aggregate.

    Responsibilities
    ----------------
    - Retrieve and update profile fields safely.
    - Manage the password lifecycle.
    - Delete the account together with its sessions.
    """

    def __init__(self, *, hasher: SecretHasher) -> None:
        super().__init__()
        self.hasher = hasher

    # --------------------------------------------------------------------- #
    # Retrieval
    # --------------------------------------------------------------------- #

    def get_profile(self, account_id: str) -> AccountPublicOut:
        """
        Retrieve an account by identifier.

        :param account_id: Account primary key.
        :type account_id: str
        :returns: Public-safe account DTO.
        :rtype: AccountPublicOut
        :raises AccountNotFound: If the account does not exist.
        """
        with self.ro_uow() as uow:
            account = uow.accounts.get(account_id)
            if account is None:
                raise AccountNotFound()
            return to_public(account)

    # --------------------------------------------------------------------- #
    # Update profile
    # --------------------------------------------------------------------- #

    def update_profile(self, account_id: str, dto: ProfileUpdateIn) -> AccountPublicOut:
        """
        Update profile fields (display name, email).

        :param account_id: Account identifier.
        :type account_id: str
        :param dto: Input DTO containing new values.
        :type dto: ProfileUpdateIn
        :returns: Updated account DTO.
        :rtype: AccountPublicOut
        :raises AccountNotFound: When the account does not exist.
        :raises EmailAlreadyInUse: When the new email belongs to another account.
        """
        with self.rw_uow() as uow:
            repo: AccountRepository = uow.accounts
            account = repo.get_for_update(account_id)
            if account is None:
                raise AccountNotFound()

            updates: dict[str, Any] = {
                k: v
                for k, v in {
                    "display_name": dto.display_name,
                    "email": dto.email,
                }.items()
                if v is not None
            }

            if "email" in updates and repo.exists_by_email(updates["email"], exclude_id=account_id):
                raise EmailAlreadyInUse()

            try:
                repo.update(account, **updates)
            except IntegrityError as exc:
                if violates(exc, "uq_accounts_email", "accounts.email"):
                    raise EmailAlreadyInUse() from exc
                raise

            # updated_at is server-generated; reload before projecting
            repo.session.refresh(account)
            out = to_public(account)

        logger.info("Account updated", extra={"account_id": account_id})
        return out

    # --------------------------------------------------------------------- #
    # Password lifecycle
    # --------------------------------------------------------------------- #

    def change_password(self, account_id: str, dto: PasswordChangeIn) -> None:
        """
        Replace the password after checking the current one.

        Existing refresh sessions are left untouched.

        :param account_id: Account identifier.
        :type account_id: str
        :param dto: Current and new password.
        :type dto: PasswordChangeIn
        :raises AccountNotFound: When the account does not exist.
        :raises InvalidCredentials: When ``current_password`` is wrong.
        """
        with self.ro_uow() as uow:
            account = uow.accounts.get(account_id)
            if account is None:
                raise AccountNotFound()
            current_hash = account.password_hash

        if not self.hasher.verify(current_hash, dto.current_password):
            logger.info("Password change rejected", extra={"account_id": account_id})
            raise InvalidCredentials("Current password is incorrect")

        new_hash = self.hasher.hash(dto.new_password)

        with self.rw_uow() as uow:
            repo: AccountRepository = uow.accounts
            account = repo.get_for_update(account_id)
            if account is None:
                raise AccountNotFound()
            repo.set_password_hash(account, new_hash)

        logger.info("Password changed", extra={"account_id": account_id})

    # --------------------------------------------------------------------- #
    # Deletion
    # --------------------------------------------------------------------- #

    def delete_account(self, account_id: str) -> None:
        """
        Delete the account and all of its refresh sessions atomically.

        :param account_id: Account identifier.
        :type account_id: str
        :raises AccountNotFound: When the account does not exist.
        """
        with self.rw_uow() as uow:
            account = uow.accounts.get_for_update(account_id)
            if account is None:
                raise AccountNotFound()
            removed = uow.sessions.delete_for_owner(account_id)
            uow.accounts.delete(account)

        logger.info(
            "Account deleted",
            extra={"account_id": account_id, "removed": removed},
        )
