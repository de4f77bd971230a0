"""Account repository: the credential store."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from contacts_auth.models.account import Account, normalize_email
from contacts_auth.repositories.base import BaseRepository


class AccountRepository(BaseRepository[Account]):
    """Persistence-only repository for :class:`Account`.

    This repository focuses on safe lookup and credential persistence.
    It never touches secrets in the clear; hashing and token issuance live
    in the service layer.
    """

    model = Account

    def _updatable_fields(self):
        """Profile columns only; the password hash has its own setter."""
        return {"display_name", "email"}

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> Account | None:
        """Fetch an account by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: Account instance or ``None`` when not found.
        :rtype: Account | None
        """
        stmt = select(Account).where(Account.email == normalize_email(email))
        result = self.session.execute(stmt).scalars().first()
        return cast(Account | None, result)

    def exists_by_email(self, email: str, *, exclude_id: str | None = None) -> bool:
        """Return ``True`` when an account with the provided email exists.

        :param email: Email address to normalise and search.
        :type email: str
        :param exclude_id: Account to ignore (the one being updated).
        :type exclude_id: str | None
        :returns: ``True`` if a row is found; otherwise ``False``.
        :rtype: bool
        """
        stmt = select(Account.id).where(Account.email == normalize_email(email))
        if exclude_id is not None:
            stmt = stmt.where(Account.id != exclude_id)
        return bool(self.session.execute(stmt).first())

    # ---------------------------- Credential ops ----------------------------

    def set_password_hash(self, account: Account, password_hash: str) -> None:
        """Persist an already-computed password hash and flush the session.

        :param account: Account to mutate.
        :type account: Account
        :param password_hash: Encoded argon2 hash.
        :type password_hash: str
        """
        account.password_hash = password_hash
        self.flush()
