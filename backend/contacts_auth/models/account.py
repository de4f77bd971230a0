"""Account model: the login identity of a contacts application user."""

from __future__ import annotations

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from contacts_auth.core.extensions import db

from .base import ReprMixin, TimestampMixin, UUIDPKMixin


def normalize_email(value: str) -> str:
    """Return the canonical (trimmed, lowercase) form used for storage and lookups."""
    return value.strip().lower()


class Account(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Authentication identity owning refresh sessions.

    Fields
    ------
    display_name : str
        Name shown in the contacts UI.
    email : str
        Login email. Stored normalized (lowercase, trimmed) so uniqueness is
        case-insensitive.
    password_hash : str
        argon2id hash of the password. Never serialized; hashing happens in
        :class:`contacts_auth.core.security.SecretHasher`.
    created_at : datetime
        Creation timestamp (from mixin).
    updated_at : datetime
        Update timestamp (from mixin).

    Notes
    -----
    The account does not hold a collection of sessions; the ``sessions``
    foreign key is declared ``ON DELETE CASCADE`` and the repository removes
    them explicitly in the same transaction.
    """

    __tablename__ = "accounts"

    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    __table_args__ = (UniqueConstraint("email", name="uq_accounts_email"),)

    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :param key: Field name (``email``).
        :type key: str
        :param value: Email to normalize.
        :type value: str
        :returns: Normalized email (lowercased/trimmed).
        :rtype: str
        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = normalize_email(value)
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("display_name")
    def _normalize_display_name(self, key: str, value: str) -> str:
        """Trim the display name and reject blank values."""
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Display name is required.")
        return value.strip()
