"""Refresh-session model (one row per issued refresh token)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contacts_auth.core.extensions import db

from .account import Account
from .base import ReprMixin, UUIDPKMixin, as_utc


class RefreshSession(UUIDPKMixin, ReprMixin, db.Model):
    """
    Server-side state of a refresh token.

    Only an argon2 hash of the random refresh secret is stored; the row cannot
    be located from the plaintext, so verification scans candidates and
    checks each hash.

    Fields
    ------
    secret_hash : str
        argon2id hash of the refresh secret.
    owner_id : str
        Owning :class:`Account` (cascade-deleted with it).
    expires_at : datetime
        Absolute expiry instant (UTC).
    revoked_at : datetime | None
        Revocation instant; ``None`` while the session is active. Once set it
        is never cleared.
    created_at : datetime
        Insert timestamp.
    """

    __tablename__ = "sessions"

    secret_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    owner: Mapped[Account] = relationship(Account)

    # Deliberately no index on anything derived from the secret.
    __table_args__ = (Index("ix_sessions_owner_id", "owner_id"),)

    @property
    def is_revoked(self) -> bool:
        """``True`` once the session has been consumed or logged out."""
        return self.revoked_at is not None

    def is_expired(self, now: datetime) -> bool:
        """
        Return whether the session is past its absolute expiry.

        :param now: Timezone-aware reference instant.
        :type now: datetime
        :rtype: bool
        """
        return as_utc(self.expires_at) <= now
