"""Refresh-session repository: the session store."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.orm import joinedload

from contacts_auth.models.session import RefreshSession
from contacts_auth.repositories.base import BaseRepository


class SessionRepository(BaseRepository[RefreshSession]):
    """Persistence-only repository for :class:`RefreshSession`.

    Rows are located by primary key or owner only; nothing here can look a
    session up by its secret, since only the secret's hash is stored.
    """

    model = RefreshSession

    def _default_eagerload(self, stmt):
        """Load the owning account alongside each session (1:1 → joinedload)."""
        return stmt.options(joinedload(RefreshSession.owner))

    # ------------------------------ Creation ------------------------------

    def create(self, *, owner_id: str, secret_hash: str, expires_at: datetime) -> RefreshSession:
        """Insert an active session row.

        :param owner_id: Owning account id.
        :type owner_id: str
        :param secret_hash: argon2 hash of the refresh secret.
        :type secret_hash: str
        :param expires_at: Absolute expiry instant.
        :type expires_at: datetime
        :returns: Flushed session instance.
        :rtype: RefreshSession
        """
        return self.add(
            RefreshSession(
                owner_id=owner_id,
                secret_hash=secret_hash,
                expires_at=expires_at,
                revoked_at=None,
            )
        )

    # ------------------------------ Scans ------------------------------

    def list_active(self) -> list[RefreshSession]:
        """Return every non-revoked session with its owner, oldest first."""
        stmt = self._default_eagerload(
            select(RefreshSession)
            .where(RefreshSession.revoked_at.is_(None))
            .order_by(RefreshSession.created_at.asc(), RefreshSession.id.asc())
        )
        return list(self.session.execute(stmt).scalars().unique().all())

    def list_all(self) -> list[RefreshSession]:
        """Return every session, revoked or not, with its owner."""
        stmt = self._default_eagerload(
            select(RefreshSession).order_by(RefreshSession.created_at.asc(), RefreshSession.id.asc())
        )
        return list(self.session.execute(stmt).scalars().unique().all())

    def list_for_owner(self, owner_id: str) -> list[RefreshSession]:
        """Return all sessions (any state) owned by ``owner_id``."""
        stmt = select(RefreshSession).where(RefreshSession.owner_id == owner_id)
        return list(self.session.execute(stmt).scalars().all())

    # ------------------------------ Mutations ------------------------------

    def revoke_if_active(self, session_id: str, *, now: datetime) -> bool:
        """Atomically mark a session revoked unless it already is.

        Issued as a single conditional ``UPDATE ... WHERE revoked_at IS NULL``
        so that, of two transactions racing on the same row, exactly one sees
        an affected row.

        :param session_id: Session primary key.
        :type session_id: str
        :param now: Revocation instant.
        :type now: datetime
        :returns: ``True`` if this call performed the revocation.
        :rtype: bool
        """
        stmt = (
            update(RefreshSession)
            .where(RefreshSession.id == session_id, RefreshSession.revoked_at.is_(None))
            .values(revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return result.rowcount == 1

    def delete_by_id(self, session_id: str) -> bool:
        """Hard-delete a session row. :returns: ``True`` if a row was removed."""
        stmt = (
            delete(RefreshSession)
            .where(RefreshSession.id == session_id)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount == 1

    def delete_for_owner(self, owner_id: str) -> int:
        """Delete every session owned by ``owner_id``. :returns: rows removed."""
        stmt = (
            delete(RefreshSession)
            .where(RefreshSession.owner_id == owner_id)
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)

    def delete_expired(self, *, now: datetime) -> int:
        """Delete sessions whose ``expires_at`` is at or before ``now``.

        :param now: Reference instant.
        :type now: datetime
        :returns: Number of rows removed.
        :rtype: int
        """
        stmt = (
            delete(RefreshSession)
            .where(RefreshSession.expires_at <= now)
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)
