# contacts_auth/services/_shared/base.py
from __future__ import annotations

from datetime import UTC, datetime

from contacts_auth.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork


class BaseService:
    """
    Common plumbing for the account and session services.

    Notes
    -----
    - Every database touch goes through :meth:`rw_uow` or :meth:`ro_uow`;
      services never reach for ``db.session`` directly.
    - Failures are raised as ``ServiceError`` subclasses and mapped to HTTP
      in ``contacts_auth.core.errors``.
    - :meth:`now_utc` is the single clock, so tests can freeze it.
    """

    READ_ISOLATION = "READ COMMITTED"

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """Open a read-write Unit of Work that commits on clean exit."""
        return SQLAlchemyUnitOfWork()

    def ro_uow(self, *, isolation: str | None = None) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Open a read-only Unit of Work.

        :param isolation: Isolation level for the snapshot. Defaults to
            :attr:`READ_ISOLATION`.
        :type isolation: str | None
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(isolation_level=isolation or self.READ_ISOLATION)

    @staticmethod
    def now_utc() -> datetime:
        """Return the current instant as an aware UTC datetime."""
        return datetime.now(UTC)
