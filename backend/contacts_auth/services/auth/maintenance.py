"""Out-of-band housekeeping for the session store."""

from __future__ import annotations

import logging

from contacts_auth.services._shared.base import BaseService

logger = logging.getLogger(__name__)


class SessionMaintenanceService(BaseService):
    """Garbage-collect refresh sessions that can never be used again."""

    def purge_expired(self) -> int:
        """
        Delete every session whose expiry is at or before now.

        :returns: Number of rows removed.
        :rtype: int
        """
        with self.rw_uow() as uow:
            removed = uow.sessions.delete_expired(now=self.now_utc())
        logger.info("Expired sessions purged", extra={"removed": removed})
        return removed
