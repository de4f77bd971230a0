"""Transaction scopes handed to services.

Use :class:`SQLAlchemyUnitOfWork` for any use-case that writes and
:class:`SQLAlchemyReadOnlyUnitOfWork` for snapshots such as the refresh scan.
"""

from .base import UnitOfWork
from .sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

__all__ = ["UnitOfWork", "SQLAlchemyUnitOfWork", "SQLAlchemyReadOnlyUnitOfWork"]
