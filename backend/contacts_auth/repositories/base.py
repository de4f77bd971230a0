"""Shared persistence helpers for the credential and session stores.

Repositories are thin: they translate calls into SQLAlchemy statements against
the session of the current Unit of Work and never commit or roll back.
Services decide transaction boundaries.

Conventions
-----------
* Every write flushes, so generated keys and constraint violations surface
  inside the calling Unit of Work rather than at commit time.
* Attribute updates go through :meth:`BaseRepository.update`, which accepts
  only the keys listed by ``_updatable_fields``. Credential columns are set
  through dedicated methods instead.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from contacts_auth.core.extensions import db

E = TypeVar("E")


class BaseRepository(Generic[E]):
    """Primary-key access and whitelisted updates for one mapped model.

    Subclasses set ``model`` and may override ``_default_eagerload`` and
    ``_updatable_fields``.

    :param session: Session of the enclosing Unit of Work. Defaults to the
        Flask-scoped ``db.session``.
    :type session: :class:`sqlalchemy.orm.Session` | None
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        self._session: Session | None = session

    @property
    def session(self) -> Session:
        """Session the repository reads and writes through."""
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ Hooks ------------------------------------

    def _default_eagerload(self, stmt: Select[Any]) -> Select[Any]:
        """Attach loader options to primary-key and scan queries."""
        return stmt

    def _updatable_fields(self) -> set[str]:
        """Keys :meth:`update` may assign. Empty means nothing is assignable."""
        return set()

    # ------------------------------ Reads ------------------------------------

    def _by_id(self, entity_id: Any) -> Select[Any]:
        pk = getattr(self.model, "id", None)
        if pk is None:
            raise RuntimeError(f"{self.model.__name__} has no 'id' column.")
        return self._default_eagerload(select(self.model).where(pk == entity_id))

    def get(self, entity_id: Any) -> E | None:
        """
        Load an entity by primary key.

        :param entity_id: Primary-key value.
        :returns: Entity or ``None``.
        :rtype: E | None
        """
        return cast(E | None, self.session.execute(self._by_id(entity_id)).scalars().first())

    def get_for_update(self, entity_id: Any) -> E | None:
        """
        Load an entity by primary key and lock its row (``SELECT ... FOR UPDATE``).

        Dialects without row locks (SQLite) ignore the clause.

        :param entity_id: Primary-key value.
        :returns: Entity or ``None``.
        :rtype: E | None
        """
        stmt = self._by_id(entity_id).with_for_update()
        return cast(E | None, self.session.execute(stmt).scalars().first())

    # ------------------------------ Writes -----------------------------------

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so its key and constraints are checked now."""
        self.session.add(instance)
        self.flush()
        return instance

    def delete(self, instance: E) -> None:
        """Delete ``instance`` and flush."""
        self.session.delete(instance)
        self.flush()

    def flush(self) -> None:
        self.session.flush()

    def update(self, instance: E, **fields: Any) -> E:
        """
        Assign whitelisted attributes and flush.

        Assignment goes through ``setattr`` so model ``@validates`` hooks run.

        :param instance: Entity to mutate.
        :param fields: Attribute values keyed by column name.
        :returns: The mutated instance.
        :raises ValueError: If a key is not in ``_updatable_fields``.
        """
        for key, value in self._checked_updates(fields).items():
            setattr(instance, key, value)
        self.flush()
        return instance

    def _checked_updates(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        allowed = self._updatable_fields()
        rejected = sorted(k for k in fields if k not in allowed)
        if rejected:
            raise ValueError(f"Unknown or non-updatable fields: {rejected}")
        return dict(fields)
