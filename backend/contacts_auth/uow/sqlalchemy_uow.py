"""
Units of Work over the Flask-SQLAlchemy scoped session.
"""

from __future__ import annotations

from contextlib import suppress

from flask import current_app
from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction, scoped_session

from contacts_auth.core.extensions import db
from contacts_auth.repositories import AccountRepository, SessionRepository
from contacts_auth.uow.base import UnitOfWork

# First keywords of statements that change data or schema.
_WRITE_KEYWORDS = (
    "insert",
    "update",
    "delete",
    "merge",
    "replace",
    "truncate",
    "create",
    "alter",
    "drop",
    "grant",
    "revoke",
)
_ISOLATION_LEVELS = frozenset({"READ UNCOMMITTED", "READ COMMITTED", "REPEATABLE READ", "SERIALIZABLE"})
# Dialects that understand ``SET TRANSACTION``; SQLite does not.
_SET_TRANSACTION_DIALECTS = frozenset({"postgresql", "mysql", "mariadb"})


class _Stores:
    """Bind both stores to one session."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.accounts = AccountRepository(session=session)
        self.sessions = SessionRepository(session=session)


class SQLAlchemyUnitOfWork(_Stores, UnitOfWork):
    """
    Read-write scope: commit when the block exits cleanly, roll back otherwise.

    The transaction starts lazily with the first statement.
    """

    def __init__(self) -> None:
        super().__init__(db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(_Stores, UnitOfWork):
    """
    Read-only scope used for lookups and the refresh-session snapshot.

    On entry the scope tries to open its own transaction. When it owns one on
    PostgreSQL or MySQL it issues ``SET TRANSACTION ISOLATION LEVEL`` and
    ``SET TRANSACTION READ ONLY``. When a transaction is already running
    (autobegin, or the test fixture's SAVEPOINT) it joins it and the isolation
    level is whatever the outer transaction has.

    On every dialect two listeners reject writes while the scope is open:
    ``before_flush`` for pending ORM changes and ``before_cursor_execute`` for
    DML or DDL text. ``commit()`` always raises. On exit the listeners are
    removed and an owned transaction is rolled back.

    :param isolation_level: Isolation level for an owned transaction, or
        ``None`` for the connection default.
    :param read_only: Issue ``SET TRANSACTION READ ONLY`` where supported.
    """

    def __init__(self, *, isolation_level: str | None = "READ COMMITTED", read_only: bool = True) -> None:
        super().__init__(db.session)
        self.isolation_level = isolation_level
        self.read_only = read_only
        self._owned: SessionTransaction | None = None
        self._guarded: tuple[Session, Connection] | None = None
        # One listener object per scope, so overlapping scopes never share a registration
        self._flush_guard = self._reject_flush
        self._sql_guard = self._reject_write_sql

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        self._owned = self._begin_if_idle()
        conn = self.session.connection()
        self._install_guards(conn)
        if self._owned is not None and conn.dialect.name in _SET_TRANSACTION_DIALECTS:
            self._set_transaction()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._owned is not None:
                owned, self._owned = self._owned, None
                with suppress(SQLAlchemyError):
                    self.session.rollback()
                owned.__exit__(exc_type, exc, tb)
        finally:
            self._remove_guards()

    def commit(self) -> None:
        """:raises RuntimeError: always."""
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    # ------------------------------ internals --------------------------------

    def _begin_if_idle(self) -> SessionTransaction | None:
        try:
            txn = self.session.begin()
        except InvalidRequestError:
            # A transaction is already in progress on this session
            return None
        txn.__enter__()
        return txn

    def _set_transaction(self) -> None:
        directives = []
        if self.isolation_level:
            level = self.isolation_level.strip().upper()
            if level not in _ISOLATION_LEVELS:
                current_app.logger.warning("Unrecognised isolation level %r, sending it as-is", level)
            directives.append(f"SET TRANSACTION ISOLATION LEVEL {level}")
        if self.read_only:
            directives.append("SET TRANSACTION READ ONLY")
        try:
            for sql in directives:
                self.session.execute(text(sql))
        except SQLAlchemyError as exc:
            current_app.logger.warning("SET TRANSACTION rejected (%s); relying on write guards", exc)

    def _reject_flush(self, session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError("Read-only UnitOfWork: ORM flush blocked (pending changes in session).")

    def _reject_write_sql(self, conn, cursor, statement, parameters, context, executemany) -> None:
        words = statement.split(None, 1) if statement else []
        keyword = words[0].lower() if words else ""
        if keyword.startswith(_WRITE_KEYWORDS):
            raise RuntimeError(f"Read-only UnitOfWork: SQL statement blocked: {keyword.upper()}")

    def _install_guards(self, conn: Connection) -> None:
        # ``db.session`` is a registry; listening on it would guard every
        # session of every worker. Bind to this scope's own Session instead.
        target = self.session() if isinstance(self.session, scoped_session) else self.session
        event.listen(target, "before_flush", self._flush_guard)
        event.listen(conn, "before_cursor_execute", self._sql_guard)
        self._guarded = (target, conn)

    def _remove_guards(self) -> None:
        if self._guarded is None:
            return
        (target, conn), self._guarded = self._guarded, None
        with suppress(InvalidRequestError):
            event.remove(target, "before_flush", self._flush_guard)
        with suppress(InvalidRequestError):
            event.remove(conn, "before_cursor_execute", self._sql_guard)
