"""Shared fixtures: one app and schema per run, one SAVEPOINT per test.

Services open their own Units of Work against ``db.session``. For each test
that name points at a session bound to a single connection whose outer
transaction is rolled back at teardown. A service ``commit()`` only releases
the current SAVEPOINT, and a new one is opened straight away.
"""

from __future__ import annotations

import os

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from contacts_auth.core.config import TestingConfig
from contacts_auth.core.extensions import db as _db
from contacts_auth.factory import create_app


class TestConfig(TestingConfig):
    """Pin the values assertions rely on, whatever the environment says."""

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    ACCESS_TOKEN_TTL = "15m"
    REFRESH_TOKEN_TTL = "7d"


def _hand_transactions_to_sqlalchemy(engine) -> None:
    # pysqlite starts transactions lazily and on its own terms, which breaks
    # SAVEPOINT nesting; SQLAlchemy emits BEGIN itself instead.
    @event.listens_for(engine, "connect")
    def _autocommit_driver(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _explicit_begin(conn):
        conn.exec_driver_sql("BEGIN")


@pytest.fixture(scope="session")
def app():
    os.environ.pop("DATABASE_URL", None)
    application = create_app(TestConfig, instance_relative_config=False)
    application.logger.setLevel("WARNING")
    return application


@pytest.fixture(scope="session")
def db(app):
    """Create the schema once; drop it when the run ends."""
    with app.app_context():
        if _db.engine.dialect.name == "sqlite":
            _hand_transactions_to_sqlalchemy(_db.engine)
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Single connection shared by every test (``:memory:`` lives per connection)."""
    conn = db.engine.connect()
    yield conn
    conn.close()


@pytest.fixture()
def session(db, connection):
    """
    Scoped session installed as ``db.session`` for the duration of one test.

    Yields
    ------
    sqlalchemy.orm.scoped_session
        Bound to ``connection`` inside a SAVEPOINT that is reopened whenever
        application code ends it.
    """
    outer = connection.begin()
    scoped = scoped_session(sessionmaker(bind=connection, autoflush=False))
    connection.begin_nested()

    @event.listens_for(scoped(), "after_transaction_end")
    def _reopen_savepoint(sess, trans):
        if trans.nested and not trans._parent.nested:
            connection.begin_nested()

    app_session = db.session
    app_session.remove()
    db.session = scoped
    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = app_session
        outer.rollback()


@pytest.fixture(autouse=True)
def _factories_session(session):
    """Persist factory-boy objects through the per-test session."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)


@pytest.fixture()
def client(app, session):
    return app.test_client()


@pytest.fixture()
def freeze_time():
    """
    Return :func:`freezegun.freeze_time`, defaulting to 2025-01-01 12:00 UTC.

    >>> with freeze_time() as frozen:
    ...     frozen.tick(timedelta(days=8))
    """
    from freezegun import freeze_time as _freeze

    return lambda when=None: _freeze(when or "2025-01-01 12:00:00")
