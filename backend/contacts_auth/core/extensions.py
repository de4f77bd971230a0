"""Extension singletons, bound to an app in :func:`init_app`."""

from __future__ import annotations

import sqlite3

from flask import Flask
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData, event
from sqlalchemy.engine import Engine

# Constraint names are deterministic so migrations and IntegrityError matching
# can refer to them (``uq_accounts_email``, ``fk_sessions_owner_id_accounts``).
metadata = MetaData(
    naming_convention={
        "pk": "pk_%(table_name)s",
        "ix": "ix_%(table_name)s_%(column_0_name)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    }
)

db: SQLAlchemy = SQLAlchemy(metadata=metadata, session_options={"autoflush": False})
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()


@event.listens_for(Engine, "connect")
def _sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite needs this per connection for the sessions -> accounts cascade
    if isinstance(dbapi_connection, sqlite3.Connection):
        dbapi_connection.execute("PRAGMA foreign_keys=ON")


def init_app(app: Flask) -> None:
    """
    Bind the database, migrations and JWT manager to ``app``.

    Importing :mod:`contacts_auth.models` here registers the tables on
    ``metadata`` before Alembic inspects it.
    """
    db.init_app(app)
    from contacts_auth import models  # noqa: F401

    migrate.init_app(app, db)
    jwt.init_app(app)
