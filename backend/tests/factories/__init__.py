"""factory-boy base classes bound to the per-test session."""

from __future__ import annotations

import factory

from contacts_auth.core.security import SecretHasher

# Same argon2 parameters as TestingConfig, usable without an app.
FAST_HASHER = SecretHasher(time_cost=1, memory_cost=8, parallelism=1)


class SQLAlchemySession:
    """Holder set by the autouse ``_factories_session`` fixture."""

    _session = None

    @classmethod
    def set(cls, session) -> None:
        cls._session = session

    @classmethod
    def get(cls):
        if cls._session is None:
            raise RuntimeError("Factory used outside a test with the 'session' fixture.")
        return cls._session


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Flush-only persistence: rows exist for the test but are never committed."""

    class Meta:
        abstract = True
        sqlalchemy_session_factory = SQLAlchemySession.get
        sqlalchemy_session_persistence = "flush"
