"""Fixtures for tests that run several workers against one real database.

The SAVEPOINT session from the top-level conftest binds every test to a single
connection, which cannot model independent workers. Tests here get their own
app backed by a SQLite file; each worker thread pushes its own app context and
so gets its own session and connection.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from contacts_auth.core.config import TestingConfig
from contacts_auth.core.extensions import db
from contacts_auth.factory import create_app
from contacts_auth.services._shared.errors import ServiceError


@pytest.fixture(autouse=True)
def _factories_session():
    """Replace the top-level wiring: nothing here goes through factories."""


@pytest.fixture()
def shared_app(tmp_path):
    class FileConfig(TestingConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'contacts_auth.db'}"
        SQLALCHEMY_ENGINE_OPTIONS = {"connect_args": {"check_same_thread": False, "timeout": 30}}

    app = create_app(FileConfig, instance_relative_config=False)
    app.logger.setLevel("WARNING")
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()
        db.engine.dispose()


@pytest.fixture()
def run_concurrently(shared_app):
    """
    Run each job on its own thread inside its own app context.

    Returns the jobs' results in submission order; a ``ServiceError`` raised
    by a job is returned in place of its result.
    """

    def _in_context(job):
        with shared_app.app_context():
            try:
                return job()
            except ServiceError as exc:
                return exc

    def _run(*jobs):
        with ThreadPoolExecutor(max_workers=len(jobs)) as pool:
            futures = [pool.submit(_in_context, job) for job in jobs]
            return [future.result(timeout=60) for future in futures]

    return _run
