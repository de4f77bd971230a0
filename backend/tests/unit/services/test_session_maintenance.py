"""Tests for :class:`SessionMaintenanceService`."""

from __future__ import annotations

from sqlalchemy import select

from contacts_auth.models.session import RefreshSession
from contacts_auth.services.auth.maintenance import SessionMaintenanceService
from tests.factories.session import RefreshSessionFactory


def test_purge_expired_removes_only_expired_rows(session):
    expired = RefreshSessionFactory(expired=True)
    active = RefreshSessionFactory()
    revoked = RefreshSessionFactory(revoked=True)
    expired_id = expired.id

    removed = SessionMaintenanceService().purge_expired()

    assert removed == 1
    remaining = set(session.execute(select(RefreshSession.id)).scalars())
    assert remaining == {active.id, revoked.id}
    assert expired_id not in remaining


def test_purge_expired_with_nothing_to_do(session):
    RefreshSessionFactory()

    assert SessionMaintenanceService().purge_expired() == 0
