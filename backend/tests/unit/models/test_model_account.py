"""Tests for the Account model."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from contacts_auth.models.account import Account, normalize_email


class TestAccount:
    def test_email_normalized_and_unique(self, session):
        a1 = Account(display_name="Alice", email=" Alice@Example.com ", password_hash="h")
        session.add(a1)
        session.commit()
        assert a1.email == "alice@example.com"

        a2 = Account(display_name="Alice 2", email="ALICE@example.com", password_hash="h")
        session.add(a2)
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    @pytest.mark.parametrize("bad", ["", "no-at-sign", "user@nodot"])
    def test_invalid_email_rejected(self, bad):
        with pytest.raises(ValueError):
            Account(display_name="X", email=bad, password_hash="h")

    def test_display_name_trimmed_and_required(self):
        assert Account(display_name="  Ana ", email="a@example.com", password_hash="h").display_name == "Ana"
        with pytest.raises(ValueError, match="Display name"):
            Account(display_name="   ", email="a@example.com", password_hash="h")

    def test_uuid_primary_key_and_timestamps(self, session):
        account = Account(display_name="Ana", email="ana@example.com", password_hash="h")
        session.add(account)
        session.flush()
        session.refresh(account)

        assert len(account.id) == 36
        assert account.created_at is not None
        assert account.updated_at is not None

    def test_repr_has_no_secrets(self):
        account = Account(id="abc", display_name="Ana", email="ana@example.com", password_hash="secret-hash")
        assert repr(account) == "<Account id=abc>"

    def test_normalize_email_helper(self):
        assert normalize_email("  MiXeD@Example.ORG ") == "mixed@example.org"
