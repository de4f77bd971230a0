"""Factory Boy definition for :class:`contacts_auth.models.session.RefreshSession`."""

from __future__ import annotations

from datetime import timedelta

import factory

from contacts_auth.models.base import utcnow
from contacts_auth.models.session import RefreshSession
from tests.factories import FAST_HASHER, BaseFactory
from tests.factories.account import AccountFactory


class RefreshSessionFactory(BaseFactory):
    """
    Build persisted :class:`RefreshSession` rows.

    Pass ``secret="..."`` to know the plaintext the row verifies against.
    """

    class Meta:
        model = RefreshSession

    owner = factory.SubFactory(AccountFactory)
    secret_hash = factory.LazyFunction(lambda: FAST_HASHER.hash("unused-secret"))
    expires_at = factory.LazyFunction(lambda: utcnow() + timedelta(days=7))
    revoked_at = None

    class Params:
        expired = factory.Trait(expires_at=factory.LazyFunction(lambda: utcnow() - timedelta(seconds=1)))
        revoked = factory.Trait(revoked_at=factory.LazyFunction(utcnow))

    @factory.post_generation
    def secret(obj, create, extracted, **kwargs):
        """Replace the hash with one of the given plaintext secret."""
        if extracted:
            obj.secret_hash = FAST_HASHER.hash(extracted)
