"""Factory Boy definition for :class:`contacts_auth.models.account.Account`."""

from __future__ import annotations

import factory

from contacts_auth.models.account import Account
from tests.factories import FAST_HASHER, BaseFactory

DEFAULT_PASSWORD = "Passw0rd!"


class AccountFactory(BaseFactory):
    """
    Build persisted :class:`Account` instances.

    Notes
    -----
    - ``password`` is a post-generation hook: pass ``password="..."`` to
      control the plaintext; the stored value is always an argon2 hash.
    """

    class Meta:
        model = Account

    display_name = factory.Faker("name")
    email = factory.Sequence(lambda n: f"account{n}@example.com")
    password_hash = ""  # set via postgen

    @factory.post_generation
    def password(obj, create, extracted, **kwargs):
        """Hash the plaintext password with the cheap test hasher."""
        obj.password_hash = FAST_HASHER.hash(extracted or DEFAULT_PASSWORD)
