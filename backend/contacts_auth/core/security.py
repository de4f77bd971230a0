"""argon2id hashing shared by account passwords and refresh-session secrets."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

# Hashed once per hasher and verified against when a lookup finds nothing, so
# "unknown account" costs the same as "wrong password".
_DUMMY_SECRET = "contacts-auth:dummy-secret"


class HashingError(RuntimeError):
    """Raised when a stored hash cannot be parsed or checked.

    This is an *internal* failure (corrupted row, foreign algorithm) and must
    never be reported to clients as a credential mismatch.
    """


class SecretHasher:
    """
    Memory-hard, salted one-way hashing of secrets.

    Every call to :meth:`hash` draws a fresh random salt that is embedded in
    the encoded output (PHC string format), so :meth:`verify` needs nothing but
    the stored value and the candidate. Comparison of digests is constant-time
    inside ``argon2-cffi``.

    :param time_cost: Number of argon2 iterations.
    :param memory_cost: Memory usage in KiB.
    :param parallelism: Number of parallel lanes.
    """

    def __init__(self, *, time_cost: int = 3, memory_cost: int = 65536, parallelism: int = 4) -> None:
        self._ph = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            type=Type.ID,
        )
        self._dummy_hash: str | None = None

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> SecretHasher:
        """Build a hasher from the ``ARGON2_*`` keys of a Flask config mapping."""
        return cls(
            time_cost=int(config.get("ARGON2_TIME_COST", 3)),
            memory_cost=int(config.get("ARGON2_MEMORY_COST", 65536)),
            parallelism=int(config.get("ARGON2_PARALLELISM", 4)),
        )

    def hash(self, secret: str | bytes) -> str:
        """
        Hash ``secret`` with a per-call random salt.

        :param secret: Plaintext password or refresh secret.
        :returns: Encoded argon2id hash.
        """
        return self._ph.hash(secret)

    def verify(self, encoded: str, candidate: str | bytes) -> bool:
        """
        Check ``candidate`` against a stored hash.

        :param encoded: Stored argon2 hash.
        :param candidate: Presented plaintext.
        :returns: ``True`` on match, ``False`` on mismatch.
        :raises HashingError: If ``encoded`` is malformed or cannot be verified.
        """
        try:
            return self._ph.verify(encoded, candidate)
        except VerifyMismatchError:
            return False
        except (InvalidHashError, VerificationError) as exc:
            raise HashingError("Stored hash could not be verified.") from exc

    def verify_dummy(self, candidate: str | bytes) -> bool:
        """Spend one verification on a throwaway hash; always ``False``."""
        if self._dummy_hash is None:
            self._dummy_hash = self.hash(_DUMMY_SECRET)
        self.verify(self._dummy_hash, candidate)
        return False

    def needs_rehash(self, encoded: str) -> bool:
        """Return ``True`` when ``encoded`` was produced with outdated parameters."""
        try:
            return self._ph.check_needs_rehash(encoded)
        except (InvalidHashError, ValueError) as exc:
            raise HashingError("Stored hash could not be parsed.") from exc
