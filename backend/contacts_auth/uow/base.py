"""Contract shared by the read-write and read-only scopes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from contacts_auth.repositories import AccountRepository, SessionRepository


class UnitOfWork(ABC):
    """
    One transaction per use-case, with the credential and session stores bound to it.

    ``accounts`` and ``sessions`` share a single database session, so whatever
    one store writes the other sees before commit.
    """

    accounts: AccountRepository
    sessions: SessionRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
