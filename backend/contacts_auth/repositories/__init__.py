"""Credential store (:class:`AccountRepository`) and session store (:class:`SessionRepository`)."""

from __future__ import annotations

from contacts_auth.repositories.account import AccountRepository
from contacts_auth.repositories.base import BaseRepository
from contacts_auth.repositories.session import SessionRepository

__all__ = ["AccountRepository", "BaseRepository", "SessionRepository"]
