"""Interfaces the services depend on; adapters live in ``contacts_auth.infra``."""

from __future__ import annotations

from .token_provider import StubTokenProvider, TokenProvider

__all__ = ["TokenProvider", "StubTokenProvider"]
