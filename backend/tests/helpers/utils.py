"""Assertion helpers with no better home."""

from __future__ import annotations

from contextlib import contextmanager

import pytest


@contextmanager
def not_raises(exception: type[BaseException]):
    """Fail the test, rather than error it, if ``exception`` escapes the block."""
    try:
        yield
    except exception as exc:
        pytest.fail(f"Unexpected {type(exc).__name__}: {exc}")
