"""``flask`` sub-commands for operators."""

from __future__ import annotations

from flask import Flask

from .sessions import sessions_cli


def init_app(app: Flask) -> None:
    """Expose ``flask sessions ...`` on ``app``."""
    app.cli.add_command(sessions_cli)
