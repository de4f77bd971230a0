"""Flask CLI commands for refresh-session housekeeping."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext
from sqlalchemy.exc import SQLAlchemyError

from contacts_auth.services import SessionMaintenanceService

LOGGER = logging.getLogger(__name__)


@click.group("sessions")
@click.option("--verbose", is_flag=True, help="Enable verbose logging for session commands.")
@click.pass_context
def sessions_cli(ctx: click.Context, verbose: bool) -> None:
    """Refresh-session maintenance commands."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    LOGGER.setLevel(logging.DEBUG if verbose else logging.INFO)


@sessions_cli.command("purge-expired")
@with_appcontext
def purge_expired_command() -> None:
    """Delete refresh sessions whose expiry has passed."""
    try:
        removed = SessionMaintenanceService().purge_expired()
    except SQLAlchemyError as exc:  # pragma: no cover - CLI safeguard
        raise click.ClickException(f"Purge failed: {exc}") from exc
    LOGGER.debug("purge-expired finished", extra={"removed": removed})
    click.echo(f"Removed {removed} expired session(s).")
