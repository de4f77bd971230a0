"""Liveness check: ``GET /api/v1/health``."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from contacts_auth.api.deps import json_response, timing
from contacts_auth.core.extensions import db

bp = Blueprint("health", __name__)


def _database_status() -> str:
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("Health check could not reach the database")
        return "fail"
    return "ok"


@bp.get("/health")
@timing
def healthcheck():
    return json_response(
        {"status": "ok", "db": _database_status(), "version": current_app.config.get("APP_VERSION", "dev")}
    )
