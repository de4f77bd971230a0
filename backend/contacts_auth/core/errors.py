"""Problem Details (RFC 7807) responses for every failure the API can surface.

Service errors carry an :class:`ErrorKind`; :data:`KIND_STATUS` is the only
place those kinds become HTTP statuses. Anything unrecognised, hashing
failures included, becomes an opaque 500.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from contacts_auth.core.logger import ensure_request_id
from contacts_auth.services._shared.errors import ErrorKind, ServiceError

log = logging.getLogger(__name__)

KIND_STATUS: dict[ErrorKind, HTTPStatus] = {
    ErrorKind.EMAIL_ALREADY_IN_USE: HTTPStatus.CONFLICT,
    ErrorKind.INVALID_CREDENTIALS: HTTPStatus.UNAUTHORIZED,
    ErrorKind.INVALID_REFRESH_TOKEN: HTTPStatus.UNAUTHORIZED,
    ErrorKind.REFRESH_TOKEN_EXPIRED: HTTPStatus.UNAUTHORIZED,
    ErrorKind.ACCOUNT_NOT_FOUND: HTTPStatus.NOT_FOUND,
}

# Machine codes for plain HTTP failures that carry no ErrorKind.
_STATUS_CODES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    413: "payload_too_large",
    415: "unsupported_media_type",
    422: "unprocessable_entity",
    500: "internal_server_error",
    503: "service_unavailable",
}


def status_for(err: ServiceError) -> int:
    """Return the HTTP status for a service error (500 for untagged kinds)."""
    kind = getattr(err, "kind", None)
    if kind is None:
        return int(HTTPStatus.INTERNAL_SERVER_ERROR)
    return int(KIND_STATUS.get(kind, HTTPStatus.INTERNAL_SERVER_ERROR))


def problem(
    status: int,
    code: str,
    detail: str,
    *,
    details: dict[str, Any] | None = None,
    exc_info: bool = False,
) -> tuple[Response, int]:
    """
    Build and log a ``application/problem+json`` response.

    :param status: HTTP status code.
    :param code: Stable machine-readable error code.
    :param detail: Client-safe summary.
    :param details: Optional structured details (validation messages).
    :param exc_info: Attach the active traceback to the log record.
    :returns: Response and status for a Flask error handler.
    """
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": detail,
        "instance": request.path,
        "code": code,
        "request_id": ensure_request_id(),
    }
    if details:
        body["details"] = details

    log.log(
        logging.ERROR if status >= 500 else logging.WARNING,
        "Request failed: code=%s status=%s",
        code,
        status,
        exc_info=exc_info,
    )
    resp = jsonify(body)
    resp.mimetype = "application/problem+json"
    return resp, status


def init_app(app: Flask) -> None:
    """Register the error handlers and the JWT rejection callbacks."""

    @app.errorhandler(ServiceError)
    def _service_error(err: ServiceError):
        status = status_for(err)
        if status >= 500:
            return problem(status, "internal_server_error", "Unexpected error", exc_info=True)
        return problem(status, err.kind.value, err.message)

    @app.errorhandler(HTTPException)
    def _http_error(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        code = _STATUS_CODES.get(status, "error")
        if status == HTTPStatus.NOT_FOUND:
            detail = f"Route '{request.path}' not found"
        else:
            detail = (err.description or code.replace("_", " ").capitalize()).strip()
        return problem(status, code, detail)

    @app.errorhandler(ValidationError)
    def _validation_error(err: ValidationError):
        return problem(422, "validation_error", "Validation failed", details={"errors": err.messages})

    @app.errorhandler(IntegrityError)
    def _integrity_error(err: IntegrityError):
        return problem(409, "conflict", "Resource conflict", exc_info=True)

    @app.errorhandler(OperationalError)
    def _operational_error(err: OperationalError):
        return problem(503, "service_unavailable", "Service temporarily unavailable", exc_info=True)

    @app.errorhandler(Exception)
    def _unexpected_error(err: Exception):
        return problem(500, "internal_server_error", "Unexpected error", exc_info=True)

    from contacts_auth.core.extensions import jwt

    @jwt.unauthorized_loader
    def _missing_token(reason: str):
        return problem(401, "unauthorized", reason)

    @jwt.invalid_token_loader
    def _invalid_token(reason: str):
        return problem(401, "unauthorized", reason)

    @jwt.expired_token_loader
    def _expired_token(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]):
        return problem(401, "unauthorized", "Token has expired")
