# Overview: JSON response helpers shared by the API routes.

from __future__ import annotations

import sys

from flask import current_app, jsonify

from .errors import BookingError
from .extensions import db


def ok(status: int = 200, **payload):
    body = {"success": True}
    body.update(payload)
    return jsonify(body), status


def error_response(exc: BookingError):
    return jsonify(exc.to_dict()), exc.status_code


def internal_error(log_message: str):
    """
    Log the exception being handled, roll back the session and answer 500.

    The exception text is only included when EXPOSE_ERROR_DETAILS is on.
    """
    current_app.logger.exception(log_message)
    db.session.rollback()
    body = {"success": False, "message": "Internal server error"}
    if current_app.config.get("EXPOSE_ERROR_DETAILS"):
        exc = sys.exc_info()[1]
        if exc is not None:
            body["error"] = f"{type(exc).__name__}: {exc}"
    return jsonify(body), 500
