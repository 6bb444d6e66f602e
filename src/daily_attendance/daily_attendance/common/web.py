from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, session
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AlreadyCheckedOutError,
    AlreadyRecordedError,
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NoCheckInError,
    StoreError,
    StoreUnreachableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (AlreadyRecordedError, 409),
    (NoCheckInError, 409),
    (AlreadyCheckedOutError, 409),
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (StoreUnreachableError, 503),
)


def error_response(exc: Exception):
    status = next((code for cls, code in _STATUS_BY_ERROR if isinstance(exc, cls)), 500)
    body = {
        "success": False,
        "error": getattr(exc, "code", "internal_error"),
        "message": str(exc) if status != 500 else "Internal server error",
    }
    return jsonify(body), status


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "error": "authentication_error", "message": "Login required"}), 401
        return view(*args, **kwargs)

    return wrapper


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        logger.info("Request rejected: %s (%s)", exc, exc.code)
        return error_response(exc)

    @app.errorhandler(StoreError)
    def handle_store_error(exc: StoreError):
        logger.error("Attendance store failure: %s", exc)
        return error_response(exc)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return exc
        logger.exception("Unhandled error")
        return error_response(exc)
