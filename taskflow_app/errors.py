"""
Error taxonomy and JSON error handlers.

Every failure a request can hit is raised as a subclass of ``ApiError``
and turned into a ``{"message": "..."}`` body by the handlers registered
in ``register_error_handlers``.  Ownership failures keep their own kind
(``Forbidden``) but answer with 401 like missing credentials do, which is
what existing clients of the API expect.
"""

from __future__ import annotations

import logging

from flask import Flask, Response, jsonify
from werkzeug.exceptions import HTTPException

from . import db

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that map onto an HTTP status code."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(ApiError):
    status_code = 401
    default_message = "Not authorized, no token"


class Forbidden(ApiError):
    """Raised when a valid caller touches a task owned by someone else."""

    status_code = 401
    default_message = "Not authorized to access this task"


class NotFound(ApiError):
    status_code = 404
    default_message = "Task not found"


class ValidationError(ApiError):
    status_code = 400
    default_message = "Invalid request"


class Conflict(ApiError):
    status_code = 409
    default_message = "Resource already exists"


def json_error(message: str, status_code: int) -> tuple[Response, int]:
    """Build the standard ``{"message": ...}`` error response."""
    return jsonify({"message": message}), status_code


def register_error_handlers(app: Flask) -> None:
    """Attach JSON error handlers for API errors, HTTP errors and crashes."""

    @app.errorhandler(ApiError)
    def handle_api_error(error: ApiError) -> tuple[Response, int]:
        if error.status_code == 401:
            logger.warning("Rejected request: %s", error.message)
        return json_error(error.message, error.status_code)

    @app.errorhandler(404)
    def not_found(_: Exception) -> tuple[Response, int]:
        return json_error("Resource not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(_: Exception) -> tuple[Response, int]:
        return json_error("Method not allowed", 405)

    @app.errorhandler(400)
    def bad_request(error: HTTPException) -> tuple[Response, int]:
        return json_error(error.description or "Bad request", 400)

    @app.errorhandler(Exception)
    def internal_error(error: Exception) -> tuple[Response, int]:
        if isinstance(error, HTTPException):
            return json_error(error.description or error.name, error.code or 500)
        logger.exception("Internal server error: %s", error)
        db.session.rollback()
        return json_error("Internal server error", 500)
