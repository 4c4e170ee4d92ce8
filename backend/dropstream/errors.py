from typing import Any, Dict, Optional

from flask import jsonify
from werkzeug.exceptions import HTTPException

from dropstream.domain.invariants.exceptions import InvariantViolation
from dropstream.extensions import db


class ApiError(Exception):
    """
    Base class for errors that map onto an HTTP response.

    `payload` is merged into the JSON body next to `error` and `code`.
    """
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.payload = payload or {}

    def to_dict(self) -> Dict[str, Any]:
        body = {"error": self.message, "code": self.code}
        body.update(self.payload)
        return body


class Unauthorized(ApiError):
    status_code = 401
    code = "UNAUTHORIZED"


class Forbidden(ApiError):
    status_code = 403
    code = "FORBIDDEN"


class NotFound(ApiError):
    status_code = 404
    code = "NOT_FOUND"


class ValidationError(ApiError):
    status_code = 400
    code = "VALIDATION_ERROR"


class Conflict(ApiError):
    status_code = 409
    code = "CONFLICT"


class InternalError(ApiError):
    status_code = 500
    code = "INTERNAL_ERROR"


class CriticalError(InternalError):
    """A compensating write failed; data needs manual repair."""
    code = "CRITICAL"


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(error):
        if error.status_code >= 500:
            db.session.rollback()
        response = jsonify(error.to_dict())
        response.status_code = error.status_code
        return response

    @app.errorhandler(InvariantViolation)
    def handle_invariant_violation(error):
        app.logger.error(f"Invariant violation: {error}")
        db.session.rollback()
        response = jsonify({
            "error": str(error),
            "code": "INVARIANT_VIOLATION"
        })
        response.status_code = 500
        return response

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        response = jsonify({
            "error": error.description,
            "code": error.name.upper().replace(" ", "_")
        })
        response.status_code = error.code
        return response

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        app.logger.exception("Unhandled error during request")
        db.session.rollback()
        response = jsonify({
            "error": "Internal server error",
            "code": "INTERNAL_ERROR"
        })
        response.status_code = 500
        return response
