from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError
import logging

from services.exceptions import SessionError
from utils.pagination import PaginationError

logger = logging.getLogger(__name__)

_ERROR_CODE_BY_STATUS = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    413: "PAYLOAD_TOO_LARGE",
    422: "VALIDATION_ERROR",
    500: "INTERNAL_ERROR",
}


def error_response(error: str, message: str, status: int, details: dict | None = None):
    payload = {"error": error, "message": message, "status": status}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def register_error_handlers(app):
    # Session-layer errors carry their own status and user-safe message
    @app.errorhandler(SessionError)
    def handle_session_error(err: SessionError):
        if err.status >= 500:
            logger.error("Session error: %s", err.message, exc_info=err.__cause__)
        return error_response(err.code, err.message, err.status)

    # Marshmallow validation errors map to 400
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        # err.messages contains field-level details
        return error_response("VALIDATION_ERROR", "Invalid input", 400, details=err.messages)

    @app.errorhandler(PaginationError)
    def handle_pagination_error(err: PaginationError):
        return error_response("VALIDATION_ERROR", str(err), 400)

    # Unique constraints on writes that bypass the session controller
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        logger.warning("Integrity error: %s", getattr(err, "orig", err))
        details = None
        if current_app and current_app.debug:
            details = {"db_error": str(getattr(err, "orig", err))}
        return error_response("CONFLICT", "Unique constraint violated.", 409, details=details)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = err.code or 400
        return error_response(_ERROR_CODE_BY_STATUS.get(status, "HTTP_ERROR"), err.description, status)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        # In dev, include exception details to speed up debugging
        details = None
        if current_app and current_app.debug:
            details = {"type": err.__class__.__name__, "message": str(err)}
        return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500, details=details)
