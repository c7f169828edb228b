from flask import current_app, jsonify, g, request
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException


class ApiError(Exception):
    """Base for every error a handler may raise; rendered by the handlers below."""

    status = 400
    code = "BAD_REQUEST"
    message = "Request error"

    def __init__(self, message=None, details=None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details


class ValidationError(ApiError):
    status = 400
    code = "VALIDATION_ERROR"
    message = "Validation error"


class InvalidResetToken(ApiError):
    # Unknown and expired reset tokens share this error
    status = 400
    code = "TOKEN_INVALID_OR_EXPIRED"
    message = "Token is invalid or has expired"


class Unauthorized(ApiError):
    status = 401
    code = "UNAUTHORIZED"
    message = "Invalid or expired token"


class Forbidden(ApiError):
    status = 403
    code = "FORBIDDEN"
    message = "Access denied"


class LinkExpired(Forbidden):
    code = "LINK_EXPIRED"
    message = "Link has expired"


class LinkExhausted(Forbidden):
    code = "LINK_EXHAUSTED"
    message = "Link has reached its maximum access limit"


class NotFound(ApiError):
    status = 404
    code = "NOT_FOUND"
    message = "Resource not found"


class Conflict(ApiError):
    status = 409
    code = "CONFLICT"
    message = "Resource already exists"


class IntegrityFailure(ApiError):
    status = 500
    code = "INTEGRITY_FAILURE"
    message = "An unexpected error occurred"


class DependencyFailure(ApiError):
    status = 500
    code = "DEPENDENCY_FAILURE"
    message = "An unexpected error occurred"


def _payload(code: str, message: str, details=None, status=400):
    return (
        jsonify({
            "success": False,
            "error": {
                "code": code,
                "message": message,
                "details": details or None,
            },
            "request_id": getattr(g, "request_id", None),
        }),
        status,
    )


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(e: ApiError):
        if e.status >= 500:
            # Server side only; the caller gets the generic message
            current_app.logger.error("%s: %s path=%s", e.code, e, request.path, exc_info=e)
            return _payload(e.code, type(e).message, status=e.status)
        return _payload(e.code, e.message, details=e.details, status=e.status)

    # Generic HTTP errors (404, 405, ...)
    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        desc = e.description

        # If we pass structured error info via abort(description=dict)
        if isinstance(desc, dict):
            code = desc.get("code") or e.name.replace(" ", "_").upper()
            message = desc.get("message") or e.name
            details = desc.get("errors") or desc.get("details")
            return _payload(code=code, message=message, details=details, status=e.code or 400)

        return _payload(
            code=e.name.replace(" ", "_").upper(),
            message=desc or e.name,
            details=None,
            status=e.code or 400
        )

    @app.errorhandler(404)
    def handle_404(_):
        return _payload("NOT_FOUND", "Resource not found", status=404)

    @app.errorhandler(SQLAlchemyError)
    def handle_db_error(e):
        from .extensions import db

        db.session.rollback()
        current_app.logger.exception("Database error path=%s", request.path)
        return _payload("DEPENDENCY_FAILURE", "An unexpected error occurred", status=500)

    @app.errorhandler(RedisError)
    def handle_cache_error(e):
        current_app.logger.exception("Cache error path=%s", request.path)
        return _payload("DEPENDENCY_FAILURE", "An unexpected error occurred", status=500)

    @app.errorhandler(500)
    def handle_500(e):
        # Don't leak internals
        current_app.logger.error(
            "Unhandled exception path=%s",
            request.path,
            exc_info=getattr(e, "original_exception", None) or e,
        )
        return _payload("INTERNAL_SERVER_ERROR", "An unexpected error occurred", status=500)
