# app/errors.py
from flask import jsonify, request
from werkzeug.exceptions import HTTPException


class AppError(Exception):
    """Base for every expected failure; rendered as the JSON error envelope."""

    status_code = 500
    code = "APPLICATION_ERROR"

    def __init__(self, message: str, code: str | None = None, details=None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.details = details


class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"


class AuthError(AppError):
    status_code = 401
    code = "AUTH_REQUIRED"


class ForbiddenError(AppError):
    status_code = 403
    code = "INSUFFICIENT_PERMISSIONS"


class NotFoundError(AppError):
    status_code = 404
    code = "RECORD_NOT_FOUND"


class ConflictError(AppError):
    status_code = 409
    code = "DUPLICATE_ENTRY"


class StoreError(AppError):
    status_code = 500
    code = "DATABASE_ERROR"


def error_response(message: str, code: str, status: int, details=None):
    body = {"success": False, "error": {"message": message, "code": code}}
    if details is not None:
        body["error"]["details"] = details
    return jsonify(body), status


_HTTP_CODES = {
    400: "BAD_REQUEST",
    404: "ROUTE_NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    413: "PAYLOAD_TOO_LARGE",
    415: "UNSUPPORTED_MEDIA_TYPE",
    429: "TOO_MANY_REQUESTS",
}


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def _handle_app_error(e: AppError):
        if e.status_code >= 500:
            app.logger.error(f"[errors] {e.code}: {e.message}")
        return error_response(e.message, e.code, e.status_code, e.details)

    @app.errorhandler(HTTPException)
    def _handle_http_error(e: HTTPException):
        status = e.code or 500
        if status == 404:
            message = f"Route {request.method} {request.path} not found"
        elif status == 429:
            app.logger.warning(f"[errors] Rate limit hit: {request.remote_addr} {request.method} {request.path}")
            message = "Too many requests from this IP, please try again later."
        else:
            message = e.description or e.name
        return error_response(message, _HTTP_CODES.get(status, "HTTP_ERROR"), status)

    @app.errorhandler(Exception)
    def _handle_unexpected(e: Exception):
        app.logger.exception(f"[errors] Unhandled error on {request.method} {request.path}: {e}")
        return error_response("Internal Server Error", "INTERNAL_SERVER_ERROR", 500)


def register_jwt_callbacks(jwt):
    # flask_jwt_extended hatalarını da aynı zarf ile dön
    @jwt.unauthorized_loader
    def _missing_token(reason):
        return error_response("No token provided, access denied", "NO_TOKEN", 401)

    @jwt.invalid_token_loader
    def _invalid_token(reason):
        return error_response("Invalid token", "INVALID_TOKEN", 401)

    @jwt.expired_token_loader
    def _expired_token(jwt_header, jwt_payload):
        return error_response("Token has expired", "TOKEN_EXPIRED", 401)
