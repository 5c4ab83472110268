"""Centralized JSON error handling for the API.

Every failure leaves the service as ``{code, message, details?}`` where
``code`` is an :class:`~algoshield.services._shared.errors.ErrorCode`. This
module is the single place that picks the HTTP status for a code.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, current_app, jsonify
from marshmallow import ValidationError as MarshmallowValidationError
from werkzeug.exceptions import HTTPException

from algoshield.services._shared.errors import ErrorCode, ServiceError

log = logging.getLogger(__name__)

STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.INVALID_CREDENTIALS: HTTPStatus.UNAUTHORIZED,
    ErrorCode.TOKEN_EXPIRED: HTTPStatus.UNAUTHORIZED,
    ErrorCode.TOKEN_REVOKED: HTTPStatus.UNAUTHORIZED,
    ErrorCode.TOKEN_INVALID: HTTPStatus.UNAUTHORIZED,
    ErrorCode.UNAUTHORIZED: HTTPStatus.UNAUTHORIZED,
    ErrorCode.USER_INACTIVE: HTTPStatus.FORBIDDEN,
    ErrorCode.INSUFFICIENT_PERMISSIONS: HTTPStatus.FORBIDDEN,
    ErrorCode.FORBIDDEN: HTTPStatus.FORBIDDEN,
    ErrorCode.NOT_FOUND: HTTPStatus.NOT_FOUND,
    ErrorCode.CONFLICT: HTTPStatus.CONFLICT,
    ErrorCode.BAD_REQUEST: HTTPStatus.BAD_REQUEST,
    ErrorCode.VALIDATION_ERROR: HTTPStatus.BAD_REQUEST,
    ErrorCode.RATE_LIMIT_EXCEEDED: HTTPStatus.TOO_MANY_REQUESTS,
    ErrorCode.INTERNAL_ERROR: HTTPStatus.INTERNAL_SERVER_ERROR,
}

# Non-5xx werkzeug statuses that have a dedicated wire code.
_CODE_BY_HTTP_STATUS: dict[int, ErrorCode] = {
    HTTPStatus.BAD_REQUEST: ErrorCode.BAD_REQUEST,
    HTTPStatus.UNAUTHORIZED: ErrorCode.UNAUTHORIZED,
    HTTPStatus.FORBIDDEN: ErrorCode.FORBIDDEN,
    HTTPStatus.NOT_FOUND: ErrorCode.NOT_FOUND,
    HTTPStatus.CONFLICT: ErrorCode.CONFLICT,
    HTTPStatus.UNPROCESSABLE_ENTITY: ErrorCode.VALIDATION_ERROR,
    HTTPStatus.TOO_MANY_REQUESTS: ErrorCode.RATE_LIMIT_EXCEEDED,
}

_DEFAULT_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.RATE_LIMIT_EXCEEDED: "Too many requests",
    ErrorCode.INTERNAL_ERROR: "Internal server error",
    ErrorCode.VALIDATION_ERROR: "Validation failed",
}


def status_for(code: ErrorCode) -> int:
    """Return the HTTP status for a wire code."""
    return int(STATUS_BY_CODE.get(code, HTTPStatus.INTERNAL_SERVER_ERROR))


def _details_allowed() -> bool:
    return current_app.config.get("APP_ENV") == "development"


def _envelope(code: ErrorCode, message: str, details: str | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"code": str(code), "message": message}
    if details:
        body["details"] = details
    return body


def _error_response(code: ErrorCode, message: str, details: str | None = None) -> tuple[Response, int]:
    status = status_for(code)
    return jsonify(_envelope(code, message, details)), status


class APIError(Exception):
    """
    Represent a JSON-serializable API error.

    Parameters
    ----------
    code : ErrorCode
        Wire code; also selects the HTTP status.
    message : str
        Human-readable description presented to clients.
    details : str | None, optional
        Extra context (e.g. field validation messages). Internal details are
        only attached by the handlers in development.
    """

    def __init__(self, code: ErrorCode, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details

    @property
    def status_code(self) -> int:
        return status_for(self.code)

    def to_envelope(self) -> dict[str, Any]:
        return _envelope(self.code, self.message, self.details)


# Domain conveniences
class Unauthorized(APIError):
    """401 when authentication is missing or malformed."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(ErrorCode.UNAUTHORIZED, message)


class Forbidden(APIError):
    """403 when the principal lacks a required role."""

    def __init__(
        self,
        message: str = "You don't have permission to perform this action",
        code: ErrorCode = ErrorCode.INSUFFICIENT_PERMISSIONS,
    ) -> None:
        super().__init__(code, message)


def _flatten_messages(messages: Any, prefix: str = "") -> list[str]:
    """Turn marshmallow's nested ``messages`` into ``field: msg`` strings."""
    if isinstance(messages, dict):
        out: list[str] = []
        for key, value in messages.items():
            path = f"{prefix}.{key}" if prefix else str(key)
            out.extend(_flatten_messages(value, path))
        return out
    if isinstance(messages, list | tuple):
        out = []
        for item in messages:
            out.extend(_flatten_messages(item, prefix))
        return out
    return [f"{prefix}: {messages}" if prefix else str(messages)]


def init_app(app: Flask) -> None:
    """
    Attach JSON error handlers to the Flask app.

    Notes
    -----
    - Every handled error becomes ``{code, message, details?}``.
    - 5xx are logged with ``exc_info``; 4xx as warnings without traceback.
    - Internal exception text only reaches ``details`` in development.
    """

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        level = log.error if err.status_code >= 500 else log.warning
        level(
            "APIError: code=%s status=%s msg=%s",
            err.code,
            err.status_code,
            err.message,
            extra={"event": "http.error", "status": err.status_code},
        )
        return jsonify(err.to_envelope()), err.status_code

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        status = status_for(err.code)
        if status >= 500:
            log.error(
                "ServiceError: code=%s type=%s",
                err.code,
                type(err).__name__,
                extra={"event": "http.error", "status": status},
                exc_info=err,
            )
            details = None
            if err.__cause__ is not None and _details_allowed():
                details = f"{type(err).__name__}: {err.__cause__!r}"
            return _error_response(err.code, err.message, details)

        log.warning(
            "ServiceError: code=%s status=%s msg=%s",
            err.code,
            status,
            err.message,
            extra={"event": "http.error", "status": status},
        )
        return _error_response(err.code, err.message)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        if status >= 500:
            code = ErrorCode.INTERNAL_ERROR
        else:
            code = _CODE_BY_HTTP_STATUS.get(status, ErrorCode.BAD_REQUEST)
        message = _DEFAULT_MESSAGES.get(code) or HTTPStatus(status).phrase
        level = log.error if status >= 500 else log.warning
        level(
            "HTTPException: code=%s status=%s detail=%s",
            code,
            status,
            err.description,
            extra={"event": "http.error", "status": status},
        )
        # The werkzeug status (405, 415, ...) is kept; only the body uses the wire code.
        return jsonify(_envelope(code, message)), status

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        details = "; ".join(_flatten_messages(err.messages)) or None
        log.warning(
            "ValidationError: %s",
            details,
            extra={"event": "http.error", "status": HTTPStatus.BAD_REQUEST},
        )
        return _error_response(
            ErrorCode.VALIDATION_ERROR, _DEFAULT_MESSAGES[ErrorCode.VALIDATION_ERROR], details
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        # Unexpected server-side error; never leak internal details outside development
        log.error(
            "Unhandled exception",
            extra={"event": "http.error", "status": HTTPStatus.INTERNAL_SERVER_ERROR},
            exc_info=err,
        )
        details = f"{type(err).__name__}: {err}" if _details_allowed() else None
        return _error_response(
            ErrorCode.INTERNAL_ERROR, _DEFAULT_MESSAGES[ErrorCode.INTERNAL_ERROR], details
        )
