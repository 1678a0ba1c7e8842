# backend/app/core/errors.py
"""
Error taxonomy shared by the engines, the store and the HTTP layer.

Every error carries an HTTP status and a public message. Internal detail
(store diagnostics, decode errors) is kept on the exception for logging and
never rendered into the response body.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class FeedbackServiceError(Exception):
    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        if message is not None:
            self.message = message
        self.detail = detail
        super().__init__(detail or self.message)


class ValidationFailure(FeedbackServiceError):
    status_code = 400
    message = "Validation failed"

    def __init__(self, details: List[Dict[str, str]], message: Optional[str] = None):
        super().__init__(message)
        self.details = details


class AuthFailureKind(str, Enum):
    MISSING = "missing"
    EXPIRED = "expired"
    INVALID = "invalid"


_AUTH_MESSAGES = {
    AuthFailureKind.MISSING: "Access token required",
    AuthFailureKind.EXPIRED: "Token expired",
    AuthFailureKind.INVALID: "Invalid token",
}


class AuthFailure(FeedbackServiceError):
    status_code = 401

    def __init__(self, kind: AuthFailureKind, detail: Optional[str] = None):
        super().__init__(_AUTH_MESSAGES[kind], detail)
        self.kind = kind


class NotFound(FeedbackServiceError):
    status_code = 404
    message = "Feedback not found"


class StoreFault(FeedbackServiceError):
    """Failure inside the persistence layer. Retryable from the caller's side."""

    status_code = 500
    message = "Storage temporarily unavailable"
    retryable = True


def error_body(message: str, details: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": True, "message": message}
    if details is not None:
        body["details"] = details
    return body


async def feedback_service_error_handler(request: Request, exc: FeedbackServiceError) -> JSONResponse:
    headers = None
    details = None

    if isinstance(exc, ValidationFailure):
        details = exc.details
    elif isinstance(exc, AuthFailure):
        headers = {"WWW-Authenticate": "Bearer"}
    elif isinstance(exc, StoreFault):
        logger.error("Store fault on %s %s: %s", request.method, request.url.path, exc.detail)

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, details),
        headers=headers,
    )


def _field_name(loc) -> str:
    # ("body", "nps") -> "nps"; ("query", "rating") -> "rating"
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) or "request"


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"field": _field_name(err.get("loc", ())), "message": err.get("msg", "Invalid value")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content=error_body(ValidationFailure.message, details))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled exception on %s %s: %s", request.method, request.url.path, exc, exc_info=True)
    return JSONResponse(status_code=500, content=error_body("Internal server error"))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FeedbackServiceError, feedback_service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
