"""
admission_portal/core/errors.py

Error taxonomy for the admission backend. Handlers raise these; the
exception handlers registered in main.py turn them into JSON responses:

    {"error": "NotFound", "message": "Application not found"}

Validation errors additionally carry ``errors: [{field, message}]``.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AdmissionError(Exception):
    """Base error with an HTTP status and a caller-safe message."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "InternalError"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body

    def to_response(self) -> JSONResponse:
        return JSONResponse(status_code=self.status_code, content=self.to_dict())


class ValidationError(AdmissionError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "ValidationError"

    def __init__(self, errors: List[Dict[str, str]], message: str = "Invalid request"):
        self.errors = errors
        super().__init__(message)

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls([{"field": field, "message": message}], message=message)

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["errors"] = self.errors
        return body


class AuthError(AdmissionError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "AuthError"

    def to_response(self) -> JSONResponse:
        resp = super().to_response()
        resp.headers["WWW-Authenticate"] = "Bearer"
        return resp


class Forbidden(AdmissionError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "Forbidden"

    def __init__(self, message: str = "Access denied", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class NotFound(AdmissionError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "NotFound"

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")


class Conflict(AdmissionError):
    status_code = status.HTTP_409_CONFLICT
    error = "Conflict"


class InvalidState(AdmissionError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "InvalidState"


class InternalError(AdmissionError):
    def __init__(self, message: str = "Server error"):
        super().__init__(message)


# ---------------- Handlers ----------------

def _field_name(loc) -> str:
    # drop the "body"/"query"/"path" prefix FastAPI puts in front
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "form")]
    return ".".join(parts) or "body"


async def admission_error_handler(request: Request, exc: AdmissionError):
    if isinstance(exc, InternalError):
        logger.error("Internal error on %s: %s", request.url.path, exc.message)
    else:
        logger.warning("%s on %s: %s", exc.error, request.url.path, exc.message)
    return exc.to_response()


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [{"field": _field_name(e.get("loc", ())), "message": e.get("msg", "")} for e in exc.errors()]
    logger.warning("Validation error on %s: %s", request.url.path, errors)
    return ValidationError(errors).to_response()


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s", request.url.path)
    return InternalError().to_response()


def register_error_handlers(app) -> None:
    app.add_exception_handler(AdmissionError, admission_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
