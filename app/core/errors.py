"""
Domain errors for the provisioning flows.

Services raise these; the API layer turns them into `{"error": message}`
responses with the status code carried by each class. Messages are safe to
show to public callers, internal detail goes to the log only.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class DomainError(Exception):
    """Base error with a user-safe message and an HTTP status."""

    status_code = 500

    def __init__(self, message: str, code: str | None = None, details: dict | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(DomainError):
    """Missing or malformed input. Raised before any side effect."""

    status_code = 400


class ConfigurationError(DomainError):
    """A required system setting is absent."""

    status_code = 500


class DuplicateError(DomainError):
    """Uniqueness conflict (email, voucher code, member number)."""

    status_code = 400


class CapacityExceeded(DomainError):
    """No slots left in the timeframe."""

    status_code = 400


class NotFound(DomainError):
    status_code = 404


class ProvisioningError(DomainError):
    """A step of a multi-step flow failed; earlier steps were compensated."""

    status_code = 500


class Unauthorized(DomainError):
    status_code = 401


class Forbidden(DomainError):
    status_code = 403


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        detail = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return JSONResponse({"error": detail}, status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        field = ".".join(str(p) for p in errors[0].get("loc", ())[1:]) if errors else ""
        message = f"Invalid value for field: {field}" if field else "Invalid request body"
        return JSONResponse({"error": message}, status_code=400)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled error", extra={"path": request.url.path, "method": request.method})
        return JSONResponse({"error": "Internal server error"}, status_code=500)
