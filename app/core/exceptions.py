import logging
from typing import Optional, Dict

from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.requests import Request
from pydantic import ValidationError as PydanticValidationError

from app.core.config import settings

logger = logging.getLogger(__name__)

LOGIN_PAGE = "/login.html"


# ---------------------------
# Service (Business logic)
# ---------------------------

class BusinessError(Exception):
    """Base class for all business logic errors."""
    pass

class ServiceError(BusinessError):
    """Generic error for unexpected service failures."""
    pass

class NotFoundError(BusinessError):
    """Raised when a requested resource does not exist."""
    pass

class ConflictError(BusinessError):
    """Raised when a resource already exists or conflicts with another resource."""
    pass

class ForbiddenError(BusinessError):
    """Raised when an authenticated user does not have permission to perform an action."""
    pass

class RegistrationDisabledError(ForbiddenError):
    """Raised when new registrations are switched off in the site settings."""

    def __init__(self, message: str = "New user registrations are disabled"):
        super().__init__(message)

class ValidationError(BusinessError):
    """Raised when input validation fails. The message names the offending field."""
    pass

class UnauthorizedError(BusinessError):
    """Raised when there is no valid session."""
    pass

class PayloadTooLargeError(BusinessError):
    """Raised when an upload exceeds the configured size limit."""
    pass

class RateLimitedError(BusinessError):
    """Raised when a client exceeds the login rate limit."""

    def __init__(self, message: str, retry_after: int):
        super().__init__(message)
        self.retry_after = retry_after


# ---------------------------
# Helpers
# ---------------------------

def describe_validation_errors(errors) -> str:
    """Render the first pydantic error as '<field>: <message>'."""
    if not errors:
        return "Invalid input"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "body: invalid JSON"
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path", "form")]
    field = ".".join(loc) or "body"
    return f"{field}: {first.get('msg', 'invalid value')}"


def from_pydantic(exc: PydanticValidationError) -> ValidationError:
    return ValidationError(describe_validation_errors(exc.errors()))


def wants_json(request: Request) -> bool:
    """API clients get JSON errors; only plain browser page loads are redirected."""
    if request.headers.get("x-requested-with", "").lower() == "xmlhttprequest":
        return True
    accept = request.headers.get("accept", "")
    if "json" in accept:
        return True
    return "text/html" not in accept


def _error(status_code: int, detail: str, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail}, headers=headers)


# ---------------------------
# FastAPI Exception Handlers
# ---------------------------

def register_exception_handlers(app):
    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _error(status.HTTP_404_NOT_FOUND, str(exc))

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError):
        return _error(status.HTTP_409_CONFLICT, str(exc))

    @app.exception_handler(ForbiddenError)
    async def forbidden_handler(request: Request, exc: ForbiddenError):
        return _error(status.HTTP_403_FORBIDDEN, str(exc))

    @app.exception_handler(UnauthorizedError)
    async def unauthorized_handler(request: Request, exc: UnauthorizedError):
        if not wants_json(request):
            return RedirectResponse(LOGIN_PAGE, status_code=status.HTTP_303_SEE_OTHER)
        return _error(status.HTTP_401_UNAUTHORIZED, str(exc))

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return _error(status.HTTP_400_BAD_REQUEST, describe_validation_errors(exc.errors()))

    @app.exception_handler(PayloadTooLargeError)
    async def payload_too_large_handler(request: Request, exc: PayloadTooLargeError):
        return _error(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, str(exc))

    @app.exception_handler(RateLimitedError)
    async def rate_limited_handler(request: Request, exc: RateLimitedError):
        return _error(
            status.HTTP_429_TOO_MANY_REQUESTS,
            str(exc),
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        logger.error(f"Service error: {exc}", exc_info=exc)
        detail = "Internal server error" if settings.is_production else str(exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, detail)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        detail = "An unexpected error occurred" if settings.is_production else str(exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, detail)
