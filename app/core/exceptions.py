import logging
from fastapi import status
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.requests import Request

logger = logging.getLogger(__name__)

# ---------------------------
# CRUD (Database abstraction)
# ---------------------------

class DatabaseError(Exception):
    """Base class for all database-related errors."""
    pass

class DatabaseConflictError(DatabaseError):
    """Raised when a database constraint is violated (e.g., unique key)."""
    pass

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
    """Raised when a requested resource does not exist or is not owned by the caller."""
    pass

class ConflictError(BusinessError):
    """Raised when a resource already exists or conflicts with another resource."""
    pass

class ValidationError(BusinessError):
    """Raised when business rule validation fails (e.g., invalid input)."""
    pass

class UnauthorizedError(BusinessError):
    """Raised when authentication fails."""
    pass

class UpstreamProviderError(BusinessError):
    """Raised when a third-party call fails, times out or returns malformed data."""

    def __init__(self, message: str, provider: str = None):
        super().__init__(message)
        self.provider = provider


# ---------------------------
# Response envelope
# ---------------------------

def error_response(status_code: int, message: str, error: dict = None) -> JSONResponse:
    content = {"success": False, "message": message}
    if error is not None:
        content["error"] = error
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


# ---------------------------
# FastAPI Exception Handlers
# ---------------------------

def register_exception_handlers(app):
    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return error_response(status.HTTP_404_NOT_FOUND, str(exc), {"type": "not_found"})

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError):
        return error_response(status.HTTP_409_CONFLICT, str(exc), {"type": "conflict"})

    @app.exception_handler(UnauthorizedError)
    async def unauthorized_handler(request: Request, exc: UnauthorizedError):
        return error_response(status.HTTP_401_UNAUTHORIZED, str(exc), {"type": "unauthorized"})

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        return error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc), {"type": "validation_error"}
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "Validation error",
            {"type": "validation_error", "errors": exc.errors()},
        )

    @app.exception_handler(UpstreamProviderError)
    async def upstream_handler(request: Request, exc: UpstreamProviderError):
        logger.warning(f"Upstream provider error ({exc.provider}): {exc}")
        return error_response(
            status.HTTP_502_BAD_GATEWAY,
            str(exc),
            {"type": "upstream_provider_error", "provider": exc.provider},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        response = error_response(exc.status_code, str(exc.detail), {"type": "http_error"})
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        logger.error(f"Service error: {exc}", exc_info=exc)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", {"type": "internal_error"}
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", {"type": "internal_error"}
        )
