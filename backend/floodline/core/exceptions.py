from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

logger = structlog.get_logger()


class AppError(Exception):
    """
    Base for every error that is allowed to reach a client.
    Carries the HTTP status and a human readable message.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "An unexpected error occurred. Please contact support."

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Validation error"


class DuplicateIdentity(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Email already exists"


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Not authenticated"


class InvalidCredentials(Unauthenticated):
    message = "Invalid credentials"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Forbidden"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class StoreError(AppError):
    message = "A storage error occurred. Please try again later."


class FeedError(Exception):
    """Internal: the government feed could not be used. Never sent over HTTP."""


class FeedUnavailable(FeedError):
    pass


class FeedFormatInvalid(FeedError):
    pass


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("app_error", error=type(exc).__name__, path=request.url.path)
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message},
    )

async def store_exception_handler(request: Request, exc: SQLAlchemyError):
    """
    Storage failures are logged in full but only a generic message leaves the process.
    """
    logger.error("store_error", error=str(exc), path=request.url.path)
    return JSONResponse(
        status_code=StoreError.status_code,
        content={"message": StoreError.message},
    )

async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch-all for unhandled exceptions.
    Prevents stack trace leakage in production.
    """
    logger.error("unhandled_exception", error=str(exc), path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": AppError.message},
    )

async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Standard HTTP exception handler (404 for unknown routes, 405, ...).
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
    )

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Pydantic validation errors surface as 400 ValidationError.
    """
    logger.warning("validation_error", errors=exc.errors(), path=request.url.path)
    return JSONResponse(
        status_code=ValidationError.status_code,
        content={
            "message": ValidationError.message,
            "errors": jsonable_encoder(exc.errors()),
        },
    )
