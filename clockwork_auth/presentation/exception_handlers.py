"""Exception handlers for converting exceptions to HTTP responses.

Instead of one handler per exception, the base handlers look up the HTTP
status from the exception's error_code in ERROR_CODE_TO_HTTP_STATUS.

To add a new exception:
1. Create the exception class (inheriting from ApplicationError or DomainException)
2. Add its error_code to ERROR_CODE_TO_HTTP_STATUS in error_codes.py
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from clockwork_auth.application.exceptions import ApplicationError, ValidationFailedError
from clockwork_auth.domain.exceptions import DomainException
from clockwork_auth.presentation.error_codes import get_http_status_for_error_code

logger = logging.getLogger(__name__)


async def application_error_handler(
    request: Request, exc: ApplicationError
) -> JSONResponse:
    """
    Handle ALL application layer exceptions.

    ValidationFailedError additionally lists every failing rule under "errors".
    """
    http_status = get_http_status_for_error_code(exc.error_code)

    content: dict = {
        "detail": exc.message,
        "error_code": exc.error_code,
    }
    if isinstance(exc, ValidationFailedError):
        content["errors"] = exc.details

    return JSONResponse(status_code=http_status, content=content)


async def domain_exception_handler(
    request: Request, exc: DomainException
) -> JSONResponse:
    """
    Handle ALL domain layer exceptions.

    This single handler handles all DomainException subclasses.
    The HTTP status code is determined by the error_code attribute.
    """
    http_status = get_http_status_for_error_code(exc.error_code)

    return JSONResponse(
        status_code=http_status,
        content={
            "detail": exc.message,
            "error_code": exc.error_code,
        },
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors from request data.

    Returns a list of all validation errors with field locations and messages.
    """
    validation_errors = []
    for error in exc.errors():
        # Build field path (e.g., "body.email")
        field_location = ".".join(str(loc) for loc in error["loc"])

        validation_errors.append(
            {
                "field": field_location,
                "message": error["msg"],
            }
        )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Validation failed",
            "error_code": "VALIDATION_ERROR",
            "errors": validation_errors,
        },
    )


async def database_error_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    """
    Handle credential store errors.

    Reported as a storage failure without exposing database details.
    """
    logger.error(f"Database error: {exc}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "detail": "Authentication temporarily unavailable",
            "error_code": "STORAGE_FAILURE",
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for any unexpected errors."""
    logger.error(f"Unhandled error: {exc}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "An internal server error occurred",
            "error_code": "INTERNAL_SERVER_ERROR",
        },
    )
