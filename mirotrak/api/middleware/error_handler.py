"""Error handling middleware and exception handlers.

Every error body carries a human-readable ``message``; handlers only choose the
status code and the static message.
"""

import logging

from fastapi import HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class ErrorResponse:
    """Standardized error response format."""

    @staticmethod
    def create(
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        headers: dict[str, str] | None = None,
        **extra,
    ) -> JSONResponse:
        """Create error response.

        Args:
            message: Human-readable error message
            status_code: HTTP status code
            headers: Extra response headers
            **extra: Additional body fields (``field``, ``errors``...)

        Returns:
            JSONResponse with error information
        """
        content = {"message": message}
        content.update({key: value for key, value in extra.items() if value is not None})

        return JSONResponse(
            status_code=status_code,
            content=jsonable_encoder(content),
            headers=headers,
        )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render HTTPException with a ``message`` body.

    Dict details are used as the body as-is; string details become the message.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    return ErrorResponse.create(
        message=str(exc.detail),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request body/query validation errors.

    Args:
        request: FastAPI request
        exc: Validation error

    Returns:
        JSON error response
    """
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")

    return ErrorResponse.create(
        message="Données invalides",
        status_code=status.HTTP_400_BAD_REQUEST,
        errors=exc.errors(),
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle database errors that escaped a route.

    Args:
        request: FastAPI request
        exc: SQLAlchemy error

    Returns:
        JSON error response
    """
    logger.error(f"Database error: {exc}", exc_info=True)

    return ErrorResponse.create(
        message="Erreur de base de données",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions.

    Args:
        request: FastAPI request
        exc: Any exception

    Returns:
        JSON error response
    """
    logger.error(f"Unexpected error: {exc}", exc_info=True)

    return ErrorResponse.create(
        message="Une erreur inattendue est survenue",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        error=str(exc) if logger.isEnabledFor(logging.DEBUG) else None,
    )
