"""
Global error handler middleware for the FastAPI application.
Catches and formats all exceptions consistently.
"""

import logging
import traceback
from typing import Any, Dict
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from fastapi import status

from app.config import settings
from app.domain.models.base import (
    DomainException,
    ValidationError,
    EntityNotFoundError,
    ConversionUnavailableError,
    ConcurrencyConflictError
)

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware to handle all uncaught exceptions and format error responses.
    """

    async def dispatch(self, request: Request, call_next):
        """
        Process the request and handle any exceptions.
        """
        try:
            response = await call_next(request)
            return response
        except Exception as exc:
            return await self.handle_exception(request, exc)

    async def handle_exception(self, request: Request, exc: Exception) -> JSONResponse:
        """
        Handle different types of exceptions and return appropriate responses.
        """
        error_response = self.format_error_response(exc)

        if error_response["status_code"] >= 500:
            logger.error(
                f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
                exc_info=True,
                extra={
                    "request_path": request.url.path,
                    "request_method": request.method,
                    "client_host": request.client.host if request.client else None
                }
            )
        else:
            logger.warning(f"{request.method} {request.url.path} failed: {str(exc)}")

        # In development, add more debug information
        if settings.debug:
            error_response["debug"] = {
                "exception_type": type(exc).__name__,
                "traceback": traceback.format_exc().split("\n")
            }

        return JSONResponse(
            status_code=error_response["status_code"],
            content=error_response
        )

    def format_error_response(self, exc: Exception) -> Dict[str, Any]:
        """
        Format exception into a consistent error response structure.
        """
        # Default error response
        error_response = {
            "error": "Internal Server Error",
            "message": "An unexpected error occurred",
            "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR
        }

        if isinstance(exc, ValidationError):
            error_response.update({
                "error": "Bad Request",
                "message": exc.message,
                "error_code": exc.code,
                "field": exc.field,
                "status_code": status.HTTP_400_BAD_REQUEST
            })
        elif isinstance(exc, EntityNotFoundError):
            error_response.update({
                "error": "Not Found",
                "message": exc.message,
                "error_code": exc.code,
                "status_code": status.HTTP_404_NOT_FOUND
            })
        elif isinstance(exc, ConcurrencyConflictError):
            error_response.update({
                "error": "Conflict",
                "message": exc.message,
                "error_code": exc.code,
                "status_code": status.HTTP_409_CONFLICT
            })
        elif isinstance(exc, ConversionUnavailableError):
            error_response.update({
                "error": "Service Unavailable",
                "message": exc.message,
                "error_code": exc.code,
                "status_code": status.HTTP_503_SERVICE_UNAVAILABLE
            })
        elif isinstance(exc, DomainException):
            error_response.update({
                "error": "Bad Request",
                "message": exc.message,
                "error_code": exc.code,
                "status_code": status.HTTP_400_BAD_REQUEST
            })
        elif isinstance(exc, ValueError):
            error_response.update({
                "error": "Bad Request",
                "message": str(exc),
                "status_code": status.HTTP_400_BAD_REQUEST
            })
        elif isinstance(exc, TimeoutError):
            error_response.update({
                "error": "Request Timeout",
                "message": "The request took too long to process",
                "status_code": status.HTTP_408_REQUEST_TIMEOUT
            })

        return error_response
