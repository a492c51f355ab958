"""
Error handling utilities
"""

from typing import Optional
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """
    A required API key, client id or secret is not configured.

    Carries remediation text for the persistent error panel of the dashboard.
    """

    def __init__(self, message: str, remediation: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.remediation = remediation


class ProviderError(Exception):
    """
    Non-2xx response, or a failure flag in the body, from a third-party API
    """

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message
        self.status_code = status_code


class ValidationError(Exception):
    """Custom exception for validation errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DatabaseError(Exception):
    """Custom exception for database errors"""
    pass


class CacheError(Exception):
    """Custom exception for cache errors"""
    pass


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Handle HTTP exceptions
    """
    logger.error(f"HTTP error: {exc.status_code} - {exc.detail}")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": True,
            "status_code": exc.status_code,
            "message": exc.detail,
            "path": str(request.url)
        }
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle request body/query validation errors
    """
    logger.error(f"Validation error: {exc.errors()}")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": True,
            "status_code": 422,
            "message": "Validation error",
            "details": exc.errors(),
            "path": str(request.url)
        }
    )


async def input_error_handler(request: Request, exc: ValidationError):
    """
    Handle missing or malformed input rejected before any network call
    """
    logger.warning(f"Rejected input: {exc.message}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": True,
            "status_code": 400,
            "message": exc.message,
            "path": str(request.url)
        }
    )


async def configuration_error_handler(request: Request, exc: ConfigurationError):
    """
    Handle missing provider configuration
    """
    logger.error(f"Configuration error: {exc.message}")

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "error": True,
            "status_code": 503,
            "message": exc.message,
            "remediation": exc.remediation,
            "path": str(request.url)
        }
    )


async def provider_error_handler(request: Request, exc: ProviderError):
    """
    Handle third-party API failures
    """
    logger.error(f"Provider error from {exc.provider}: {exc.status_code} - {exc.message}")

    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={
            "error": True,
            "status_code": 502,
            "provider": exc.provider,
            "upstream_status": exc.status_code,
            "message": exc.message,
            "path": str(request.url)
        }
    )


async def storage_error_handler(request: Request, exc: Exception):
    """
    Handle MongoDB and Redis failures
    """
    logger.error(f"Storage error: {type(exc).__name__} - {str(exc)}")

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "error": True,
            "status_code": 503,
            "message": str(exc) or "Storage unavailable",
            "path": str(request.url)
        }
    )


async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle general exceptions
    """
    logger.error(f"Unhandled exception: {type(exc).__name__} - {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": True,
            "status_code": 500,
            "message": "Internal server error",
            "path": str(request.url)
        }
    )
