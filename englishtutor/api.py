"""
Central API router and utilities for the exam practice service.

This module provides:
- A central router that includes the practice routers
- The standard response envelope
- Exception handlers mapping the error taxonomy to HTTP responses
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from englishtutor.common.exceptions import (
    BaseError,
    ConfigurationError,
    DatabaseError,
    EvaluationUnavailable,
    NotFoundError,
    ValidationError,
)
from englishtutor.common.logger import app_logger

logger = app_logger.getChild("api")

# Create main API router
main_router = APIRouter()

# Version prefix for all API routes
API_VERSION = "v1"

registered_modules: Dict[str, APIRouter] = {}


def register_module(name: str, router: APIRouter, prefix: Optional[str] = None) -> None:
    """
    Register a module router with the main API router.

    Args:
        name: Name of the module, used as tag
        router: FastAPI router of the module
        prefix: Path prefix below the API version (the module name by default)
    """
    if registered_modules.get(name) is router:
        return
    if name in registered_modules:
        logger.warning(f"Module '{name}' already registered, overwriting")

    main_router.include_router(router, prefix=f"/{API_VERSION}{prefix if prefix is not None else '/' + name}",
                               tags=[name])
    registered_modules[name] = router
    logger.info(f"Registered module: {name} with {len(router.routes)} routes")


class APIResponse:
    """Standard API response structure"""

    @staticmethod
    def success(data: Any = None, message: str = "Success") -> Dict[str, Any]:
        """
        Create a success response.

        Args:
            data: Response data
            message: Success message

        Returns:
            Response dictionary
        """
        return {
            "status": "success",
            "message": message,
            "data": data
        }

    @staticmethod
    def error(message: str, details: Optional[Any] = None,
              code: Optional[str] = None) -> Dict[str, Any]:
        """
        Create an error response.

        Args:
            message: Error message
            details: Optional error details
            code: Optional error code

        Returns:
            Response dictionary
        """
        response = {
            "status": "error",
            "message": message
        }

        if details:
            response["details"] = details

        if code:
            response["code"] = code

        return response


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle request validation errors and return a standardized response.

    Args:
        request: The incoming request
        exc: The validation exception

    Returns:
        A JSON response with error details
    """
    error_details = []
    for error in exc.errors():
        error_details.append({
            "location": list(error.get("loc", [])),
            "message": error.get("msg", "Unknown validation error"),
            "type": error.get("type", "")
        })

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=APIResponse.error("Validation error", error_details, "validation_error")
    )


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=APIResponse.error(exc.message, code="not_found"),
    )


async def answer_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=APIResponse.error(exc.message, exc.errors, "validation_error"),
    )


async def evaluation_unavailable_handler(request: Request, exc: EvaluationUnavailable) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=APIResponse.error(
            "Your answer could not be evaluated right now. Please try again shortly.",
            code="evaluation_unavailable",
        ),
    )


async def internal_error_handler(request: Request, exc: BaseError) -> JSONResponse:
    """Configuration and store failures: logged in full, reported generically."""
    logger.error(f"{request.method} {request.url.path}: {exc.message}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=APIResponse.error("Internal server error", code=type(exc).__name__),
    )


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(ValidationError, answer_validation_handler)
    app.add_exception_handler(EvaluationUnavailable, evaluation_unavailable_handler)
    app.add_exception_handler(ConfigurationError, internal_error_handler)
    app.add_exception_handler(DatabaseError, internal_error_handler)
    app.add_exception_handler(BaseError, internal_error_handler)
