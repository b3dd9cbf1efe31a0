"""
Centralized translation of errors into `{status, message}` responses.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cart_service.core.exceptions import CartServiceError
from cart_service.schemas.cart import ErrorResponse

logger = logging.getLogger(__name__)


def _error_response(status_code: int, message: str) -> JSONResponse:
    body = ErrorResponse(status="fail" if status_code < 500 else "error", message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def cart_error_handler(request: Request, exc: CartServiceError):
    """Handle typed cart service errors."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return _error_response(exc.status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Handle malformed request payloads without echoing validation internals."""
    logger.info(f"Rejected payload for {request.method} {request.url.path}: {len(exc.errors())} errors")
    return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid request payload")


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Handle routing errors, including unknown routes."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return _error_response(exc.status_code, f"Can't find route {request.url.path} on the server")
    return _error_response(exc.status_code, str(exc.detail))


async def unhandled_error_handler(request: Request, exc: Exception):
    """Handle anything unexpected. The traceback is logged, never returned."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Something went wrong")


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(CartServiceError, cart_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
