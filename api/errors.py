"""
JSON error translation.

Wraps every route so failures always leave the server as
{"error": "<reason>"} with a meaningful status code:

  ServiceError            → its own status + reason
  BackendFailureError     → 500 "Internal server error" (already logged by
                            the coordinator)
  HTTPException           → its status + detail (404, 405, ...)
  RequestValidationError  → 400 + short description of the bad field
  anything else           → 500 "Internal server error" (logged, never echoed)

Successful responses are passed through untouched.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from inference.errors import BackendFailureError, ServiceError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


def error_response(status_code: int, reason: str) -> JSONResponse:
    """Build the error envelope."""
    return JSONResponse(status_code=status_code, content={"error": reason})


def describe_validation_error(exc: RequestValidationError) -> str:
    """Summarize the first validation problem, e.g. "prompt: Field required"."""
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part != "body"]
    field = ".".join(loc) or "body"
    return f"Invalid request body: {field}: {first.get('msg', 'invalid value')}"


async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
    return error_response(exc.status_code, exc.reason)


async def handle_backend_failure(request: Request, exc: BackendFailureError) -> JSONResponse:
    return error_response(500, INTERNAL_ERROR_MESSAGE)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    reason = exc.detail if isinstance(exc.detail, str) else INTERNAL_ERROR_MESSAGE
    return error_response(exc.status_code, reason)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    reason = describe_validation_error(exc)
    logger.info(f"{request.method} {request.url.path} rejected: {reason}")
    return error_response(400, reason)


def install_error_handlers(app: FastAPI) -> None:
    """Register the error translation layer on ``app``."""
    app.add_exception_handler(ServiceError, handle_service_error)
    app.add_exception_handler(BackendFailureError, handle_backend_failure)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    @app.middleware("http")
    async def json_errors(request: Request, call_next):
        """Catch everything the exception handlers did not."""
        logger.debug(f"{request.method} {request.url.path}")
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"Request error on {request.url.path}: {e}", exc_info=True)
            return error_response(500, INTERNAL_ERROR_MESSAGE)
