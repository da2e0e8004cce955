"""Centralized error transformation for the REST API.

Maps Calepin errors to JSON bodies of the form
``{"error": <code>, "message": <text>, **context}``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from calepin.domain.shared.error import (
    CalepinError,
    ConfigurationError,
    InfrastructureError,
    RoutingError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS_MAP: dict[type[CalepinError], int] = {
    ConfigurationError: 500,
    RoutingError: 400,
    InfrastructureError: 500,
    UpstreamError: 502,
}


def status_for(error: CalepinError) -> int:
    for error_type in type(error).__mro__:
        if error_type in ERROR_STATUS_MAP:
            return ERROR_STATUS_MAP[error_type]
    return 500


def error_body(error: CalepinError) -> dict:
    return {"error": error.code, "message": error.message, **error.context}


def internal_error_response() -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(CalepinError)
    async def calepin_error_handler(request: Request, exc: CalepinError) -> JSONResponse:
        status_code = status_for(exc)
        logger.error("%s %s -> %s: %s", request.method, request.url.path, status_code, exc.message)
        return JSONResponse(status_code=status_code, content=error_body(exc))

    # Global exception handler - logs all unhandled exceptions
    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return internal_error_response()
