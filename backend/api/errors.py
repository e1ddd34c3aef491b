from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.models import ErrorEnvelope

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong!"


def error_response(
    status_code: int,
    error: str,
    message: str | None = None,
    path: str | None = None,
) -> JSONResponse:
    envelope = ErrorEnvelope(error=error, message=message, path=path)
    return JSONResponse(status_code=status_code, content=envelope.model_dump(exclude_none=True))


async def not_found_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """404 envelope for unknown API routes; other paths keep the default body.

    Also bound to 405 so a known API path hit with another method reads as
    an unknown endpoint.
    """
    if request.url.path.startswith("/api/"):
        return error_response(404, "API endpoint not found", path=request.url.path)
    return await http_exception_handler(request, exc)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    expose = getattr(request.app.state, "expose_error_details", False)
    return error_response(
        500,
        "Internal Server Error",
        message=str(exc) if expose else GENERIC_ERROR_MESSAGE,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(404, not_found_handler)
    app.add_exception_handler(405, not_found_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
