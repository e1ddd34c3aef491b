from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request

from backend.api.errors import unhandled_exception_handler

logger = logging.getLogger(__name__)


def register_request_accounting(app: FastAPI) -> None:
    """Count every request and time its response into ``app.state.server_metrics``.

    Instrumentation faults are logged and dropped; they never fail a request.
    Handler exceptions become the 500 envelope here so the response still
    passes back through the CORS middleware registered outside this one.
    """

    @app.middleware("http")
    async def account_request(request: Request, call_next):
        started = time.perf_counter()
        try:
            request.app.state.server_metrics.record_request()
        except Exception as exc:
            logger.warning("Request accounting failed: %s", exc)

        try:
            return await call_next(request)
        except Exception as exc:
            return await unhandled_exception_handler(request, exc)
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            try:
                request.app.state.server_metrics.record_response(elapsed_ms)
            except Exception as exc:
                logger.warning("Response timing failed: %s", exc)
