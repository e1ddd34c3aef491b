from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.api.errors import register_exception_handlers
from backend.api.middleware import register_request_accounting
from backend.api.routes import router
from backend.collectors import DockerCliRuntime, build_health_source
from backend.config import Settings, settings
from backend.engine import ServerMetrics, StatusAggregator

logger = logging.getLogger(__name__)


def build_aggregator(config: Settings) -> StatusAggregator:
    return StatusAggregator(
        runtime=DockerCliRuntime(binary=config.docker_binary, timeout=config.docker_timeout),
        health_source=build_health_source(config.health_source, disk_path=config.disk_path),
        metrics=ServerMetrics(),
        version=config.version,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ── startup ───────────────────────────────────────
    config: Settings = app.state.settings
    aggregator = build_aggregator(config)
    aggregator.metrics.reset()

    # Store on app.state for route and middleware access
    app.state.aggregator = aggregator
    app.state.server_metrics = aggregator.metrics

    logger.info(
        "%s %s started (runtime=%s, health_source=%s)",
        config.app_name,
        config.version,
        aggregator.runtime.name,
        aggregator.health_source.name,
    )

    yield

    # ── shutdown ──────────────────────────────────────
    logger.info(
        "%s shut down after %s (%d requests)",
        config.app_name,
        aggregator.metrics.uptime(),
        aggregator.metrics.request_count,
    )


def create_app(config: Settings = settings) -> FastAPI:
    app = FastAPI(title=config.app_name, version=config.version, lifespan=lifespan)
    app.state.settings = config
    app.state.expose_error_details = config.expose_error_details

    register_request_accounting(app)
    # Added last so it wraps every other middleware, error envelopes included
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(router)
    return app


app = create_app()
