from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from backend.api.dependencies import get_aggregator
from backend.api.errors import error_response
from backend.engine import StatusAggregator

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", tags=["health"])
async def health(aggregator: StatusAggregator = Depends(get_aggregator)) -> JSONResponse:
    body, status_code = await aggregator.health_check()
    return JSONResponse(status_code=status_code, content=body)


@router.get("/api/status", tags=["status"])
async def get_status(aggregator: StatusAggregator = Depends(get_aggregator)) -> dict:
    return await aggregator.status()


@router.get("/api/metrics", tags=["status"])
async def get_metrics(aggregator: StatusAggregator = Depends(get_aggregator)) -> dict:
    return await aggregator.metrics_report()


@router.get("/api/containers", tags=["docker"])
async def get_containers(aggregator: StatusAggregator = Depends(get_aggregator)):
    try:
        return await aggregator.containers()
    except Exception as exc:
        logger.warning("Container listing failed: %s", exc)
        return error_response(500, "Failed to fetch containers", message=str(exc))


@router.get("/api/system", tags=["system"])
async def get_system(aggregator: StatusAggregator = Depends(get_aggregator)):
    try:
        return await aggregator.system_info()
    except Exception as exc:
        logger.warning("System information failed: %s", exc)
        return error_response(500, "Failed to fetch system information", message=str(exc))
