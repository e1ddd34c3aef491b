"""Shared FastAPI dependencies exposing the aggregator held on ``app.state``."""

from __future__ import annotations

from fastapi import HTTPException, Request

from backend.engine import StatusAggregator


def get_aggregator(request: Request) -> StatusAggregator:
    aggregator = getattr(request.app.state, "aggregator", None)
    if aggregator is None:
        raise HTTPException(status_code=503, detail="Status aggregator not ready")
    return aggregator
