from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, Field


def iso_timestamp(moment: datetime | None = None) -> str:
    """UTC ISO-8601 with millisecond precision, e.g. ``2025-01-01T12:00:00.000Z``."""
    if moment is None:
        moment = datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ServiceStatus(StrEnum):
    ONLINE = "online"
    OFFLINE = "offline"
    DEGRADED = "degraded"


class HealthStatus(StrEnum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class DockerState(StrEnum):
    RUNNING = "running"
    STOPPED = "stopped"


class ErrorEnvelope(BaseModel):
    """JSON body returned for every failed request."""

    error: str
    message: str | None = None
    path: str | None = None
    timestamp: str = Field(default_factory=iso_timestamp)
