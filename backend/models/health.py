from __future__ import annotations

from pydantic import BaseModel, Field

from backend.models.status import iso_timestamp

CPU_LIMIT = 80
MEMORY_LIMIT = 85
DISK_LIMIT = 90


class HealthSample(BaseModel):
    """Point-in-time resource reading used by the health endpoints.

    A failed reading carries ``error`` instead of the percentages and is
    always unhealthy.
    """

    healthy: bool
    cpu: int | float | None = None
    memory: int | float | None = None
    disk: int | float | None = None
    error: str | None = None
    timestamp: str = Field(default_factory=iso_timestamp)

    @classmethod
    def from_readings(cls, cpu: float, memory: float, disk: float) -> HealthSample:
        return cls(
            healthy=cpu < CPU_LIMIT and memory < MEMORY_LIMIT and disk < DISK_LIMIT,
            cpu=cpu,
            memory=memory,
            disk=disk,
        )

    @classmethod
    def failed(cls, message: str) -> HealthSample:
        return cls(healthy=False, error=message)

    def to_json(self) -> dict:
        return self.model_dump(exclude_none=True)
