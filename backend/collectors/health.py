from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod

import psutil

from backend.models.health import HealthSample

logger = logging.getLogger(__name__)


class HealthSource(ABC):
    """Abstract provider of resource readings for the health endpoints.

    Subclasses implement ``sample()``; callers go through ``sample_health()``
    which turns any failure into an unhealthy sample.
    """

    name: str = "base"

    @abstractmethod
    async def sample(self) -> HealthSample:
        """Take one reading of CPU, memory and disk utilisation."""
        ...


class SimulatedHealthSource(HealthSource):
    """Random readings inside fixed, always-healthy bands."""

    name = "simulated"

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    async def sample(self) -> HealthSample:
        cpu = self._rng.randrange(10, 40)
        memory = self._rng.randrange(30, 70)
        disk = self._rng.randrange(20, 40)
        return HealthSample.from_readings(cpu, memory, disk)


class PsutilHealthSource(HealthSource):
    """Real host utilisation read through psutil."""

    name = "psutil"

    def __init__(self, disk_path: str = "/") -> None:
        self.disk_path = disk_path

    async def sample(self) -> HealthSample:
        cpu = psutil.cpu_percent(interval=0)
        memory = psutil.virtual_memory().percent
        disk = psutil.disk_usage(self.disk_path).percent
        return HealthSample.from_readings(round(cpu, 1), round(memory, 1), round(disk, 1))


class FixedHealthSource(HealthSource):
    """Returns the same readings on every call."""

    name = "fixed"

    def __init__(self, cpu: float, memory: float, disk: float) -> None:
        self.cpu = cpu
        self.memory = memory
        self.disk = disk

    async def sample(self) -> HealthSample:
        return HealthSample.from_readings(self.cpu, self.memory, self.disk)


async def sample_health(source: HealthSource) -> HealthSample:
    try:
        return await source.sample()
    except Exception as exc:
        logger.warning("Health source [%s] failed: %s", source.name, exc)
        return HealthSample.failed(str(exc))


def build_health_source(kind: str, disk_path: str = "/") -> HealthSource:
    if kind == "psutil":
        return PsutilHealthSource(disk_path=disk_path)
    if kind == "simulated":
        return SimulatedHealthSource()
    raise ValueError(f"Unknown health source: {kind!r}")
