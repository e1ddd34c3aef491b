from __future__ import annotations

import logging
import os
import platform
import random
import socket
import sys
from datetime import datetime, timezone

from backend.collectors.docker_runtime import ContainerRuntime, check_docker_status
from backend.collectors.health import HealthSource, sample_health
from backend.engine.server_metrics import ServerMetrics, simulated_uptime_percentage
from backend.models import (
    DockerState,
    HealthSample,
    HealthStatus,
    ServiceStatus,
    iso_timestamp,
)

logger = logging.getLogger(__name__)


class StatusAggregator:
    """Builds the dashboard JSON snapshots.

    Combines the container runtime, a health source and the request
    counters. Nothing is cached: every call queries its collaborators again.
    """

    def __init__(
        self,
        runtime: ContainerRuntime,
        health_source: HealthSource,
        metrics: ServerMetrics | None = None,
        version: str = "1.0.0",
        rng: random.Random | None = None,
    ) -> None:
        self.runtime = runtime
        self.health_source = health_source
        self.metrics = metrics or ServerMetrics()
        self.version = version
        self._rng = rng or random.Random()

    async def health_check(self) -> tuple[dict, int]:
        health = await sample_health(self.health_source)
        status = HealthStatus.HEALTHY if health.healthy else HealthStatus.UNHEALTHY
        body = {
            "status": status,
            "timestamp": health.timestamp,
            "details": health.to_json(),
        }
        return body, 200 if health.healthy else 503

    async def status(self) -> dict:
        docker = await check_docker_status(self.runtime)
        health = await sample_health(self.health_source)
        uptime = self.metrics.uptime()
        response_time = self.metrics.average_response_time()

        return {
            "server": {
                "status": ServiceStatus.ONLINE,
                "version": self.version,
                "uptime": uptime,
            },
            "services": {
                "webServer": {
                    "status": ServiceStatus.ONLINE,
                    "responseTime": response_time,
                },
                "docker": {
                    "status": ServiceStatus.ONLINE if docker.running else ServiceStatus.OFFLINE,
                    "containers": docker.container_count,
                },
                "healthCheck": {
                    "status": ServiceStatus.ONLINE if health.healthy else ServiceStatus.DEGRADED,
                    "lastCheck": health.timestamp,
                },
                "ssl": {
                    "status": ServiceStatus.ONLINE,
                    "certificate": "valid",
                },
            },
            "metrics": {
                "uptime": uptime,
                "responseTime": f"{response_time}ms",
                "requestsPerHour": f"{self.metrics.requests_per_hour():,}",
            },
            "timestamp": iso_timestamp(),
        }

    async def metrics_report(self) -> dict:
        health = await sample_health(self.health_source)
        docker = await check_docker_status(self.runtime)
        started = datetime.fromtimestamp(self.metrics.start_time / 1000, tz=timezone.utc)

        return {
            "uptime": {
                "percentage": simulated_uptime_percentage(self._rng),
                "duration": self.metrics.uptime(),
                "startTime": iso_timestamp(started),
            },
            "performance": {
                "averageResponseTime": self.metrics.average_response_time(),
                "requestCount": self.metrics.request_count,
                "requestsPerHour": self.metrics.requests_per_hour(),
            },
            "system": _resources(health) | {"healthy": health.healthy},
            "docker": {
                "status": DockerState.RUNNING if docker.running else DockerState.STOPPED,
                "containerCount": docker.container_count,
                "containers": [c.model_dump() for c in docker.containers],
            },
            "timestamp": iso_timestamp(),
        }

    async def containers(self) -> dict:
        """Detailed listing; runtime failures propagate to the caller."""
        records = await self.runtime.list_all()
        return {
            "containers": records,
            "total": len(records),
            "running": sum(1 for r in records if r.get("State") == "running"),
            "timestamp": iso_timestamp(),
        }

    async def system_info(self) -> dict:
        health = await sample_health(self.health_source)
        return {
            "os": sys.platform,
            "arch": platform.machine(),
            "pythonVersion": platform.python_version(),
            "hostname": socket.gethostname(),
            "pid": os.getpid(),
            "serverUptime": self.metrics.uptime(),
            "resources": _resources(health),
            "timestamp": iso_timestamp(),
        }


def _resources(health: HealthSample) -> dict:
    return {"cpu": health.cpu, "memory": health.memory, "disk": health.disk}
