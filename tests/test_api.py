"""Tests for backend.api routes, middleware and error envelopes."""

from __future__ import annotations

import random
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from backend.collectors import ContainerRuntime, ContainerRuntimeError, FixedHealthSource
from backend.engine import ServerMetrics, StatusAggregator
from backend.engine.server_metrics import MS_PER_MINUTE, now_ms
from backend.main import app
from backend.models import ContainerSnapshot

_STATE_KEYS = ("aggregator", "server_metrics")


class FakeRuntime(ContainerRuntime):
    """Returns fixed fixtures, or raises when ``error`` is set."""

    name = "fake"

    def __init__(self, snapshots=None, records=None, error: Exception | None = None) -> None:
        self.snapshots = snapshots or []
        self.records = records or []
        self.error = error

    async def list_running(self):
        if self.error:
            raise self.error
        return self.snapshots

    async def list_all(self):
        if self.error:
            raise self.error
        return self.records


RUNNING = [
    ContainerSnapshot(name="web", status="Up 2 hours"),
    ContainerSnapshot(name="api", status="Up 2 hours"),
]
RECORDS = [
    {"Names": "web", "State": "running", "Image": "nginx"},
    {"Names": "api", "State": "running", "Image": "node"},
    {"Names": "job", "State": "exited", "Image": "busybox"},
]


# ── fixtures ───────────────────────────────────────────


def _install(aggregator) -> None:
    app.state.aggregator = aggregator
    app.state.server_metrics = aggregator.metrics


@pytest.fixture
def install():
    """Inject an aggregator into app.state so routes work without lifespan."""
    yield _install
    for key in _STATE_KEYS:
        if hasattr(app.state, key):
            delattr(app.state, key)


def _aggregator(runtime=None, source=None, metrics=None) -> StatusAggregator:
    return StatusAggregator(
        runtime=runtime or FakeRuntime(snapshots=RUNNING, records=RECORDS),
        health_source=source or FixedHealthSource(cpu=10, memory=10, disk=10),
        metrics=metrics or ServerMetrics(),
        version="1.0.0",
        rng=random.Random(0),
    )


@pytest.fixture
async def client():
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


# ── /health ────────────────────────────────────────────


class TestHealth:
    @pytest.mark.asyncio
    async def test_healthy(self, client: AsyncClient, install):
        install(_aggregator(source=FixedHealthSource(cpu=10, memory=10, disk=10)))
        resp = await client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["details"]["healthy"] is True
        assert data["details"]["cpu"] == 10
        assert data["timestamp"] == data["details"]["timestamp"]

    @pytest.mark.asyncio
    async def test_unhealthy(self, client: AsyncClient, install):
        install(_aggregator(source=FixedHealthSource(cpu=90, memory=10, disk=10)))
        resp = await client.get("/health")
        assert resp.status_code == 503
        data = resp.json()
        assert data["status"] == "unhealthy"
        assert data["details"]["healthy"] is False

    @pytest.mark.asyncio
    async def test_not_ready_without_state(self, client: AsyncClient, install):
        resp = await client.get("/health")
        assert resp.status_code == 503


# ── /api/status ────────────────────────────────────────


class TestStatus:
    @pytest.mark.asyncio
    async def test_status_shape(self, client: AsyncClient, install):
        install(_aggregator())
        resp = await client.get("/api/status")
        assert resp.status_code == 200
        data = resp.json()
        assert data["server"]["status"] == "online"
        assert data["server"]["version"] == "1.0.0"
        assert data["services"]["webServer"]["status"] == "online"
        assert data["services"]["docker"] == {"status": "online", "containers": 2}
        assert data["services"]["healthCheck"]["status"] == "online"
        assert data["services"]["ssl"] == {"status": "online", "certificate": "valid"}
        assert data["metrics"]["responseTime"].endswith("ms")
        assert data["timestamp"].endswith("Z")

    @pytest.mark.asyncio
    async def test_runtime_failure_reads_offline(self, client: AsyncClient, install):
        install(_aggregator(runtime=FakeRuntime(error=ContainerRuntimeError("no docker"))))
        resp = await client.get("/api/status")
        assert resp.status_code == 200
        docker = resp.json()["services"]["docker"]
        assert docker["status"] == "offline"
        assert docker["containers"] == 0

    @pytest.mark.asyncio
    async def test_unhealthy_sample_reads_degraded(self, client: AsyncClient, install):
        install(_aggregator(source=FixedHealthSource(cpu=99, memory=10, disk=10)))
        resp = await client.get("/api/status")
        assert resp.status_code == 200
        assert resp.json()["services"]["healthCheck"]["status"] == "degraded"

    @pytest.mark.asyncio
    async def test_uptime_and_rate(self, client: AsyncClient, install):
        metrics = ServerMetrics(start_time=now_ms() - 90 * MS_PER_MINUTE)
        install(_aggregator(metrics=metrics))
        resp = await client.get("/api/status")
        data = resp.json()
        assert data["server"]["uptime"] == "1h 30m"
        assert data["metrics"]["uptime"] == "1h 30m"
        assert data["metrics"]["requestsPerHour"] == "1"


# ── /api/metrics ───────────────────────────────────────


class TestMetrics:
    @pytest.mark.asyncio
    async def test_metrics_shape(self, client: AsyncClient, install):
        install(_aggregator())
        resp = await client.get("/api/metrics")
        assert resp.status_code == 200
        data = resp.json()
        assert 99.0 <= data["uptime"]["percentage"] <= 100.0
        assert data["uptime"]["startTime"].endswith("Z")
        assert data["performance"]["requestCount"] == 1
        assert data["system"] == {"cpu": 10, "memory": 10, "disk": 10, "healthy": True}
        assert data["docker"]["status"] == "running"
        assert data["docker"]["containerCount"] == 2
        assert data["docker"]["containers"][0] == {"name": "web", "status": "Up 2 hours"}

    @pytest.mark.asyncio
    async def test_metrics_with_runtime_down(self, client: AsyncClient, install):
        install(_aggregator(runtime=FakeRuntime(error=ContainerRuntimeError("down"))))
        resp = await client.get("/api/metrics")
        assert resp.status_code == 200
        docker = resp.json()["docker"]
        assert docker == {"status": "stopped", "containerCount": 0, "containers": []}


# ── /api/containers ────────────────────────────────────


class TestContainers:
    @pytest.mark.asyncio
    async def test_listing(self, client: AsyncClient, install):
        install(_aggregator())
        resp = await client.get("/api/containers")
        assert resp.status_code == 200
        data = resp.json()
        assert data["total"] == 3
        assert data["running"] == 2
        assert data["containers"][2]["Names"] == "job"
        assert "timestamp" in data

    @pytest.mark.asyncio
    async def test_runtime_failure_is_500(self, client: AsyncClient, install):
        install(_aggregator(runtime=FakeRuntime(error=ContainerRuntimeError("docker missing"))))
        resp = await client.get("/api/containers")
        assert resp.status_code == 500
        data = resp.json()
        assert data["error"] == "Failed to fetch containers"
        assert data["message"] == "docker missing"
        assert "timestamp" in data


# ── /api/system ────────────────────────────────────────


class TestSystem:
    @pytest.mark.asyncio
    async def test_system_info(self, client: AsyncClient, install):
        install(_aggregator())
        resp = await client.get("/api/system")
        assert resp.status_code == 200
        data = resp.json()
        for key in ("os", "arch", "pythonVersion", "serverUptime", "timestamp"):
            assert key in data
        assert data["resources"] == {"cpu": 10, "memory": 10, "disk": 10}

    @pytest.mark.asyncio
    async def test_system_failure_is_500(self, client: AsyncClient, install):
        aggregator = _aggregator()
        aggregator.system_info = AsyncMock(side_effect=RuntimeError("platform probe failed"))
        install(aggregator)
        resp = await client.get("/api/system")
        assert resp.status_code == 500
        assert resp.json()["error"] == "Failed to fetch system information"


# ── routing misses and uncaught errors ─────────────────


class TestErrors:
    @pytest.mark.asyncio
    async def test_unknown_api_path(self, client: AsyncClient, install):
        install(_aggregator())
        resp = await client.get("/api/doesnotexist")
        assert resp.status_code == 404
        data = resp.json()
        assert data["error"] == "API endpoint not found"
        assert data["path"] == "/api/doesnotexist"
        assert "timestamp" in data

    @pytest.mark.asyncio
    async def test_unknown_non_api_path_keeps_default(self, client: AsyncClient, install):
        install(_aggregator())
        resp = await client.get("/nothing-here")
        assert resp.status_code == 404
        assert "path" not in resp.json()

    @pytest.mark.asyncio
    async def test_wrong_method_on_api_path(self, client: AsyncClient, install):
        install(_aggregator())
        resp = await client.post("/api/status")
        assert resp.status_code == 404
        data = resp.json()
        assert data["error"] == "API endpoint not found"
        assert data["path"] == "/api/status"
        assert "timestamp" in data

    @pytest.mark.asyncio
    async def test_wrong_method_outside_api_keeps_default(self, client: AsyncClient, install):
        install(_aggregator())
        resp = await client.post("/health")
        assert resp.status_code == 405
        assert "path" not in resp.json()

    @pytest.mark.asyncio
    async def test_uncaught_error_keeps_cors_headers(self, client: AsyncClient, install):
        aggregator = _aggregator()
        aggregator.status = AsyncMock(side_effect=RuntimeError("boom"))
        install(aggregator)
        resp = await client.get("/api/status", headers={"Origin": "http://dashboard.test"})
        assert resp.status_code == 500
        assert resp.json()["error"] == "Internal Server Error"
        assert resp.headers.get("access-control-allow-origin") in ("*", "http://dashboard.test")

    @pytest.mark.asyncio
    async def test_uncaught_error_is_generic(self, client: AsyncClient, install):
        aggregator = _aggregator()
        aggregator.status = AsyncMock(side_effect=RuntimeError("secret detail"))
        install(aggregator)
        resp = await client.get("/api/status")
        assert resp.status_code == 500
        data = resp.json()
        assert data["error"] == "Internal Server Error"
        assert data["message"] == "Something went wrong!"

    @pytest.mark.asyncio
    async def test_uncaught_error_detail_in_development(self, client: AsyncClient, install):
        aggregator = _aggregator()
        aggregator.metrics_report = AsyncMock(side_effect=RuntimeError("secret detail"))
        install(aggregator)
        previous = app.state.expose_error_details
        app.state.expose_error_details = True
        try:
            resp = await client.get("/api/metrics")
        finally:
            app.state.expose_error_details = previous
        assert resp.status_code == 500
        assert resp.json()["message"] == "secret detail"


# ── request accounting ─────────────────────────────────


class TestRequestAccounting:
    @pytest.mark.asyncio
    async def test_counts_every_request(self, client: AsyncClient, install):
        aggregator = _aggregator()
        install(aggregator)
        await client.get("/health")
        await client.get("/api/status")
        await client.get("/api/doesnotexist")
        assert aggregator.metrics.request_count == 3
        assert aggregator.metrics.response_time_count == 3
        assert aggregator.metrics.total_response_time >= 0

    @pytest.mark.asyncio
    async def test_counts_failed_requests(self, client: AsyncClient, install):
        aggregator = _aggregator()
        aggregator.status = AsyncMock(side_effect=RuntimeError("boom"))
        install(aggregator)
        await client.get("/api/status")
        assert aggregator.metrics.request_count == 1
        assert aggregator.metrics.response_time_count == 1

    @pytest.mark.asyncio
    async def test_broken_metrics_do_not_fail_requests(self, client: AsyncClient, install):
        aggregator = _aggregator()
        install(aggregator)
        broken = MagicMock()
        broken.record_request.side_effect = RuntimeError("counter broke")
        broken.record_response.side_effect = RuntimeError("timer broke")
        app.state.server_metrics = broken
        resp = await client.get("/health")
        assert resp.status_code == 200
