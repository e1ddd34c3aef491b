from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from abc import ABC, abstractmethod

from backend.models.container import ContainerRecord, ContainerSnapshot, ContainerStatus

logger = logging.getLogger(__name__)

RUNNING_FORMAT = "{{.Names}}\t{{.Status}}"
DETAILED_FORMAT = "{{json .}}"


class ContainerRuntimeError(RuntimeError):
    """The container runtime could not be queried."""


class ContainerRuntime(ABC):
    """Read-only view of the local container runtime."""

    name: str = "base"

    @abstractmethod
    async def list_running(self) -> list[ContainerSnapshot]:
        """Name and status of every running container."""
        ...

    @abstractmethod
    async def list_all(self) -> list[ContainerRecord]:
        """Full records for all containers, running or not."""
        ...


class DockerCliRuntime(ContainerRuntime):
    """Queries containers by spawning the ``docker`` CLI.

    Every call is bounded by ``timeout`` seconds; a process that overruns
    is killed and reported as a ``ContainerRuntimeError``.
    """

    name = "docker"

    def __init__(self, binary: str = "docker", timeout: float = 5.0) -> None:
        self.binary = binary
        self.timeout = timeout

    async def list_running(self) -> list[ContainerSnapshot]:
        stdout = await self._run("ps", "--format", RUNNING_FORMAT)
        return self.parse_running(stdout)

    async def list_all(self) -> list[ContainerRecord]:
        stdout = await self._run("ps", "-a", "--format", DETAILED_FORMAT)
        return self.parse_records(stdout)

    # ── parsing ─────────────────────────────────────────

    @staticmethod
    def parse_running(stdout: str) -> list[ContainerSnapshot]:
        snapshots: list[ContainerSnapshot] = []
        for line in stdout.splitlines():
            if not line.strip():
                continue
            name, _, status = line.partition("\t")
            snapshots.append(ContainerSnapshot(name=name.strip(), status=status.strip()))
        return snapshots

    @staticmethod
    def parse_records(stdout: str) -> list[ContainerRecord]:
        records: list[ContainerRecord] = []
        for line in stdout.splitlines():
            if not line.strip():
                continue
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError as exc:
                raise ContainerRuntimeError(f"Unparsable container record: {exc}") from exc
        return records

    # ── internals ───────────────────────────────────────

    async def _run(self, *args: str) -> str:
        try:
            proc = await asyncio.create_subprocess_exec(
                self.binary,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ContainerRuntimeError(f"Cannot run {self.binary}: {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise ContainerRuntimeError(
                f"{self.binary} {' '.join(args)} timed out after {self.timeout:.1f}s"
            ) from exc
        finally:
            # timed out or cancelled with the child still alive
            if proc.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    proc.kill()
                await proc.wait()

        if proc.returncode != 0:
            detail = stderr.decode(errors="replace").strip() or f"exit code {proc.returncode}"
            raise ContainerRuntimeError(f"{self.binary} {args[0]} failed: {detail}")
        return stdout.decode(errors="replace")


async def check_docker_status(runtime: ContainerRuntime) -> ContainerStatus:
    """Summary of running containers; an unreachable runtime reads as offline."""
    try:
        snapshots = await runtime.list_running()
    except Exception as exc:
        logger.warning("Container runtime [%s] unavailable: %s", runtime.name, exc)
        return ContainerStatus.offline()
    return ContainerStatus.from_snapshots(snapshots)
