from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# One object per line of ``docker ps -a --format '{{json .}}'``; fields vary by
# runtime version so the record stays an untyped mapping.
ContainerRecord = dict[str, Any]


class ContainerSnapshot(BaseModel):
    """Name and raw status text of a running container."""

    name: str
    status: str = ""


class ContainerStatus(BaseModel):
    """Summary of the running containers as seen by the runtime."""

    model_config = ConfigDict(populate_by_name=True)

    running: bool = False
    container_count: int = Field(default=0, alias="containerCount")
    containers: list[ContainerSnapshot] = Field(default_factory=list)

    @classmethod
    def from_snapshots(cls, snapshots: list[ContainerSnapshot]) -> ContainerStatus:
        return cls(
            running=len(snapshots) > 0,
            container_count=len(snapshots),
            containers=snapshots,
        )

    @classmethod
    def offline(cls) -> ContainerStatus:
        return cls(running=False, container_count=0, containers=[])
