from .docker_runtime import (
    ContainerRuntime,
    ContainerRuntimeError,
    DockerCliRuntime,
    check_docker_status,
)
from .health import (
    FixedHealthSource,
    HealthSource,
    PsutilHealthSource,
    SimulatedHealthSource,
    build_health_source,
    sample_health,
)

__all__ = [
    "ContainerRuntime",
    "ContainerRuntimeError",
    "DockerCliRuntime",
    "check_docker_status",
    "FixedHealthSource",
    "HealthSource",
    "PsutilHealthSource",
    "SimulatedHealthSource",
    "build_health_source",
    "sample_health",
]
