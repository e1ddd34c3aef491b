from .container import ContainerRecord, ContainerSnapshot, ContainerStatus
from .health import HealthSample
from .status import DockerState, ErrorEnvelope, HealthStatus, ServiceStatus, iso_timestamp

__all__ = [
    "ContainerRecord",
    "ContainerSnapshot",
    "ContainerStatus",
    "HealthSample",
    "DockerState",
    "ErrorEnvelope",
    "HealthStatus",
    "ServiceStatus",
    "iso_timestamp",
]
