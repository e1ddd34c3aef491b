from .aggregator import StatusAggregator
from .server_metrics import (
    ServerMetrics,
    average_response_time,
    format_uptime,
    requests_per_hour,
    simulated_uptime_percentage,
)

__all__ = [
    "StatusAggregator",
    "ServerMetrics",
    "average_response_time",
    "format_uptime",
    "requests_per_hour",
    "simulated_uptime_percentage",
]
