from __future__ import annotations

import math
import random
import time

MS_PER_MINUTE = 60 * 1000
MS_PER_HOUR = 60 * MS_PER_MINUTE
MIN_RATE_WINDOW_HOURS = 0.1


def now_ms() -> float:
    return time.time() * 1000


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_uptime(elapsed_ms: float) -> str:
    """Render elapsed time as ``"{h}h {m}m"``, or ``"{m}m"`` below one hour."""
    elapsed_ms = max(elapsed_ms, 0)
    hours = math.floor(elapsed_ms / MS_PER_HOUR)
    minutes = math.floor((elapsed_ms % MS_PER_HOUR) / MS_PER_MINUTE)
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def average_response_time(total_ms: float, count: int) -> int:
    if count <= 0:
        return 0
    return round_half_up(total_ms / count)


def requests_per_hour(request_count: int, elapsed_hours: float) -> int:
    return round_half_up(request_count / max(elapsed_hours, MIN_RATE_WINDOW_HOURS))


def simulated_uptime_percentage(rng: random.Random | None = None) -> float:
    """Synthetic availability figure in ``[99.0, 100.0]``, one decimal."""
    rng = rng or random
    percentage = max(99.0, 100 - rng.random() * 1)
    return round_half_up(percentage * 10) / 10


class ServerMetrics:
    """Request counters for the lifetime of the process.

    Counters only grow between calls to ``reset()``; every recorded response
    belongs to a counted request, so ``response_time_count`` never exceeds
    ``request_count``.
    """

    def __init__(self, start_time: float | None = None) -> None:
        self.start_time: float = 0.0
        self.request_count = 0
        self.total_response_time = 0.0
        self.response_time_count = 0
        self.reset(start_time)

    # ── lifecycle ────────────────────────────────────────

    def reset(self, start_time: float | None = None) -> None:
        self.start_time = now_ms() if start_time is None else start_time
        self.request_count = 0
        self.total_response_time = 0.0
        self.response_time_count = 0

    # ── accounting ──────────────────────────────────────

    def record_request(self) -> None:
        self.request_count += 1

    def record_response(self, elapsed_ms: float) -> None:
        if self.response_time_count >= self.request_count:
            # response without a counted request
            self.request_count = self.response_time_count + 1
        self.total_response_time += max(elapsed_ms, 0.0)
        self.response_time_count += 1

    # ── derived values ──────────────────────────────────

    def elapsed_ms(self, now: float | None = None) -> float:
        now = now_ms() if now is None else now
        return max(now - self.start_time, 0.0)

    def uptime(self, now: float | None = None) -> str:
        return format_uptime(self.elapsed_ms(now))

    def average_response_time(self) -> int:
        return average_response_time(self.total_response_time, self.response_time_count)

    def requests_per_hour(self, now: float | None = None) -> int:
        return requests_per_hour(self.request_count, self.elapsed_ms(now) / MS_PER_HOUR)
