import time
from dataclasses import dataclass, field
from typing import Callable, Dict


@dataclass
class MetricsCollector:
    """Process counters; one instance per app, owned by main()."""

    clock: Callable[[], float] = time.monotonic
    requests_total: int = 0
    errors_total: int = 0
    started_at: float = field(default=0.0)

    def __post_init__(self) -> None:
        if not self.started_at:
            self.started_at = self.clock()

    def track_request(self) -> None:
        self.requests_total += 1

    def track_error(self) -> None:
        self.errors_total += 1

    def snapshot(self) -> Dict[str, int]:
        return {
            "uptime_seconds": int(self.clock() - self.started_at),
            "requests_total": self.requests_total,
            "errors_total": self.errors_total,
        }
