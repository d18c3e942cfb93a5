"""
In-process service counters reported by /health and /api/debug.
"""

import threading
import time
from typing import Optional


class ServiceMetrics:
    def __init__(self):
        self._lock = threading.Lock()
        self.started_at: Optional[float] = None
        self.request_count = 0
        self.error_count = 0
        self.ws_connections = 0

    def mark_started(self) -> None:
        self.started_at = time.time()

    @property
    def uptime_seconds(self) -> int:
        if self.started_at is None:
            return 0
        return int(time.time() - self.started_at)

    def record_request(self) -> None:
        with self._lock:
            self.request_count += 1

    def record_error(self) -> None:
        with self._lock:
            self.error_count += 1

    def ws_opened(self) -> int:
        with self._lock:
            self.ws_connections += 1
            return self.ws_connections

    def ws_closed(self) -> int:
        with self._lock:
            self.ws_connections = max(0, self.ws_connections - 1)
            return self.ws_connections

    def reset(self) -> None:
        with self._lock:
            self.started_at = None
            self.request_count = 0
            self.error_count = 0
            self.ws_connections = 0


metrics = ServiceMetrics()
