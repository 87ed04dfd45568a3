"""
Request Timing Middleware
Rolling latency statistics for the /metrics endpoint.
"""

import logging
import time
from collections import Counter, deque
from threading import Lock
from typing import Callable, Dict, List, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..config import get_settings

logger = logging.getLogger(__name__)


class LatencyTracker:
    """
    Rolling window of request latencies plus status-class counters.

    Percentiles are nearest-rank over the window.
    """

    def __init__(self, window_size: int = 1000):
        self.window_size = window_size
        self.latencies: deque = deque(maxlen=window_size)
        self.status_classes: Counter = Counter()
        self.total = 0
        self.lock = Lock()

    def record(self, latency_ms: float, status_code: int = 200) -> None:
        with self.lock:
            self.latencies.append(latency_ms)
            self.status_classes[f"{status_code // 100}xx"] += 1
            self.total += 1

    def reset(self) -> None:
        with self.lock:
            self.latencies.clear()
            self.status_classes.clear()
            self.total = 0

    def get_stats(self) -> Dict[str, float]:
        """
        Summarize the current window.

        Returns:
            Dict with count (window), total, p50, p95, p99, mean, min, max
        """
        with self.lock:
            values = sorted(self.latencies)
            total = self.total

        if not values:
            return {"count": 0, "total": total, "p50": 0.0, "p95": 0.0, "p99": 0.0,
                    "mean": 0.0, "min": 0.0, "max": 0.0}

        return {
            "count": len(values),
            "total": total,
            "p50": self.percentile(values, 50),
            "p95": self.percentile(values, 95),
            "p99": self.percentile(values, 99),
            "mean": sum(values) / len(values),
            "min": values[0],
            "max": values[-1],
        }

    def get_status_counts(self) -> Dict[str, int]:
        with self.lock:
            return dict(self.status_classes)

    @staticmethod
    def percentile(sorted_values: List[float], percentile: int) -> float:
        if not sorted_values:
            return 0.0
        index = min(int((percentile / 100.0) * len(sorted_values)), len(sorted_values) - 1)
        return sorted_values[index]


_latency_tracker = LatencyTracker()


def get_latency_tracker() -> LatencyTracker:
    return _latency_tracker


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Record each request's latency and warn about slow ones."""

    def __init__(self, app, tracker: Optional[LatencyTracker] = None, slow_request_ms: Optional[int] = None):
        super().__init__(app)
        self.tracker = tracker or get_latency_tracker()
        self.slow_request_ms = slow_request_ms if slow_request_ms is not None else get_settings().slow_request_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        self.tracker.record(duration_ms, response.status_code)
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

        if duration_ms > self.slow_request_ms:
            logger.warning(
                f"Slow request: {request.method} {request.url.path} took {duration_ms:.1f}ms",
                extra={"threshold_ms": self.slow_request_ms},
            )

        return response
