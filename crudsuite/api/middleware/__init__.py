"""
Middleware
Request ID logging and latency tracking.
"""

from .logging import RequestLoggingMiddleware
from .timing import LatencyTracker, RequestTimingMiddleware, get_latency_tracker

__all__ = [
    "LatencyTracker",
    "RequestLoggingMiddleware",
    "RequestTimingMiddleware",
    "get_latency_tracker",
]
