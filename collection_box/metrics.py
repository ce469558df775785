"""Prometheus metrics exposed on /metrics."""

import time

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest


REQUEST_COUNT = Counter(
    "collectionbox_requests_total",
    "Total HTTP requests",
    labelnames=["method", "path", "status"],
)
REQUEST_DURATION = Histogram(
    "collectionbox_request_duration_seconds", "Request duration in seconds"
)
COLLECTIONS_CREATED = Counter(
    "collectionbox_collections_created_total",
    "Collections stored for the first time",
    labelnames=["origin"],
)


def observe_request(method: str, path: str, status_code: int, start_time: float) -> float:
    """Update counters for a processed request and return its duration."""
    duration = time.perf_counter() - start_time
    REQUEST_COUNT.labels(method=method, path=path, status=status_code).inc()
    REQUEST_DURATION.observe(duration)
    return duration


def observe_collection_created(origin: str) -> None:
    COLLECTIONS_CREATED.labels(origin=origin).inc()


def latest_metrics() -> bytes:
    """Return raw metrics to expose on /metrics."""
    return generate_latest()


__all__ = [
    "REQUEST_COUNT",
    "REQUEST_DURATION",
    "COLLECTIONS_CREATED",
    "CONTENT_TYPE_LATEST",
    "observe_request",
    "observe_collection_created",
    "latest_metrics",
]
