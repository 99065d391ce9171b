"""
Prometheus metrics for the Spinnaker resource.

This module defines the metrics collected while talking to the Spinnaker Gate API:
request counts and latencies per endpoint, request errors, and triggered executions.
"""

from prometheus_client import Counter, Histogram
import time


# Spinnaker API interaction metrics
spinnaker_api_calls_total = Counter(
    "spinnaker_resource_api_calls_total",
    "Total number of Spinnaker API calls",
    ["endpoint", "method", "status_code"],
)

spinnaker_api_call_duration_seconds = Histogram(
    "spinnaker_resource_api_call_duration_seconds",
    "Duration of Spinnaker API calls",
    ["endpoint", "method"],
)

spinnaker_api_call_errors_total = Counter(
    "spinnaker_resource_api_call_errors_total",
    "Total number of failed Spinnaker API calls",
    ["endpoint", "method", "error_type"],
)

# Pipeline execution metrics
spinnaker_executions_triggered_total = Counter(
    "spinnaker_resource_executions_triggered_total",
    "Total number of Spinnaker pipeline executions triggered",
    ["application", "pipeline"],
)


class MetricsContext:
    """Context manager for timing operations and handling errors with metrics."""

    def __init__(self, histogram, error_counter, labels, error_labels):
        self.histogram = histogram
        self.error_counter = error_counter
        self.labels = labels
        self.error_labels = error_labels
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is not None:
            duration = time.time() - self.start_time
            self.histogram.labels(*self.labels).observe(duration)

        if exc_type is not None:
            error_type = exc_type.__name__
            self.error_counter.labels(*self.error_labels, error_type).inc()

        return False  # Don't suppress exceptions


def track_spinnaker_api_call(endpoint: str, method: str):
    """Context manager for tracking Spinnaker API call metrics."""
    return MetricsContext(
        spinnaker_api_call_duration_seconds,
        spinnaker_api_call_errors_total,
        labels=[endpoint, method],
        error_labels=[endpoint, method],
    )


def record_spinnaker_api_call(endpoint: str, method: str, status_code: int):
    """Record a completed Spinnaker API call."""
    spinnaker_api_calls_total.labels(endpoint, method, str(status_code)).inc()


def record_execution_triggered(application: str, pipeline: str):
    """Record a triggered pipeline execution."""
    spinnaker_executions_triggered_total.labels(application, pipeline).inc()
