"""Observability module for queue_slo.

This module provides structured logging and the metrics clients used by the
job hooks and the queue health exporter.
"""

from queue_slo.observability.logging import configure_logging, get_logger
from queue_slo.observability.metrics import (
    JOB,
    JOB_ENQUEUED,
    JOB_TIME,
    JOB_TOTAL_TIME,
    QUEUE_LATENCY,
    QUEUE_NORMALISED_LATENCY,
    QUEUE_SIZE,
    InMemoryMetricsClient,
    MetricsClient,
    PrometheusMetricsClient,
    SafeMetrics,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    # Metric names
    "JOB",
    "JOB_ENQUEUED",
    "JOB_TIME",
    "JOB_TOTAL_TIME",
    "QUEUE_LATENCY",
    "QUEUE_NORMALISED_LATENCY",
    "QUEUE_SIZE",
    # Clients
    "InMemoryMetricsClient",
    "MetricsClient",
    "PrometheusMetricsClient",
    "SafeMetrics",
]
