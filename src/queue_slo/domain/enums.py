"""Enums for queue_slo domain models."""

from enum import Enum


class DeclarationKind(str, Enum):
    """Shape of a source construct that assigns a job to a queue."""

    DIRECT = "direct-style-declaration"  # sidekiq_options(queue="...")
    ADAPTER = "adapter-style-declaration"  # queue_as("...")


class JobOutcome(str, Enum):
    """Value of the ``status`` tag on job execution metrics."""

    OK = "ok"
    ERROR = "error"


class MetricKind(str, Enum):
    """Kind of metric emission."""

    COUNT = "count"
    TIMING = "timing"
    GAUGE = "gauge"
