"""Domain types for queue_slo."""

from queue_slo.domain.enums import DeclarationKind, JobOutcome, MetricKind
from queue_slo.domain.models import (
    VIOLATION_MESSAGE,
    ClassIdentity,
    InstanceIdentity,
    MetricEvent,
    PolicyViolation,
    QueueDeclarationSite,
    QueueHealth,
    QueueSnapshot,
    StringIdentity,
    WorkerRef,
)
from queue_slo.domain.tiers import (
    DEFAULT_PERMITTED_LATENCY_SECONDS,
    LATENCY_TIERS,
    AllowedQueueSet,
    QueueSLOTable,
)

__all__ = [
    "AllowedQueueSet",
    "ClassIdentity",
    "DEFAULT_PERMITTED_LATENCY_SECONDS",
    "DeclarationKind",
    "InstanceIdentity",
    "JobOutcome",
    "LATENCY_TIERS",
    "MetricEvent",
    "MetricKind",
    "PolicyViolation",
    "QueueDeclarationSite",
    "QueueHealth",
    "QueueSLOTable",
    "QueueSnapshot",
    "StringIdentity",
    "VIOLATION_MESSAGE",
    "WorkerRef",
]
