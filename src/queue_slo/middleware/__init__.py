"""Job life-cycle hooks reporting enqueue and execution metrics."""

from queue_slo.middleware.chain import MiddlewareChain
from queue_slo.middleware.enqueue import EnqueueMetricsMiddleware
from queue_slo.middleware.execution import ExecutionMetricsMiddleware
from queue_slo.middleware.naming import (
    resolve_enqueued_name,
    resolve_executed_name,
    underscore,
)

__all__ = [
    "EnqueueMetricsMiddleware",
    "ExecutionMetricsMiddleware",
    "MiddlewareChain",
    "resolve_enqueued_name",
    "resolve_executed_name",
    "underscore",
]
