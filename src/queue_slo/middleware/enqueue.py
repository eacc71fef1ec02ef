"""Report a metric every time a job gets enqueued.

``sidekiq.job_enqueued`` counts how many jobs of each type were pushed,
tagged with ``name`` and ``queue``.

Install it on the client chain of every process that pushes jobs, including
workers, so jobs enqueued by other jobs are counted too. If other client
hooks can stop a push, add this one last: it counts every push that reaches
it, so anything after it that drops the job would inflate the count.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeVar

from queue_slo.middleware.naming import resolve_enqueued_name
from queue_slo.observability.logging import get_logger
from queue_slo.observability.metrics import JOB_ENQUEUED, MetricsClient, SafeMetrics

logger = get_logger(__name__)

T = TypeVar("T")


def build_enqueue_tags(
    worker_class: type | str, job: Mapping[str, Any], queue: str | None
) -> list[str]:
    return [
        f"name:{resolve_enqueued_name(worker_class, job)}",
        f"queue:{queue or ''}",
    ]


class EnqueueMetricsMiddleware:
    """Client-side hook counting pushed jobs. Never blocks delivery."""

    def __init__(self, metrics: MetricsClient) -> None:
        self._metrics = SafeMetrics.wrap(metrics)

    def __call__(
        self,
        worker_class: type | str,
        job: Mapping[str, Any],
        queue: str | None,
        call_next: Callable[[], T],
    ) -> T:
        self._report(worker_class, job, queue)
        return call_next()

    async def acall(
        self,
        worker_class: type | str,
        job: Mapping[str, Any],
        queue: str | None,
        call_next: Callable[[], Awaitable[T]],
    ) -> T:
        self._report(worker_class, job, queue)
        return await call_next()

    def _report(self, worker_class: type | str, job: Mapping[str, Any], queue: str | None) -> None:
        try:
            tags = build_enqueue_tags(worker_class, job, queue)
        except Exception:
            logger.warning("enqueue_tags_failed", queue=queue, exc_info=True)
            return
        self._metrics.increment(JOB_ENQUEUED, tags=tags)
