"""Report metrics for every job run.

We report:
  - ``sidekiq.job`` to count how many times each job has run.
  - ``sidekiq.job.time`` (timing, milliseconds) for stats on job runtime.
  - ``sidekiq.job.total_time`` (counter, seconds) with the total time spent
    working on the job. Timing samples give good averages, but
    ``avg * count`` only approximates the busy time, and only when grouping
    by job; it cannot give the total time spent on a queue.

All three carry ``name``, ``queue`` (when known) and ``status`` tags, plus
``error`` when the job raised. Install it on the server chain.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeVar

from queue_slo.domain.enums import JobOutcome
from queue_slo.middleware.naming import error_kind, resolve_executed_name
from queue_slo.observability.logging import get_logger
from queue_slo.observability.metrics import (
    JOB,
    JOB_TIME,
    JOB_TOTAL_TIME,
    MetricsClient,
    SafeMetrics,
)

logger = get_logger(__name__)

T = TypeVar("T")


def build_execution_tags(
    worker: Any,
    job: Mapping[str, Any],
    queue: str | None,
    error: BaseException | None = None,
) -> list[str]:
    tags = [f"name:{resolve_executed_name(worker, job)}"]
    if queue:
        tags.append(f"queue:{queue}")

    if error is None:
        tags.append(f"status:{JobOutcome.OK.value}")
    else:
        tags.append(f"status:{JobOutcome.ERROR.value}")
        tags.append(f"error:{error_kind(error)}")
    return tags


class ExecutionMetricsMiddleware:
    """Server-side hook timing each job and classifying its outcome.

    Errors raised by the job are re-raised unchanged after reporting. The
    hook keeps no state between calls; the start time and tags of a run are
    local to that call.
    """

    def __init__(
        self,
        metrics: MetricsClient,
        *,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._metrics = SafeMetrics.wrap(metrics)
        self._clock = clock

    def __call__(
        self,
        worker: Any,
        job: Mapping[str, Any],
        queue: str | None,
        call_next: Callable[[], T],
    ) -> T:
        start_ms = self._clock_ms()
        try:
            result = call_next()
        except Exception as e:
            self._report(worker, job, queue, start_ms, e)
            raise
        self._report(worker, job, queue, start_ms)
        return result

    async def acall(
        self,
        worker: Any,
        job: Mapping[str, Any],
        queue: str | None,
        call_next: Callable[[], Awaitable[T]],
    ) -> T:
        start_ms = self._clock_ms()
        try:
            result = await call_next()
        except Exception as e:
            self._report(worker, job, queue, start_ms, e)
            raise
        self._report(worker, job, queue, start_ms)
        return result

    def _clock_ms(self) -> float:
        return self._clock() * 1000.0

    def _report(
        self,
        worker: Any,
        job: Mapping[str, Any],
        queue: str | None,
        start_ms: float,
        error: BaseException | None = None,
    ) -> None:
        try:
            duration_ms = self._clock_ms() - start_ms
            tags = build_execution_tags(worker, job, queue, error)
        except Exception:
            logger.warning("execution_tags_failed", queue=queue, exc_info=True)
            return

        self._metrics.increment(JOB, tags=tags)
        self._metrics.timing(JOB_TIME, duration_ms, tags=tags)
        self._metrics.increment(JOB_TOTAL_TIME, value=duration_ms / 1000.0, tags=tags)
