"""Periodically exported queue health metrics.

sidekiq.queue.size: Number of jobs in the queue.
sidekiq.queue.latency: How late jobs are executing, i.e. how far behind (in
  seconds) the oldest pending job is.
sidekiq.queue.normalised_latency: Latency as a fraction of the queue's
  permitted latency. Values over 1.0 mean the SLO is broken; they are
  reported as-is so alerts can fire on them.

All metrics are tagged with ``queue:<name>``. The exporter keeps no state
between ticks; scheduling the ticks is up to the caller. Each tick also asks
the metrics client to forget queues that were not seen, so a deleted queue
does not keep reporting its last latency.
"""

from __future__ import annotations

import math

from queue_slo.domain.models import QueueHealth
from queue_slo.domain.tiers import QueueSLOTable
from queue_slo.errors import ConfigurationError
from queue_slo.observability.logging import get_logger
from queue_slo.observability.metrics import (
    QUEUE_LATENCY,
    QUEUE_NORMALISED_LATENCY,
    QUEUE_SIZE,
    MetricsClient,
    SafeMetrics,
)
from queue_slo.queue.protocol import QueueInspector

logger = get_logger(__name__)

QUEUE_GAUGES = (QUEUE_SIZE, QUEUE_LATENCY, QUEUE_NORMALISED_LATENCY)


def normalised_latency(latency: float, permitted_latency: float) -> float:
    """``latency / permitted_latency`` rounded to 3 decimal places.

    Raises:
        ConfigurationError: If ``permitted_latency`` is not a positive number.
    """
    if not math.isfinite(permitted_latency) or permitted_latency <= 0:
        raise ConfigurationError(
            f"Permitted latency must be positive, got {permitted_latency!r}",
            details={"permitted_latency": permitted_latency},
        )
    return round(float(latency) / permitted_latency, 3)


class QueueHealthExporter:
    """Snapshots every queue and emits size, latency and normalised latency."""

    def __init__(
        self,
        inspector: QueueInspector,
        slo_table: QueueSLOTable,
        metrics: MetricsClient,
    ) -> None:
        self._inspector = inspector
        self._slo_table = slo_table
        self._metrics = SafeMetrics.wrap(metrics)

    def export(self) -> list[QueueHealth]:
        """Run one tick. Errors reading the queues propagate to the caller."""
        reports: list[QueueHealth] = []
        for snapshot in self._inspector.queues():
            permitted = self._slo_table.permitted_latency(snapshot.name)
            report = QueueHealth(
                snapshot=snapshot,
                permitted_latency=permitted,
                normalised_latency=normalised_latency(snapshot.latency, permitted),
            )

            tags = [f"queue:{snapshot.name}"]
            self._metrics.gauge(QUEUE_SIZE, snapshot.size, tags=tags)
            self._metrics.gauge(QUEUE_LATENCY, snapshot.latency, tags=tags)
            self._metrics.gauge(QUEUE_NORMALISED_LATENCY, report.normalised_latency, tags=tags)
            reports.append(report)

        # Drop series of queues that no longer exist
        current = [[f"queue:{report.snapshot.name}"] for report in reports]
        for name in QUEUE_GAUGES:
            self._metrics.retain(name, current)

        breached = [report.snapshot.name for report in reports if report.breached]
        logger.info("queue_health_exported", queues=len(reports), breached=breached)
        return reports
