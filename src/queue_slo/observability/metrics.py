"""Metric names and metrics clients for queue_slo.

Metric names are the dotted names dashboards and alerts are built on; they
are passed verbatim to whatever ``MetricsClient`` is installed.

Categories:
- Enqueue metrics: sidekiq.job_enqueued
- Execution metrics: sidekiq.job, sidekiq.job.time, sidekiq.job.total_time
- Queue health metrics: sidekiq.queue.size, sidekiq.queue.latency,
  sidekiq.queue.normalised_latency

Every tag is a ``key:value`` string.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable, Sequence
from typing import Any, Protocol, runtime_checkable

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

from queue_slo.domain.enums import MetricKind
from queue_slo.domain.models import MetricEvent
from queue_slo.observability.logging import get_logger

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# Metric names
# -----------------------------------------------------------------------------

JOB_ENQUEUED = "sidekiq.job_enqueued"
JOB = "sidekiq.job"
JOB_TIME = f"{JOB}.time"
JOB_TOTAL_TIME = f"{JOB}.total_time"

QUEUE_SIZE = "sidekiq.queue.size"
QUEUE_LATENCY = "sidekiq.queue.latency"
QUEUE_NORMALISED_LATENCY = "sidekiq.queue.normalised_latency"

# Tag keys per metric, used as Prometheus label names
METRIC_TAG_KEYS: dict[str, tuple[str, ...]] = {
    JOB_ENQUEUED: ("name", "queue"),
    JOB: ("name", "queue", "status", "error"),
    JOB_TIME: ("name", "queue", "status", "error"),
    JOB_TOTAL_TIME: ("name", "queue", "status", "error"),
    QUEUE_SIZE: ("queue",),
    QUEUE_LATENCY: ("queue",),
    QUEUE_NORMALISED_LATENCY: ("queue",),
}

# Job timings are reported in milliseconds
TIMING_BUCKETS_MS = (
    5.0,
    10.0,
    25.0,
    50.0,
    100.0,
    250.0,
    500.0,
    1000.0,
    2500.0,
    5000.0,
    10000.0,
    30000.0,
    60000.0,
    300000.0,
    600000.0,
    1800000.0,
    3600000.0,
)

Tags = Sequence[str]


@runtime_checkable
class MetricsClient(Protocol):
    """Fire-and-forget metrics sink (StatsD-style counters, timings and gauges)."""

    def increment(self, name: str, *, value: float = 1, tags: Tags = ()) -> None: ...

    def timing(self, name: str, value_ms: float, *, tags: Tags = ()) -> None: ...

    def gauge(self, name: str, value: float, *, tags: Tags = ()) -> None: ...


def split_tag(tag: str) -> tuple[str, str]:
    """Split ``key:value`` at the first colon. Tags without a colon have an empty value."""
    key, _, value = tag.partition(":")
    return key, value


class SafeMetrics:
    """Best-effort wrapper: emission failures are logged and dropped.

    Job delivery, job outcome and exporter ticks must never depend on the
    metrics backend being healthy.
    """

    def __init__(self, client: MetricsClient) -> None:
        self._client = client

    @classmethod
    def wrap(cls, client: MetricsClient) -> SafeMetrics:
        return client if isinstance(client, SafeMetrics) else cls(client)

    @property
    def client(self) -> MetricsClient:
        return self._client

    def increment(self, name: str, *, value: float = 1, tags: Tags = ()) -> None:
        self._emit(self._client.increment, name, value=value, tags=tags)

    def timing(self, name: str, value_ms: float, *, tags: Tags = ()) -> None:
        self._emit(self._client.timing, name, value_ms, tags=tags)

    def gauge(self, name: str, value: float, *, tags: Tags = ()) -> None:
        self._emit(self._client.gauge, name, value, tags=tags)

    def retain(self, name: str, tag_sets: Iterable[Tags]) -> None:
        """Forward to clients that keep per-series state; others have nothing to drop."""
        retain = getattr(self._client, "retain", None)
        if retain is not None:
            self._emit(retain, name, [tuple(tags) for tags in tag_sets])

    def _emit(self, method: Callable[..., Any], name: str, *args: Any, **kwargs: Any) -> None:
        try:
            method(name, *args, **kwargs)
        except Exception:
            logger.warning("metric_emit_failed", metric=name, exc_info=True)


class InMemoryMetricsClient:
    """Thread-safe client that records every emission.

    Used by tests and by ``queue-slo export-once`` to show what would be sent.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._events: list[MetricEvent] = []

    @property
    def events(self) -> list[MetricEvent]:
        with self._lock:
            return list(self._events)

    def increment(self, name: str, *, value: float = 1, tags: Tags = ()) -> None:
        self._record(MetricKind.COUNT, name, value, tags)

    def timing(self, name: str, value_ms: float, *, tags: Tags = ()) -> None:
        self._record(MetricKind.TIMING, name, value_ms, tags)

    def gauge(self, name: str, value: float, *, tags: Tags = ()) -> None:
        self._record(MetricKind.GAUGE, name, value, tags)

    def find(self, name: str) -> list[MetricEvent]:
        return [event for event in self.events if event.name == name]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    def _record(self, kind: MetricKind, name: str, value: float, tags: Tags) -> None:
        event = MetricEvent(kind=kind, name=name, value=float(value), tags=tuple(tags))
        with self._lock:
            self._events.append(event)


class PrometheusMetricsClient:
    """Exposes emissions as Prometheus metrics.

    Dotted names become underscored metric names (``sidekiq.job.time`` ->
    ``sidekiq_job_time``); counters get the usual ``_total`` suffix on
    exposition. Tags become labels using ``METRIC_TAG_KEYS``; metrics not
    listed there take their label names from the first emission. Missing tags
    are exported as empty label values, unknown tag keys are dropped.

    Gauge series keep their last value until removed; ``retain`` drops the
    series of a metric that were not reported in the latest round.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        self._lock = threading.Lock()
        self._families: dict[str, tuple[Counter | Histogram | Gauge, tuple[str, ...]]] = {}
        self._series: dict[str, set[tuple[str, ...]]] = {}

    def increment(self, name: str, *, value: float = 1, tags: Tags = ()) -> None:
        family = self._labelled(MetricKind.COUNT, name, tags)
        family.inc(value)

    def timing(self, name: str, value_ms: float, *, tags: Tags = ()) -> None:
        family = self._labelled(MetricKind.TIMING, name, tags)
        family.observe(value_ms)

    def gauge(self, name: str, value: float, *, tags: Tags = ()) -> None:
        family = self._labelled(MetricKind.GAUGE, name, tags)
        family.set(value)

    def retain(self, name: str, tag_sets: Iterable[Tags]) -> None:
        """Remove every labelled series of ``name`` not matching one of ``tag_sets``."""
        with self._lock:
            existing = self._families.get(name)
            if existing is None:
                return
            family, label_names = existing
            keep = {_label_values(label_names, tags) for tags in tag_sets}
            stale = self._series.get(name, set()) - keep
            for values in stale:
                family.remove(*values)
            self._series[name] = self._series.get(name, set()) - stale

    def _labelled(self, kind: MetricKind, name: str, tags: Tags) -> Any:
        family, label_names = self._family(kind, name, tuple(dict(map(split_tag, tags))))
        if not label_names:
            return family
        values = _label_values(label_names, tags)
        with self._lock:
            self._series.setdefault(name, set()).add(values)
        return family.labels(*values)

    def _family(
        self, kind: MetricKind, name: str, tag_keys: tuple[str, ...]
    ) -> tuple[Counter | Histogram | Gauge, tuple[str, ...]]:
        with self._lock:
            existing = self._families.get(name)
            if existing is not None:
                return existing

            metric_name = name.replace(".", "_").replace("-", "_")
            label_names = METRIC_TAG_KEYS.get(name, tag_keys)
            family: Counter | Histogram | Gauge
            if kind is MetricKind.COUNT:
                family = Counter(metric_name, name, label_names, registry=self.registry)
            elif kind is MetricKind.TIMING:
                family = Histogram(
                    metric_name,
                    f"{name} (milliseconds)",
                    label_names,
                    registry=self.registry,
                    buckets=TIMING_BUCKETS_MS,
                )
            else:
                family = Gauge(metric_name, name, label_names, registry=self.registry)

            self._families[name] = (family, label_names)
            return family, label_names


def _label_values(label_names: tuple[str, ...], tags: Tags) -> tuple[str, ...]:
    values = dict(split_tag(tag) for tag in tags)
    return tuple(values.get(label, "") for label in label_names)
