"""Pytest configuration and fixtures for queue_slo tests."""

from __future__ import annotations

import pytest

from queue_slo.domain.tiers import LATENCY_TIERS, AllowedQueueSet, QueueSLOTable
from queue_slo.observability.metrics import InMemoryMetricsClient


@pytest.fixture
def metrics() -> InMemoryMetricsClient:
    """Recording metrics client."""
    return InMemoryMetricsClient()


@pytest.fixture
def allowed_queues() -> AllowedQueueSet:
    """The four default latency tiers."""
    return AllowedQueueSet(LATENCY_TIERS)


@pytest.fixture
def slo_table() -> QueueSLOTable:
    """Default tiers with a one hour default."""
    return QueueSLOTable(LATENCY_TIERS, default=3600)


class BrokenMetricsClient:
    """Metrics client whose every call fails."""

    def __init__(self) -> None:
        self.calls = 0

    def increment(self, name: str, *, value: float = 1, tags: object = ()) -> None:
        self.calls += 1
        raise ConnectionError("metrics backend down")

    def timing(self, name: str, value_ms: float, *, tags: object = ()) -> None:
        self.calls += 1
        raise ConnectionError("metrics backend down")

    def gauge(self, name: str, value: float, *, tags: object = ()) -> None:
        self.calls += 1
        raise ConnectionError("metrics backend down")


@pytest.fixture
def broken_metrics() -> BrokenMetricsClient:
    return BrokenMetricsClient()
