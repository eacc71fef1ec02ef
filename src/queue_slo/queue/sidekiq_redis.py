"""Queue inspection for Sidekiq-compatible Redis queues.

Redis data structures (all optionally prefixed with ``<namespace>:``):
- queues - Set with the names of every known queue
- queue:{name} - List of JSON job payloads; new jobs are pushed on the left,
  so the oldest pending job is the last element

Each payload carries ``enqueued_at``: epoch seconds as a float in older
Sidekiq versions, epoch milliseconds as an integer in newer ones.
"""

from __future__ import annotations

import json
import time
from collections.abc import Callable
from typing import Any

import redis

from queue_slo.domain.models import QueueSnapshot
from queue_slo.observability.logging import get_logger

logger = get_logger(__name__)

KEY_QUEUES = "queues"
KEY_QUEUE_PREFIX = "queue"


def _text(value: Any) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else str(value)


def enqueued_at_seconds(value: Any) -> float:
    """Convert a payload's ``enqueued_at`` to epoch seconds."""
    if isinstance(value, bool):
        raise TypeError("enqueued_at must be a number")
    if isinstance(value, int):
        return value / 1000.0
    return float(value)


class SidekiqRedisInspector:
    """Reads queue sizes and latencies straight from Redis."""

    def __init__(
        self,
        client: Any,
        *,
        namespace: str | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the inspector.

        Args:
            client: Synchronous Redis client (``redis.Redis`` or compatible).
            namespace: Optional key prefix.
            clock: Wall-clock source in epoch seconds.
        """
        self._client = client
        self._namespace = namespace
        self._clock = clock

    @classmethod
    def from_url(cls, url: str, *, namespace: str | None = None) -> SidekiqRedisInspector:
        client = redis.Redis.from_url(url, decode_responses=True)
        return cls(client, namespace=namespace)

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}" if self._namespace else key

    def queue_names(self) -> list[str]:
        return sorted(_text(name) for name in self._client.smembers(self._key(KEY_QUEUES)))

    def queues(self) -> list[QueueSnapshot]:
        names = self.queue_names()
        if not names:
            return []

        pipe = self._client.pipeline(transaction=False)
        for name in names:
            key = self._key(f"{KEY_QUEUE_PREFIX}:{name}")
            pipe.llen(key)
            pipe.lrange(key, -1, -1)
        results = pipe.execute()

        now = self._clock()
        snapshots: list[QueueSnapshot] = []
        for index, name in enumerate(names):
            size = int(results[index * 2])
            oldest = results[index * 2 + 1]
            snapshots.append(
                QueueSnapshot(name=name, size=size, latency=self._latency(name, oldest, now))
            )
        return snapshots

    def _latency(self, name: str, oldest: list[Any], now: float) -> float:
        if not oldest:
            return 0.0
        try:
            payload = json.loads(oldest[0])
            enqueued_at = enqueued_at_seconds(payload["enqueued_at"])
        except (ValueError, KeyError, TypeError):
            logger.warning("queue_latency_unreadable", queue=name)
            return 0.0
        return max(0.0, now - enqueued_at)
