"""Latency tiers: the approved queue allow-list and the per-queue SLO table.

Both objects are built once at process start from configuration and are
read-only afterwards, so they can be shared freely between threads.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Iterator, Mapping
from datetime import timedelta
from types import MappingProxyType

from queue_slo.errors import ConfigurationError

QUEUE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_\-.:]*$")

# Default latency tiers (queue name -> permitted latency in seconds)
LATENCY_TIERS: dict[str, float] = {
    "within_1_minute": 60.0,
    "within_10_minutes": 600.0,
    "within_1_hour": 3600.0,
    "within_1_day": 86400.0,
}

DEFAULT_PERMITTED_LATENCY_SECONDS = 3600.0

Duration = float | int | timedelta


def validate_queue_name(name: object) -> str:
    """Return ``name`` if it is a valid queue-name token.

    Raises:
        ConfigurationError: If the token is not a non-empty queue name.
    """
    if not isinstance(name, str) or not QUEUE_NAME_PATTERN.match(name):
        raise ConfigurationError(
            f"Invalid queue name: {name!r}",
            details={"queue": name, "pattern": QUEUE_NAME_PATTERN.pattern},
        )
    return name


def to_seconds(value: Duration, *, queue: str | None = None) -> float:
    """Convert a configured duration to positive, finite seconds."""
    seconds = value.total_seconds() if isinstance(value, timedelta) else float(value)
    if not math.isfinite(seconds) or seconds <= 0:
        raise ConfigurationError(
            f"Permitted latency must be a positive duration, got {value!r}",
            details={"queue": queue, "value": str(value)},
        )
    return seconds


class AllowedQueueSet:
    """Ordered, immutable set of latency-tiered queue names."""

    __slots__ = ("_names", "_lookup")

    def __init__(self, names: Iterable[str]) -> None:
        ordered: list[str] = []
        for name in names:
            validate_queue_name(name)
            if name not in ordered:
                ordered.append(name)
        if not ordered:
            raise ConfigurationError("Allowed queue list must not be empty")
        self._names = tuple(ordered)
        self._lookup = frozenset(ordered)

    @property
    def names(self) -> tuple[str, ...]:
        return self._names

    def __contains__(self, name: object) -> bool:
        return name in self._lookup

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"AllowedQueueSet({list(self._names)!r})"


class QueueSLOTable:
    """Permitted latency per queue, with a default for unlisted queues.

    Attributes:
        default_seconds: Permitted latency used for queues missing from the table.
    """

    __slots__ = ("_permitted", "default_seconds")

    def __init__(
        self,
        permitted: Mapping[str, Duration] | None = None,
        *,
        default: Duration = DEFAULT_PERMITTED_LATENCY_SECONDS,
    ) -> None:
        table: dict[str, float] = {}
        for name, value in (permitted or {}).items():
            table[validate_queue_name(name)] = to_seconds(value, queue=name)
        self._permitted = MappingProxyType(table)
        self.default_seconds = to_seconds(default)

    @property
    def permitted(self) -> Mapping[str, float]:
        return self._permitted

    def permitted_latency(self, queue_name: str) -> float:
        """Permitted latency in seconds for ``queue_name``."""
        return self._permitted.get(queue_name, self.default_seconds)

    def __repr__(self) -> str:
        return f"QueueSLOTable({dict(self._permitted)!r}, default={self.default_seconds!r})"
