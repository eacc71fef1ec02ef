"""QueueInspector protocol definition.

The health exporter only needs to enumerate queues and read their size and
latency; it never enqueues, dequeues or mutates queue state.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from queue_slo.domain.models import QueueSnapshot


@runtime_checkable
class QueueInspector(Protocol):
    """Read-only view of a job queue runtime.

    Usage:
        ```python
        for snapshot in inspector.queues():
            print(snapshot.name, snapshot.size, snapshot.latency)
        ```
    """

    def queues(self) -> Iterable[QueueSnapshot]:
        """Snapshot every known queue.

        Returns:
            One snapshot per queue: name, number of pending jobs, and the age
            in seconds of the oldest pending job (0 when empty).
        """
        ...
