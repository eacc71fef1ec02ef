"""Domain models for queue_slo."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from queue_slo.domain.enums import DeclarationKind, MetricKind

VIOLATION_MESSAGE = "New async jobs should only use latency based queues"

# ============================================================
# Policy checking
# ============================================================


class QueueDeclarationSite(BaseModel):
    """One call in source that may assign a job to a queue."""

    model_config = ConfigDict(frozen=True)

    kind: DeclarationKind
    queue: str | None = Field(None, description="Literal queue name, None when computed")
    path: str
    line: int
    col: int


class PolicyViolation(BaseModel):
    """A queue declaration that does not use a latency-tiered queue."""

    model_config = ConfigDict(frozen=True)

    site: QueueDeclarationSite
    message: str = VIOLATION_MESSAGE

    @property
    def path(self) -> str:
        return self.site.path

    @property
    def queue(self) -> str | None:
        return self.site.queue

    def format(self) -> str:
        queue = self.site.queue if self.site.queue is not None else "<dynamic>"
        return f"{self.site.path}:{self.site.line}:{self.site.col}: {self.message} (queue={queue})"


# ============================================================
# Queue health
# ============================================================


class QueueSnapshot(BaseModel):
    """State of one queue read at exporter-tick time."""

    model_config = ConfigDict(frozen=True)

    name: str
    size: int = Field(..., ge=0, description="Number of pending jobs")
    latency: float = Field(..., ge=0, description="Age of the oldest pending job (seconds)")


class QueueHealth(BaseModel):
    """Values exported for one queue during a health tick."""

    model_config = ConfigDict(frozen=True)

    snapshot: QueueSnapshot
    permitted_latency: float
    normalised_latency: float

    @property
    def breached(self) -> bool:
        return self.normalised_latency > 1.0


# ============================================================
# Metrics
# ============================================================


@dataclass(frozen=True)
class MetricEvent:
    """A single metric emission as seen by a recording client."""

    kind: MetricKind
    name: str
    value: float
    tags: tuple[str, ...] = ()

    def tag(self, key: str) -> str | None:
        """Value of the first ``key:value`` tag, or None."""
        prefix = f"{key}:"
        for tag in self.tags:
            if tag.startswith(prefix):
                return tag[len(prefix) :]
        return None


# ============================================================
# Worker identity
# ============================================================


@dataclass(frozen=True)
class ClassIdentity:
    """Worker referenced by its class (enqueue path)."""

    cls: type


@dataclass(frozen=True, eq=False)
class InstanceIdentity:
    """Worker referenced by an instance (execution path)."""

    instance: Any


@dataclass(frozen=True)
class StringIdentity:
    """Worker referenced by its class name (scheduled job pushes)."""

    name: str


WorkerRef = ClassIdentity | InstanceIdentity | StringIdentity
