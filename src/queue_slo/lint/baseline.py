"""Grandfathering baseline for the queue naming check.

The baseline is generated once, when the check is introduced, from every
violation present at that moment. Afterwards only violations beyond the
recorded ones are reported: existing declarations keep working, new ones
must use a latency-tiered queue.

Entries are counted per (file, queue) and do not record line numbers, so
unrelated edits that move a declaration do not un-grandfather it.

File format::

    {"version": 1, "entries": {"jobs/report.py": {"default": 2, "<dynamic>": 1}}}
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from queue_slo.domain.models import PolicyViolation
from queue_slo.errors import BaselineError
from queue_slo.observability.logging import get_logger

logger = get_logger(__name__)

BASELINE_VERSION = 1
DYNAMIC_QUEUE_KEY = "<dynamic>"


class BaselineDocument(BaseModel):
    """On-disk representation of a baseline."""

    version: int = BASELINE_VERSION
    entries: dict[str, dict[str, int]] = Field(default_factory=dict)


def _key(violation: PolicyViolation) -> tuple[str, str]:
    queue = violation.queue if violation.queue is not None else DYNAMIC_QUEUE_KEY
    return violation.path, queue


class Baseline:
    """Known violations that are tolerated."""

    def __init__(self, counts: Counter[tuple[str, str]] | None = None) -> None:
        self._counts: Counter[tuple[str, str]] = Counter(counts or {})

    @classmethod
    def from_violations(cls, violations: Iterable[PolicyViolation]) -> Baseline:
        return cls(Counter(_key(violation) for violation in violations))

    @classmethod
    def load(cls, path: Path) -> Baseline:
        """Load a baseline file. A missing file is an empty baseline.

        Raises:
            BaselineError: If the file cannot be read or is malformed.
        """
        if not path.exists():
            return cls()
        try:
            document = BaselineDocument.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            raise BaselineError(
                f"Could not read baseline file {path}", details={"path": str(path)}
            ) from e
        if document.version != BASELINE_VERSION:
            raise BaselineError(
                f"Unsupported baseline version {document.version}",
                details={"path": str(path), "version": document.version},
            )

        counts: Counter[tuple[str, str]] = Counter()
        for file_path, queues in document.entries.items():
            for queue, count in queues.items():
                if count > 0:
                    counts[(file_path, queue)] = count
        return cls(counts)

    def save(self, path: Path) -> None:
        entries: dict[str, dict[str, int]] = {}
        for (file_path, queue), count in sorted(self._counts.items()):
            entries.setdefault(file_path, {})[queue] = count
        document = BaselineDocument(entries=entries)
        try:
            path.write_text(document.model_dump_json(indent=2) + "\n", encoding="utf-8")
        except OSError as e:
            raise BaselineError(
                f"Could not write baseline file {path}", details={"path": str(path)}
            ) from e
        logger.info("baseline_written", path=str(path), violations=len(self))

    def filter(self, violations: Iterable[PolicyViolation]) -> list[PolicyViolation]:
        """Return the violations not covered by the baseline."""
        remaining = Counter(self._counts)
        new: list[PolicyViolation] = []
        for violation in violations:
            key = _key(violation)
            if remaining[key] > 0:
                remaining[key] -= 1
            else:
                new.append(violation)
        return new

    def __len__(self) -> int:
        return sum(self._counts.values())

    def __contains__(self, violation: object) -> bool:
        return isinstance(violation, PolicyViolation) and self._counts[_key(violation)] > 0
