"""Logical job names for metric tags.

The enqueue hook and the execution hook see a job's worker in different
shapes: at enqueue time it is the worker class (or, for scheduled pushes,
the class name as a string); at execution time it is a worker instance.
Each hook therefore has its own resolution function. Both share the wrapped
identity precedence and the final ``underscore`` normalisation, so the same
job always produces the same ``name`` tag.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from queue_slo.domain.models import ClassIdentity, InstanceIdentity, StringIdentity, WorkerRef

# Payload key set by adapter layers (ActiveJob-style wrappers) to the real job class
WRAPPED_KEY = "wrapped"

_ACRONYM_BOUNDARY = re.compile(r"([A-Z\d]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")

# Modules left out of qualified names
_UNQUALIFIED_MODULES = frozenset({"builtins", "__main__"})


def underscore(name: str) -> str:
    """Normalise a class-like name to a lower-case, underscored token.

    ``Admin::ReportJob`` and ``admin.ReportJob`` both become
    ``admin/report_job``; ``HTTPRetryError`` becomes ``http_retry_error``.
    Normalising a normalised token returns it unchanged.
    """
    word = name.replace("::", "/").replace(".", "/")
    word = _ACRONYM_BOUNDARY.sub(r"\1_\2", word)
    word = _WORD_BOUNDARY.sub(r"\1_\2", word)
    return word.replace("-", "_").lower()


def qualified_name(cls: type) -> str:
    """Dotted ``module.QualName`` of a class, matching its string reference.

    ``billing.jobs.SyncJob`` and ``crm.jobs.SyncJob`` stay distinct, and the
    class and the string ``"billing.jobs.SyncJob"`` normalise to the same tag.
    """
    module = getattr(cls, "__module__", None)
    if not module or module in _UNQUALIFIED_MODULES:
        return cls.__qualname__
    return f"{module}.{cls.__qualname__}"


def wrapped_identity(job: Mapping[str, Any]) -> str | None:
    """Name of the wrapped job class, if the payload carries a non-blank one."""
    value = job.get(WRAPPED_KEY)
    if value is None:
        return None
    name = qualified_name(value) if isinstance(value, type) else str(value)
    return name if name.strip() else None


def enqueued_worker_ref(worker_class: Any) -> WorkerRef:
    if isinstance(worker_class, str):
        return StringIdentity(worker_class)
    if isinstance(worker_class, type):
        return ClassIdentity(worker_class)
    return InstanceIdentity(worker_class)


def worker_ref_name(ref: WorkerRef) -> str:
    if isinstance(ref, StringIdentity):
        return ref.name
    if isinstance(ref, ClassIdentity):
        return qualified_name(ref.cls)
    return qualified_name(type(ref.instance))


def resolve_enqueued_name(worker_class: type | str, job: Mapping[str, Any]) -> str:
    """``name`` tag for a job about to be pushed.

    Precedence: wrapped identity, then a string worker reference verbatim,
    then the worker class name.
    """
    name = wrapped_identity(job)
    if name is None:
        name = worker_ref_name(enqueued_worker_ref(worker_class))
    return underscore(name)


def resolve_executed_name(worker: Any, job: Mapping[str, Any]) -> str:
    """``name`` tag for a job being run; ``worker`` is always an instance."""
    name = wrapped_identity(job)
    if name is None:
        name = worker_ref_name(InstanceIdentity(worker))
    return underscore(name)


def error_kind(error: BaseException) -> str:
    """``error`` tag value for an exception raised by a job."""
    return underscore(qualified_name(type(error)))
