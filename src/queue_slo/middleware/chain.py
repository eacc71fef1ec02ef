"""Ordered hook chain around job pushes and job runs.

A hook is called as ``hook(worker, job, queue, call_next)`` and decides
whether to proceed by calling ``call_next()``. Returning without calling it
stops the chain; for a client chain that means the job is not pushed.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import Any

Hook = Callable[[Any, Mapping[str, Any], str | None, Callable[[], Any]], Any]


class MiddlewareChain:
    """Hooks run in insertion order, the first added being the outermost."""

    def __init__(self, hooks: list[Hook] | None = None) -> None:
        self._hooks: list[Hook] = list(hooks or [])

    def add(self, hook: Hook) -> None:
        self._hooks.append(hook)

    def prepend(self, hook: Hook) -> None:
        self._hooks.insert(0, hook)

    def remove(self, hook_type: type) -> bool:
        """Remove every hook of ``hook_type``. Returns True if any was removed."""
        kept = [hook for hook in self._hooks if not isinstance(hook, hook_type)]
        removed = len(kept) != len(self._hooks)
        self._hooks = kept
        return removed

    def __iter__(self) -> Iterator[Hook]:
        return iter(list(self._hooks))

    def __len__(self) -> int:
        return len(self._hooks)

    def invoke(
        self,
        worker: Any,
        job: Mapping[str, Any],
        queue: str | None,
        final: Callable[[], Any],
    ) -> Any:
        """Run the chain, then ``final`` if every hook proceeded.

        Returns whatever the outermost hook returns.
        """
        hooks = list(self._hooks)

        def step(index: int) -> Any:
            if index == len(hooks):
                return final()
            return hooks[index](worker, job, queue, lambda: step(index + 1))

        return step(0)
