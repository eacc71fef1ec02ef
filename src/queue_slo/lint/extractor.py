"""Queue name extraction from job declarations.

Two declaration shapes are recognised, each by its own matcher:

- adapter style: ``queue_as("within_1_minute")``, a bare call whose only
  argument is the queue name.
- direct style: ``sidekiq_options(retry=3, queue="within_1_minute")``, a bare
  call with a ``queue`` entry anywhere in its arguments, either as a keyword
  or as a ``"queue"`` key of a (possibly nested) dict literal or ``dict(...)``
  call.

Only string literals are extracted. Computed queue names do not match.
The matchers accept any object and never raise.
"""

from __future__ import annotations

import ast
from collections.abc import Collection, Iterator

ADAPTER_CALL_NAMES: frozenset[str] = frozenset({"queue_as"})
OPTIONS_CALL_NAMES: frozenset[str] = frozenset({"sidekiq_options"})
QUEUE_KEY = "queue"


def _bare_call(node: object, names: Collection[str]) -> ast.Call | None:
    """Return ``node`` if it is a call to one of ``names`` without a receiver."""
    if not isinstance(node, ast.Call):
        return None
    func = getattr(node, "func", None)
    if isinstance(func, ast.Name) and func.id in names:
        return node
    return None


def string_literal(node: object) -> str | None:
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        return node.value
    return None


def adapter_queue_expression(
    node: object, names: Collection[str] = ADAPTER_CALL_NAMES
) -> ast.expr | None:
    """Expression passed as the queue of an adapter-style declaration."""
    call = _bare_call(node, names)
    if call is None:
        return None
    args = getattr(call, "args", None) or []
    keywords = getattr(call, "keywords", None) or []
    if len(args) != 1 or keywords or isinstance(args[0], ast.Starred):
        return None
    return args[0]


def match_adapter_queue(node: object, names: Collection[str] = ADAPTER_CALL_NAMES) -> str | None:
    """Queue name declared by ``queue_as("name")``, or None."""
    return string_literal(adapter_queue_expression(node, names))


def _queue_entries(call: ast.Call) -> Iterator[ast.expr]:
    """Values bound to a ``queue`` key anywhere in the call's arguments."""
    keywords = getattr(call, "keywords", None) or []
    args = getattr(call, "args", None) or []

    for keyword in keywords:
        if keyword.arg == QUEUE_KEY:
            yield keyword.value

    for root in [*args, *(keyword.value for keyword in keywords)]:
        for child in ast.walk(root):
            if isinstance(child, ast.Dict):
                for key, value in zip(child.keys, child.values):
                    if string_literal(key) == QUEUE_KEY:
                        yield value
            elif isinstance(child, ast.Call):
                for keyword in child.keywords:
                    if keyword.arg == QUEUE_KEY:
                        yield keyword.value


def options_queue_expressions(
    node: object, names: Collection[str] = OPTIONS_CALL_NAMES
) -> list[ast.expr]:
    """Every expression bound to ``queue`` in a direct-style declaration."""
    call = _bare_call(node, names)
    if call is None:
        return []
    return list(_queue_entries(call))


def match_options_queue(node: object, names: Collection[str] = OPTIONS_CALL_NAMES) -> str | None:
    """First literal queue name in ``sidekiq_options(..., queue="name")``, or None."""
    for expression in options_queue_expressions(node, names):
        name = string_literal(expression)
        if name is not None:
            return name
    return None
