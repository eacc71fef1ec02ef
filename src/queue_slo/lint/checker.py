"""Queue naming policy check.

New job declarations may only target latency-tiered queues. Existing
offenders are grandfathered through a baseline file (see
``queue_slo.lint.baseline``), so the rule blocks new declarations without
requiring the whole codebase to be migrated first.
"""

from __future__ import annotations

import ast
from collections.abc import Collection, Iterable, Iterator
from pathlib import Path

from queue_slo.domain.enums import DeclarationKind
from queue_slo.domain.models import PolicyViolation, QueueDeclarationSite
from queue_slo.domain.tiers import AllowedQueueSet
from queue_slo.lint.extractor import (
    ADAPTER_CALL_NAMES,
    OPTIONS_CALL_NAMES,
    adapter_queue_expression,
    match_adapter_queue,
    match_options_queue,
    options_queue_expressions,
)


class QueueNamingChecker:
    """Flags job declarations that target queues outside the allow-list.

    By default only literal queue names are judged; a computed queue name is
    never flagged. With ``flag_dynamic=True`` a declaration whose queue is not
    a literal is flagged too, with its queue recorded as None.

    The checker holds no per-run state, so one instance can check many
    source units, including from several threads.
    """

    def __init__(
        self,
        allowed: AllowedQueueSet,
        *,
        flag_dynamic: bool = False,
        options_call_names: Collection[str] = OPTIONS_CALL_NAMES,
        adapter_call_names: Collection[str] = ADAPTER_CALL_NAMES,
    ) -> None:
        self._allowed = allowed
        self._flag_dynamic = flag_dynamic
        self._options_names = frozenset(options_call_names)
        self._adapter_names = frozenset(adapter_call_names)

    def iter_violations(self, tree: ast.AST, path: str = "<unknown>") -> Iterator[PolicyViolation]:
        """Lazily yield violations in ``tree`` in source order.

        Each call starts a fresh pass over the tree.
        """
        yield from self._visit(tree, path)

    def check_source(self, source: str, path: str = "<unknown>") -> list[PolicyViolation]:
        """Parse and check one source unit.

        Raises:
            SyntaxError: If ``source`` is not valid Python.
        """
        tree = ast.parse(source, filename=path)
        return list(self.iter_violations(tree, path))

    def check_file(self, path: Path, *, root: Path | None = None) -> list[PolicyViolation]:
        """Check one file, reporting its path relative to ``root`` when given."""
        return self.check_source(path.read_text(encoding="utf-8"), display_path(path, root))

    def _visit(self, node: ast.AST, path: str) -> Iterator[PolicyViolation]:
        if isinstance(node, ast.Call):
            yield from self._check_call(node, path)
        for child in ast.iter_child_nodes(node):
            yield from self._visit(child, path)

    def _check_call(self, node: ast.Call, path: str) -> Iterator[PolicyViolation]:
        adapter_queue = match_adapter_queue(node, self._adapter_names)
        if adapter_queue is not None:
            if adapter_queue not in self._allowed:
                yield self._violation(node, DeclarationKind.ADAPTER, adapter_queue, path)
        elif (
            self._flag_dynamic
            and adapter_queue_expression(node, self._adapter_names) is not None
        ):
            yield self._violation(node, DeclarationKind.ADAPTER, None, path)

        options_queue = match_options_queue(node, self._options_names)
        if options_queue is not None:
            if options_queue not in self._allowed:
                yield self._violation(node, DeclarationKind.DIRECT, options_queue, path)
        elif self._flag_dynamic and options_queue_expressions(node, self._options_names):
            yield self._violation(node, DeclarationKind.DIRECT, None, path)

    @staticmethod
    def _violation(
        node: ast.Call, kind: DeclarationKind, queue: str | None, path: str
    ) -> PolicyViolation:
        site = QueueDeclarationSite(
            kind=kind,
            queue=queue,
            path=path,
            line=getattr(node, "lineno", 0),
            col=getattr(node, "col_offset", 0) + 1,
        )
        return PolicyViolation(site=site)


def iter_python_files(paths: Iterable[Path]) -> Iterator[Path]:
    """Expand directories into the ``*.py`` files below them, sorted."""
    for path in paths:
        if path.is_dir():
            yield from sorted(p for p in path.rglob("*.py") if p.is_file())
        else:
            yield path


def display_path(path: Path, root: Path | None = None) -> str:
    """Posix path of ``path`` relative to ``root``.

    Paths outside ``root`` are reported absolute, so the same file gets the
    same name however it was given on the command line.
    """
    if root is None:
        return path.as_posix()
    resolved = path.resolve()
    try:
        return resolved.relative_to(root.resolve()).as_posix()
    except ValueError:
        return resolved.as_posix()
