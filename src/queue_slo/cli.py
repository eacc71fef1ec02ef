"""queue-slo CLI - queue naming checks and one-off queue health reads.

Usage:
    queue-slo lint PATH... [--baseline FILE] [--no-baseline] [--strict]
    queue-slo baseline PATH... [--baseline FILE]
    queue-slo export-once [--redis-url URL]
    queue-slo version

Exit codes: 0 clean, 1 new violations found, 2 usage, configuration or
parse errors.
"""

import argparse
import sys
from pathlib import Path

import redis

from queue_slo import __version__
from queue_slo.config import Settings, load_settings
from queue_slo.domain.models import PolicyViolation
from queue_slo.errors import QueueSloError
from queue_slo.lint.baseline import Baseline
from queue_slo.lint.checker import QueueNamingChecker, display_path, iter_python_files
from queue_slo.observability.logging import configure_logging
from queue_slo.observability.metrics import InMemoryMetricsClient
from queue_slo.queue.sidekiq_redis import SidekiqRedisInspector
from queue_slo.services.queue_health import QueueHealthExporter

EXIT_OK = 0
EXIT_VIOLATIONS = 1
EXIT_ERROR = 2


def _checker(settings: Settings, *, strict: bool = False) -> QueueNamingChecker:
    return QueueNamingChecker(
        settings.allowed_queue_set(),
        flag_dynamic=strict or settings.flag_dynamic_queues,
        options_call_names=settings.options_call_names,
        adapter_call_names=settings.adapter_call_names,
    )


def _collect(
    checker: QueueNamingChecker, paths: list[str]
) -> tuple[list[PolicyViolation], list[str]]:
    """Check every file below ``paths``. Returns (violations, error lines).

    Paths are reported relative to the working directory, which is also how
    the baseline records them.
    """
    root = Path.cwd()
    violations: list[PolicyViolation] = []
    errors: list[str] = []
    for path in iter_python_files(Path(p) for p in paths):
        try:
            violations.extend(checker.check_file(path, root=root))
        except SyntaxError as e:
            errors.append(f"{display_path(path, root)}:{e.lineno or 0}: error: {e.msg}")
        except (OSError, UnicodeDecodeError) as e:
            errors.append(f"{display_path(path, root)}: error: {e}")
    return violations, errors


def _baseline_path(args: argparse.Namespace, settings: Settings) -> Path:
    return Path(args.baseline) if args.baseline else settings.baseline_path


def cmd_lint(args: argparse.Namespace, settings: Settings) -> int:
    """Report job declarations using queues outside the allow-list."""
    violations, errors = _collect(_checker(settings, strict=args.strict), args.paths)
    if not args.no_baseline:
        violations = Baseline.load(_baseline_path(args, settings)).filter(violations)

    for line in errors:
        print(line, file=sys.stderr)
    for violation in violations:
        print(violation.format())

    if errors:
        return EXIT_ERROR
    return EXIT_VIOLATIONS if violations else EXIT_OK


def cmd_baseline(args: argparse.Namespace, settings: Settings) -> int:
    """Grandfather every current violation."""
    violations, errors = _collect(_checker(settings), args.paths)
    for line in errors:
        print(line, file=sys.stderr)
    if errors:
        return EXIT_ERROR

    path = _baseline_path(args, settings)
    Baseline.from_violations(violations).save(path)
    print(f"Recorded {len(violations)} existing violation(s) in {path}")
    return EXIT_OK


def cmd_export_once(args: argparse.Namespace, settings: Settings) -> int:
    """Run a single queue health tick and print the gauges."""
    inspector = SidekiqRedisInspector.from_url(
        args.redis_url or settings.redis_url, namespace=settings.redis_namespace
    )
    metrics = InMemoryMetricsClient()
    try:
        QueueHealthExporter(inspector, settings.slo_table(), metrics).export()
    except redis.RedisError as e:
        print(f"Error: could not read queues: {e}", file=sys.stderr)
        return EXIT_ERROR
    for event in metrics.events:
        print(f"{event.name} {','.join(event.tags)} {event.value:g}")
    return EXIT_OK


def cmd_version(args: argparse.Namespace, settings: Settings) -> int:
    """Show version."""
    print(f"queue-slo v{__version__}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="queue-slo",
        description="queue-slo - latency-tiered queue checks and metrics",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # lint
    lint_parser = subparsers.add_parser("lint", help="Check job declarations in source files")
    lint_parser.add_argument("paths", nargs="+", help="Files or directories to check")
    lint_parser.add_argument("--baseline", help="Baseline file (default: from settings)")
    lint_parser.add_argument(
        "--no-baseline", action="store_true", help="Report grandfathered violations too"
    )
    lint_parser.add_argument(
        "--strict", action="store_true", help="Also flag queues that are not string literals"
    )
    lint_parser.set_defaults(func=cmd_lint)

    # baseline
    baseline_parser = subparsers.add_parser(
        "baseline", help="Grandfather all current violations"
    )
    baseline_parser.add_argument("paths", nargs="+", help="Files or directories to check")
    baseline_parser.add_argument("--baseline", help="Baseline file (default: from settings)")
    baseline_parser.set_defaults(func=cmd_baseline)

    # export-once
    export_parser = subparsers.add_parser("export-once", help="Run one queue health tick")
    export_parser.add_argument("--redis-url", help="Redis URL (default: from settings)")
    export_parser.set_defaults(func=cmd_export_once)

    # version
    version_parser = subparsers.add_parser("version", help="Show version")
    version_parser.set_defaults(func=cmd_version)

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_ERROR

    try:
        settings = load_settings()
        configure_logging(settings)
        return args.func(args, settings)
    except QueueSloError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
