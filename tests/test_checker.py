"""Tests for the queue naming policy check."""

from __future__ import annotations

import ast
from pathlib import Path

import pytest

from queue_slo.domain.enums import DeclarationKind
from queue_slo.domain.models import VIOLATION_MESSAGE
from queue_slo.domain.tiers import LATENCY_TIERS, AllowedQueueSet
from queue_slo.lint.checker import QueueNamingChecker, display_path, iter_python_files

OPTIONS_JOB = """
class ReportWorker(Worker):
    sidekiq_options(retry=3, queue="{queue}")
"""

ADAPTER_JOB = """
class ReportJob(ApplicationJob):
    queue_as("{queue}")
"""

SHAPES = [
    pytest.param(OPTIONS_JOB, DeclarationKind.DIRECT, id="direct"),
    pytest.param(ADAPTER_JOB, DeclarationKind.ADAPTER, id="adapter"),
]


@pytest.fixture
def checker(allowed_queues: AllowedQueueSet) -> QueueNamingChecker:
    return QueueNamingChecker(allowed_queues)


@pytest.mark.parametrize("template,kind", SHAPES)
@pytest.mark.parametrize("queue", list(LATENCY_TIERS))
def test_allowed_queues_pass(
    checker: QueueNamingChecker, template: str, kind: DeclarationKind, queue: str
) -> None:
    assert checker.check_source(template.format(queue=queue)) == []


@pytest.mark.parametrize("template,kind", SHAPES)
@pytest.mark.parametrize("queue", ["default", "mailers", "critical", "within_2_minutes"])
def test_other_queues_are_flagged_once(
    checker: QueueNamingChecker, template: str, kind: DeclarationKind, queue: str
) -> None:
    violations = checker.check_source(template.format(queue=queue), "jobs/report.py")

    assert len(violations) == 1
    violation = violations[0]
    assert violation.message == VIOLATION_MESSAGE
    assert violation.site.kind == kind
    assert violation.site.queue == queue
    assert violation.site.path == "jobs/report.py"
    assert violation.site.line == 3
    assert violation.site.col == 5


@pytest.mark.parametrize(
    "source",
    [
        "queue_as(QUEUE_NAME)",
        "sidekiq_options(queue=queue_for(priority))",
        'sidekiq_options(queue=f"{prefix}_queue")',
    ],
)
def test_dynamic_queue_names_are_not_flagged(checker: QueueNamingChecker, source: str) -> None:
    assert checker.check_source(source) == []


def test_strict_mode_flags_dynamic_queue_names(allowed_queues: AllowedQueueSet) -> None:
    checker = QueueNamingChecker(allowed_queues, flag_dynamic=True)

    violations = checker.check_source("queue_as(QUEUE_NAME)\nsidekiq_options(queue=q)\n")

    assert [(v.site.kind, v.site.queue) for v in violations] == [
        (DeclarationKind.ADAPTER, None),
        (DeclarationKind.DIRECT, None),
    ]


def test_strict_mode_still_accepts_allowed_literals(allowed_queues: AllowedQueueSet) -> None:
    checker = QueueNamingChecker(allowed_queues, flag_dynamic=True)
    assert checker.check_source('sidekiq_options(queue="within_1_hour", retry=q)') == []


def test_decorator_declarations_are_checked(checker: QueueNamingChecker) -> None:
    source = """
@sidekiq_options(queue="default")
def send_digest():
    pass
"""
    violations = checker.check_source(source)

    assert len(violations) == 1
    assert violations[0].site.line == 2


def test_violations_are_reported_in_source_order(checker: QueueNamingChecker) -> None:
    source = """
class A(Worker):
    sidekiq_options(queue="low")

class B(ApplicationJob):
    queue_as("within_1_minute")

class C(ApplicationJob):
    queue_as("high")
"""
    violations = checker.check_source(source)

    assert [(v.site.line, v.site.queue) for v in violations] == [(3, "low"), (9, "high")]


def test_iter_violations_restarts_on_each_call(checker: QueueNamingChecker) -> None:
    tree = ast.parse('queue_as("default")\nsidekiq_options(queue="low")\n')

    first = list(checker.iter_violations(tree, "a.py"))
    second = list(checker.iter_violations(tree, "a.py"))

    assert len(first) == 2
    assert first == second


def test_receiver_calls_are_ignored(checker: QueueNamingChecker) -> None:
    source = 'ReportJob.queue_as("default")\nself.sidekiq_options(queue="default")\n'
    assert checker.check_source(source) == []


def test_custom_declaration_names(allowed_queues: AllowedQueueSet) -> None:
    checker = QueueNamingChecker(
        allowed_queues,
        options_call_names=["job_options"],
        adapter_call_names=["use_queue"],
    )
    source = 'job_options(queue="default")\nuse_queue("default")\nqueue_as("default")\n'

    violations = checker.check_source(source)

    assert [v.site.line for v in violations] == [1, 2]


def test_syntax_errors_propagate(checker: QueueNamingChecker) -> None:
    with pytest.raises(SyntaxError):
        checker.check_source("class Broken(:\n")


def test_check_file_uses_posix_path(checker: QueueNamingChecker, tmp_path: Path) -> None:
    job = tmp_path / "jobs" / "report.py"
    job.parent.mkdir()
    job.write_text('queue_as("default")\n', encoding="utf-8")

    violations = checker.check_file(job)

    assert violations[0].path == job.as_posix()
    assert violations[0].format().endswith(f"{VIOLATION_MESSAGE} (queue=default)")


def test_check_file_relative_to_root(checker: QueueNamingChecker, tmp_path: Path) -> None:
    job = tmp_path / "jobs" / "report.py"
    job.parent.mkdir()
    job.write_text('queue_as("default")\n', encoding="utf-8")

    [violation] = checker.check_file(job, root=tmp_path)

    assert violation.path == "jobs/report.py"


def test_display_path_is_independent_of_spelling(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "jobs").mkdir()
    monkeypatch.chdir(tmp_path)

    absolute = display_path(tmp_path / "jobs" / "report.py", tmp_path)
    relative = display_path(Path("jobs/../jobs/report.py"), Path.cwd())

    assert absolute == relative == "jobs/report.py"


def test_display_path_outside_root_is_absolute(tmp_path: Path) -> None:
    root = tmp_path / "repo"
    outside = tmp_path / "vendor" / "job.py"

    assert display_path(outside, root) == outside.resolve().as_posix()


def test_iter_python_files_expands_directories(tmp_path: Path) -> None:
    (tmp_path / "pkg").mkdir()
    (tmp_path / "pkg" / "b.py").write_text("", encoding="utf-8")
    (tmp_path / "pkg" / "a.py").write_text("", encoding="utf-8")
    (tmp_path / "pkg" / "notes.txt").write_text("", encoding="utf-8")
    single = tmp_path / "single.py"
    single.write_text("", encoding="utf-8")

    files = list(iter_python_files([tmp_path / "pkg", single]))

    assert [f.name for f in files] == ["a.py", "b.py", "single.py"]
