"""Tests for queue name extraction from job declarations."""

from __future__ import annotations

import ast

import pytest

from queue_slo.lint.extractor import (
    adapter_queue_expression,
    match_adapter_queue,
    match_options_queue,
    options_queue_expressions,
)


def _call(source: str) -> ast.expr:
    return ast.parse(source, mode="eval").body


def test_adapter_literal_queue() -> None:
    assert match_adapter_queue(_call('queue_as("within_1_minute")')) == "within_1_minute"


@pytest.mark.parametrize(
    "source",
    [
        'self.queue_as("within_1_minute")',  # has a receiver
        'queue_as("within_1_minute", "extra")',
        'queue_as(name="within_1_minute")',
        "queue_as(*queues)",
        "queue_as()",
        'queue_for("within_1_minute")',
    ],
)
def test_adapter_other_shapes_do_not_match(source: str) -> None:
    assert match_adapter_queue(_call(source)) is None


def test_adapter_dynamic_queue_is_not_extracted() -> None:
    node = _call("queue_as(QUEUE_NAME)")

    assert match_adapter_queue(node) is None
    assert isinstance(adapter_queue_expression(node), ast.Name)


def test_options_keyword_queue() -> None:
    node = _call('sidekiq_options(retry=3, queue="within_10_minutes")')
    assert match_options_queue(node) == "within_10_minutes"


def test_options_queue_found_inside_dict_literal() -> None:
    node = _call('sidekiq_options({"retry": 5, "queue": "within_1_hour"})')
    assert match_options_queue(node) == "within_1_hour"


def test_options_queue_found_in_nested_arguments() -> None:
    node = _call('sidekiq_options(retry=3, extra=dict(tags=["a"], queue="within_1_day"))')
    assert match_options_queue(node) == "within_1_day"


def test_options_dynamic_queue_is_not_extracted() -> None:
    node = _call("sidekiq_options(queue=settings.QUEUE)")

    assert match_options_queue(node) is None
    assert len(options_queue_expressions(node)) == 1


def test_options_first_literal_queue_wins() -> None:
    node = _call('sidekiq_options(queue=pick(), extra={"queue": "within_1_minute"})')
    assert match_options_queue(node) == "within_1_minute"


@pytest.mark.parametrize(
    "source",
    [
        'Worker.sidekiq_options(queue="default")',
        'other_options(queue="default")',
        "sidekiq_options(retry=3)",
        'sidekiq_options({"queues": "default"})',
    ],
)
def test_options_other_shapes_do_not_match(source: str) -> None:
    assert match_options_queue(_call(source)) is None


def test_custom_call_names() -> None:
    node = _call('job_options(queue="default")')

    assert match_options_queue(node) is None
    assert match_options_queue(node, names={"job_options"}) == "default"


@pytest.mark.parametrize("node", [None, object(), ast.Name(id="queue_as"), ast.Call()])
def test_unexpected_input_never_raises(node: object) -> None:
    assert match_adapter_queue(node) is None
    assert match_options_queue(node) is None
