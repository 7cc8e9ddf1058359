from __future__ import annotations

import inspect
import re

import pytest

from gherkinbind.core.model import KeywordType
from gherkinbind.core.registry import StepRegistry
from gherkinbind.core.resolver import resolve_steps
from gherkinbind.core.runner import PlanRunner
from gherkinbind.core.scenario import BoundScenario, collect_fixtures, pending_message
from tests.support.builders import make_step


def _bind(registry: StepRegistry, runner: PlanRunner, *steps) -> BoundScenario:
    return BoundScenario(name="s", steps=resolve_steps(steps, registry), registry=registry, runner=runner)


def test_fixture_union_keeps_first_seen_order():
    registry = StepRegistry()
    registry.register(KeywordType.CONTEXT, "a browser", lambda browser: None)
    registry.register(KeywordType.ACTION, "I open a page", lambda page: None)
    registry.register(KeywordType.OUTCOME, "a context exists", lambda browser, context: None)

    resolved = resolve_steps(
        [make_step("Given", "a browser"), make_step("When", "I open a page"), make_step("Then", "a context exists")],
        registry,
    )
    assert collect_fixtures(resolved, registry) == ("browser", "page", "context")


def test_signature_is_exactly_the_fixture_set():
    registry = StepRegistry()
    registry.register(KeywordType.CONTEXT, "a browser", lambda browser, page: None)
    bound = _bind(registry, PlanRunner(), make_step("Given", "a browser"), make_step("When", "undefined"))
    assert list(inspect.signature(bound).parameters) == ["browser", "page"]


def test_steps_run_in_order_and_unresolved_steps_are_pending():
    calls: list[str] = []
    registry = StepRegistry()
    registry.register(KeywordType.CONTEXT, "first", lambda log: log.append("first"))
    registry.register(KeywordType.OUTCOME, "third", lambda log: log.append("third"))
    runner = PlanRunner()
    bound = _bind(registry, runner, make_step("Given", "first"), make_step("When", "second"), make_step("Then", "third"))
    runner.test("s", bound)

    [outcome] = runner.run({"log": calls})
    assert calls == ["first", "third"]
    assert outcome.status == "pending"
    assert outcome.trace == ["Given first", "When second", "Then third"]
    assert outcome.pending == [pending_message(bound.steps[1])]
    assert "StepRegistry.when" in outcome.pending[0]


def test_extras_carry_table_doc_string_and_pattern_groups():
    seen: dict = {}
    registry = StepRegistry()

    @registry.given(re.compile(r"(?P<count>\d+) cats"))
    def cats(count, data_table):
        seen["count"] = count
        seen["rows"] = data_table.as_dicts()

    @registry.when("I write")
    def write(doc_string):
        seen["doc"] = doc_string

    runner = PlanRunner()
    runner.test(
        "s",
        _bind(
            registry,
            runner,
            make_step("Given", "2 cats", table=[["name"], ["Tom"], ["Kit"]]),
            make_step("When", "I write", doc="hello"),
        ),
    )
    [outcome] = runner.run()
    assert outcome.status == "passed"
    assert seen == {"count": "2", "rows": [{"name": "Tom"}, {"name": "Kit"}], "doc": "hello"}


def test_handler_failure_propagates_and_stops_the_scenario():
    registry = StepRegistry()
    registry.register(KeywordType.CONTEXT, "boom", lambda: 1 / 0)
    registry.register(KeywordType.OUTCOME, "never", lambda log: log.append("never"))
    runner = PlanRunner()
    bound = _bind(registry, runner, make_step("Given", "boom"), make_step("Then", "never"))

    with pytest.raises(ZeroDivisionError):
        bound(log=[])


def test_async_handlers_are_awaited():
    order: list[str] = []
    registry = StepRegistry()

    @registry.given("async work")
    async def work(log):
        log.append("async")

    @registry.then("sync check")
    def check(log):
        log.append("sync")

    runner = PlanRunner()
    _bind(registry, runner, make_step("Given", "async work"), make_step("Then", "sync check"))(log=order)
    assert order == ["async", "sync"]


def test_missing_fixture_argument_is_reported():
    registry = StepRegistry()
    registry.register(KeywordType.CONTEXT, "x", lambda page: None)
    bound = _bind(registry, PlanRunner(), make_step("Given", "x"))
    with pytest.raises(TypeError, match="page"):
        bound()
