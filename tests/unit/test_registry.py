from __future__ import annotations

import re

import pytest

from gherkinbind.core.error_types import StepDefinitionError
from gherkinbind.core.model import KeywordType
from gherkinbind.core.registry import StepRegistry, registration_method


def test_exact_match_by_keyword_type():
    registry = StepRegistry()

    @registry.given("a shelter")
    def shelter():
        pass

    found = registry.resolve(KeywordType.CONTEXT, "a shelter")
    assert found is not None and found.handler is shelter
    assert registry.resolve(KeywordType.ACTION, "a shelter") is None


def test_regex_named_groups_become_arguments():
    registry = StepRegistry()

    @registry.when(re.compile(r"I adopt (?P<count>\d+) cats"))
    def adopt(count, shelter):
        pass

    found = registry.resolve(KeywordType.ACTION, "I adopt 3 cats")
    assert found is not None
    assert found.arguments == {"count": "3"}
    assert registry.fixture_names(found.definition) == ("shelter",)


def test_exact_wins_over_pattern():
    registry = StepRegistry()
    registry.register(KeywordType.OUTCOME, re.compile(r".*"), lambda: "pattern")
    exact = registry.register(KeywordType.OUTCOME, "done", lambda: "exact")
    assert registry.resolve(KeywordType.OUTCOME, "done").definition is exact


def test_step_decorator_matches_any_type_after_specific():
    registry = StepRegistry()

    @registry.step("the log is empty")
    def generic():
        pass

    @registry.then("the log is empty")
    def specific():
        pass

    assert registry.resolve(KeywordType.OUTCOME, "the log is empty").handler is specific
    assert registry.resolve(KeywordType.CONTEXT, "the log is empty").handler is generic


def test_unknown_keyword_searches_all_types():
    registry = StepRegistry()

    @registry.then("it works")
    def works():
        pass

    assert registry.resolve(KeywordType.UNKNOWN, "it works").handler is works


def test_duplicate_registration_raises():
    registry = StepRegistry()
    registry.register(KeywordType.CONTEXT, "x", lambda: None)
    with pytest.raises(StepDefinitionError):
        registry.register(KeywordType.CONTEXT, "x", lambda: None)
    registry.register(KeywordType.ACTION, "x", lambda: None)
    assert len(registry) == 2


def test_explicit_fixtures_replace_inference():
    registry = StepRegistry()

    @registry.given("a page", fixtures=["browser", "page", "browser"])
    def page_step(**fixtures):
        pass

    definition = registry.resolve(KeywordType.CONTEXT, "a page").definition
    assert registry.fixture_names(definition) == ("browser", "page")


def test_registration_method_names():
    assert registration_method(KeywordType.CONTEXT) == "given"
    assert registration_method(KeywordType.ACTION) == "when"
    assert registration_method(KeywordType.OUTCOME) == "then"
    assert registration_method(KeywordType.CONJUNCTION) == "step"
