from __future__ import annotations

import contextlib
from dataclasses import dataclass, field
from typing import Any, Callable, ContextManager, Iterator, Mapping, Optional, Protocol, Union

from gherkinbind.core.scenario import BoundScenario


class Runner(Protocol):
    """Primitives a test framework must offer to host translated features."""

    def describe(self, name: str, body: Callable[[], None]) -> None: ...

    def before_each(self, fn: BoundScenario) -> None: ...

    def test(self, name: str, fn: BoundScenario) -> None: ...

    def step(self, label: str) -> ContextManager[None]: ...

    def pending(self, message: str) -> None: ...


@dataclass
class PlanHook:
    scenario: BoundScenario


@dataclass
class PlanTest:
    name: str
    scenario: BoundScenario


@dataclass
class PlanGroup:
    name: str
    children: list[Union["PlanGroup", PlanTest]] = field(default_factory=list)
    hooks: list[PlanHook] = field(default_factory=list)


@dataclass
class PlanOutcome:
    path: tuple[str, ...]
    status: str
    trace: list[str] = field(default_factory=list)
    pending: list[str] = field(default_factory=list)
    error: Optional[BaseException] = None


def _steps_dict(scenario: BoundScenario) -> list[dict[str, Any]]:
    return [
        {"label": s.label, "keyword_type": s.keyword_type.value, "defined": s.defined}
        for s in scenario.steps
    ]


class PlanRunner:
    """Records the translated tree instead of handing it to a framework.

    `run` executes the recorded tests in registration order, each preceded by
    the hooks of every enclosing group, outermost first.
    """

    def __init__(self) -> None:
        self.root = PlanGroup(name="")
        self._stack: list[PlanGroup] = [self.root]
        self._trace: Optional[list[str]] = None
        self._pending: Optional[list[str]] = None

    def describe(self, name: str, body: Callable[[], None]) -> None:
        group = PlanGroup(name=name)
        self._stack[-1].children.append(group)
        self._stack.append(group)
        try:
            body()
        finally:
            self._stack.pop()

    def before_each(self, fn: BoundScenario) -> None:
        self._stack[-1].hooks.append(PlanHook(scenario=fn))

    def test(self, name: str, fn: BoundScenario) -> None:
        self._stack[-1].children.append(PlanTest(name=name, scenario=fn))

    @contextlib.contextmanager
    def step(self, label: str) -> Iterator[None]:
        if self._trace is not None:
            self._trace.append(label)
        yield

    def pending(self, message: str) -> None:
        if self._pending is not None:
            self._pending.append(message)

    def tests(self) -> Iterator[tuple[tuple[str, ...], list[PlanHook], PlanTest]]:
        def walk(group: PlanGroup, path: tuple[str, ...], hooks: list[PlanHook]):
            for child in group.children:
                if isinstance(child, PlanGroup):
                    yield from walk(child, path + (child.name,), hooks + child.hooks)
                else:
                    yield path + (child.name,), hooks, child

        yield from walk(self.root, (), list(self.root.hooks))

    def run(self, fixtures: Mapping[str, Any] | None = None) -> list[PlanOutcome]:
        available = dict(fixtures or {})
        outcomes: list[PlanOutcome] = []
        for path, hooks, test in self.tests():
            outcome = PlanOutcome(path=path, status="passed")
            self._trace, self._pending = outcome.trace, outcome.pending
            try:
                for hook in hooks:
                    hook.scenario(**{n: available[n] for n in hook.scenario.fixtures})
                test.scenario(**{n: available[n] for n in test.scenario.fixtures})
            except Exception as exc:
                outcome.status = "failed"
                outcome.error = exc
            finally:
                self._trace = self._pending = None
            if outcome.status == "passed" and outcome.pending:
                outcome.status = "pending"
            outcomes.append(outcome)
        return outcomes

    def to_dict(self) -> dict[str, Any]:
        def group_dict(group: PlanGroup) -> dict[str, Any]:
            return {
                "kind": "group",
                "name": group.name,
                "before_each": [
                    {"fixtures": list(h.scenario.fixtures), "steps": _steps_dict(h.scenario)} for h in group.hooks
                ],
                "children": [
                    group_dict(c) if isinstance(c, PlanGroup) else test_dict(c) for c in group.children
                ],
            }

        def test_dict(test: PlanTest) -> dict[str, Any]:
            return {
                "kind": "test",
                "name": test.name,
                "fixtures": list(test.scenario.fixtures),
                "steps": _steps_dict(test.scenario),
            }

        return group_dict(self.root)
