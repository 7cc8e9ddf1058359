from __future__ import annotations

import asyncio
import inspect
import logging
from typing import TYPE_CHECKING, Any, Iterable

from gherkinbind.core.registry import StepMatch, StepRegistry, registration_method
from gherkinbind.core.resolver import ResolvedStep

if TYPE_CHECKING:
    from gherkinbind.core.runner import Runner

logger = logging.getLogger(__name__)


def collect_fixtures(steps: Iterable[ResolvedStep], registry: StepRegistry) -> tuple[str, ...]:
    names: dict[str, None] = {}
    for resolved in steps:
        definition = resolved.match.definition if resolved.match else None
        for name in registry.fixture_names(definition):
            names.setdefault(name, None)
    return tuple(names)


def pending_message(resolved: ResolvedStep) -> str:
    return (
        f"Step {resolved.label!r} is not defined. "
        f"Register it with StepRegistry.{registration_method(resolved.keyword_type)}"
    )


def step_extras(resolved: ResolvedStep) -> dict[str, Any]:
    extras: dict[str, Any] = dict(resolved.match.arguments) if resolved.match else {}
    step = resolved.step
    if step.data_table is not None:
        extras["data_table"] = step.data_table
    if step.doc_string is not None:
        extras["doc_string"] = step.doc_string.content
    return extras


async def _consume(awaitable: Any) -> Any:
    return await awaitable


class BoundScenario:
    """Runs the resolved steps of one scenario or background.

    The signature lists exactly the fixtures the steps need, so a runner that
    injects by parameter name (pytest) materializes nothing else.
    """

    def __init__(
        self,
        *,
        name: str,
        steps: tuple[ResolvedStep, ...],
        registry: StepRegistry,
        runner: Runner,
    ) -> None:
        self.name = name
        self.steps = steps
        self.fixtures = collect_fixtures(steps, registry)
        self._registry = registry
        self._runner = runner
        self.__signature__ = inspect.Signature(
            [inspect.Parameter(n, inspect.Parameter.POSITIONAL_OR_KEYWORD) for n in self.fixtures]
        )

    @property
    def pending(self) -> tuple[ResolvedStep, ...]:
        return tuple(s for s in self.steps if not s.defined)

    def __call__(self, **fixtures: Any) -> None:
        missing = [name for name in self.fixtures if name not in fixtures]
        if missing:
            raise TypeError(f"{self.name!r} missing fixtures: {', '.join(missing)}")
        for resolved in self.steps:
            with self._runner.step(resolved.label):
                if resolved.match is None:
                    message = pending_message(resolved)
                    logger.warning(message)
                    self._runner.pending(message)
                    continue
                self._run_handler(resolved, resolved.match, fixtures)

    def _run_handler(self, resolved: ResolvedStep, match: StepMatch, fixtures: dict[str, Any]) -> None:
        handler = match.handler
        shape = self._registry.analyzer.shape(handler)
        kwargs = shape.call_arguments(fixtures, step_extras(resolved))
        logger.debug("running %r with %s", resolved.label, sorted(kwargs))
        result = handler(**kwargs)
        if inspect.isawaitable(result):
            asyncio.run(_consume(result))

    def __repr__(self) -> str:
        return f"BoundScenario(name={self.name!r}, fixtures={self.fixtures!r})"
