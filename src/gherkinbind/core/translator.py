from __future__ import annotations

import logging
from typing import Optional

from gherkinbind.core.config import BindSettings, load_settings
from gherkinbind.core.model import Background, Document, Feature, Rule, Scenario
from gherkinbind.core.outline import expand_outline
from gherkinbind.core.registry import StepRegistry, default_registry
from gherkinbind.core.resolver import resolve_steps
from gherkinbind.core.runner import Runner
from gherkinbind.core.scenario import BoundScenario

logger = logging.getLogger(__name__)


class Translator:
    def __init__(self, runner: Runner, registry: StepRegistry, settings: BindSettings) -> None:
        self.runner = runner
        self.registry = registry
        self.settings = settings

    def run_feature(self, feature: Feature) -> None:
        def body() -> None:
            for child in feature.children:
                if isinstance(child, Rule):
                    self.run_rule(child)
                elif isinstance(child, Background):
                    self.run_background(child)
                else:
                    self.run_scenario(child)

        logger.debug("feature %r", feature.name)
        self.runner.describe(feature.name, body)

    def run_rule(self, rule: Rule) -> None:
        def body() -> None:
            for child in rule.children:
                if isinstance(child, Background):
                    self.run_background(child)
                else:
                    self.run_scenario(child)

        logger.debug("rule %r", rule.name)
        self.runner.describe(rule.name, body)

    def run_background(self, background: Background) -> None:
        self.runner.before_each(self._bind(background.name, background.steps))

    def run_scenario(self, scenario: Scenario) -> None:
        if scenario.is_outline:
            for concrete in expand_outline(scenario):
                self.run_scenario(concrete)
            return
        self.runner.test(scenario.name, self._bind(scenario.name, scenario.steps))

    def _bind(self, name: str, steps) -> BoundScenario:
        resolved = resolve_steps(steps, self.registry, strict=self.settings.strict_keywords)
        bound = BoundScenario(name=name, steps=resolved, registry=self.registry, runner=self.runner)
        logger.debug("bound %r requesting %s", name, bound.fixtures)
        return bound


def bind(
    document: Document,
    *,
    runner: Runner,
    registry: Optional[StepRegistry] = None,
    settings: Optional[BindSettings] = None,
) -> None:
    """Register every group and test of `document` with `runner`."""
    if document.feature is None:
        logger.debug("no feature in %s", document.uri or "<document>")
        return
    translator = Translator(
        runner,
        registry if registry is not None else default_registry,
        settings if settings is not None else load_settings(),
    )
    translator.run_feature(document.feature)
