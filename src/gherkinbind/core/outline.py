from __future__ import annotations

from dataclasses import replace

from gherkinbind.core.model import Examples, Scenario, Step


def substitute(text: str, header: tuple[str, ...], row: tuple[str, ...]) -> str:
    for name, value in zip(header, row):
        text = text.replace(f"<{name}>", value)
    return text


def example_name(template: str, examples: Examples, index: int) -> str:
    name = template
    if examples.name:
        name += " -- " + examples.name
    return f"{name} ({index + 1})"


def expand_examples(scenario: Scenario, examples: Examples) -> list[Scenario]:
    if examples.header is None:
        return []
    expanded: list[Scenario] = []
    for i, row in enumerate(examples.rows):
        steps: tuple[Step, ...] = tuple(
            replace(step, text=substitute(step.text, examples.header, row)) for step in scenario.steps
        )
        expanded.append(replace(scenario, name=example_name(scenario.name, examples, i), steps=steps, examples=()))
    return expanded


def expand_outline(scenario: Scenario) -> list[Scenario]:
    """Concrete scenarios for every example row, all rows of one table before the next."""
    expanded: list[Scenario] = []
    for examples in scenario.examples:
        expanded.extend(expand_examples(scenario, examples))
    return expanded
