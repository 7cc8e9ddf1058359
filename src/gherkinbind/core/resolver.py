from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Iterable, Optional

from gherkinbind.core.error_types import KeywordAnomalyError, KeywordAnomalyWarning
from gherkinbind.core.model import KeywordType, Step
from gherkinbind.core.registry import StepMatch, StepRegistry


@dataclass(frozen=True)
class ResolvedStep:
    step: Step
    keyword_type: KeywordType
    match: Optional[StepMatch] = None

    @property
    def label(self) -> str:
        return self.step.label

    @property
    def defined(self) -> bool:
        return self.match is not None


def effective_keyword_type(step: Step, previous: KeywordType | None, *, strict: bool = False) -> KeywordType:
    if not step.keyword_type.propagates:
        return step.keyword_type
    if previous is not None:
        return previous
    if step.keyword_type is KeywordType.UNKNOWN:
        # A leading `*` is a valid standalone step; the registry searches all types.
        return KeywordType.UNKNOWN
    if strict:
        raise KeywordAnomalyError(step.label)
    warnings.warn(
        f"Step {step.label!r} continues a previous step but is the first step of its block; "
        f"only definitions registered with `step` can match it",
        KeywordAnomalyWarning,
        stacklevel=3,
    )
    return step.keyword_type


def resolve_step(
    step: Step,
    previous: KeywordType | None,
    registry: StepRegistry,
    *,
    strict: bool = False,
) -> ResolvedStep:
    keyword_type = effective_keyword_type(step, previous, strict=strict)
    return ResolvedStep(step=step, keyword_type=keyword_type, match=registry.resolve(keyword_type, step.text))


def resolve_steps(steps: Iterable[Step], registry: StepRegistry, *, strict: bool = False) -> tuple[ResolvedStep, ...]:
    resolved: list[ResolvedStep] = []
    previous: KeywordType | None = None
    for step in steps:
        current = resolve_step(step, previous, registry, strict=strict)
        resolved.append(current)
        previous = current.keyword_type
    return tuple(resolved)
