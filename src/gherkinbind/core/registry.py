from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, Union

from gherkinbind.core.error_types import StepDefinitionError
from gherkinbind.core.model import KeywordType
from gherkinbind.core.signature import SignatureAnalyzer

Pattern = Union[str, re.Pattern]
Handler = Callable[..., Any]

_REGISTRATION_METHODS: dict[KeywordType, str] = {
    KeywordType.CONTEXT: "given",
    KeywordType.ACTION: "when",
    KeywordType.OUTCOME: "then",
}

# Lookup order for a standalone `*` step.
_ANY_TYPE_ORDER = (KeywordType.CONTEXT, KeywordType.ACTION, KeywordType.OUTCOME)


def registration_method(keyword_type: KeywordType) -> str:
    return _REGISTRATION_METHODS.get(keyword_type, "step")


@dataclass(frozen=True)
class StepDefinition:
    keyword_type: KeywordType
    pattern: Pattern
    handler: Handler
    fixtures: Optional[tuple[str, ...]] = None

    @property
    def pattern_text(self) -> str:
        return self.pattern if isinstance(self.pattern, str) else self.pattern.pattern

    @property
    def argument_names(self) -> tuple[str, ...]:
        if isinstance(self.pattern, str):
            return ()
        return tuple(self.pattern.groupindex)

    def match(self, text: str) -> Optional[dict[str, str]]:
        if isinstance(self.pattern, str):
            return {} if self.pattern == text else None
        m = self.pattern.fullmatch(text)
        return m.groupdict() if m else None


@dataclass(frozen=True)
class StepMatch:
    definition: StepDefinition
    arguments: dict[str, str] = field(default_factory=dict)

    @property
    def handler(self) -> Handler:
        return self.definition.handler


class StepRegistry:
    """Maps (keyword type, step text) to handlers.

    Definitions registered through `step` match every keyword type and are
    consulted after the type-specific ones.
    """

    def __init__(self) -> None:
        self._exact: dict[tuple[KeywordType, str], StepDefinition] = {}
        self._patterns: list[StepDefinition] = []
        self.analyzer = SignatureAnalyzer()

    def register(
        self,
        keyword_type: KeywordType,
        pattern: Pattern,
        handler: Handler,
        *,
        fixtures: Iterable[str] | None = None,
    ) -> StepDefinition:
        declared = tuple(dict.fromkeys(fixtures)) if fixtures is not None else None
        definition = StepDefinition(keyword_type=keyword_type, pattern=pattern, handler=handler, fixtures=declared)
        if isinstance(pattern, str):
            key = (keyword_type, pattern)
            if key in self._exact:
                raise StepDefinitionError(keyword_type.value, definition.pattern_text)
            self._exact[key] = definition
        else:
            for existing in self._patterns:
                if existing.keyword_type is keyword_type and existing.pattern == pattern:
                    raise StepDefinitionError(keyword_type.value, definition.pattern_text)
            self._patterns.append(definition)
        return definition

    def _decorator(self, keyword_type: KeywordType, pattern: Pattern, fixtures: Iterable[str] | None):
        def decorate(handler: Handler) -> Handler:
            self.register(keyword_type, pattern, handler, fixtures=fixtures)
            return handler

        return decorate

    def given(self, pattern: Pattern, *, fixtures: Iterable[str] | None = None):
        return self._decorator(KeywordType.CONTEXT, pattern, fixtures)

    def when(self, pattern: Pattern, *, fixtures: Iterable[str] | None = None):
        return self._decorator(KeywordType.ACTION, pattern, fixtures)

    def then(self, pattern: Pattern, *, fixtures: Iterable[str] | None = None):
        return self._decorator(KeywordType.OUTCOME, pattern, fixtures)

    def step(self, pattern: Pattern, *, fixtures: Iterable[str] | None = None):
        return self._decorator(KeywordType.UNKNOWN, pattern, fixtures)

    def resolve(self, keyword_type: KeywordType, text: str) -> Optional[StepMatch]:
        if keyword_type is KeywordType.UNKNOWN:
            for candidate in _ANY_TYPE_ORDER:
                found = self._lookup(candidate, text)
                if found is not None:
                    return found
            return None
        return self._lookup(keyword_type, text)

    def _lookup(self, keyword_type: KeywordType, text: str) -> Optional[StepMatch]:
        for kt in (keyword_type, KeywordType.UNKNOWN):
            definition = self._exact.get((kt, text))
            if definition is not None:
                return StepMatch(definition=definition)
            for definition in self._patterns:
                if definition.keyword_type is not kt:
                    continue
                arguments = definition.match(text)
                if arguments is not None:
                    return StepMatch(definition=definition, arguments=arguments)
        return None

    def fixture_names(self, definition: StepDefinition | None) -> tuple[str, ...]:
        if definition is None:
            return ()
        if definition.fixtures is not None:
            return definition.fixtures
        return self.analyzer.fixture_names(definition.handler, exclude=definition.argument_names)

    def __len__(self) -> int:
        return len(self._exact) + len(self._patterns)


default_registry = StepRegistry()

given = default_registry.given
when = default_registry.when
then = default_registry.then
step = default_registry.step
