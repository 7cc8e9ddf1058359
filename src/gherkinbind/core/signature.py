"""Fixture requirements of step handlers.

A handler declares the fixtures it needs through its own parameter names, the
same convention pytest uses for test functions. Inspection goes through
`inspect.signature`, so nothing in the handler's source text (comments,
default-value literals) can leak into the result.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

# Keyword arguments supplied by the step itself rather than by pytest.
STEP_ARGUMENTS: tuple[str, ...] = ("data_table", "doc_string")

_NAMED_KINDS = (inspect.Parameter.POSITIONAL_OR_KEYWORD, inspect.Parameter.KEYWORD_ONLY)


@dataclass(frozen=True)
class HandlerShape:
    parameters: tuple[str, ...]
    required: tuple[str, ...]
    var_keyword: bool

    def fixture_names(self, *, exclude: Iterable[str] = ()) -> tuple[str, ...]:
        if self.var_keyword:
            # `**kwargs` could consume anything; request nothing beyond the runner's defaults.
            return ()
        excluded = set(STEP_ARGUMENTS).union(exclude)
        return tuple(dict.fromkeys(name for name in self.required if name not in excluded))

    def call_arguments(self, context: Mapping[str, Any], extras: Mapping[str, Any]) -> dict[str, Any]:
        available = {**context, **extras}
        if self.var_keyword:
            return available
        return {name: available[name] for name in self.parameters if name in available}


EMPTY_SHAPE = HandlerShape(parameters=(), required=(), var_keyword=False)


def inspect_handler(handler: object) -> HandlerShape:
    if not callable(handler):
        return EMPTY_SHAPE
    try:
        sig = inspect.signature(handler)
    except (TypeError, ValueError):
        return EMPTY_SHAPE

    parameters: list[str] = []
    required: list[str] = []
    var_keyword = False
    for param in sig.parameters.values():
        if param.kind is inspect.Parameter.VAR_KEYWORD:
            var_keyword = True
        elif param.kind in _NAMED_KINDS:
            parameters.append(param.name)
            if param.default is inspect.Parameter.empty:
                required.append(param.name)
    return HandlerShape(parameters=tuple(parameters), required=tuple(required), var_keyword=var_keyword)


class SignatureAnalyzer:
    """Memoizing front end for `inspect_handler`.

    The cache is keyed by handler identity and owned by whoever owns the
    analyzer (normally a `StepRegistry`). Entries are write-once and recomputing
    one yields the same shape, so sharing an analyzer between concurrently
    running scenarios is safe.
    """

    def __init__(self) -> None:
        self._shapes: dict[int, tuple[Callable[..., Any], HandlerShape]] = {}

    def shape(self, handler: object) -> HandlerShape:
        if not callable(handler):
            return EMPTY_SHAPE
        cached = self._shapes.get(id(handler))
        # The stored reference keeps the id from being recycled while cached.
        if cached is not None and cached[0] is handler:
            return cached[1]
        shape = inspect_handler(handler)
        self._shapes[id(handler)] = (handler, shape)
        return shape

    def fixture_names(self, handler: object, *, exclude: Iterable[str] = ()) -> tuple[str, ...]:
        return self.shape(handler).fixture_names(exclude=exclude)

    def __len__(self) -> int:
        return len(self._shapes)
