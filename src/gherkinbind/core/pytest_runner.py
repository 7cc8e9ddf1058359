"""pytest host for translated features.

Features and rules become nested `Test_*` classes, scenarios become `test_*`
functions and backgrounds become autouse fixtures of the class that owns them.
Every generated callable advertises the bound scenario's fixture set as its
signature, so pytest injects exactly those fixtures.
"""

from __future__ import annotations

import contextlib
import inspect
import logging
import re
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import Any, Callable, Iterator, MutableMapping, Optional

import pytest

from gherkinbind.core.config import BindSettings
from gherkinbind.core.parsing import collect_feature_files, parse_file
from gherkinbind.core.registry import StepRegistry
from gherkinbind.core.scenario import BoundScenario
from gherkinbind.core.translator import bind

logger = logging.getLogger(__name__)

PENDING_STEPS = pytest.StashKey[list]()

_current_node: ContextVar[Optional[pytest.Item]] = ContextVar("gherkinbind_current_node", default=None)

_POK = inspect.Parameter.POSITIONAL_OR_KEYWORD


def identifier(prefix: str, name: str) -> str:
    slug = re.sub(r"\W+", "_", name).strip("_")
    return prefix + (slug or "unnamed")


def _pytest_callable(fn: BoundScenario, *, name: str, method: bool, is_test: bool) -> Callable[..., None]:
    wants_request = "request" in fn.fixtures
    params = [inspect.Parameter(n, _POK) for n in fn.fixtures]
    if not wants_request:
        params.append(inspect.Parameter("request", _POK))
    if method:
        params.insert(0, inspect.Parameter("self", _POK))

    def run(*args: Any, **kwargs: Any) -> None:
        request = kwargs["request"] if wants_request else kwargs.pop("request")
        token = _current_node.set(request.node)
        try:
            fn(**kwargs)
        finally:
            _current_node.reset(token)
        if is_test:
            pending = request.node.stash.get(PENDING_STEPS, [])
            if pending:
                pytest.skip("\n".join(pending))

    run.__name__ = run.__qualname__ = name
    run.__doc__ = fn.name
    run.__signature__ = inspect.Signature(params)  # type: ignore[attr-defined]
    return run


class PytestRunner:
    def __init__(self, namespace: MutableMapping[str, Any]) -> None:
        self._scopes: list[MutableMapping[str, Any]] = [namespace]
        self._path: list[str] = []
        self._module = namespace.get("__name__", __name__)

    @property
    def _in_class(self) -> bool:
        return len(self._scopes) > 1

    def _unique(self, base: str) -> str:
        scope = self._scopes[-1]
        name, n = base, 1
        while name in scope:
            n += 1
            name = f"{base}_{n}"
        return name

    def describe(self, name: str, body: Callable[[], None]) -> None:
        scope: dict[str, Any] = {"__doc__": name, "__module__": self._module}
        self._scopes.append(scope)
        self._path.append(identifier("", name))
        try:
            body()
        finally:
            self._scopes.pop()
            self._path.pop()
        attr = self._unique(identifier("Test_", name))
        self._scopes[-1][attr] = type(attr, (), scope)
        logger.debug("registered class %s for %r", attr, name)

    def before_each(self, fn: BoundScenario) -> None:
        # Must be unique across nested classes; an inner fixture of the same name overrides the outer one.
        attr = self._unique("_".join(["gherkinbind_background", *self._path]))
        hook = _pytest_callable(fn, name=attr, method=self._in_class, is_test=False)
        self._scopes[-1][attr] = pytest.fixture(autouse=True)(hook)

    def test(self, name: str, fn: BoundScenario) -> None:
        attr = self._unique(identifier("test_", name))
        self._scopes[-1][attr] = _pytest_callable(fn, name=attr, method=self._in_class, is_test=True)
        logger.debug("registered %s requesting %s", attr, fn.fixtures)

    @contextlib.contextmanager
    def step(self, label: str) -> Iterator[None]:
        logger.debug("step %s", label)
        try:
            yield
        except Exception as exc:
            exc.add_note(f"Step failed: {label}")
            raise

    def pending(self, message: str) -> None:
        node = _current_node.get()
        if node is None:
            return
        node.stash.setdefault(PENDING_STEPS, []).append(message)


def scenarios(
    *paths: str | Path,
    registry: StepRegistry | None = None,
    settings: BindSettings | None = None,
) -> None:
    """Bind feature files (or directories of them) into the calling test module.

    Relative paths are resolved against the calling module's directory.
    """
    namespace = sys._getframe(1).f_globals
    base = Path(namespace.get("__file__") or ".").resolve().parent
    runner = PytestRunner(namespace)
    for feature_path in collect_feature_files(*(base / p for p in paths)):
        logger.debug("binding %s", feature_path)
        bind(parse_file(feature_path), runner=runner, registry=registry, settings=settings)
