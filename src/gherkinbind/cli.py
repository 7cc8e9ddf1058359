from __future__ import annotations

import importlib
import logging
import os
import sys
import warnings
from pathlib import Path
from typing import List, Optional

import typer

from gherkinbind.core import config as config_core
from gherkinbind.core import envelope
from gherkinbind.core.error_types import FeatureParseError, KeywordAnomalyError
from gherkinbind.core.parsing import collect_feature_files, parse_file
from gherkinbind.core.registry import default_registry
from gherkinbind.core.runner import PlanRunner
from gherkinbind.core.translator import bind

VERSION = "0.1.0"

app = typer.Typer(add_completion=False, help="gherkinbind - bind Gherkin features to pytest step handlers")


class _CommandError(Exception):
    def __init__(self, error_type: str, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.details = details or {}


def _emit(out: dict) -> None:
    typer.echo(envelope.dumps(out))
    if out.get("ok") is True:
        raise typer.Exit(code=0)
    raise typer.Exit(code=1)


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")


def _import_steps(modules: list[str]) -> None:
    cwd = os.getcwd()
    if cwd not in sys.path:
        sys.path.insert(0, cwd)
    for name in modules:
        try:
            importlib.import_module(name)
        except ImportError as exc:
            raise _CommandError("IMPORT_FAILED", f"Cannot import step module {name!r}: {exc}", {"module": name}) from exc


def _build_plan(paths: list[Path], steps: list[str] | None) -> tuple[PlanRunner, list[str]]:
    try:
        settings = config_core.load_settings()
    except ValueError as exc:
        raise _CommandError("INVALID_ARGUMENT", str(exc)) from exc
    _import_steps(list(steps) if steps else list(settings.steps))

    try:
        files = collect_feature_files(*paths)
    except FileNotFoundError as exc:
        raise _CommandError("NOT_FOUND", str(exc), {"paths": [str(p) for p in paths]}) from exc

    runner = PlanRunner()
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        for path in files:
            try:
                bind(parse_file(path), runner=runner, registry=default_registry, settings=settings)
            except FeatureParseError as exc:
                raise _CommandError("PARSE_FAILED", str(exc), {"path": str(path)}) from exc
            except KeywordAnomalyError as exc:
                raise _CommandError("INVALID_ARGUMENT", str(exc), {"path": str(path), "step": exc.label}) from exc
    return runner, [str(w.message) for w in caught]


def _summary(runner: PlanRunner) -> dict:
    tests = steps = 0
    undefined: dict[str, None] = {}
    for _, hooks, test in runner.tests():
        tests += 1
        for bound in [*(h.scenario for h in hooks), test.scenario]:
            steps += len(bound.steps)
            for resolved in bound.pending:
                undefined.setdefault(resolved.label, None)
    return {"tests": tests, "steps": steps, "undefined": list(undefined)}


@app.command()
def version(json_output: bool = typer.Option(False, "--json", help="Output JSON envelope")):
    if json_output:
        _emit(envelope.ok(command="version", data={"version": VERSION}))
    typer.echo(f"gherkinbind {VERSION}")


@app.command()
def plan(
    paths: List[Path] = typer.Argument(..., help="Feature files or directories"),
    steps: Optional[List[str]] = typer.Option(None, "--steps", help="Module registering step handlers"),
    verbose: bool = typer.Option(False, "--verbose"),
):
    """Show the groups, tests, fixtures and step bindings a feature set translates to."""
    _configure_logging(verbose)
    try:
        runner, caught = _build_plan(paths, steps)
        out = envelope.ok(
            command="plan",
            data={"groups": runner.to_dict()["children"], "summary": _summary(runner), "warnings": caught},
        )
    except _CommandError as exc:
        out = envelope.err(command="plan", error_type=exc.error_type, message=str(exc), details=exc.details)
    _emit(out)


@app.command()
def check(
    paths: List[Path] = typer.Argument(..., help="Feature files or directories"),
    steps: Optional[List[str]] = typer.Option(None, "--steps", help="Module registering step handlers"),
    verbose: bool = typer.Option(False, "--verbose"),
):
    """Fail when any step has no registered handler."""
    _configure_logging(verbose)
    try:
        runner, caught = _build_plan(paths, steps)
        summary = _summary(runner)
        if summary["undefined"]:
            out = envelope.err(
                command="check",
                error_type="UNDEFINED_STEPS",
                message=f"{len(summary['undefined'])} step(s) have no handler",
                details={"undefined": summary["undefined"]},
            )
        else:
            out = envelope.ok(command="check", data={"summary": summary, "warnings": caught})
    except _CommandError as exc:
        out = envelope.err(command="check", error_type=exc.error_type, message=str(exc), details=exc.details)
    _emit(out)


if __name__ == "__main__":
    app()
