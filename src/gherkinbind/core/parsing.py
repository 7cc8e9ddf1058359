from __future__ import annotations

from pathlib import Path

from gherkin.errors import ParserError
from gherkin.parser import Parser
from gherkin.token_scanner import TokenScanner

from gherkinbind.core.error_types import FeatureParseError
from gherkinbind.core.model import Document

FEATURE_SUFFIX = ".feature"


def parse_text(text: str, *, uri: str | None = None) -> Document:
    try:
        raw = Parser().parse(TokenScanner(text))
    except ParserError as exc:
        raise FeatureParseError(uri, str(exc)) from exc
    return Document.from_raw(raw, uri=uri)


def parse_file(path: str | Path) -> Document:
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise FeatureParseError(str(p), str(exc)) from exc
    return parse_text(text, uri=str(p))


def collect_feature_files(*paths: str | Path) -> list[Path]:
    """Expand directories into their `*.feature` files, keeping explicit files as given."""
    found: list[Path] = []
    for path in paths:
        p = Path(path)
        if p.is_dir():
            found.extend(sorted(p.rglob(f"*{FEATURE_SUFFIX}")))
        elif p.exists():
            found.append(p)
        else:
            raise FileNotFoundError(f"Feature path not found: {p}")
    return found
