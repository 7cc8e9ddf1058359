"""
Typed boundary for Gherkin parser output.

The gherkin parser returns untyped JSON-like dictionaries. This module is the
only place where that structure is inspected; everything downstream works with
the frozen dataclasses below.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union


class KeywordType(str, Enum):
    CONTEXT = "Context"
    ACTION = "Action"
    OUTCOME = "Outcome"
    CONJUNCTION = "Conjunction"
    EXCEPTION = "Exception"
    UNKNOWN = "Unknown"

    @property
    def propagates(self) -> bool:
        """True when the effective type comes from the previous step."""
        return self in (KeywordType.CONJUNCTION, KeywordType.EXCEPTION, KeywordType.UNKNOWN)


# English dialect keywords, used only when the parser did not emit keywordType.
_KEYWORD_TYPES: dict[str, KeywordType] = {
    "given": KeywordType.CONTEXT,
    "when": KeywordType.ACTION,
    "then": KeywordType.OUTCOME,
    "and": KeywordType.CONJUNCTION,
    "but": KeywordType.EXCEPTION,
    "*": KeywordType.UNKNOWN,
}


@dataclass(frozen=True)
class DataTable:
    rows: tuple[tuple[str, ...], ...]

    @property
    def header(self) -> tuple[str, ...]:
        return self.rows[0] if self.rows else ()

    def as_dicts(self) -> list[dict[str, str]]:
        header = self.header
        return [dict(zip(header, row)) for row in self.rows[1:]]


@dataclass(frozen=True)
class DocString:
    content: str
    media_type: Optional[str] = None


@dataclass(frozen=True)
class Step:
    keyword: str
    keyword_type: KeywordType
    text: str
    data_table: Optional[DataTable] = None
    doc_string: Optional[DocString] = None
    line: Optional[int] = None

    @property
    def label(self) -> str:
        return self.keyword + self.text


@dataclass(frozen=True)
class Examples:
    name: str
    header: Optional[tuple[str, ...]]
    rows: tuple[tuple[str, ...], ...] = ()


@dataclass(frozen=True)
class Scenario:
    name: str
    keyword: str
    steps: tuple[Step, ...]
    examples: tuple[Examples, ...] = ()
    line: Optional[int] = None

    @property
    def is_outline(self) -> bool:
        return bool(self.examples)


@dataclass(frozen=True)
class Background:
    name: str
    steps: tuple[Step, ...]
    line: Optional[int] = None


@dataclass(frozen=True)
class Rule:
    name: str
    children: tuple[Union[Background, Scenario], ...]
    line: Optional[int] = None


@dataclass(frozen=True)
class Feature:
    name: str
    children: tuple[Union[Background, Scenario, Rule], ...]
    line: Optional[int] = None


@dataclass(frozen=True)
class Document:
    feature: Optional[Feature]
    uri: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: object, *, uri: str | None = None) -> Document:
        if not isinstance(raw, dict):
            raise TypeError(f"Gherkin document must be a dict, got {type(raw).__name__}")
        feature_raw = raw.get("feature")
        feature = _feature_from_raw(feature_raw) if isinstance(feature_raw, dict) else None
        return cls(feature=feature, uri=uri or _as_optional_str(raw.get("uri")))


def keyword_type_for(keyword: str) -> KeywordType:
    return _KEYWORD_TYPES.get(keyword.strip().lower(), KeywordType.UNKNOWN)


def _feature_from_raw(raw: dict[str, Any]) -> Feature:
    children: list[Union[Background, Scenario, Rule]] = []
    for child in _as_list(raw.get("children")):
        if not isinstance(child, dict):
            continue
        if isinstance(child.get("rule"), dict):
            children.append(_rule_from_raw(child["rule"]))
        elif isinstance(child.get("background"), dict):
            children.append(_background_from_raw(child["background"]))
        elif isinstance(child.get("scenario"), dict):
            children.append(_scenario_from_raw(child["scenario"]))
    return Feature(name=_as_str(raw.get("name")), children=tuple(children), line=_line(raw))


def _rule_from_raw(raw: dict[str, Any]) -> Rule:
    children: list[Union[Background, Scenario]] = []
    for child in _as_list(raw.get("children")):
        if not isinstance(child, dict):
            continue
        if isinstance(child.get("background"), dict):
            children.append(_background_from_raw(child["background"]))
        elif isinstance(child.get("scenario"), dict):
            children.append(_scenario_from_raw(child["scenario"]))
    return Rule(name=_as_str(raw.get("name")), children=tuple(children), line=_line(raw))


def _background_from_raw(raw: dict[str, Any]) -> Background:
    return Background(name=_as_str(raw.get("name")), steps=_steps_from_raw(raw.get("steps")), line=_line(raw))


def _scenario_from_raw(raw: dict[str, Any]) -> Scenario:
    examples = tuple(_examples_from_raw(ex) for ex in _as_list(raw.get("examples")) if isinstance(ex, dict))
    return Scenario(
        name=_as_str(raw.get("name")),
        keyword=_as_str(raw.get("keyword")),
        steps=_steps_from_raw(raw.get("steps")),
        examples=examples,
        line=_line(raw),
    )


def _examples_from_raw(raw: dict[str, Any]) -> Examples:
    header_raw = raw.get("tableHeader")
    header = _cells(header_raw) if isinstance(header_raw, dict) else None
    rows = tuple(_cells(row) for row in _as_list(raw.get("tableBody")) if isinstance(row, dict))
    return Examples(name=_as_str(raw.get("name")), header=header, rows=rows)


def _steps_from_raw(raw: object) -> tuple[Step, ...]:
    return tuple(_step_from_raw(step) for step in _as_list(raw) if isinstance(step, dict))


def _step_from_raw(raw: dict[str, Any]) -> Step:
    keyword = _as_str(raw.get("keyword"))
    raw_type = raw.get("keywordType")
    try:
        keyword_type = KeywordType(raw_type) if raw_type else keyword_type_for(keyword)
    except ValueError:
        keyword_type = keyword_type_for(keyword)

    table_raw = raw.get("dataTable")
    data_table = None
    if isinstance(table_raw, dict):
        data_table = DataTable(rows=tuple(_cells(row) for row in _as_list(table_raw.get("rows")) if isinstance(row, dict)))

    doc_raw = raw.get("docString")
    doc_string = None
    if isinstance(doc_raw, dict):
        doc_string = DocString(
            content=_as_str(doc_raw.get("content")),
            media_type=_as_optional_str(doc_raw.get("mediaType")),
        )

    return Step(
        keyword=keyword,
        keyword_type=keyword_type,
        text=_as_str(raw.get("text")),
        data_table=data_table,
        doc_string=doc_string,
        line=_line(raw),
    )


def _cells(raw: dict[str, Any]) -> tuple[str, ...]:
    return tuple(_as_str(cell.get("value")) for cell in _as_list(raw.get("cells")) if isinstance(cell, dict))


def _line(raw: dict[str, Any]) -> Optional[int]:
    location = raw.get("location")
    if not isinstance(location, dict):
        return None
    line = location.get("line")
    return line if isinstance(line, int) else None


def _as_list(value: object) -> list:
    return value if isinstance(value, list) else []


def _as_str(value: object) -> str:
    return value if isinstance(value, str) else ""


def _as_optional_str(value: object) -> Optional[str]:
    return value if isinstance(value, str) else None
