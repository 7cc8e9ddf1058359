from __future__ import annotations

from typing import Final

# `error.type` values the CLI may put in an error envelope.
KNOWN_ERROR_TYPES: Final[set[str]] = {
    "IMPORT_FAILED",
    "INVALID_ARGUMENT",
    "NOT_FOUND",
    "PARSE_FAILED",
    "UNDEFINED_STEPS",
}


def assert_known_error_type(error_type: str) -> None:
    if error_type not in KNOWN_ERROR_TYPES:
        raise ValueError(f"Unknown error type: {error_type!r}")


class FeatureParseError(ValueError):
    def __init__(self, uri: str | None, message: str) -> None:
        super().__init__(f"Failed to parse {uri or '<text>'}: {message}")
        self.uri = uri
        self.reason = message


class StepDefinitionError(ValueError):
    def __init__(self, keyword_type: str, pattern: str) -> None:
        super().__init__(f"Step already defined for {keyword_type} {pattern!r}")
        self.keyword_type = keyword_type
        self.pattern = pattern


class KeywordAnomalyError(RuntimeError):
    def __init__(self, label: str) -> None:
        super().__init__(f"Step {label!r} continues a previous step but is the first step of its block")
        self.label = label


class KeywordAnomalyWarning(UserWarning):
    pass
