from __future__ import annotations

import json
from typing import Any, Dict

from gherkinbind.core.error_types import assert_known_error_type

SCHEMA_VERSION = "1"


def ok(
    *,
    command: str,
    data: Dict[str, Any] | None = None,
    schema_version: str = SCHEMA_VERSION,
) -> Dict[str, Any]:
    return {
        "ok": True,
        "schema_version": schema_version,
        "command": command,
        "data": data or {},
    }


def err(
    *,
    command: str,
    error_type: str,
    message: str,
    details: Dict[str, Any] | None = None,
    schema_version: str = SCHEMA_VERSION,
) -> Dict[str, Any]:
    assert_known_error_type(error_type)
    return {
        "ok": False,
        "schema_version": schema_version,
        "command": command,
        "error": {
            "type": error_type,
            "message": message,
            "details": details or {},
        },
    }


def dumps(obj: Dict[str, Any]) -> str:
    return json.dumps(obj, ensure_ascii=False, indent=2, sort_keys=True) + "\n"
