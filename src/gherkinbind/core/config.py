from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
import tomllib

_BIND_TABLE: dict | None = None


@dataclass(frozen=True)
class BindSettings:
    strict_keywords: bool = False
    steps: tuple[str, ...] = ()


def config_path() -> Path:
    override = os.environ.get("GHERKINBIND_CONFIG_PATH")
    if override:
        return Path(override).expanduser()
    base = os.environ.get("XDG_CONFIG_HOME")
    root = Path(base).expanduser() if base else (Path.home() / ".config")
    return root / "gherkinbind" / "config.toml"


def _read_bind_table(path: Path) -> dict:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ValueError(f"Invalid config file: {path}") from exc
    table = data.get("bind", {})
    if not isinstance(table, dict):
        raise ValueError(f"[bind] in {path} must be a table")
    return table


def _bind_table() -> dict:
    """The `[bind]` table of the config file, read once per process."""
    global _BIND_TABLE
    if _BIND_TABLE is None:
        path = config_path()
        _BIND_TABLE = _read_bind_table(path) if path.exists() else {}
    return _BIND_TABLE


def reset_config_cache() -> None:
    global _BIND_TABLE
    _BIND_TABLE = None


def load_settings() -> BindSettings:
    table = _bind_table()
    strict = table.get("strict_keywords", False)
    if not isinstance(strict, bool):
        raise ValueError(f"bind.strict_keywords must be a boolean, got {type(strict).__name__}")
    # The environment can only tighten the file setting.
    if os.environ.get("GHERKINBIND_STRICT_KEYWORDS") == "1":
        strict = True

    steps = table.get("steps", [])
    if not isinstance(steps, list) or not all(isinstance(s, str) for s in steps):
        raise ValueError("bind.steps must be a list of module names")
    return BindSettings(strict_keywords=strict, steps=tuple(steps))
