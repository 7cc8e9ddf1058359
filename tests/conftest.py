# pytest configuration hooks.

from __future__ import annotations

import os
from pathlib import Path

import pytest

from gherkinbind.core import config

pytest_plugins = ["pytester", "tests.bdd.steps"]


def pytest_configure() -> None:
    if "GHERKINBIND_CONFIG_PATH" not in os.environ:
        path = Path(__file__).resolve().parent / "gherkinbind-test-config.toml"
        os.environ["GHERKINBIND_CONFIG_PATH"] = str(path)


@pytest.fixture(autouse=True)
def _fresh_config_cache():
    config.reset_config_cache()
    yield
    config.reset_config_cache()
