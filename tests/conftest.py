"""Shared test fixtures for specmock.

Provides reusable fixtures for loading spec fixtures, creating isolated
config environments, managing output state, and running CLI commands.
These fixtures are automatically discovered by pytest and available to
all test modules without explicit imports.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest
import yaml

from specmock.models import GeneratorSettings
from specmock.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    The same goes for the console bound to the ``specmock`` log handler,
    so the handler is removed as well.
    """
    yield
    reset_output()
    logger = logging.getLogger("specmock")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# Raw spec fixtures (plain dicts loaded from fixture files)
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_path() -> Path:
    return FIXTURES_DIR / "petstore.yaml"


@pytest.fixture
def petstore_raw(petstore_path: Path) -> dict[str, Any]:
    """Load raw petstore spec dict."""
    with open(petstore_path, encoding="utf-8") as f:
        return yaml.safe_load(f)


@pytest.fixture
def inventory_raw() -> dict[str, Any]:
    """Load raw inventory spec dict."""
    with open(FIXTURES_DIR / "inventory.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def seeded_settings() -> GeneratorSettings:
    """Generator settings with a fixed seed for reproducible values."""
    return GeneratorSettings(seed=1234)


def make_ref_chain(length: int) -> dict[str, Any]:
    """Build a spec whose 200 response schema is a chain of *length* ``$ref`` hops.

    The response schema points at ``S0``, ``S0`` at ``S1`` and so on; the
    last ``S`` node points at a plain string schema ``Leaf``.  Following
    the response schema to ``Leaf`` takes exactly *length* hops.
    """
    schemas: dict[str, Any] = {"Leaf": {"type": "string"}}
    names = [f"S{i}" for i in range(length - 1)]
    for i, name in enumerate(names):
        target = names[i + 1] if i + 1 < len(names) else "Leaf"
        schemas[name] = {"$ref": f"#/components/schemas/{target}"}
    start = names[0] if names else "Leaf"
    return {
        "openapi": "3.0.3",
        "info": {"title": "Chain", "version": "1"},
        "paths": {
            "/chain": {
                "get": {
                    "responses": {
                        "200": {
                            "description": "ok",
                            "content": {
                                "application/json": {
                                    "schema": {"$ref": f"#/components/schemas/{start}"}
                                }
                            },
                        }
                    }
                }
            }
        },
        "components": {"schemas": schemas},
    }


@pytest.fixture
def ref_chain():
    """Factory fixture returning :func:`make_ref_chain`."""
    return make_ref_chain


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path
    so that tests never touch real user config. Clears all SPECMOCK_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("specmock.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in ["SPECMOCK_SEED", "SPECMOCK_LOCALE"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, PLAIN-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
