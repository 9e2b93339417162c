"""Shared test fixtures for spectui.

Provides reusable fixtures for loading document fixtures, building sessions
over them, creating isolated config environments, managing output state,
and running CLI commands.  These fixtures are automatically discovered by
pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from spectui.models import CallOutcome, Document
from spectui.output import OutputFormat, OutputManager, reset_output, set_output
from spectui.parser.resolver import Resolver
from spectui.parser.store import NodeStore, load_document


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Raw document fixtures (plain dicts loaded from JSON files)
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_raw() -> dict[str, Any]:
    """Load the raw OpenAPI 3.0 petstore document."""
    with open(FIXTURES_DIR / "petstore.json") as f:
        return json.load(f)


@pytest.fixture
def tree_raw() -> dict[str, Any]:
    """Load the raw OpenAPI 3.1 document with cyclic and broken references."""
    with open(FIXTURES_DIR / "tree.json") as f:
        return json.load(f)


# ---------------------------------------------------------------------------
# Loaded document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore(petstore_raw: dict[str, Any]) -> tuple[Document, NodeStore]:
    """Loaded petstore document and its node store."""
    return load_document(petstore_raw, "3.0.3", source=str(FIXTURES_DIR / "petstore.json"))


@pytest.fixture
def tree(tree_raw: dict[str, Any]) -> tuple[Document, NodeStore]:
    """Loaded tree document and its node store."""
    return load_document(tree_raw, "3.1.0", source=str(FIXTURES_DIR / "tree.json"))


@pytest.fixture
def petstore_resolver(petstore: tuple[Document, NodeStore]) -> Resolver:
    return Resolver(petstore[1])


@pytest.fixture
def tree_resolver(tree: tuple[Document, NodeStore]) -> Resolver:
    return Resolver(tree[1])


# ---------------------------------------------------------------------------
# Executor fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_executor() -> MagicMock:
    """Stand-in for an entered Executor that answers every call with 200 JSON.

    Tests inspect ``fake_executor.execute.call_args`` to see the request
    handed over, and replace ``return_value`` to simulate other outcomes.
    """
    executor = MagicMock()
    executor.execute.return_value = CallOutcome(
        status_code=200,
        reason="OK",
        headers={"content-type": "application/json"},
        body=b'{"id": 1, "name": "Rex"}',
        elapsed=0.012,
    )
    return executor


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME, XDG_CACHE_HOME, and XDG_DATA_HOME to
    subdirectories of tmp_path so that tests never touch real user
    config. Clears all SPECTUI_* environment variables and changes
    the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    config_dir = tmp_path / "config"
    cache_dir = tmp_path / "cache"
    data_dir = tmp_path / "data"

    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_dir))
    monkeypatch.setenv("XDG_CACHE_HOME", str(cache_dir))
    monkeypatch.setenv("XDG_DATA_HOME", str(data_dir))
    monkeypatch.setattr("spectui.config._is_xdg_platform", lambda: True)

    for var in ["SPECTUI_BASE_URL", "SPECTUI_TIMEOUT"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.JSON)
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
