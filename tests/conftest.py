"""Shared test fixtures for adminlens.

Provides reusable fixtures for loading description fixtures, creating
isolated config environments, managing output state, and running CLI
commands.  These fixtures are automatically discovered by pytest and
available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from adminlens.models import ParsedSpec, ProductProfile
from adminlens.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"

ADMIN_BASE_URL = "http://localhost:3000/api/v1/admin"
FIXED_PARSED_AT = datetime(2024, 1, 1, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and log handlers after every test.

    The OutputManager and the RichHandler it installs cache references to
    sys.stdout/sys.stderr at creation time.  When Typer's CliRunner
    redirects those streams during a test and the test finishes, the
    cached references become stale.  Resetting forces a fresh manager to
    be created on next use.
    """
    yield
    reset_output()
    logger = logging.getLogger("adminlens")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# Raw description fixtures (plain dicts)
# ---------------------------------------------------------------------------


@pytest.fixture
def admin_api_raw() -> dict[str, Any]:
    """Load the raw Acme admin description (users, stats, events, credits)."""
    with open(FIXTURES_DIR / "admin_api.json") as f:
        return json.load(f)


@pytest.fixture
def users_api_raw() -> dict[str, Any]:
    """A minimal description with users, a user by id, and a user's credits."""
    prefix = "/api/v1/admin"
    ok = {"200": {"description": "OK"}}
    return {
        "openapi": "3.1.0",
        "info": {"title": "Users", "version": "1.0.0"},
        "paths": {
            f"{prefix}/users": {
                "get": {"summary": "List users", "responses": ok},
                "post": {"summary": "Create user", "responses": ok},
            },
            f"{prefix}/users/{{userId}}": {
                "get": {"summary": "Get user", "responses": ok},
                "patch": {"summary": "Update user", "responses": ok},
                "delete": {"summary": "Delete user", "responses": ok},
            },
            f"{prefix}/users/{{userId}}/credits": {
                "get": {"summary": "List credits", "responses": ok},
            },
        },
    }


# ---------------------------------------------------------------------------
# Parsed description fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def admin_spec(admin_api_raw: dict[str, Any]) -> ParsedSpec:
    """Parsed Acme admin description with a fixed timestamp."""
    from adminlens.discovery.extractor import parse_openapi_spec

    return parse_openapi_spec(
        admin_api_raw, ADMIN_BASE_URL, "acme", parsed_at=FIXED_PARSED_AT
    )


@pytest.fixture
def users_spec(users_api_raw: dict[str, Any]) -> ParsedSpec:
    """Parsed minimal users description with a fixed timestamp."""
    from adminlens.discovery.extractor import parse_openapi_spec

    return parse_openapi_spec(
        users_api_raw, ADMIN_BASE_URL, "users", parsed_at=FIXED_PARSED_AT
    )


# ---------------------------------------------------------------------------
# Product fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_product(tmp_path: Path) -> ProductProfile:
    """A product profile pointing to a copy of the admin fixture in tmp_path."""
    spec_path = tmp_path / "admin_api.json"
    spec_path.write_text((FIXTURES_DIR / "admin_api.json").read_text())

    return ProductProfile(name="acme", spec=str(spec_path), base_url=ADMIN_BASE_URL)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME to a subdirectory of tmp_path so that tests never
    touch real user config.  Clears all ADMINLENS_* environment variables
    and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))

    for var in [
        "ADMINLENS_PRODUCT",
        "ADMINLENS_BASE_URL",
        "ADMINLENS_SAMPLE_SIZE",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet PLAIN-format output manager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format output manager for the test."""
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
