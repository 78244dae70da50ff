"""End-to-end tests for the adminlens CLI.

Runs the Typer application through ``CliRunner`` against the admin
description fixture, with configuration isolated to a temp directory.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from adminlens.app import app, main
from adminlens.exceptions import SpecParseError


FIXTURES_DIR = Path(__file__).parent / "fixtures"
SPEC_PATH = str(FIXTURES_DIR / "admin_api.json")
BASE_URL = "http://localhost:3000/api/v1/admin"


# ---------------------------------------------------------------------------
# Discovery commands
# ---------------------------------------------------------------------------


class TestDiscoverCommand:
    def test_json_tree(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(
            app, ["--json", "--quiet", "discover", SPEC_PATH, "--base-url", BASE_URL]
        )
        assert result.exit_code == 0, result.output
        roots = json.loads(result.stdout)
        assert [r["key"] for r in roots] == ["credits", "events", "health", "stats", "users"]
        users = roots[-1]
        assert users["children"][0]["key"] == "users.credits"
        assert users["children"][0]["requires_parent_id"] is True

    def test_plain_tree(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(
            app, ["--plain", "--quiet", "discover", SPEC_PATH, "-b", BASE_URL]
        )
        assert result.exit_code == 0, result.output
        assert "  users.credits *\tsub-list" in result.stdout.splitlines()

    def test_missing_source(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["discover", "--base-url", BASE_URL])
        assert result.exit_code == 2
        assert "No API description" in result.output

    def test_missing_base_url(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["discover", SPEC_PATH])
        assert result.exit_code == 2
        assert "base address" in result.output

    def test_missing_file(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(
            app, ["discover", str(isolated_config / "nope.json"), "--base-url", BASE_URL]
        )
        assert result.exit_code == 7
        assert "File not found" in result.output

    def test_swagger_rejected(self, cli_runner, isolated_config: Path) -> None:
        spec = isolated_config / "swagger.json"
        spec.write_text(json.dumps({"swagger": "2.0", "paths": {}}))
        result = cli_runner.invoke(app, ["discover", str(spec), "--base-url", BASE_URL])
        assert result.exit_code == 7
        assert "Swagger" in result.output

    def test_warns_when_prefix_matches_nothing(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(
            app,
            ["--no-color", "discover", SPEC_PATH, "--base-url", "http://localhost/api/v9/none"],
        )
        assert result.exit_code == 0, result.output
        assert "No operations found" in result.output


class TestOperationsCommand:
    def test_plain_table(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(
            app, ["--plain", "--quiet", "operations", SPEC_PATH, "--base-url", BASE_URL]
        )
        assert result.exit_code == 0, result.output
        lines = result.stdout.splitlines()
        assert lines[0] == "Method\tPath\tResource\tType\tSummary"
        assert "GET\t/users\tusers\tlist\tList users" in lines
        assert "GET\t/users/{userId}/credits\tusers.credits\tsub-list\tList a user's credit grants" in lines
        assert "PATCH\t/credits/config\tcredits.config\tupdate\tUpdate credit configuration" in lines

    def test_json_table(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(
            app, ["--json", "--quiet", "operations", SPEC_PATH, "--base-url", BASE_URL]
        )
        assert result.exit_code == 0, result.output
        rows = json.loads(result.stdout)
        assert len(rows) == 12
        assert rows[0] == {
            "Method": "GET",
            "Path": "/users",
            "Resource": "users",
            "Type": "list",
            "Summary": "List users",
        }


class TestEndpointsCommand:
    def test_ranked(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(
            app, ["--json", "--quiet", "endpoints", SPEC_PATH, "--base-url", BASE_URL]
        )
        assert result.exit_code == 0, result.output
        rows = json.loads(result.stdout)
        assert [(r["Priority"], r["Resource"]) for r in rows] == [
            ("1", "stats"),
            ("2", "stats.trends"),
            ("3", "events"),
            ("5", "credits.config.tiers"),
            ("10", "users"),
        ]
        assert rows[-1]["Kind"] == "collection"


# ---------------------------------------------------------------------------
# classify
# ---------------------------------------------------------------------------


class TestClassifyCommand:
    def test_event_log_file(self, cli_runner, isolated_config: Path) -> None:
        payload = isolated_config / "events.json"
        payload.write_text(json.dumps({
            "items": [
                {"id": "e1", "createdAt": "2024-01-01T00:00:00Z", "message": "Signed up"},
                {"id": "e2", "createdAt": "2024-01-02T00:00:00Z", "message": "Upgraded"},
            ]
        }))
        result = cli_runner.invoke(
            app, ["--json", "classify", str(payload), "--summary", "Recent activity"]
        )
        assert result.exit_code == 0, result.output
        verdict = json.loads(result.stdout)
        assert verdict["shape"] == "event-log"
        assert verdict["title"] == "Recent activity"
        assert verdict["item_count"] == 2
        assert verdict["fields"]["date_field"] == "createdAt"

    def test_stdin(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "classify", "-"], input="42")
        assert result.exit_code == 0, result.output
        verdict = json.loads(result.stdout)
        assert verdict["shape"] == "scalar"
        assert verdict["item_count"] is None

    def test_with_schema(self, cli_runner, isolated_config: Path) -> None:
        payload = isolated_config / "series.json"
        payload.write_text(json.dumps([{"at": "2024-01-01", "n": 1}, {"at": "2024-01-02", "n": 2}]))
        schema = isolated_config / "schema.json"
        schema.write_text(json.dumps({"items": {"properties": {"at": {"format": "date-time"}}}}))
        result = cli_runner.invoke(
            app, ["--json", "classify", str(payload), "--schema", str(schema)]
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["shape"] == "time-series"

    def test_invalid_payload(self, cli_runner, isolated_config: Path) -> None:
        payload = isolated_config / "bad.json"
        payload.write_text("{nope")
        result = cli_runner.invoke(app, ["classify", str(payload)])
        assert result.exit_code == 7

    def test_sample_size_env_error(
        self, cli_runner, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ADMINLENS_SAMPLE_SIZE", "0")
        result = cli_runner.invoke(app, ["classify", "-"], input="[]")
        assert result.exit_code == 1
        assert "ADMINLENS_SAMPLE_SIZE" in result.output


# ---------------------------------------------------------------------------
# products
# ---------------------------------------------------------------------------


class TestProductsCommands:
    def _add(self, cli_runner, *extra: str):
        return cli_runner.invoke(
            app,
            ["products", "add", "acme", "--spec", SPEC_PATH, "--base-url", BASE_URL, *extra],
        )

    def test_add_and_list(self, cli_runner, isolated_config: Path) -> None:
        result = self._add(cli_runner, "--default")
        assert result.exit_code == 0, result.output

        result = cli_runner.invoke(app, ["--json", "products", "list"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == [
            {"Product": "acme", "Spec": SPEC_PATH, "Base URL": BASE_URL, "Default": "yes"}
        ]

    def test_discover_uses_default_product(self, cli_runner, isolated_config: Path) -> None:
        assert self._add(cli_runner, "--default").exit_code == 0
        result = cli_runner.invoke(app, ["--json", "--quiet", "discover"])
        assert result.exit_code == 0, result.output
        assert [r["key"] for r in json.loads(result.stdout)][-1] == "users"

    def test_discover_with_named_product(self, cli_runner, isolated_config: Path) -> None:
        assert self._add(cli_runner).exit_code == 0
        result = cli_runner.invoke(
            app, ["--json", "--quiet", "operations", "--product", "acme"]
        )
        assert result.exit_code == 0, result.output
        assert len(json.loads(result.stdout)) == 12

    def test_unknown_product(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["discover", "--product", "ghost"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_add_rejects_base_url_without_path(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(
            app,
            ["products", "add", "acme", "--spec", SPEC_PATH, "--base-url", "http://localhost"],
        )
        assert result.exit_code == 2

    def test_remove_clears_default(self, cli_runner, isolated_config: Path) -> None:
        from adminlens.config import load_global_config

        assert self._add(cli_runner, "--default").exit_code == 0
        result = cli_runner.invoke(app, ["products", "remove", "acme"])
        assert result.exit_code == 0, result.output
        assert load_global_config().default_product is None

    def test_remove_missing(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["products", "remove", "ghost"])
        assert result.exit_code == 1

    def test_list_empty(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "products", "list"])
        assert result.exit_code == 0
        assert "No products saved" in result.output


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


class TestEntryPoint:
    def test_version(self, cli_runner) -> None:
        from adminlens import __version__

        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_main_maps_errors_to_exit_codes(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def boom() -> None:
            raise SpecParseError("bad document")

        monkeypatch.setattr("adminlens.app._setup_signal_handlers", lambda: None)
        monkeypatch.setattr("adminlens.app.app", boom)
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 7

    def test_main_unexpected_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def boom() -> None:
            raise RuntimeError("kaboom")

        monkeypatch.setattr("adminlens.app._setup_signal_handlers", lambda: None)
        monkeypatch.setattr("adminlens.app.app", boom)
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1
