"""Tests for the openapi-analyzer CLI (openapi_analyzer.app)."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from openapi_analyzer import __version__
from openapi_analyzer.app import app, main
from openapi_analyzer.exceptions import SpecParseError


@pytest.fixture(autouse=True)
def _restore_root_logger(isolated_env: Path):
    """Commands install a Rich handler bound to the runner's stderr; undo it."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _invoke(cli_runner, *args: str):
    return cli_runner.invoke(app, list(args))


class TestRootOptions:
    """Global flags and configuration errors."""

    def test_version(self, cli_runner) -> None:
        result = _invoke(cli_runner, "--version")
        assert result.exit_code == 0
        assert f"openapi-analyzer {__version__}" in result.output

    def test_no_args_shows_help(self, cli_runner) -> None:
        result = _invoke(cli_runner)
        assert "serve" in result.output
        assert "compare" in result.output

    def test_missing_sources_is_config_error(self, cli_runner) -> None:
        result = _invoke(cli_runner, "--plain", "--no-color", "list")
        assert result.exit_code == 3
        assert "No spec source configured" in result.output

    def test_missing_folder_is_config_error(self, cli_runner, tmp_path: Path) -> None:
        result = _invoke(cli_runner, "--no-color", "--folder", str(tmp_path / "nope"), "list")
        assert result.exit_code == 3
        assert "does not exist" in result.output

    def test_bad_url_is_config_error(self, cli_runner) -> None:
        result = _invoke(cli_runner, "--no-color", "--url", "example.com/openapi.json", "list")
        assert result.exit_code == 3

    def test_folder_from_environment(
        self, cli_runner, specs_folder: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("OPENAPI_SPECS_FOLDER", str(specs_folder))
        result = _invoke(cli_runner, "--json", "-q", "list")
        assert result.exit_code == 0, result.output
        assert len(json.loads(result.stdout)) == 3


class TestQueryCommands:
    """Commands that load once and print one query result."""

    def test_list_json(self, cli_runner, specs_folder: Path) -> None:
        result = _invoke(cli_runner, "--json", "-q", "--folder", str(specs_folder), "list")
        assert result.exit_code == 0, result.output
        apis = json.loads(result.stdout)
        assert [a["id"] for a in apis] == ["legacy.json", "petstore.json", "users.yaml"]
        assert apis[2]["endpointCount"] == 3

    def test_list_plain(self, cli_runner, specs_folder: Path) -> None:
        result = _invoke(cli_runner, "--plain", "-q", "--folder", str(specs_folder), "list")
        assert result.exit_code == 0, result.output
        lines = result.stdout.strip().split("\n")
        assert lines[0] == "ID\tTitle\tVersion\tPaths"
        assert "petstore.json\tPetstore API\t1.0.0\t2" in lines

    def test_show(self, cli_runner, specs_folder: Path) -> None:
        result = _invoke(cli_runner, "--json", "-q", "--folder", str(specs_folder), "show", "users.yaml")
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["info"]["title"] == "Users API"

    def test_show_not_found(self, cli_runner, specs_folder: Path) -> None:
        result = _invoke(cli_runner, "--no-color", "-q", "--folder", str(specs_folder), "show", "missing.json")
        assert result.exit_code == 4
        assert "API spec not found: missing.json" in result.output

    def test_search(self, cli_runner, specs_folder: Path) -> None:
        result = _invoke(cli_runner, "--json", "-q", "--folder", str(specs_folder), "search", "PETS")
        assert result.exit_code == 0, result.output
        hits = json.loads(result.stdout)
        assert len(hits) == 5
        assert hits[0]["method"] == "GET"

    def test_search_no_match(self, cli_runner, specs_folder: Path) -> None:
        result = _invoke(cli_runner, "--plain", "--folder", str(specs_folder), "search", "zebra")
        assert result.exit_code == 0
        assert "No endpoints match 'zebra'" in result.output

    def test_stats(self, cli_runner, specs_folder: Path) -> None:
        result = _invoke(cli_runner, "--json", "-q", "--folder", str(specs_folder), "stats")
        assert result.exit_code == 0, result.output
        stats = json.loads(result.stdout)
        assert stats["totalEndpoints"] == sum(stats["methodCounts"].values()) == 9

    def test_inconsistencies(self, cli_runner, specs_folder: Path) -> None:
        result = _invoke(cli_runner, "--json", "-q", "--folder", str(specs_folder), "inconsistencies")
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)[0]["type"] == "authentication"

    def test_inconsistencies_none(self, cli_runner, tmp_path: Path) -> None:
        (tmp_path / "one.json").write_text('{"openapi": "3.0.0", "paths": {"/a": {}}}', encoding="utf-8")
        result = _invoke(cli_runner, "--plain", "--folder", str(tmp_path), "inconsistencies")
        assert result.exit_code == 0
        assert "No inconsistencies found." in result.output

    def test_compare(self, cli_runner, specs_folder: Path) -> None:
        result = _invoke(cli_runner, "--json", "-q", "--folder", str(specs_folder), "compare", "Pet", "User")
        assert result.exit_code == 0, result.output
        found = json.loads(result.stdout)
        assert [(c["id"], c["schemaName"]) for c in found] == [
            ("petstore.json", "Pet"),
            ("users.yaml", "Pet"),
            ("users.yaml", "User"),
        ]

    def test_compare_unknown(self, cli_runner, specs_folder: Path) -> None:
        result = _invoke(cli_runner, "--plain", "--folder", str(specs_folder), "compare", "Nope")
        assert result.exit_code == 0
        assert "No API defines a schema named Nope" in result.output

    def test_sources(self, cli_runner, specs_folder: Path) -> None:
        (specs_folder / "broken.json").write_text("{", encoding="utf-8")
        result = _invoke(cli_runner, "--json", "-q", "--folder", str(specs_folder), "sources")
        assert result.exit_code == 0, result.output
        report = json.loads(result.stdout)[0]
        assert report["kind"] == "folder"
        assert report["loaded"] == ["legacy.json", "petstore.json", "users.yaml"]
        assert report["skipped"][0]["item"] == "broken.json"


class TestServeCommand:
    """The MCP server entry."""

    def test_serve_runs_server_with_resolved_config(self, cli_runner, specs_folder: Path) -> None:
        with patch("openapi_analyzer.server.run_server") as mock_run:
            result = _invoke(cli_runner, "--folder", str(specs_folder), "--timeout", "7", "serve")
        assert result.exit_code == 0, result.output
        config = mock_run.call_args.args[0]
        assert config.specs_folder == specs_folder
        assert config.http_timeout == 7.0

    def test_serve_refuses_without_sources(self, cli_runner) -> None:
        with patch("openapi_analyzer.server.run_server") as mock_run:
            result = _invoke(cli_runner, "serve")
        assert result.exit_code == 3
        mock_run.assert_not_called()


class TestMain:
    """Exit codes and crash logs from the console-script entry point."""

    def test_analyzer_error_exit_code(self) -> None:
        with patch("openapi_analyzer.app.app", side_effect=SpecParseError("bad spec")):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 7

    def test_keyboard_interrupt(self) -> None:
        with patch("openapi_analyzer.app.app", side_effect=KeyboardInterrupt):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 130

    def test_unexpected_error_writes_crash_log(
        self, isolated_env: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("openapi_analyzer.config._is_xdg_platform", lambda: True)
        with patch("openapi_analyzer.app.app", side_effect=RuntimeError("kaboom")):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 1

        logs = list((isolated_env / "data" / "openapi-analyzer" / "logs").glob("crash-*.log"))
        assert len(logs) == 1
        assert "RuntimeError: kaboom" in logs[0].read_text()
