"""Shared test fixtures for openapi_analyzer.

Provides reusable fixtures for loading spec fixtures, building registries
and analyzers, isolating the environment, faking HTTP responses, and running
CLI commands. These fixtures are automatically discovered by pytest and
available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Any, Callable
from unittest.mock import patch

import httpx
import pytest
import yaml

from openapi_analyzer.analyzer import SpecAnalyzer
from openapi_analyzer.models import LoadedSpec, SourceKind, SpecOrigin
from openapi_analyzer.output import OutputFormat, OutputManager, reset_output, set_output
from openapi_analyzer.parser import resolve_refs
from openapi_analyzer.registry import SpecRegistry


FIXTURES_DIR = Path(__file__).parent / "fixtures"

SPEC_FIXTURES = ("legacy.json", "petstore.json", "users.yaml")


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    Resetting forces a fresh manager to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Raw spec fixtures (plain dicts loaded from fixture files)
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_raw() -> dict[str, Any]:
    """Load raw petstore OpenAPI 3.0 spec dict."""
    with open(FIXTURES_DIR / "petstore.json") as f:
        return json.load(f)


@pytest.fixture
def users_raw() -> dict[str, Any]:
    """Load raw users OpenAPI 3.1 spec dict (YAML fixture)."""
    with open(FIXTURES_DIR / "users.yaml") as f:
        return yaml.safe_load(f)


@pytest.fixture
def legacy_raw() -> dict[str, Any]:
    """Load raw Swagger 2.0 orders spec dict."""
    with open(FIXTURES_DIR / "legacy.json") as f:
        return json.load(f)


# ---------------------------------------------------------------------------
# Registry and analyzer fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_spec() -> Callable[..., LoadedSpec]:
    """Factory for :class:`LoadedSpec` entries built from inline documents.

    The document is passed through ``resolve_refs`` just like the loader
    does, and tagged with a folder origin unless *kind* says otherwise.
    """

    def _make(
        spec_id: str,
        document: dict[str, Any],
        kind: SourceKind = SourceKind.FOLDER,
    ) -> LoadedSpec:
        return LoadedSpec(
            id=spec_id,
            document=resolve_refs(document),
            origin=SpecOrigin(kind=kind, location=spec_id),
        )

    return _make


@pytest.fixture
def make_analyzer(make_spec: Callable[..., LoadedSpec]) -> Callable[..., SpecAnalyzer]:
    """Factory building a :class:`SpecAnalyzer` over ``(id, document)`` pairs."""

    def _make(*entries: tuple[str, dict[str, Any]]) -> SpecAnalyzer:
        registry = SpecRegistry()
        registry.replace_all(make_spec(spec_id, doc) for spec_id, doc in entries)
        return SpecAnalyzer(registry)

    return _make


@pytest.fixture
def fixture_analyzer(
    make_analyzer: Callable[..., SpecAnalyzer],
    legacy_raw: dict[str, Any],
    petstore_raw: dict[str, Any],
    users_raw: dict[str, Any],
) -> SpecAnalyzer:
    """Analyzer over the three fixture specs, in folder (sorted) order."""
    return make_analyzer(
        ("legacy.json", legacy_raw),
        ("petstore.json", petstore_raw),
        ("users.yaml", users_raw),
    )


# ---------------------------------------------------------------------------
# Filesystem and environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def specs_folder(tmp_path: Path) -> Path:
    """A folder holding copies of the three fixture specs."""
    folder = tmp_path / "specs"
    folder.mkdir()
    for name in SPEC_FIXTURES:
        shutil.copy(FIXTURES_DIR / name, folder / name)
    return folder


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration from the real environment.

    Clears all OPENAPI_* source variables, points XDG_DATA_HOME at
    tmp_path so crash logs never touch real user data, and changes the
    working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in [
        "OPENAPI_DISCOVERY_URL",
        "OPENAPI_SPEC_URLS",
        "OPENAPI_SPECS_FOLDER",
        "OPENAPI_HTTP_TIMEOUT",
        "OPENAPI_ANALYZER_LOG_LEVEL",
        "NO_COLOR",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# HTTP fakes
# ---------------------------------------------------------------------------


def make_response(
    url: str,
    body: Any = None,
    status_code: int = 200,
    content_type: str = "application/json",
) -> httpx.Response:
    """Build an ``httpx.Response`` for *url*; dict/list bodies are JSON-encoded."""
    text = body if isinstance(body, str) else json.dumps(body)
    return httpx.Response(
        status_code=status_code,
        text=text,
        headers={"content-type": content_type},
        request=httpx.Request("GET", url),
    )


@pytest.fixture
def fake_http():
    """Patch ``httpx.get`` in the loader with a URL -> response table.

    Yields a dict; tests fill it with ``url -> httpx.Response`` (or an
    exception instance to raise). Unknown URLs answer 404.
    """
    routes: dict[str, Any] = {}

    def _get(url: str, **kwargs: Any) -> httpx.Response:
        answer = routes.get(url)
        if answer is None:
            return make_response(url, {"detail": "not found"}, status_code=404)
        if isinstance(answer, Exception):
            raise answer
        return answer

    with patch("openapi_analyzer.parser.loader.httpx.get", side_effect=_get):
        yield routes


@pytest.fixture
def http_response() -> Callable[..., httpx.Response]:
    """Expose :func:`make_response` to tests."""
    return make_response


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def json_output() -> OutputManager:
    """Set up JSON output for tests that check JSON-formatted output."""
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
