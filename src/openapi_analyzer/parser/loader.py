"""Read OpenAPI documents from a URL or a local file.

This module handles the I/O for a single document: fetching it, detecting
JSON or YAML, and checking that the result looks like an OpenAPI/Swagger
spec. Walking whole sources (registry, URL list, folder) is the job of
:mod:`openapi_analyzer.sources`.

The public functions are:

* :func:`load_document` -- Load and parse any JSON/YAML document (used for
  registry discovery documents, which may be lists).
* :func:`load_spec` -- Load a document that must be a mapping.
* :func:`validate_spec_document` -- Check the ``openapi``/``swagger``
  discriminator and return the declared version.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import httpx
import yaml

from openapi_analyzer.exceptions import SourceFetchError, SpecParseError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def load_document(source: str, timeout: float = DEFAULT_TIMEOUT) -> Any:
    """Load a JSON or YAML document from a URL or file path.

    Args:
        source: An ``http(s)://`` URL or a local file path.
        timeout: HTTP timeout in seconds (URLs only).

    Returns:
        The parsed document (mapping, list, or scalar).

    Raises:
        SourceFetchError: If a URL cannot be fetched.
        SpecParseError: If a file is missing or the content cannot be parsed.
    """
    if source.startswith(("http://", "https://")):
        return _load_from_url(source, timeout)
    return _load_from_file(source)


def load_spec(source: str, timeout: float = DEFAULT_TIMEOUT) -> dict[str, Any]:
    """Load a spec document, which must be a JSON/YAML object.

    Raises:
        SourceFetchError: If a URL cannot be fetched.
        SpecParseError: If the content cannot be parsed or is not an object.
    """
    document = load_document(source, timeout)
    if not isinstance(document, dict):
        kind = type(document).__name__ if document is not None else "empty document"
        raise SpecParseError(f"Spec must be a JSON/YAML object (got {kind})")
    return document


def _load_from_url(url: str, timeout: float) -> Any:
    """Fetch a document from URL. Supports JSON and YAML responses."""
    logger.debug("Fetching %s", url)
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SourceFetchError(
            f"HTTP {exc.response.status_code} fetching {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SourceFetchError(f"Failed to fetch {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> Any:
    """Load a document from a local file.

    The ``.json``/``.yaml``/``.yml`` extension is used as a format hint;
    other extensions fall back to content-based detection.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Spec file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecParseError(f"Failed to read spec file {path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"Spec file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> Any:
    """Parse content as JSON or YAML.

    JSON is tried first unless the hint says YAML; a ``json`` hint disables
    the YAML fallback.

    Raises:
        SpecParseError: If the content cannot be parsed as either format.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            return json.loads(content)
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
            json_error = exc

    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as exc:
        msg = "Failed to parse document as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise SpecParseError(msg) from exc


def validate_spec_document(document: dict[str, Any]) -> str:
    """Check that *document* is an OpenAPI or Swagger spec.

    Both OpenAPI 3.x (``openapi`` field) and Swagger 2.0 (``swagger`` field)
    are accepted; no further schema validation is performed.

    Returns:
        The declared version string, e.g. ``"3.0.3"`` or ``"2.0"``.

    Raises:
        SpecParseError: If neither discriminator field is present.
    """
    version = document.get("openapi") or document.get("swagger")
    if not version:
        raise SpecParseError(
            "Not an OpenAPI/Swagger specification "
            "(missing 'openapi' or 'swagger' field)"
        )
    return str(version)
