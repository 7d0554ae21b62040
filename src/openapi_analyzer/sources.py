"""Spec loader -- turn the configured sources into a registry snapshot.

:class:`SpecLoader` walks the sources of an
:class:`~openapi_analyzer.models.AnalyzerConfig` in a fixed priority order:

1. the registry discovery document (``discovery_url``),
2. the explicit URL list (``spec_urls``),
3. the local folder (``specs_folder``).

Sources and the documents inside them are loaded one at a time. A failure
is logged and recorded in that source's
:class:`~openapi_analyzer.models.LoadSourceReport`, and loading continues
with the next document or source; nothing is retried.

Every accepted document must carry an ``openapi`` or ``swagger`` field and
gets its internal ``$ref`` pointers inlined. Ids must be unique within one
load: a later document with an id that is already taken is skipped, so the
earlier source in priority order wins.

Registry discovery documents are JSON or YAML, either a list of entries or a
mapping with an ``apis`` list::

    {"apis": [
        {"name": "petstore", "url": "https://example.com/petstore.json"},
        {"name": "billing", "specUrl": "specs/billing.yaml"},
        "https://example.com/inventory/openapi.json"
    ]}

Relative URLs are resolved against the discovery URL.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urljoin, urlsplit

from openapi_analyzer.exceptions import SpecParseError
from openapi_analyzer.models import (
    AnalyzerConfig,
    LoadedSpec,
    LoadResult,
    LoadSourceReport,
    SkippedItem,
    SourceKind,
    SpecOrigin,
)
from openapi_analyzer.parser import (
    load_document,
    load_spec,
    resolve_refs,
    validate_spec_document,
)

logger = logging.getLogger(__name__)

SPEC_FILE_SUFFIXES = frozenset({".json", ".yaml", ".yml"})
"""File extensions picked up from the specs folder."""

_ENTRY_URL_KEYS = ("url", "specUrl", "spec_url")


def url_spec_id(url: str) -> str:
    """Derive a spec id from a URL: host (with port) plus path.

    ``https://api.example.com/v1/openapi.json`` becomes
    ``api.example.com/v1/openapi.json``.
    """
    parts = urlsplit(url)
    return f"{parts.netloc}{parts.path}".rstrip("/") or url


class SpecLoader:
    """Loads every configured source into a :class:`~openapi_analyzer.models.LoadResult`.

    The loader holds no state between calls; each :meth:`load` is a complete,
    independent load cycle.

    Args:
        config: Validated configuration naming the sources to read.

    Example::

        loader = SpecLoader(validate_config(resolve_config()))
        result = loader.load()
        registry.replace_all(result.specs)
    """

    def __init__(self, config: AnalyzerConfig) -> None:
        self._config = config

    @property
    def config(self) -> AnalyzerConfig:
        return self._config

    def load(self) -> LoadResult:
        """Run one full load cycle over all configured sources."""
        cycle = _LoadCycle(self._config.http_timeout)

        if self._config.discovery_url:
            cycle.load_registry(self._config.discovery_url)
        for url in self._config.spec_urls:
            cycle.load_url(url)
        if self._config.specs_folder is not None:
            cycle.load_folder(self._config.specs_folder)

        if cycle.specs:
            logger.info(
                "Successfully loaded %d OpenAPI specs from %d source(s)",
                len(cycle.specs),
                len(cycle.reports),
            )
        else:
            logger.warning("No valid OpenAPI specifications were loaded")

        return LoadResult(specs=cycle.specs, sources=cycle.reports)


class _LoadCycle:
    """Accumulates specs and reports for a single :meth:`SpecLoader.load` call."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        self.specs: list[LoadedSpec] = []
        self.reports: list[LoadSourceReport] = []
        self._ids: set[str] = set()

    # ------------------------------------------------------------------ #
    # Sources
    # ------------------------------------------------------------------ #

    def load_registry(self, discovery_url: str) -> None:
        report = self._new_report(SourceKind.REGISTRY, discovery_url)
        logger.info("Discovering specs from registry %s", discovery_url)

        try:
            entries = _registry_entries(load_document(discovery_url, self.timeout))
        except Exception as exc:
            logger.warning("Skipping registry %s: %s", discovery_url, exc)
            report.error = str(exc)
            return

        for index, entry in enumerate(entries):
            resolved = _registry_entry(entry, discovery_url)
            if resolved is None:
                label = f"entry #{index}"
                logger.warning("Skipping registry %s: no URL given", label)
                report.skipped.append(SkippedItem(item=label, reason="Entry has no URL"))
                continue
            spec_id, url = resolved
            self._fetch(url, spec_id, SpecOrigin(kind=SourceKind.REGISTRY, location=url), report)

    def load_url(self, url: str) -> None:
        report = self._new_report(SourceKind.URL, url)
        self._fetch(url, url_spec_id(url), SpecOrigin(kind=SourceKind.URL, location=url), report)

    def load_folder(self, folder: Path) -> None:
        report = self._new_report(SourceKind.FOLDER, str(folder))

        try:
            files = sorted(
                path
                for path in folder.iterdir()
                if path.is_file()
                and not path.name.startswith(".")
                and path.suffix.lower() in SPEC_FILE_SUFFIXES
            )
        except OSError as exc:
            logger.error("Error reading specs folder %s: %s", folder, exc)
            report.error = f"Error reading specs folder: {exc}"
            return

        if not files:
            logger.warning("No .json, .yaml or .yml files found in %s", folder)
            return
        logger.info("Found %d spec files in %s", len(files), folder)

        for path in files:
            origin = SpecOrigin(kind=SourceKind.FOLDER, location=str(path))
            self._fetch(str(path), path.name, origin, report)

    # ------------------------------------------------------------------ #
    # Documents
    # ------------------------------------------------------------------ #

    def _new_report(self, kind: SourceKind, location: Optional[str]) -> LoadSourceReport:
        report = LoadSourceReport(kind=kind, location=location)
        self.reports.append(report)
        return report

    def _fetch(
        self,
        source: str,
        spec_id: str,
        origin: SpecOrigin,
        report: LoadSourceReport,
    ) -> None:
        """Load, check, and resolve one document; record the outcome on *report*."""
        if spec_id in self._ids:
            reason = f"Duplicate id '{spec_id}' (already loaded from an earlier source)"
            logger.warning("Skipping %s: %s", source, reason)
            report.skipped.append(SkippedItem(item=spec_id, reason=reason))
            return

        try:
            raw = load_spec(source, self.timeout)
            validate_spec_document(raw)
            document = resolve_refs(raw)
        except Exception as exc:
            logger.warning("Skipping %s: %s", spec_id, exc)
            report.skipped.append(SkippedItem(item=spec_id, reason=str(exc)))
            return

        spec = LoadedSpec(id=spec_id, document=document, origin=origin)
        if not isinstance(raw.get("info"), dict):
            logger.warning("%s missing 'info' section, but will be loaded", spec_id)
        if not spec.paths:
            logger.warning("%s has no paths defined", spec_id)

        self._ids.add(spec_id)
        self.specs.append(spec)
        report.loaded.append(spec_id)
        logger.info("Loaded %s (%s v%s)", spec_id, spec.title, spec.version)


def _registry_entries(document: Any) -> list[Any]:
    """Return the entry list of a registry discovery document."""
    entries = document.get("apis") if isinstance(document, dict) else document
    if not isinstance(entries, list):
        raise SpecParseError(
            "Registry document must be a list of entries or a mapping with an 'apis' list"
        )
    return entries


def _registry_entry(entry: Any, discovery_url: str) -> Optional[tuple[str, str]]:
    """Return ``(spec_id, absolute_url)`` for a registry entry, or ``None``."""
    if isinstance(entry, str):
        if not entry.strip():
            return None
        url = urljoin(discovery_url, entry.strip())
        return url_spec_id(url), url
    if not isinstance(entry, dict):
        return None

    raw_url = next((entry[key] for key in _ENTRY_URL_KEYS if entry.get(key)), None)
    if not isinstance(raw_url, str):
        return None

    url = urljoin(discovery_url, raw_url)
    name = entry.get("name") or entry.get("id")
    return (str(name) if name else url_spec_id(url)), url
