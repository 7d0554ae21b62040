"""Canonical Pydantic models shared across all openapi_analyzer modules.

This is the single source of truth for data shapes in the project. The
models fall into three groups:

**Configuration** -- resolved once at startup and handed to the loader:
    :class:`AnalyzerConfig`.

**Registry entries and provenance** -- produced by the spec loader:
    :class:`SourceKind`, :class:`SpecOrigin`, :class:`LoadedSpec`,
    :class:`SkippedItem`, :class:`LoadSourceReport`, and :class:`LoadResult`.

**Query results** -- produced by :class:`~openapi_analyzer.analyzer.SpecAnalyzer`
and serialised to JSON by the tool dispatcher:
    :class:`ApiSummary`, :class:`SearchResult`, :class:`ApiStatsEntry`,
    :class:`ApiStats`, :class:`Inconsistency`, and :class:`SchemaComparison`.

Query result fields use snake_case attribute names with camelCase aliases that
match the wire format; serialise them with ``model_dump(by_alias=True)``.
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

NO_TITLE = "No title"
NO_VERSION = "No version"
NO_DESCRIPTION = "No description"
UNKNOWN_VERSION = "unknown"


def as_text(value: Any) -> Optional[str]:
    """Coerce a scalar document value to ``str``, keeping ``None``."""
    return None if value is None else str(value)


# --- Configuration ---


class AnalyzerConfig(BaseModel):
    """Effective configuration, built by :func:`~openapi_analyzer.config.resolve_config`.

    Sources are loaded in a fixed priority order: the registry discovery
    document first, then the explicit URL list, then the local folder. At
    least one of them must be set; see
    :func:`~openapi_analyzer.config.validate_config`.
    """

    model_config = ConfigDict(frozen=True)

    discovery_url: Optional[str] = Field(
        default=None, description="URL of a registry document listing spec URLs"
    )
    spec_urls: list[str] = Field(
        default_factory=list, description="Individual spec URLs to fetch"
    )
    specs_folder: Optional[Path] = Field(
        default=None, description="Local folder of .json/.yaml/.yml spec files"
    )
    http_timeout: float = Field(default=30.0, description="HTTP timeout in seconds")
    log_level: str = Field(default="INFO", description="Root log level")

    @property
    def has_sources(self) -> bool:
        """Whether any spec source is configured."""
        return bool(self.discovery_url or self.spec_urls or self.specs_folder)


# --- Registry entries ---


class HTTPMethod(str, enum.Enum):
    """HTTP verbs counted as operations by the query engine.

    Path-item keys outside this set (``parameters``, ``$ref``, ``servers``,
    ``x-*`` extensions, ``trace``) are not endpoints for statistics or search.
    """

    GET = "get"
    POST = "post"
    PUT = "put"
    DELETE = "delete"
    PATCH = "patch"
    OPTIONS = "options"
    HEAD = "head"


class SourceKind(str, enum.Enum):
    """Where a spec came from."""

    REGISTRY = "registry"
    URL = "url"
    FOLDER = "folder"


class SpecOrigin(BaseModel):
    """Provenance tag carried by every :class:`LoadedSpec`.

    ``location`` is the URL a document was fetched from, or the file path for
    folder sources.
    """

    kind: SourceKind
    location: Optional[str] = None


class LoadedSpec(BaseModel):
    """One ingested OpenAPI/Swagger document.

    ``document`` is the full parsed tree with internal ``$ref`` pointers
    resolved. The engine only reads it through the accessors below, which
    never raise on missing or malformed sections.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    document: dict[str, Any]
    origin: SpecOrigin

    @property
    def info(self) -> dict[str, Any]:
        info = self.document.get("info")
        return info if isinstance(info, dict) else {}

    @property
    def title(self) -> str:
        return as_text(self.info.get("title")) or NO_TITLE

    @property
    def version(self) -> str:
        return as_text(self.info.get("version")) or NO_VERSION

    @property
    def description(self) -> str:
        return as_text(self.info.get("description")) or NO_DESCRIPTION

    @property
    def paths(self) -> dict[str, Any]:
        paths = self.document.get("paths")
        return paths if isinstance(paths, dict) else {}

    @property
    def components(self) -> dict[str, Any]:
        components = self.document.get("components")
        return components if isinstance(components, dict) else {}

    @property
    def schemas(self) -> dict[str, Any]:
        schemas = self.components.get("schemas")
        return schemas if isinstance(schemas, dict) else {}

    @property
    def security_schemes(self) -> dict[str, Any]:
        schemes = self.components.get("securitySchemes")
        return schemes if isinstance(schemes, dict) else {}


class SkippedItem(BaseModel):
    """A document or registry entry the loader refused, and why."""

    item: str
    reason: str


class LoadSourceReport(BaseModel):
    """What one configured source contributed to the last load.

    ``error`` is set when the source as a whole failed (unreachable discovery
    URL, unreadable folder); per-document failures land in ``skipped``.
    """

    kind: SourceKind
    location: Optional[str] = None
    loaded: list[str] = Field(default_factory=list)
    skipped: list[SkippedItem] = Field(default_factory=list)
    error: Optional[str] = None


class LoadResult(BaseModel):
    """Output of one full load cycle: the new snapshot plus per-source reports."""

    specs: list[LoadedSpec] = Field(default_factory=list)
    sources: list[LoadSourceReport] = Field(default_factory=list)


# --- Query results ---


class ApiSummary(BaseModel):
    """One row of ``list_apis``. ``endpoint_count`` counts distinct paths."""

    id: str
    title: str
    version: str
    description: str
    endpoint_count: int = Field(alias="endpointCount")

    model_config = {"populate_by_name": True}


class SearchResult(BaseModel):
    """One (path, method) hit of ``search_endpoints``."""

    id: str
    api_title: Optional[str] = None
    path: str
    method: str
    summary: Optional[str] = None
    description: Optional[str] = None
    operation_id: Optional[str] = Field(default=None, alias="operationId")

    model_config = {"populate_by_name": True}


class ApiStatsEntry(BaseModel):
    """Per-spec breakdown inside :class:`ApiStats`.

    Unlike :class:`ApiSummary`, ``endpoint_count`` here counts
    (path, recognised method) pairs.
    """

    id: str
    title: Optional[str] = None
    version: Optional[str] = None
    endpoint_count: int = Field(alias="endpointCount")
    methods: list[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class ApiStats(BaseModel):
    """Aggregate statistics across every loaded spec."""

    total_apis: int = Field(default=0, alias="totalApis")
    total_endpoints: int = Field(default=0, alias="totalEndpoints")
    method_counts: dict[str, int] = Field(default_factory=dict, alias="methodCounts")
    common_paths: dict[str, int] = Field(default_factory=dict, alias="commonPaths")
    versions: dict[str, int] = Field(default_factory=dict)
    apis: list[ApiStatsEntry] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class Inconsistency(BaseModel):
    """A cross-API inconsistency, e.g. mixed authentication scheme types."""

    type: str
    message: str
    details: dict[str, list[str]] = Field(default_factory=dict)


class SchemaComparison(BaseModel):
    """One named schema found in one spec, returned verbatim."""

    id: str
    api: Optional[str] = None
    schema_name: str = Field(alias="schemaName")
    schema_: Any = Field(default=None, alias="schema")

    model_config = {"populate_by_name": True}
