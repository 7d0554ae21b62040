"""Tool dispatcher and MCP stdio server.

The analyzer's operations are exposed as a fixed set of named tools. Every
call goes through :meth:`ToolDispatcher.dispatch`, which always returns a
single text payload:

* pretty-printed JSON on success;
* ``"Error: ..."`` for missing arguments, unknown tools, and any exception
  raised while handling the call;
* ``"API spec not found: <filename>"`` for an unknown spec id.

There is no separate error channel: callers distinguish failures by prefix.
:func:`create_server` wraps the dispatcher in a :class:`fastmcp.FastMCP`
application whose tools are thin shims with all-optional arguments, so the
missing-argument messages above come from the dispatcher rather than from
protocol-level validation.
"""

from __future__ import annotations

import enum
import json
import logging
from typing import Annotated, Any, Optional

from fastmcp import FastMCP
from pydantic import BaseModel, Field

from openapi_analyzer import __version__
from openapi_analyzer.analyzer import SpecAnalyzer
from openapi_analyzer.exceptions import ConfigError, InvalidUsageError
from openapi_analyzer.models import AnalyzerConfig, LoadSourceReport
from openapi_analyzer.registry import SpecRegistry
from openapi_analyzer.sources import SpecLoader

logger = logging.getLogger(__name__)

SERVER_NAME = "openapi-analyzer"


class ToolName(str, enum.Enum):
    """The closed set of operations the server exposes."""

    LOAD_SPECS = "load_specs"
    LIST_APIS = "list_apis"
    GET_API_SPEC = "get_api_spec"
    SEARCH_ENDPOINTS = "search_endpoints"
    GET_API_STATS = "get_api_stats"
    FIND_INCONSISTENCIES = "find_inconsistencies"
    COMPARE_SCHEMAS = "compare_schemas"
    GET_LOAD_SOURCES = "get_load_sources"


TOOL_DESCRIPTIONS: dict[ToolName, str] = {
    ToolName.LOAD_SPECS: "Load all OpenAPI specifications from the configured sources",
    ToolName.LIST_APIS: "List all loaded API specifications with basic info",
    ToolName.GET_API_SPEC: "Get the full OpenAPI spec for a specific file",
    ToolName.SEARCH_ENDPOINTS: "Search for endpoints across all APIs by keyword",
    ToolName.GET_API_STATS: "Get comprehensive statistics about all loaded APIs",
    ToolName.FIND_INCONSISTENCIES: "Find naming conventions and other inconsistencies across APIs",
    ToolName.COMPARE_SCHEMAS: "Compare schemas with the same name across different APIs",
    ToolName.GET_LOAD_SOURCES: "Show which sources the last load read and what each contributed",
}


def to_json(value: Any) -> str:
    """Serialise *value* (models, lists of models, or plain data) as indented JSON."""
    return json.dumps(to_plain(value), indent=2, ensure_ascii=False, default=str)


def to_plain(value: Any) -> Any:
    """Convert models (and lists of them) to JSON-ready data using wire aliases."""
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, list):
        return [to_plain(item) for item in value]
    return value


def _string_arg(arguments: dict[str, Any], key: str) -> str:
    value = arguments.get(key)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class ToolDispatcher:
    """Routes named tool calls to the registry, loader, and analyzer.

    Args:
        analyzer: Query engine bound to the registry that loads replace.
        loader: Loader used by ``load_specs``. ``None`` makes ``load_specs``
            report a configuration error.
    """

    def __init__(self, analyzer: SpecAnalyzer, loader: Optional[SpecLoader] = None) -> None:
        self._analyzer = analyzer
        self._loader = loader
        self._last_sources: list[LoadSourceReport] = []

    @property
    def analyzer(self) -> SpecAnalyzer:
        return self._analyzer

    @property
    def last_sources(self) -> list[LoadSourceReport]:
        """Per-source reports of the most recent load."""
        return list(self._last_sources)

    def load(self) -> int:
        """Run a full load cycle and swap the registry snapshot.

        Returns:
            The number of specs now loaded.

        Raises:
            ConfigError: If the dispatcher was created without a loader.
        """
        if self._loader is None:
            raise ConfigError("No spec sources configured")
        result = self._loader.load()
        self._analyzer.registry.replace_all(result.specs)
        self._last_sources = result.sources
        return len(result.specs)

    def dispatch(self, name: str, arguments: Optional[dict[str, Any]] = None) -> str:
        """Run tool *name* with *arguments* and return its text payload.

        Never raises: unknown tools and all exceptions become ``"Error: ..."``
        strings.
        """
        try:
            tool = ToolName(name)
        except ValueError:
            return f"Error: Unknown tool: {name}"

        try:
            return self._run(tool, arguments or {})
        except Exception as exc:
            logger.exception("Tool %s failed", tool.value)
            return f"Error: {exc}"

    def _run(self, tool: ToolName, arguments: dict[str, Any]) -> str:
        if tool is ToolName.LOAD_SPECS:
            count = self.load()
            return f"Successfully loaded {count} OpenAPI specifications"

        elif tool is ToolName.LIST_APIS:
            return to_json(self._analyzer.list_apis())

        elif tool is ToolName.GET_API_SPEC:
            filename = _string_arg(arguments, "filename")
            if not filename:
                return "Error: filename parameter is required"
            spec = self._analyzer.get_spec(filename)
            if spec is None:
                return f"API spec not found: {filename}"
            return to_json(spec)

        elif tool is ToolName.SEARCH_ENDPOINTS:
            query = _string_arg(arguments, "query")
            if not query:
                return "Error: query parameter is required"
            return to_json(self._analyzer.search_endpoints(query))

        elif tool is ToolName.GET_API_STATS:
            return to_json(self._analyzer.get_api_stats())

        elif tool is ToolName.FIND_INCONSISTENCIES:
            return to_json(self._analyzer.find_inconsistencies())

        elif tool is ToolName.COMPARE_SCHEMAS:
            schema1 = _string_arg(arguments, "schema1")
            if not schema1:
                return "Error: schema1 parameter is required"
            schema2 = _string_arg(arguments, "schema2") or None
            return to_json(self._analyzer.compare_schemas(schema1, schema2))

        elif tool is ToolName.GET_LOAD_SOURCES:
            return to_json(self._last_sources)

        raise InvalidUsageError(f"Unknown tool: {tool.value}")


def create_server(dispatcher: ToolDispatcher) -> FastMCP:
    """Build the MCP application exposing every :class:`ToolName` as a tool."""
    mcp = FastMCP(
        SERVER_NAME,
        instructions=(
            "Analyze a collection of OpenAPI/Swagger specifications: list APIs, "
            "search endpoints, compute statistics, find authentication "
            "inconsistencies, and compare schemas across APIs."
        ),
    )

    @mcp.tool(name=ToolName.LOAD_SPECS.value, description=TOOL_DESCRIPTIONS[ToolName.LOAD_SPECS])
    def load_specs() -> str:
        return dispatcher.dispatch(ToolName.LOAD_SPECS)

    @mcp.tool(name=ToolName.LIST_APIS.value, description=TOOL_DESCRIPTIONS[ToolName.LIST_APIS])
    def list_apis() -> str:
        return dispatcher.dispatch(ToolName.LIST_APIS)

    @mcp.tool(name=ToolName.GET_API_SPEC.value, description=TOOL_DESCRIPTIONS[ToolName.GET_API_SPEC])
    def get_api_spec(
        filename: Annotated[str, Field(description="The filename of the OpenAPI spec")] = "",
    ) -> str:
        return dispatcher.dispatch(ToolName.GET_API_SPEC, {"filename": filename})

    @mcp.tool(
        name=ToolName.SEARCH_ENDPOINTS.value,
        description=TOOL_DESCRIPTIONS[ToolName.SEARCH_ENDPOINTS],
    )
    def search_endpoints(
        query: Annotated[
            str,
            Field(description="Search term to find in paths, methods, summaries, or descriptions"),
        ] = "",
    ) -> str:
        return dispatcher.dispatch(ToolName.SEARCH_ENDPOINTS, {"query": query})

    @mcp.tool(name=ToolName.GET_API_STATS.value, description=TOOL_DESCRIPTIONS[ToolName.GET_API_STATS])
    def get_api_stats() -> str:
        return dispatcher.dispatch(ToolName.GET_API_STATS)

    @mcp.tool(
        name=ToolName.FIND_INCONSISTENCIES.value,
        description=TOOL_DESCRIPTIONS[ToolName.FIND_INCONSISTENCIES],
    )
    def find_inconsistencies() -> str:
        return dispatcher.dispatch(ToolName.FIND_INCONSISTENCIES)

    @mcp.tool(
        name=ToolName.COMPARE_SCHEMAS.value,
        description=TOOL_DESCRIPTIONS[ToolName.COMPARE_SCHEMAS],
    )
    def compare_schemas(
        schema1: Annotated[str, Field(description="First schema name to compare")] = "",
        schema2: Annotated[str, Field(description="Second schema name to compare (optional)")] = "",
    ) -> str:
        return dispatcher.dispatch(
            ToolName.COMPARE_SCHEMAS, {"schema1": schema1, "schema2": schema2}
        )

    @mcp.tool(
        name=ToolName.GET_LOAD_SOURCES.value,
        description=TOOL_DESCRIPTIONS[ToolName.GET_LOAD_SOURCES],
    )
    def get_load_sources() -> str:
        return dispatcher.dispatch(ToolName.GET_LOAD_SOURCES)

    return mcp


def build_dispatcher(config: AnalyzerConfig) -> ToolDispatcher:
    """Wire a fresh registry, analyzer, and loader for *config*."""
    analyzer = SpecAnalyzer(SpecRegistry())
    return ToolDispatcher(analyzer, SpecLoader(config))


def run_server(config: AnalyzerConfig) -> None:
    """Load specs once, then serve the tools over stdio until the client disconnects.

    *config* must already be validated.
    """
    dispatcher = build_dispatcher(config)
    dispatcher.load()
    logger.info("OpenAPI Analyzer MCP server %s running on stdio", __version__)
    create_server(dispatcher).run()
