"""openapi_analyzer -- Query a collection of OpenAPI/Swagger specs from one place.

This package loads OpenAPI 3.x and Swagger 2.0 documents from a registry
discovery document, a list of URLs, or a local folder, keeps them in an
in-memory registry, and answers analytical questions about them: listing,
raw lookup, endpoint search, aggregate statistics, authentication
inconsistencies, and cross-API schema comparison.

The queries are exposed as tools over the Model Context Protocol (stdio) and
as one-shot CLI commands::

    openapi-analyzer --folder ./specs serve
    openapi-analyzer --folder ./specs search users

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    config: Environment/flag configuration resolution and validation.
    sources: Spec loader walking the configured sources in priority order.
    registry: In-memory snapshot of loaded specs.
    analyzer: Read-only query operations over the registry.
    server: Tool dispatcher and MCP server.
    output: stdout/stderr output and logging setup.
"""

__version__ = "1.0.0"
