"""Typer application and CLI entry point for openapi-analyzer.

``serve`` runs the MCP stdio server. The remaining commands mirror the
server's tools for use from a shell: each one resolves and validates the
configuration, performs a single load, runs one query, and prints the
result (tables on a terminal, JSON with ``--json``).

Source options given on the command line override the ``OPENAPI_*``
environment variables described in :mod:`openapi_analyzer.config`.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Unhandled exceptions are written to a crash log under the
data directory.
"""

from __future__ import annotations

import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from openapi_analyzer import __version__
from openapi_analyzer.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="openapi-analyzer",
    help="Analyze collections of OpenAPI/Swagger specs, as an MCP server or from the shell.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"openapi-analyzer {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    folder: Optional[str] = typer.Option(
        None, "--folder", "-d", help="Folder of spec files (overrides OPENAPI_SPECS_FOLDER)."
    ),
    urls: Optional[list[str]] = typer.Option(
        None, "--url", "-u", help="Spec URL; repeatable (overrides OPENAPI_SPEC_URLS)."
    ),
    discovery_url: Optional[str] = typer.Option(
        None, "--discovery-url", help="Registry document URL (overrides OPENAPI_DISCOVERY_URL)."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="HTTP timeout in seconds (overrides OPENAPI_HTTP_TIMEOUT)."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only log warnings and errors."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~openapi_analyzer.output.OutputManager` and
    stores the source overrides in ``ctx.obj`` for :func:`_resolve`.
    """
    from openapi_analyzer.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet))

    log_level: Optional[str] = None
    if verbose:
        log_level = "DEBUG"
    elif quiet:
        log_level = "WARNING"

    ctx.ensure_object(dict)
    ctx.obj["folder"] = folder
    ctx.obj["urls"] = urls
    ctx.obj["discovery_url"] = discovery_url
    ctx.obj["timeout"] = timeout
    ctx.obj["log_level"] = log_level
    ctx.obj["no_color"] = no_color


def _resolve(ctx: typer.Context):  # noqa: ANN202
    """Resolve and validate configuration, then set up logging.

    Raises:
        typer.Exit: With the configuration error's exit code when no usable
            source is configured.
    """
    from openapi_analyzer.config import resolve_config, validate_config
    from openapi_analyzer.exceptions import ConfigError
    from openapi_analyzer.output import configure_logging, error, suggest

    obj = ctx.obj or {}
    try:
        config = validate_config(
            resolve_config(
                cli_folder=obj.get("folder"),
                cli_urls=obj.get("urls"),
                cli_discovery_url=obj.get("discovery_url"),
                cli_timeout=obj.get("timeout"),
                cli_log_level=obj.get("log_level"),
            )
        )
    except ConfigError as exc:
        error(str(exc))
        suggest("Example: OPENAPI_SPECS_FOLDER=/absolute/path/to/specs openapi-analyzer serve")
        raise typer.Exit(code=exc.exit_code) from None

    configure_logging(config.log_level, no_color=obj.get("no_color", False))
    return config


def _load(ctx: typer.Context):  # noqa: ANN202
    """Resolve config and run one load; return the loaded dispatcher."""
    from openapi_analyzer.server import build_dispatcher

    dispatcher = build_dispatcher(_resolve(ctx))
    dispatcher.load()
    return dispatcher


def _emit(records: list[Any], headers: list[str], rows: list[list[str]], title: str) -> None:
    """Print *records* as JSON in ``--json`` mode, otherwise *rows* as a table."""
    from openapi_analyzer.output import OutputFormat, format_response, get_output
    from openapi_analyzer.server import to_plain

    output = get_output()
    if output.format == OutputFormat.JSON:
        format_response(to_plain(records))
    else:
        output.print_table(headers, rows, title=title)


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("serve")
def serve_command(ctx: typer.Context) -> None:
    """Run the MCP server on stdio.

    Example::

        OPENAPI_SPECS_FOLDER=./specs openapi-analyzer serve
    """
    from openapi_analyzer.server import run_server

    run_server(_resolve(ctx))


@app.command("list")
def list_command(ctx: typer.Context) -> None:
    """List loaded APIs with their path counts."""
    analyzer = _load(ctx).analyzer
    summaries = analyzer.list_apis()
    rows = [
        [s.id, s.title, s.version, str(s.endpoint_count)]
        for s in summaries
    ]
    _emit(summaries, ["ID", "Title", "Version", "Paths"], rows, f"APIs ({len(rows)})")


@app.command("show")
def show_command(
    ctx: typer.Context,
    spec_id: str = typer.Argument(..., help="Spec id, e.g. petstore.json."),
) -> None:
    """Print the full document of one spec."""
    from openapi_analyzer.exceptions import NotFoundError
    from openapi_analyzer.output import error, format_response, suggest

    spec = _load(ctx).analyzer.get_spec(spec_id)
    if spec is None:
        exc = NotFoundError(f"API spec not found: {spec_id}")
        error(str(exc))
        suggest("Run 'openapi-analyzer list' to see the loaded ids.")
        raise typer.Exit(code=exc.exit_code)
    format_response(spec)


@app.command("search")
def search_command(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Text to find in paths, methods, summaries, descriptions, operationIds."),
) -> None:
    """Search endpoints across all APIs (case-insensitive substring match)."""
    from openapi_analyzer.output import info

    hits = _load(ctx).analyzer.search_endpoints(query)
    if not hits:
        info(f"No endpoints match '{query}'.")
    rows = [
        [h.method, h.path, h.id, h.summary or "-"]
        for h in hits
    ]
    _emit(hits, ["Method", "Path", "API", "Summary"], rows, f"Endpoints matching '{query}' ({len(rows)})")


@app.command("stats")
def stats_command(ctx: typer.Context) -> None:
    """Show aggregate statistics across all APIs."""
    from openapi_analyzer.output import format_response
    from openapi_analyzer.server import to_plain

    format_response(to_plain(_load(ctx).analyzer.get_api_stats()))


@app.command("inconsistencies")
def inconsistencies_command(ctx: typer.Context) -> None:
    """Report authentication scheme types that differ across APIs."""
    from openapi_analyzer.output import format_response, success
    from openapi_analyzer.server import to_plain

    found = _load(ctx).analyzer.find_inconsistencies()
    if not found:
        success("No inconsistencies found.")
    format_response(to_plain(found))


@app.command("compare")
def compare_command(
    ctx: typer.Context,
    schema1: str = typer.Argument(..., help="First schema name."),
    schema2: Optional[str] = typer.Argument(None, help="Second schema name."),
) -> None:
    """Show the named component schemas from every API side by side."""
    from openapi_analyzer.output import format_response, info
    from openapi_analyzer.server import to_plain

    found = _load(ctx).analyzer.compare_schemas(schema1, schema2)
    if not found:
        names = schema1 if not schema2 else f"{schema1} or {schema2}"
        info(f"No API defines a schema named {names}.")
    format_response(to_plain(found))


@app.command("sources")
def sources_command(ctx: typer.Context) -> None:
    """Show what each configured source contributed to the load."""
    reports = _load(ctx).last_sources
    rows = [
        [
            r.kind.value,
            r.location or "-",
            str(len(r.loaded)),
            str(len(r.skipped)),
            r.error or "",
        ]
        for r in reports
    ]
    _emit(reports, ["Kind", "Location", "Loaded", "Skipped", "Error"], rows, "Load sources")


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from openapi_analyzer.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``openapi-analyzer`` console script.

    :class:`~openapi_analyzer.exceptions.AnalyzerError` instances exit with
    their ``exit_code``; any other exception produces a crash log and a
    generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from openapi_analyzer.exceptions import AnalyzerError
        from openapi_analyzer.output import error

        if isinstance(exc, AnalyzerError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
