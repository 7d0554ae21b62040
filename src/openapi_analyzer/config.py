"""Configuration resolution and validation.

The analyzer is configured entirely out-of-band: environment variables set by
the MCP host (or the shell), optionally overridden by CLI flags. This module
turns those inputs into one immutable :class:`~openapi_analyzer.models.AnalyzerConfig`
that is passed to the spec loader at construction time; nothing else in the
package reads the environment.

* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, and defaults.
* **Validation** -- :func:`validate_config` runs once at startup and raises
  :class:`~openapi_analyzer.exceptions.ConfigError` for unusable settings.
* **Directory layout** -- :func:`get_data_dir` is XDG Base Directory compliant
  on Linux/BSD and ``~/.openapi-analyzer/`` elsewhere; it holds crash logs.

Environment variables:

``OPENAPI_DISCOVERY_URL``
    Registry document listing spec URLs.
``OPENAPI_SPEC_URLS``
    Comma- or newline-separated spec URLs.
``OPENAPI_SPECS_FOLDER``
    Local folder of spec files.
``OPENAPI_HTTP_TIMEOUT``
    HTTP timeout in seconds (default 30).
``OPENAPI_ANALYZER_LOG_LEVEL``
    Log level name (default ``INFO``).
"""

from __future__ import annotations

import logging
import os
import platform
import re
from pathlib import Path
from typing import Optional, Sequence

from openapi_analyzer.exceptions import ConfigError
from openapi_analyzer.models import AnalyzerConfig

_APP_NAME = "openapi-analyzer"

ENV_DISCOVERY_URL = "OPENAPI_DISCOVERY_URL"
ENV_SPEC_URLS = "OPENAPI_SPEC_URLS"
ENV_SPECS_FOLDER = "OPENAPI_SPECS_FOLDER"
ENV_HTTP_TIMEOUT = "OPENAPI_HTTP_TIMEOUT"
ENV_LOG_LEVEL = "OPENAPI_ANALYZER_LOG_LEVEL"

_URL_SEPARATORS = re.compile(r"[,\n]")


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/openapi-analyzer/`` (default
    ``~/.local/share/openapi-analyzer/``). On macOS/Windows:
    ``~/.openapi-analyzer/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_DATA_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Precedence resolution ---


def _split_urls(value: str) -> list[str]:
    """Split a comma/newline separated URL list, dropping blanks."""
    return [part.strip() for part in _URL_SEPARATORS.split(value) if part.strip()]


def _parse_timeout(raw: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(
            f"{ENV_HTTP_TIMEOUT} must be a number of seconds, got '{raw}'"
        ) from exc


def resolve_config(
    cli_folder: Optional[str] = None,
    cli_urls: Optional[Sequence[str]] = None,
    cli_discovery_url: Optional[str] = None,
    cli_timeout: Optional[float] = None,
    cli_log_level: Optional[str] = None,
) -> AnalyzerConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. CLI flags
        2. Environment variables (see module docstring)
        3. Defaults

    A non-empty ``cli_urls`` replaces the environment URL list rather than
    extending it.

    Returns:
        The merged :class:`~openapi_analyzer.models.AnalyzerConfig`. It is
        not validated; call :func:`validate_config` before loading.

    Raises:
        ConfigError: If ``OPENAPI_HTTP_TIMEOUT`` is not a number.
    """
    discovery_url = os.environ.get(ENV_DISCOVERY_URL) or None
    if cli_discovery_url:
        discovery_url = cli_discovery_url

    spec_urls = _split_urls(os.environ.get(ENV_SPEC_URLS, ""))
    if cli_urls:
        spec_urls = [url.strip() for url in cli_urls if url.strip()]

    folder_value = os.environ.get(ENV_SPECS_FOLDER) or None
    if cli_folder:
        folder_value = cli_folder
    specs_folder = Path(folder_value).expanduser() if folder_value else None

    timeout = 30.0
    env_timeout = os.environ.get(ENV_HTTP_TIMEOUT)
    if env_timeout:
        timeout = _parse_timeout(env_timeout)
    if cli_timeout is not None:
        timeout = cli_timeout

    log_level = os.environ.get(ENV_LOG_LEVEL) or "INFO"
    if cli_log_level:
        log_level = cli_log_level

    return AnalyzerConfig(
        discovery_url=discovery_url,
        spec_urls=spec_urls,
        specs_folder=specs_folder,
        http_timeout=timeout,
        log_level=log_level.upper(),
    )


# --- Validation ---


def _check_url(url: str, label: str) -> None:
    if not url.startswith(("http://", "https://")):
        raise ConfigError(f"{label} must be an http(s) URL, got '{url}'")


def validate_config(config: AnalyzerConfig) -> AnalyzerConfig:
    """Check that *config* describes at least one usable spec source.

    Runs once at startup, before anything is loaded.

    Args:
        config: The resolved configuration.

    Returns:
        The same *config*, for chaining.

    Raises:
        ConfigError: If no source is configured, the folder is missing, not a
            directory, or unreadable, a URL is not http(s), the timeout is
            not positive, or the log level is unknown.
    """
    if not config.has_sources:
        raise ConfigError(
            "No spec source configured. Set at least one of "
            f"{ENV_DISCOVERY_URL}, {ENV_SPEC_URLS} or {ENV_SPECS_FOLDER} "
            "(or pass --discovery-url, --url, --folder)."
        )

    if config.discovery_url:
        _check_url(config.discovery_url, ENV_DISCOVERY_URL)
    for url in config.spec_urls:
        _check_url(url, ENV_SPEC_URLS)

    folder = config.specs_folder
    if folder is not None:
        if not folder.exists():
            raise ConfigError(f"{ENV_SPECS_FOLDER} does not exist: {folder}")
        if not folder.is_dir():
            raise ConfigError(f"{ENV_SPECS_FOLDER} is not a directory: {folder}")
        if not os.access(folder, os.R_OK | os.X_OK):
            raise ConfigError(f"No read permission for {ENV_SPECS_FOLDER}: {folder}")

    if config.http_timeout <= 0:
        raise ConfigError(
            f"HTTP timeout must be positive, got {config.http_timeout}"
        )

    if not isinstance(logging.getLevelName(config.log_level), int):
        raise ConfigError(f"Unknown log level: {config.log_level}")

    return config
