"""Exception hierarchy for openapi_analyzer.

All exceptions inherit from :class:`AnalyzerError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`openapi_analyzer.exit_codes`. The spec loader catches these per item
and per source, the tool dispatcher turns them into text payloads, and the
CLI entry point in :func:`openapi_analyzer.app.main` exits with the code.

Subclass hierarchy::

    AnalyzerError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- ConfigError         (exit 3)
    +-- NotFoundError       (exit 4)
    +-- SourceFetchError    (exit 6)
    +-- SpecParseError      (exit 7)
"""

from openapi_analyzer.exit_codes import (
    EXIT_CONFIG_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SPEC_PARSE_ERROR,
)


class AnalyzerError(Exception):
    """Base exception for all openapi_analyzer errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(AnalyzerError):
    """Raised for invalid CLI arguments or missing required tool parameters."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(AnalyzerError):
    """Raised when no source is configured or a configured source is unusable."""

    exit_code = EXIT_CONFIG_ERROR


class NotFoundError(AnalyzerError):
    """Raised when a spec id or schema name is not present in the registry."""

    exit_code = EXIT_NOT_FOUND


class SourceFetchError(AnalyzerError):
    """Raised on network-level failures (timeout, DNS, HTTP error status)."""

    exit_code = EXIT_CONNECTION_ERROR


class SpecParseError(AnalyzerError):
    """Raised when a document cannot be parsed or is not an OpenAPI/Swagger spec."""

    exit_code = EXIT_SPEC_PARSE_ERROR
