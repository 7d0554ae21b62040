"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to an error category and is referenced by the
corresponding :class:`~openapi_analyzer.exceptions.AnalyzerError` subclass.

Example::

    $ openapi-analyzer serve
    $ echo $?
    3   # EXIT_CONFIG_ERROR -- no spec source configured
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_CONFIG_ERROR = 3
"""No spec source is configured, or a configured source is unusable."""

EXIT_NOT_FOUND = 4
"""The requested spec or schema does not exist in the loaded registry."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred while fetching a spec or registry document."""

EXIT_SPEC_PARSE_ERROR = 7
"""A spec document could not be parsed or is not an OpenAPI/Swagger document."""
