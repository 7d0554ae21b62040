"""Allow ``python -m openapi_analyzer``."""

from openapi_analyzer.app import main

main()
