"""Spec parser -- read single documents and resolve ``$ref`` pointers.

Typical usage::

    from openapi_analyzer.parser import load_spec, resolve_refs, validate_spec_document

    raw = load_spec("https://petstore3.swagger.io/api/v3/openapi.json")
    validate_spec_document(raw)
    document = resolve_refs(raw)

Sub-modules:

* :mod:`~openapi_analyzer.parser.loader` -- I/O layer (URL, file) plus
  format detection and the ``openapi``/``swagger`` discriminator check.
* :mod:`~openapi_analyzer.parser.resolver` -- Recursive internal ``$ref``
  resolution with cycle detection.
"""

from openapi_analyzer.parser.loader import load_document, load_spec, validate_spec_document
from openapi_analyzer.parser.resolver import resolve_refs

__all__ = ["load_document", "load_spec", "validate_spec_document", "resolve_refs"]
