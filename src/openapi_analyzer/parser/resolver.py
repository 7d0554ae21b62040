"""Resolve internal ``$ref`` pointers in OpenAPI and Swagger documents.

The query engine works on documents whose references are already inlined, so
that ``components.schemas`` entries and operations can be returned verbatim.
:func:`resolve_refs` deep-copies a document and replaces every internal
``{"$ref": "#/..."}`` mapping with the object it points to.

Resolution never fails a document:

* circular references stay as ``$ref`` mappings at the cycle point;
* external references (``other.yaml#/...``, URLs) are left untouched;
* dangling internal references are left untouched and logged.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

logger = logging.getLogger(__name__)


class _Unresolvable(Exception):
    """Internal signal that a pointer cannot be followed."""


def resolve_refs(document: dict[str, Any]) -> dict[str, Any]:
    """Return a deep copy of *document* with internal ``$ref`` pointers inlined.

    Args:
        document: The parsed spec, as returned by
            :func:`~openapi_analyzer.parser.loader.load_spec`.

    Returns:
        A **new** dictionary; the input is not modified.

    Example::

        resolved = resolve_refs(load_spec("petstore.json"))
        resolved["paths"]["/pets"]["post"]["requestBody"]["content"]
        # now holds the inlined Pet schema instead of a $ref pointer
    """
    root = copy.deepcopy(document)
    return _deep_resolve(root, root, frozenset())


def _follow_pointer(ref: str, root: dict[str, Any]) -> Any:
    """Follow a ``#/a/b/c`` JSON Pointer (RFC 6901 escaping) within *root*."""
    current: Any = root
    for segment in ref[2:].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")
        if isinstance(current, dict) and segment in current:
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
            current = current[int(segment)]
        else:
            raise _Unresolvable(segment)
    return current


def _deep_resolve(obj: Any, root: dict[str, Any], seen: frozenset[str]) -> Any:
    """Recursively inline references below *obj*.

    *seen* holds the references on the current resolution stack; each branch
    extends its own copy so sibling references do not interfere.
    """
    if isinstance(obj, dict):
        ref = obj.get("$ref")
        if isinstance(ref, str):
            if not ref.startswith("#/"):
                return obj
            if ref in seen:
                return obj
            try:
                target = _follow_pointer(ref, root)
            except _Unresolvable as exc:
                logger.debug("Leaving unresolvable $ref '%s' (missing '%s')", ref, exc)
                return obj
            return _deep_resolve(target, root, seen | {ref})
        return {key: _deep_resolve(value, root, seen) for key, value in obj.items()}

    if isinstance(obj, list):
        return [_deep_resolve(item, root, seen) for item in obj]

    return obj
