"""Read-only analytical queries over the loaded specs.

:class:`SpecAnalyzer` answers every question from the current
:class:`~openapi_analyzer.registry.SpecRegistry` snapshot. Nothing is cached:
each call walks the snapshot again, so results always reflect the last load,
and nothing ever writes back into a spec document.

Queries:

* :meth:`SpecAnalyzer.list_apis` -- one summary per spec.
* :meth:`SpecAnalyzer.get_spec` -- the full document for an id.
* :meth:`SpecAnalyzer.search_endpoints` -- case-insensitive substring search
  over path, method, summary, description, and operationId.
* :meth:`SpecAnalyzer.get_api_stats` -- method counts, normalised path
  patterns, version histogram, and a per-spec breakdown.
* :meth:`SpecAnalyzer.find_inconsistencies` -- mixed authentication scheme
  types across specs.
* :meth:`SpecAnalyzer.compare_schemas` -- the named component schemas of
  every spec, side by side.
"""

from __future__ import annotations

import re
from typing import Any, Iterator, Optional

from openapi_analyzer.models import (
    UNKNOWN_VERSION,
    ApiStats,
    ApiStatsEntry,
    ApiSummary,
    HTTPMethod,
    Inconsistency,
    LoadedSpec,
    SchemaComparison,
    SearchResult,
    as_text,
)
from openapi_analyzer.registry import SpecRegistry

_HTTP_METHODS = frozenset(m.value for m in HTTPMethod)

_PATH_PARAMETER = re.compile(r"\{[^}]+\}")


def normalize_path(path: str) -> str:
    """Replace every ``{param}`` segment of *path* with ``{id}``.

    ``/users/{userId}/posts/{postId}`` becomes ``/users/{id}/posts/{id}``.
    """
    return _PATH_PARAMETER.sub("{id}", path)


def _operations(spec: LoadedSpec) -> Iterator[tuple[str, str, dict[str, Any]]]:
    """Yield ``(path, method, operation)`` for every recognised verb in *spec*.

    Methods are matched case-insensitively and yielded as written in the
    document. Keys that are not strings (YAML reads ``on:`` as a bool) and
    operations that are not mappings are skipped; path keys are yielded as
    strings.
    """
    for path, path_item in spec.paths.items():
        if not isinstance(path_item, dict):
            continue
        for method, operation in path_item.items():
            if not isinstance(method, str) or not isinstance(operation, dict):
                continue
            if method.lower() in _HTTP_METHODS:
                yield str(path), method, operation


class SpecAnalyzer:
    """Stateless query engine bound to a :class:`SpecRegistry`.

    Args:
        registry: The registry whose current snapshot every query reads.
    """

    def __init__(self, registry: SpecRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> SpecRegistry:
        return self._registry

    def list_apis(self) -> list[ApiSummary]:
        """Summarise every loaded spec.

        ``endpointCount`` is the number of path templates, not operations: a
        path declaring GET and POST counts once.
        """
        return [
            ApiSummary(
                id=spec.id,
                title=spec.title,
                version=spec.version,
                description=spec.description,
                endpoint_count=len(spec.paths),
            )
            for spec in self._registry.all()
        ]

    def get_spec(self, spec_id: str) -> Optional[dict[str, Any]]:
        """Return the full document for *spec_id*, or ``None`` if not loaded."""
        spec = self._registry.find_by_id(spec_id)
        return spec.document if spec is not None else None

    def search_endpoints(self, query: str) -> list[SearchResult]:
        """Find operations whose text contains *query* (case-insensitive).

        The searchable text of an operation is its path, method, summary,
        description, and operationId joined with spaces. Results come in
        spec, then path, then method order.
        """
        needle = query.lower()
        results: list[SearchResult] = []

        for spec in self._registry.all():
            api_title = as_text(spec.info.get("title"))
            for path, method, operation in _operations(spec):
                summary = as_text(operation.get("summary"))
                description = as_text(operation.get("description"))
                operation_id = as_text(operation.get("operationId"))
                haystack = " ".join(
                    [path, method, summary or "", description or "", operation_id or ""]
                ).lower()
                if needle not in haystack:
                    continue
                results.append(
                    SearchResult(
                        id=spec.id,
                        api_title=api_title,
                        path=path,
                        method=method.upper(),
                        summary=summary,
                        description=description,
                        operation_id=operation_id,
                    )
                )

        return results

    def get_api_stats(self) -> ApiStats:
        """Aggregate endpoint, method, path-pattern, and version statistics.

        Only recognised HTTP verbs count as endpoints. ``commonPaths`` is
        incremented once per (spec, path template) after normalising
        parameter names with :func:`normalize_path`.
        """
        specs = self._registry.all()
        stats = ApiStats(total_apis=len(specs))

        for spec in specs:
            endpoint_count = 0
            methods: set[str] = set()

            for path in spec.paths:
                pattern = normalize_path(str(path))
                stats.common_paths[pattern] = stats.common_paths.get(pattern, 0) + 1

            for _, method, _ in _operations(spec):
                verb = method.upper()
                endpoint_count += 1
                methods.add(verb)
                stats.method_counts[verb] = stats.method_counts.get(verb, 0) + 1

            stats.total_endpoints += endpoint_count

            declared_version = as_text(spec.info.get("version"))
            version_key = declared_version or UNKNOWN_VERSION
            stats.versions[version_key] = stats.versions.get(version_key, 0) + 1

            stats.apis.append(
                ApiStatsEntry(
                    id=spec.id,
                    title=as_text(spec.info.get("title")),
                    version=declared_version,
                    endpoint_count=endpoint_count,
                    methods=sorted(methods),
                )
            )

        return stats

    def find_inconsistencies(self) -> list[Inconsistency]:
        """Report cross-API inconsistencies.

        Only authentication is checked: if the security schemes declared
        across all specs use more than one ``type``, a single
        ``authentication`` record lists the qualified scheme names
        (``"<spec id>: <scheme name>"``) per type.
        """
        inconsistencies: list[Inconsistency] = []

        auth = self._authentication_schemes_by_type()
        if len(auth) > 1:
            inconsistencies.append(
                Inconsistency(
                    type="authentication",
                    message="Multiple authentication schemes found across APIs",
                    details=auth,
                )
            )

        return inconsistencies

    def _authentication_schemes_by_type(self) -> dict[str, list[str]]:
        by_type: dict[str, list[str]] = {}
        for spec in self._registry.all():
            for name, scheme in spec.security_schemes.items():
                if not isinstance(scheme, dict):
                    continue
                scheme_type = scheme.get("type")
                if scheme_type:
                    by_type.setdefault(str(scheme_type), []).append(f"{spec.id}: {name}")
        return by_type

    def compare_schemas(
        self, name1: str, name2: Optional[str] = None
    ) -> list[SchemaComparison]:
        """Collect the component schemas called *name1* (and *name2*) from every spec.

        A falsy *name2* means a single-name lookup. Identical names are looked
        up twice. Schemas are returned verbatim; comparing them is left to
        the caller.
        """
        names = [name1, name2] if name2 else [name1]
        comparisons: list[SchemaComparison] = []

        for spec in self._registry.all():
            schemas = spec.schemas
            for name in names:
                if schemas.get(name) is None:
                    continue
                comparisons.append(
                    SchemaComparison(
                        id=spec.id,
                        api=as_text(spec.info.get("title")),
                        schema_name=name,
                        schema=schemas[name],
                    )
                )

        return comparisons
