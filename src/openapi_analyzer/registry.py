"""In-memory snapshot of the currently loaded specs.

:class:`SpecRegistry` owns the canonical state of the analyzer. It is either
empty (nothing loaded yet) or holds the result of the most recent full load;
there is no API to add, update, or remove single entries.
"""

from __future__ import annotations

from typing import Iterable, Optional

from openapi_analyzer.models import LoadedSpec


class SpecRegistry:
    """Ordered collection of :class:`~openapi_analyzer.models.LoadedSpec` entries.

    Entries keep the order in which the loader produced them. There is at
    most one entry per id: when duplicates are passed, the later entry
    replaces the earlier one at the earlier one's position.

    Example::

        registry = SpecRegistry()
        registry.replace_all(result.specs)
        spec = registry.find_by_id("petstore.json")
    """

    def __init__(self) -> None:
        self._specs: tuple[LoadedSpec, ...] = ()
        self._by_id: dict[str, LoadedSpec] = {}

    def replace_all(self, specs: Iterable[LoadedSpec]) -> None:
        """Discard the current snapshot and install *specs* in one step."""
        by_id = {spec.id: spec for spec in specs}
        self._specs, self._by_id = tuple(by_id.values()), by_id

    def all(self) -> list[LoadedSpec]:
        """Return the current snapshot in load order."""
        return list(self._specs)

    def find_by_id(self, spec_id: str) -> Optional[LoadedSpec]:
        """Return the spec with *spec_id*, or ``None`` when absent."""
        return self._by_id.get(spec_id)

    @property
    def is_loaded(self) -> bool:
        """Whether at least one spec is loaded."""
        return bool(self._specs)

    def __len__(self) -> int:
        return len(self._specs)
