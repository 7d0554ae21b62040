"""Tests for openapi_analyzer.registry."""

from __future__ import annotations

from openapi_analyzer.registry import SpecRegistry


class TestSpecRegistry:
    """Snapshot replacement and lookup."""

    def test_starts_empty(self) -> None:
        registry = SpecRegistry()
        assert registry.all() == []
        assert len(registry) == 0
        assert not registry.is_loaded
        assert registry.find_by_id("petstore.json") is None

    def test_replace_all_keeps_order(self, make_spec) -> None:
        registry = SpecRegistry()
        registry.replace_all(
            [make_spec("b.json", {"openapi": "3.0.0"}), make_spec("a.json", {"openapi": "3.0.0"})]
        )
        assert [s.id for s in registry.all()] == ["b.json", "a.json"]
        assert registry.is_loaded
        assert len(registry) == 2

    def test_replace_all_discards_previous_snapshot(self, make_spec) -> None:
        registry = SpecRegistry()
        registry.replace_all([make_spec("old.json", {"openapi": "3.0.0"})])
        registry.replace_all([make_spec("new.json", {"openapi": "3.0.0"})])

        assert registry.find_by_id("old.json") is None
        assert registry.find_by_id("new.json") is not None
        assert [s.id for s in registry.all()] == ["new.json"]

    def test_replace_all_with_nothing_empties(self, make_spec) -> None:
        registry = SpecRegistry()
        registry.replace_all([make_spec("a.json", {"openapi": "3.0.0"})])
        registry.replace_all([])
        assert not registry.is_loaded

    def test_all_returns_a_copy(self, make_spec) -> None:
        registry = SpecRegistry()
        registry.replace_all([make_spec("a.json", {"openapi": "3.0.0"})])
        registry.all().clear()
        assert len(registry) == 1

    def test_find_by_id_is_exact(self, make_spec) -> None:
        registry = SpecRegistry()
        registry.replace_all([make_spec("Petstore.json", {"openapi": "3.0.0"})])
        assert registry.find_by_id("petstore.json") is None
        assert registry.find_by_id("Petstore.json").id == "Petstore.json"

    def test_accepts_generator(self, make_spec) -> None:
        registry = SpecRegistry()
        registry.replace_all(make_spec(f"{n}.json", {"openapi": "3.0.0"}) for n in range(3))
        assert len(registry) == 3

    def test_duplicate_ids_keep_one_entry(self, make_spec) -> None:
        registry = SpecRegistry()
        first = make_spec("a.json", {"openapi": "3.0.0", "info": {"title": "First"}})
        other = make_spec("b.json", {"openapi": "3.0.0"})
        second = make_spec("a.json", {"openapi": "3.0.0", "info": {"title": "Second"}})
        registry.replace_all([first, other, second])

        assert [s.id for s in registry.all()] == ["a.json", "b.json"]
        assert len(registry) == 2
        assert registry.all()[0] is second
        assert registry.find_by_id("a.json") is second
