"""Tests for the in-memory sources, pinned store and head registry."""

from __future__ import annotations

from specresolve.core.dependency import Requirement, Specification, Version
from specresolve.core.sources import (
    AggregateSource,
    HeadRegistry,
    InMemorySource,
    PinnedStore,
)


def _spec(name: str, version: str, deps: tuple[str, ...] = ()) -> Specification:
    return Specification(
        name=name,
        version=Version.parse(version),
        dependencies=tuple(Requirement.parse(d) for d in deps),
    )


class TestInMemorySource:
    def test_search(self) -> None:
        source = InMemorySource([_spec("A", "2.0"), _spec("A", "1.0"), _spec("B", "1.0")])
        found = source.search("A")
        assert found is not None
        assert [str(v) for v in found.versions] == ["1.0", "2.0"]
        assert source.package_names == ["A", "B"]

    def test_unknown_package(self) -> None:
        assert InMemorySource().search("A") is None

    def test_add(self) -> None:
        source = InMemorySource()
        source.add(_spec("A", "1.0"))
        assert source.search("A") is not None


class TestAggregateSource:
    def test_merges_versions(self) -> None:
        first = InMemorySource([_spec("A", "1.0")])
        second = InMemorySource([_spec("A", "2.0"), _spec("B", "1.0")])
        aggregate = AggregateSource([first, second])
        found = aggregate.search("A")
        assert found is not None
        assert [str(v) for v in found.versions] == ["1.0", "2.0"]
        assert aggregate.search("B") is not None
        assert aggregate.search("C") is None

    def test_first_source_wins_per_version(self) -> None:
        first = InMemorySource([_spec("A", "1.0", ("B",))])
        second = InMemorySource([_spec("A", "1.0", ("C",))])
        found = AggregateSource([first, second]).search("A")
        assert found is not None
        assert [r.name for r in found.specifications[0].dependencies] == ["B"]


class TestPinnedStoreAndHeads:
    def test_pinned_lookup_by_root(self) -> None:
        store = PinnedStore([_spec("D", "0.3")])
        assert store.specification("D") is not None
        assert store.specification("E") is None

    def test_head_registry(self) -> None:
        registry = HeadRegistry()
        registry.store_head("B")
        registry.store_head("A")
        registry.store_head("B")
        assert registry.head_names == ["A", "B"]
