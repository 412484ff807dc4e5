"""In-memory collaborators of the resolver.

These classes satisfy the ``SpecificationSource``, ``PinnedSpecifications``
and ``HeadStore`` contracts from already loaded data. Loading from disk or
network happens before resolution starts.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable, Sequence

from specresolve.core.dependency.specification import PackageSet, Specification
from specresolve.core.dependency.provider import SpecificationSource

logger = logging.getLogger(__name__)


class InMemorySource:
    """A package source backed by a list of specifications.

    Args:
        specifications: Initial specifications, any number per package.
        name: Label used in log messages.
    """

    def __init__(self, specifications: Iterable[Specification] = (), name: str = "memory") -> None:
        self.name = name
        self._specs: dict[str, list[Specification]] = defaultdict(list)
        for spec in specifications:
            self.add(spec)

    def add(self, specification: Specification) -> None:
        self._specs[specification.root_name].append(specification)

    @property
    def package_names(self) -> list[str]:
        return sorted(self._specs)

    def search(self, name: str) -> PackageSet | None:
        specs = self._specs.get(name)
        if not specs:
            return None
        return PackageSet.from_specifications(name, specs)


class AggregateSource:
    """Union of several sources.

    When two sources know the same version of a package, the one listed
    first wins.
    """

    def __init__(self, sources: Sequence[SpecificationSource]) -> None:
        self._sources = list(sources)

    def search(self, name: str) -> PackageSet | None:
        merged: PackageSet | None = None
        for source in self._sources:
            found = source.search(name)
            if found is None:
                continue
            merged = found if merged is None else merged.merge(found)
        if merged is None:
            logger.debug("No source knows %s", name)
        return merged


class PinnedStore:
    """Specifications of external-source dependencies, keyed by root name."""

    def __init__(self, specifications: Iterable[Specification] = ()) -> None:
        self._specs: dict[str, Specification] = {}
        for spec in specifications:
            self.add(spec)

    def add(self, specification: Specification) -> None:
        self._specs[specification.root_name] = specification

    def specification(self, name: str) -> Specification | None:
        return self._specs.get(name)


class HeadRegistry:
    """Records which packages were resolved to a head version."""

    def __init__(self) -> None:
        self._names: set[str] = set()

    def store_head(self, name: str) -> None:
        self._names.add(name)

    @property
    def head_names(self) -> list[str]:
        return sorted(self._names)
