"""Candidate provider and the collaborator contracts it consumes.

The provider answers three questions for the search engine:

- which specifications could satisfy a pending requirement, newest first;
- what a chosen specification in turn depends on;
- whether an already activated package can take on one more requirement.

It is a pure function of the graph and its caches: package sets come from
collaborators that have already loaded their indices into memory.
"""

from __future__ import annotations

import logging
from typing import Protocol

from specresolve.core.dependency.constraints import Requirement, RequirementKind
from specresolve.core.dependency.graph import DependencyGraph
from specresolve.core.dependency.specification import PackageSet, Specification
from specresolve.exceptions import InvalidState, NoSpecificationFound

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Collaborator contracts
# ---------------------------------------------------------------------------


class SpecificationSource(Protocol):
    """Aggregates configured package sources."""

    def search(self, name: str) -> PackageSet | None:
        """Return every known version of root package *name*, or None."""
        ...


class PinnedSpecifications(Protocol):
    """Holds the specifications of external-source dependencies."""

    def specification(self, name: str) -> Specification | None:
        """Return the pinned specification for root package *name*, or None."""
        ...


class HeadStore(Protocol):
    """Persisted record of packages resolved to bleeding-edge versions."""

    def store_head(self, name: str) -> None:
        ...


# ---------------------------------------------------------------------------
# CandidateProvider
# ---------------------------------------------------------------------------


class CandidateProvider:
    """Produces ordered candidates and compatibility answers for the resolver.

    Package sets are memoized per root name and candidate lists per
    requirement for the lifetime of the provider, which should match one
    resolution run.

    Args:
        source: Aggregate of the configured package sources.
        pinned: Store of pinned specifications for external-source
            requirements. Required only if such requirements occur.
    """

    def __init__(
        self,
        source: SpecificationSource,
        pinned: PinnedSpecifications | None = None,
    ) -> None:
        self._source = source
        self._pinned = pinned
        self._sets: dict[str, PackageSet] = {}
        self._search: dict[Requirement, tuple[Specification, ...]] = {}

    def package_set(self, requirement: Requirement) -> PackageSet:
        """Load (or return the memoized) package set for the requirement's root.

        Raises:
            InvalidState: If an external-source requirement has no pinned
                specification.
            NoSpecificationFound: If no version of the package is known.
        """
        name = requirement.root_name
        cached = self._sets.get(name)
        if cached is not None:
            return cached

        if requirement.kind is RequirementKind.EXTERNAL:
            spec = self._pinned.specification(name) if self._pinned else None
            if spec is None:
                raise InvalidState(
                    f"Unable to find the pinned specification for `{requirement}`."
                )
            package_set: PackageSet | None = PackageSet.external(spec)
        else:
            package_set = self._source.search(name)

        if package_set is None or len(package_set) == 0:
            raise NoSpecificationFound(
                requirement.name, "no version is available in the configured sources"
            )
        logger.debug("Loaded %d version(s) of %s", len(package_set), name)
        self._sets[name] = package_set
        return package_set

    def candidates_for(self, requirement: Requirement) -> list[Specification]:
        """Return the specifications that could satisfy *requirement*, newest first.

        Versions outside the constraint are dropped, and so are prerelease
        versions unless the requirement accepts them. Candidates are then
        narrowed to the named subspec, skipping versions lacking it, and
        tagged with the requirement's head flag. The result may be empty.

        Raises:
            NoSpecificationFound: If the package set is missing or empty.
            InvalidState: See ``package_set``.
        """
        cached = self._search.get(requirement)
        if cached is None:
            package_set = self.package_set(requirement)
            candidates: list[Specification] = []
            for spec in reversed(package_set.specifications):
                if not requirement.is_satisfied_by(spec.version):
                    continue
                if spec.version.is_prerelease and not requirement.accepts_prerelease:
                    continue
                narrowed = spec.subspec_by_name(requirement.name)
                if narrowed is None:
                    continue
                candidates.append(narrowed.with_head(requirement.head))
            cached = tuple(candidates)
            self._search[requirement] = cached
        return list(cached)

    def explain_empty(self, requirement: Requirement) -> str:
        """Describe why ``candidates_for`` found nothing for *requirement*."""
        package_set = self.package_set(requirement)
        matching = [
            s for s in package_set.specifications
            if requirement.is_satisfied_by(s.version)
        ]
        available = ", ".join(str(v) for v in package_set.versions)
        if not matching:
            return f"no version satisfies `{requirement.constraint}`; available: {available}"
        if not requirement.accepts_prerelease and all(
            s.version.is_prerelease for s in matching
        ):
            return "only prerelease versions satisfy the requirement"
        return f"no matching version provides `{requirement.name}`"

    def sub_dependencies_of(self, specification: Specification) -> list[Requirement]:
        return list(specification.all_dependencies())

    def is_requirement_satisfied(
        self,
        requirement: Requirement,
        graph: DependencyGraph,
        candidate: Specification,
    ) -> bool:
        """Whether *candidate* is acceptable for *requirement* given *graph*.

        When some vertex of the same root package is already activated, the
        candidate must have exactly that version, which keeps a single version
        per root no matter which requirement context asks.
        """
        existing = graph.activated_for_root(requirement.name)
        if existing is not None and existing.payload is not None:
            return (
                existing.payload.version == candidate.version
                and requirement.is_satisfied_by(candidate.version)
            )
        return requirement.is_satisfied_by(candidate.version)
