"""Dependency graph and backtracking dependency resolution.

This package implements the resolution engine: it turns the top-level
requirements of a set of consumers, plus any locked versions, into exactly
one specification per package name, then groups the result by consumer.
All public names are re-exported here so that callers can write
``from specresolve.core.dependency import X``.

Data flow
---------
requirements + locks -> ``DependencyGraph`` (seeded) -> ``Resolver`` (driven
by ``CandidateProvider`` and the ordering heuristic, recording ``Conflict``
entries) -> consistent graph -> ``project`` -> per-consumer specification
lists.
"""

from specresolve.core.dependency.constraints import (
    ANY_VERSION,
    ConstraintAtom,
    ConstraintOp,
    ExternalSource,
    Requirement,
    RequirementKind,
    Version,
    VersionConstraint,
    root_name,
)
from specresolve.core.dependency.specification import (
    KNOWN_PLATFORMS,
    PackageSet,
    Platform,
    Specification,
)
from specresolve.core.dependency.graph import (
    DependencyGraph,
    Edge,
    Vertex,
)
from specresolve.core.dependency.provider import (
    CandidateProvider,
    HeadStore,
    PinnedSpecifications,
    SpecificationSource,
)
from specresolve.core.dependency.conflicts import Conflict
from specresolve.core.dependency.ordering import PendingRequirement, order
from specresolve.core.dependency.projector import Consumer, project
from specresolve.core.dependency.resolver import (
    LockedDependency,
    Resolver,
    SearchState,
    resolve,
)

__all__ = [
    "ANY_VERSION",
    "CandidateProvider",
    "Conflict",
    "ConstraintAtom",
    "ConstraintOp",
    "Consumer",
    "DependencyGraph",
    "Edge",
    "ExternalSource",
    "HeadStore",
    "KNOWN_PLATFORMS",
    "LockedDependency",
    "PackageSet",
    "PendingRequirement",
    "PinnedSpecifications",
    "Platform",
    "Requirement",
    "RequirementKind",
    "Resolver",
    "SearchState",
    "Specification",
    "SpecificationSource",
    "Version",
    "VersionConstraint",
    "Vertex",
    "order",
    "project",
    "resolve",
    "root_name",
]
