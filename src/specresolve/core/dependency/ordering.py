"""Ordering heuristic for the pending requirement queue.

Requirements are attempted in ascending order of the key::

    (already activated ? 0 : 1, has conflict ? 0 : 1, number of candidates)

Requirements on already fixed packages come first since they never open new
search branches. Among new packages, those with recorded conflicts come next
so that failures surface early, and the rest follow most-constrained-first.
Python's sort is stable, so ties keep queue order and the result is
deterministic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

from specresolve.core.dependency.conflicts import Conflict
from specresolve.core.dependency.constraints import Requirement
from specresolve.core.dependency.graph import DependencyGraph
from specresolve.core.dependency.provider import CandidateProvider


@dataclass(frozen=True)
class PendingRequirement:
    """An entry of the search queue.

    Attributes:
        requirement: The requirement still to be satisfied.
        parent: Name of the vertex whose payload declared it, None for
            top-level requirements.
        requested_by: Consumer name for top-level requirements, otherwise
            the parent vertex name.
    """

    requirement: Requirement
    parent: str | None
    requested_by: str

    @property
    def name(self) -> str:
        return self.requirement.name


def sort_key(
    pending: PendingRequirement,
    graph: DependencyGraph,
    conflicts: Mapping[str, Conflict],
    provider: CandidateProvider,
) -> tuple[int, int, int]:
    vertex = graph.vertex_named(pending.name)
    activated = vertex is not None and vertex.payload is not None
    return (
        0 if activated else 1,
        0 if pending.name in conflicts else 1,
        len(provider.candidates_for(pending.requirement)),
    )


def order(
    pending: Sequence[PendingRequirement],
    graph: DependencyGraph,
    conflicts: Mapping[str, Conflict],
    provider: CandidateProvider,
) -> list[PendingRequirement]:
    """Return *pending* sorted so the easiest requirement comes first."""
    return sorted(pending, key=lambda p: sort_key(p, graph, conflicts, provider))
