"""Backtracking search engine for dependency resolution.

The engine turns an unordered pile of requirements into one specification
per package name. It repeatedly picks the easiest pending requirement (see
``ordering``), either checks it against the package already activated for
that name or activates the newest viable candidate, and on a dead end
restores the most recent decision that still has untried candidates.

Snapshots are cheap: a ``SearchState`` stores the graph's undo-log tag and
the immutable queue, never a copy of the graph.

Locked packages are seeded as root vertices. Their pinned version restricts
every candidate list for the package and is never replaced by the search.

The search has no iteration or time bound. The ordering heuristic is the
only mitigation against pathological constraint sets.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from specresolve.core.dependency.conflicts import Conflict, conflict_for
from specresolve.core.dependency.constraints import Requirement, Version
from specresolve.core.dependency.graph import DependencyGraph, Vertex
from specresolve.core.dependency.ordering import PendingRequirement, order
from specresolve.core.dependency.projector import Consumer, project
from specresolve.core.dependency.provider import (
    CandidateProvider,
    HeadStore,
    PinnedSpecifications,
    SpecificationSource,
)
from specresolve.core.dependency.specification import Specification
from specresolve.exceptions import NoSpecificationFound, ResolutionConflict

logger = logging.getLogger(__name__)

TOP_LEVEL = "top-level"


@dataclass(frozen=True)
class LockedDependency:
    """A package pinned to one version by a previous resolution."""

    name: str
    pinned_version: Version

    @classmethod
    def parse(cls, name: str, version: str) -> LockedDependency:
        return cls(name=name, pinned_version=Version.parse(version))


@dataclass(frozen=True)
class SearchState:
    """Snapshot taken before trying a candidate for a decision.

    Attributes:
        pending: The requirement the decision was made for.
        graph_tag: Undo-log tag of the graph before the activation.
        queue: The pending queue right after ``pending`` was taken off it.
        possibilities: Candidates not tried yet, newest first.
    """

    pending: PendingRequirement
    graph_tag: int
    queue: tuple[PendingRequirement, ...]
    possibilities: tuple[Specification, ...]


class Resolver:
    """Depth-first backtracking resolver.

    Args:
        provider: Supplies candidates and compatibility answers.
        requirements: Top-level requirements, as plain ``Requirement``
            values or as ``PendingRequirement`` entries naming the consumer
            that declared them.
        locked_dependencies: Packages pinned by a previous resolution.
    """

    def __init__(
        self,
        provider: CandidateProvider,
        requirements: Iterable[Requirement | PendingRequirement],
        locked_dependencies: Iterable[LockedDependency] = (),
    ) -> None:
        self._provider = provider
        self._requirements = [
            r if isinstance(r, PendingRequirement) else PendingRequirement(r, None, TOP_LEVEL)
            for r in requirements
        ]
        self._locked = list(locked_dependencies)
        self._consumers = {r.requested_by for r in self._requirements}
        self._graph = DependencyGraph()
        self._queue: list[PendingRequirement] = []
        self._states: list[SearchState] = []
        self._conflicts: dict[str, Conflict] = {}
        self.iteration_count = 0
        self.backtrack_count = 0

    @property
    def conflicts(self) -> Mapping[str, Conflict]:
        return self._conflicts

    def resolve(self) -> DependencyGraph:
        """Run the search to completion.

        Returns:
            The consistent dependency graph.

        Raises:
            NoSpecificationFound: If a package is unknown, or a top-level
                requirement has no candidate at all.
            ResolutionConflict: If every candidate combination failed.
            CircularDependency: If the resolved packages depend on each
                other in a cycle.
            InvalidState: If an external-source requirement has no pinned
                specification.
        """
        graph = self._graph = DependencyGraph()
        for locked in self._locked:
            graph.add_root_vertex(locked.name, locked.pinned_version)
        self._queue = list(self._requirements)
        self._states = []
        self._conflicts = {}
        self.iteration_count = 0
        self.backtrack_count = 0

        while self._queue:
            self.iteration_count += 1
            ordered = order(self._queue, graph, self._conflicts, self._provider)
            pending, self._queue = ordered[0], ordered[1:]
            if not self._process(pending):
                self._backtrack()

        logger.info(
            "Resolved %d package(s) in %d step(s) with %d backtrack(s)",
            len(graph.activated()),
            self.iteration_count,
            self.backtrack_count,
        )
        return graph

    # -- Steps --------------------------------------------------------------

    def _process(self, pending: PendingRequirement) -> bool:
        vertex = self._graph.vertex_named(pending.name)
        if vertex is not None and vertex.payload is not None:
            return self._resolve_existing(pending, vertex)
        return self._activate_new(pending)

    def _resolve_existing(self, pending: PendingRequirement, vertex: Vertex) -> bool:
        existing = vertex.payload
        if self._provider.is_requirement_satisfied(pending.requirement, self._graph, existing):
            self._attach(pending)
            return True
        self._record_conflict(conflict_for(
            vertex,
            pending.requirement,
            pending.requested_by,
            existing=existing,
            locked_version=self._graph.locked_version(pending.name),
        ))
        return False

    def _activate_new(self, pending: PendingRequirement) -> bool:
        requirement = pending.requirement
        candidates = self._provider.candidates_for(requirement)
        if not candidates and pending.parent is None:
            # Candidate lists do not depend on the graph, so no other choice
            # can ever make this requirement satisfiable.
            raise NoSpecificationFound(
                requirement.name, self._provider.explain_empty(requirement)
            )
        if not candidates:
            self._record_conflict(conflict_for(
                self._graph.vertex_named(requirement.name),
                requirement,
                pending.requested_by,
                locked_version=self._graph.locked_version(requirement.name),
                reason=self._provider.explain_empty(requirement),
            ))
            return False

        locked = self._graph.locked_version(requirement.name)
        viable = [
            c for c in candidates
            if (locked is None or c.version == locked)
            and self._provider.is_requirement_satisfied(requirement, self._graph, c)
        ]
        if not viable:
            blocking = self._graph.activated_for_root(requirement.name)
            self._record_conflict(conflict_for(
                self._graph.vertex_named(requirement.name),
                requirement,
                pending.requested_by,
                existing=blocking.payload if blocking else None,
                locked_version=locked,
            ))
            return False

        self._attempt(pending, viable)
        return True

    def _attempt(
        self, pending: PendingRequirement, possibilities: Sequence[Specification]
    ) -> None:
        graph = self._graph
        candidate, rest = possibilities[0], tuple(possibilities[1:])
        self._states.append(
            SearchState(pending, graph.tag(), tuple(self._queue), rest)
        )
        logger.debug("Activating %s for %s", candidate, pending.requirement)

        name = pending.name
        if name not in graph:
            graph.add_vertex(name)
        graph.set_payload(name, candidate)
        self._attach(pending)
        for dependency in self._provider.sub_dependencies_of(candidate):
            self._queue.append(PendingRequirement(dependency, name, name))

    def _attach(self, pending: PendingRequirement) -> None:
        if pending.parent is None:
            self._graph.add_requirement(pending.name, pending.requirement, pending.requested_by)
        else:
            self._graph.add_edge(pending.parent, pending.name, pending.requirement)

    def _backtrack(self) -> None:
        """Restore the latest decision with an untried candidate and retry it.

        Raises:
            ResolutionConflict: If no decision has candidates left.
        """
        while self._states:
            state = self._states.pop()
            if not state.possibilities:
                continue
            self.backtrack_count += 1
            self._graph.rewind_to(state.graph_tag)
            self._queue = list(state.queue)
            logger.debug(
                "Backtracking to %s, %d candidate(s) left",
                state.pending.requirement,
                len(state.possibilities),
            )
            self._attempt(state.pending, state.possibilities)
            return
        logger.info("Resolution failed with %d conflict(s)", len(self._conflicts))
        raise ResolutionConflict(self._conflicts)

    def _record_conflict(self, conflict: Conflict) -> None:
        logger.debug("Conflict on %s", conflict.name)
        decision = next(
            (s for s in reversed(self._states)
             if s.pending.requirement.root_name == conflict.root_name),
            None,
        )
        if decision is not None:
            conflict.possibilities = list(decision.possibilities)
        for requested_by in conflict.requirements:
            if requested_by not in self._consumers and requested_by in self._graph:
                conflict.chains[requested_by] = tuple(
                    self._graph.requirement_chain(requested_by)
                )
        previous = self._conflicts.get(conflict.name)
        if previous is None:
            self._conflicts[conflict.name] = conflict
        else:
            previous.merge(conflict)


def resolve(
    consumers: Sequence[Consumer],
    source: SpecificationSource,
    *,
    locked_dependencies: Iterable[LockedDependency] = (),
    pinned: PinnedSpecifications | None = None,
    head_store: HeadStore | None = None,
    top_level_requirements: Iterable[Requirement] | None = None,
) -> dict[Consumer, list[Specification]]:
    """Resolve the consumers' dependencies and group the result by consumer.

    Args:
        consumers: Targets whose declared requirements are resolved together.
        source: Aggregate of the configured package sources.
        locked_dependencies: Versions pinned by a previous resolution.
        pinned: Store of specifications for external-source requirements.
        head_store: Notified of packages resolved to head versions.
        top_level_requirements: Overrides the requirements flattened from
            *consumers*.

    Returns:
        Mapping from consumer to its specifications, sorted by name.
    """
    if top_level_requirements is None:
        pending: list[Requirement | PendingRequirement] = [
            PendingRequirement(r, None, c.name) for c in consumers for r in c.requirements
        ]
    else:
        pending = list(top_level_requirements)
    provider = CandidateProvider(source, pinned)
    graph = Resolver(provider, pending, locked_dependencies).resolve()
    return project(graph, consumers, head_store)
