"""Dependency graph with an undo log.

The graph holds one vertex per activated package (or subspec) name. Every
mutation made after seeding is appended to an undo log, so the search engine
can take a cheap snapshot with ``tag()`` and later restore that exact state
with ``rewind_to()`` instead of copying the whole graph per decision.

Invariant: at most one vertex per name, and the edges form a DAG. Adding an
edge that would close a cycle raises ``CircularDependency``.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Iterator

from specresolve.core.dependency.constraints import Requirement, Version, root_name
from specresolve.core.dependency.specification import Specification
from specresolve.exceptions import CircularDependency, InvalidState


@dataclass(frozen=True)
class Edge:
    """A requirement of *origin* on the *destination* vertex."""

    origin: str
    destination: str
    requirement: Requirement


@dataclass
class Vertex:
    """A node of the dependency graph.

    Attributes:
        name: Package or subspec name this vertex stands for.
        payload: The assigned specification, None while pending.
        root: True for vertices seeded from a lock.
        locked_version: Version pinned by the lock, for root vertices.
        explicit: Edges for top-level requirements made directly by
            consumers. Their origin is the consumer's name, not a vertex.
        incoming: Edges from vertices that depend on this one.
        outgoing: Edges to this vertex's sub-dependencies.
    """

    name: str
    payload: Specification | None = None
    root: bool = False
    locked_version: Version | None = None
    explicit: list[Edge] = field(default_factory=list)
    incoming: list[Edge] = field(default_factory=list)
    outgoing: list[Edge] = field(default_factory=list)

    @property
    def requirements(self) -> list[Requirement]:
        """Every requirement currently made against this vertex."""
        return [e.requirement for e in self.explicit + self.incoming]

    @property
    def successors(self) -> list[str]:
        return [e.destination for e in self.outgoing]

    @property
    def predecessors(self) -> list[str]:
        return [e.origin for e in self.incoming]


class DependencyGraph:
    """Mutable named-vertex graph of the packages under consideration.

    Thread safety: This class is NOT thread-safe. A graph is owned by one
    resolution run at a time.
    """

    def __init__(self) -> None:
        self._vertices: dict[str, Vertex] = {}
        self._log: list[tuple] = []

    # -- Queries ------------------------------------------------------------

    def __contains__(self, name: object) -> bool:
        return name in self._vertices

    def __iter__(self) -> Iterator[Vertex]:
        return iter(self._vertices.values())

    def __len__(self) -> int:
        return len(self._vertices)

    def vertex_named(self, name: str) -> Vertex | None:
        return self._vertices.get(name)

    def activated(self) -> list[Vertex]:
        """Vertices with an assigned specification, sorted by name."""
        return sorted(
            (v for v in self._vertices.values() if v.payload is not None),
            key=lambda v: v.name,
        )

    def activated_for_root(self, name: str) -> Vertex | None:
        """Return an activated vertex sharing *name*'s root name, if any."""
        root = root_name(name)
        for vertex in self._vertices.values():
            if vertex.payload is not None and vertex.payload.root_name == root:
                return vertex
        return None

    def locked_version(self, name: str) -> Version | None:
        """Return the version pinned for *name*'s root package, if locked."""
        vertex = self._vertices.get(root_name(name))
        if vertex is not None and vertex.root:
            return vertex.locked_version
        return None

    def recursive_successors(self, name: str) -> list[Vertex]:
        """All vertices reachable from *name*, excluding *name* itself.

        Uses an explicit worklist so deep chains do not exhaust the stack.
        Order is breadth-first in edge insertion order.
        """
        start = self._vertices.get(name)
        if start is None:
            return []
        seen: set[str] = {name}
        order: list[Vertex] = []
        queue: deque[str] = deque(start.successors)
        while queue:
            current = queue.popleft()
            if current in seen:
                continue
            seen.add(current)
            vertex = self._vertices[current]
            order.append(vertex)
            queue.extend(vertex.successors)
        return order

    def path(self, source: str, target: str) -> list[str] | None:
        """Return a vertex path from *source* to *target*, or None."""
        parents: dict[str, str | None] = {source: None}
        queue: deque[str] = deque([source])
        while queue:
            current = queue.popleft()
            if current == target:
                path = [current]
                while parents[path[-1]] is not None:
                    path.append(parents[path[-1]])
                return list(reversed(path))
            vertex = self._vertices.get(current)
            if vertex is None:
                continue
            for successor in vertex.successors:
                if successor not in parents:
                    parents[successor] = current
                    queue.append(successor)
        return None

    def requirement_chain(self, name: str) -> list[str]:
        """Return how *name* was pulled in, e.g. ``["App", "A", "B"]``.

        The chain starts at the consumer of the first top-level vertex that
        reaches *name*. A vertex nobody reaches yields just ``[name]``.
        """
        for vertex in self._vertices.values():
            if not vertex.explicit:
                continue
            path = self.path(vertex.name, name)
            if path is not None:
                return [vertex.explicit[0].origin] + path
        return [name]

    # -- Seeding ------------------------------------------------------------

    def add_root_vertex(self, name: str, locked_version: Version) -> Vertex:
        """Seed a locked vertex pinning *name* to *locked_version*.

        Root vertices are added before the search starts and are never
        removed by ``rewind_to``.
        """
        if self._log:
            raise InvalidState("root vertices must be added before any search step")
        vertex = Vertex(name=name, root=True, locked_version=locked_version)
        self._vertices[name] = vertex
        return vertex

    # -- Logged mutations ---------------------------------------------------

    def add_vertex(self, name: str) -> Vertex:
        if name in self._vertices:
            raise InvalidState(f"vertex {name!r} already exists")
        vertex = Vertex(name=name)
        self._vertices[name] = vertex
        self._log.append(("add_vertex", name))
        return vertex

    def set_payload(self, name: str, payload: Specification | None) -> None:
        vertex = self._vertices[name]
        self._log.append(("set_payload", name, vertex.payload))
        vertex.payload = payload

    def add_requirement(
        self, name: str, requirement: Requirement, requested_by: str
    ) -> Edge:
        """Record a consumer's top-level *requirement* against *name*."""
        edge = Edge(requested_by, name, requirement)
        self._vertices[name].explicit.append(edge)
        self._log.append(("add_requirement", name))
        return edge

    def add_edge(self, origin: str, destination: str, requirement: Requirement) -> Edge:
        """Add an edge from *origin* to *destination*.

        Raises:
            CircularDependency: If the edge would close a cycle.
        """
        cycle = self.path(destination, origin)
        if cycle is not None:
            raise CircularDependency(cycle)
        edge = Edge(origin, destination, requirement)
        self._vertices[origin].outgoing.append(edge)
        self._vertices[destination].incoming.append(edge)
        self._log.append(("add_edge", edge))
        return edge

    def remove_edge(self, edge: Edge) -> None:
        self._vertices[edge.origin].outgoing.remove(edge)
        self._vertices[edge.destination].incoming.remove(edge)
        self._log.append(("remove_edge", edge))

    # -- Snapshots ----------------------------------------------------------

    def tag(self) -> int:
        """Return a marker for the current state, usable with ``rewind_to``."""
        return len(self._log)

    def rewind_to(self, tag: int) -> None:
        """Undo every logged mutation made since *tag* was taken."""
        while len(self._log) > tag:
            action = self._log.pop()
            kind = action[0]
            if kind == "add_vertex":
                del self._vertices[action[1]]
            elif kind == "set_payload":
                self._vertices[action[1]].payload = action[2]
            elif kind == "add_requirement":
                self._vertices[action[1]].explicit.pop()
            elif kind == "add_edge":
                edge = action[1]
                self._vertices[edge.origin].outgoing.remove(edge)
                self._vertices[edge.destination].incoming.remove(edge)
            elif kind == "remove_edge":
                edge = action[1]
                self._vertices[edge.origin].outgoing.append(edge)
                self._vertices[edge.destination].incoming.append(edge)

    def to_dict(self) -> dict[str, str]:
        """Map each activated vertex name to its resolved version string."""
        return {v.name: str(v.payload.version) for v in self.activated()}
