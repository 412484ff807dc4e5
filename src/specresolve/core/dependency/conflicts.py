"""Structured records of why a requirement could not be satisfied.

Conflicts are created by the search engine whenever a requirement clashes
with an activated package or runs out of candidates. They steer the ordering
heuristic towards troublesome packages and, when the search is exhausted,
become the body of the ``ResolutionConflict`` error.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from specresolve.core.dependency.constraints import Requirement, Version, root_name
from specresolve.core.dependency.graph import Vertex
from specresolve.core.dependency.specification import Specification


@dataclass
class Conflict:
    """Why requirements on one package name could not be satisfied.

    Attributes:
        name: The requirement name (package or subspec).
        requirements: Requirements involved, keyed by who made them: a
            consumer name or the name of the requiring vertex.
        existing: The activated specification that blocked a requirement,
            if any.
        locked_version: The version pinned by a lock, if the package is locked.
        possibilities: Candidates not yet tried when the conflict occurred.
        reason: Why no candidate exists at all, when that is the cause.
        chains: For requesters that are packages, the path of package names
            from the consumer that pulled them in down to the requester.
    """

    name: str
    requirements: dict[str, list[Requirement]] = field(default_factory=dict)
    existing: Specification | None = None
    locked_version: Version | None = None
    possibilities: list[Specification] = field(default_factory=list)
    reason: str = ""
    chains: dict[str, tuple[str, ...]] = field(default_factory=dict)

    @property
    def root_name(self) -> str:
        return root_name(self.name)

    def add_requirement(self, requested_by: str, requirement: Requirement) -> None:
        bucket = self.requirements.setdefault(requested_by, [])
        if requirement not in bucket:
            bucket.append(requirement)

    def merge(self, other: Conflict) -> None:
        """Fold a later conflict on the same name into this one."""
        for requested_by, requirements in other.requirements.items():
            for requirement in requirements:
                self.add_requirement(requested_by, requirement)
        if other.existing is not None:
            self.existing = other.existing
        if other.locked_version is not None:
            self.locked_version = other.locked_version
        self.possibilities = list(other.possibilities)
        if other.reason:
            self.reason = other.reason
        for requested_by, chain in other.chains.items():
            self.chains.setdefault(requested_by, chain)

    def describe(self) -> str:
        """Render the conflict as an indented, human-readable block."""
        lines = [f"Conflict on `{self.name}`:"]
        for requested_by in sorted(self.requirements):
            chain = " > ".join(self.chains.get(requested_by, (requested_by,)))
            for requirement in self.requirements[requested_by]:
                lines.append(f"  {chain} requires `{requirement}`")
        if self.reason:
            lines.append(f"  no candidates: {self.reason}")
        if self.existing is not None:
            lines.append(f"  already activated: {self.existing}")
        if self.locked_version is not None:
            lines.append(f"  locked to: {self.locked_version}")
        if self.possibilities:
            tried = ", ".join(str(p.version) for p in self.possibilities)
            lines.append(f"  untried candidates: {tried}")
        return "\n".join(lines)


def conflict_for(
    vertex: Vertex | None,
    requirement: Requirement,
    requested_by: str,
    *,
    existing: Specification | None = None,
    locked_version: Version | None = None,
    possibilities: list[Specification] | None = None,
    reason: str = "",
) -> Conflict:
    """Build a conflict for *requirement*, including those already on *vertex*.

    Requirements made by other vertices are attributed to the requiring
    vertex's name, top-level ones to the consumer that declared them.
    """
    conflict = Conflict(
        name=requirement.name,
        existing=existing,
        locked_version=locked_version,
        possibilities=list(possibilities or []),
        reason=reason,
    )
    if vertex is not None:
        for edge in vertex.explicit:
            conflict.add_requirement(edge.origin, edge.requirement)
        for edge in vertex.incoming:
            conflict.add_requirement(edge.origin, edge.requirement)
    conflict.add_requirement(requested_by, requirement)
    return conflict
