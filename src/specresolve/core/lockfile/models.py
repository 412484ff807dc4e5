"""Lockfile data models: LockedPackage and LockfileMetadata.

Defines the data structures of the ``spec-lock.json`` lockfile format. These
are pure data holders with no business logic, safe to import without
circular-dependency concerns.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class LockedPackage:
    """A single resolved package (or subspec) entry in the lockfile.

    Attributes:
        name: Full specification name, e.g. ``"AFNetworking/Security"``.
        version: Resolved version string.
        dependencies: The specification's requirements, rendered as
            ``"Name (constraint)"`` strings.
        head: True if the package was resolved from a bleeding-edge source.
        external_source: Description of the external source, if any.
    """

    name: str
    version: str
    dependencies: list[str] = field(default_factory=list)
    head: bool = False
    external_source: str = ""

    @property
    def root_name(self) -> str:
        return self.name.split("/", 1)[0]


@dataclass
class LockfileMetadata:
    """Metadata section of the lockfile.

    Attributes:
        total_packages: Expected number of package entries. Used during
            validation to detect incomplete writes.
        resolution_strategy: The algorithm that produced the lockfile.
    """

    total_packages: int = 0
    resolution_strategy: str = "backtracking"
