"""Specifications, platforms, and package sets.

A ``Specification`` is one concrete version of a package: its identity, its
declared sub-dependencies, the platforms it supports, and any nested
subspecs. A ``PackageSet`` collects every known version of one root name.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable

from specresolve.core.dependency.constraints import (
    Requirement,
    Version,
    VersionConstraint,
    root_name,
)


# ---------------------------------------------------------------------------
# Platform
# ---------------------------------------------------------------------------

_PLATFORM_ALIASES: dict[str, str] = {"macos": "osx"}

_PLATFORM_DISPLAY: dict[str, str] = {
    "ios": "iOS",
    "osx": "macOS",
    "tvos": "tvOS",
    "watchos": "watchOS",
}

KNOWN_PLATFORMS: tuple[str, ...] = ("ios", "osx", "tvos", "watchos")


@dataclass(frozen=True)
class Platform:
    """A platform name with an optional minimum deployment target.

    Attributes:
        name: Normalized lowercase platform name (``"ios"``, ``"osx"``, ...).
        deployment_target: Minimum OS version, or None for any.
    """

    name: str
    deployment_target: Version | None = None

    @classmethod
    def parse(cls, name: str, deployment_target: str | Version | None = None) -> Platform:
        key = name.strip().lower()
        key = _PLATFORM_ALIASES.get(key, key)
        target = None
        if deployment_target not in (None, ""):
            target = Version.parse(str(deployment_target))
        return cls(name=key, deployment_target=target)

    def supports(self, other: Platform) -> bool:
        """Whether a consumer on this platform can use code built for *other*.

        Names must match; when both sides carry a deployment target, *other*
        must not require a newer OS than this platform targets.
        """
        if other.name != self.name:
            return False
        if self.deployment_target is None or other.deployment_target is None:
            return True
        return other.deployment_target <= self.deployment_target

    def __str__(self) -> str:
        label = _PLATFORM_DISPLAY.get(self.name, self.name)
        if self.deployment_target is not None:
            return f"{label} {self.deployment_target}"
        return label


# ---------------------------------------------------------------------------
# Specification
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Specification:
    """One version of a package, or a subspec materialized from one.

    Nested entries in ``subspecs`` carry their short name (``"Sub"``); once
    materialized through ``subspec_by_name`` a subspec carries its full
    ``Root/Sub`` name, the root's version, its parent's dependencies in
    addition to its own, and its parent's platforms unless it declares some.

    Attributes:
        name: Full name, ``Root`` or ``Root/Sub[/Nested]``.
        version: Version of the root specification.
        dependencies: Declared sub-dependencies.
        platforms: Declared supported platforms. Empty means all platforms.
        subspecs: Nested subspec declarations.
        default_subspecs: Short names of the subspecs pulled in when the
            specification itself is required. Empty means all of them.
    """

    name: str
    version: Version
    dependencies: tuple[Requirement, ...] = ()
    platforms: tuple[Platform, ...] = ()
    subspecs: tuple[Specification, ...] = ()
    default_subspecs: tuple[str, ...] = ()

    @property
    def root_name(self) -> str:
        return root_name(self.name)

    @property
    def is_subspec(self) -> bool:
        return "/" in self.name

    @property
    def available_platforms(self) -> tuple[Platform, ...]:
        if self.platforms:
            return self.platforms
        return tuple(Platform(name) for name in KNOWN_PLATFORMS)

    def supports_platform(self, platform: Platform) -> bool:
        return any(platform.supports(p) for p in self.available_platforms)

    def subspec_by_name(self, name: str) -> Specification | None:
        """Return the specification or subspec with the full *name*.

        Returns:
            ``self`` when *name* is this specification's own name, the
            materialized subspec when it exists, otherwise None.
        """
        if name == self.name:
            return self
        prefix = self.name + "/"
        if not name.startswith(prefix):
            return None
        current: Specification = self
        for part in name[len(prefix):].split("/"):
            child = next((s for s in current.subspecs if s.name == part), None)
            if child is None:
                return None
            current = Specification(
                name=f"{current.name}/{part}",
                version=current.version,
                dependencies=current.dependencies + child.dependencies,
                platforms=child.platforms or current.platforms,
                subspecs=child.subspecs,
                default_subspecs=child.default_subspecs,
            )
        return current

    def subspec_dependencies(self) -> tuple[Requirement, ...]:
        """Exact-version requirements on the subspecs this specification pulls in."""
        names = self.default_subspecs or tuple(s.name for s in self.subspecs)
        exact = VersionConstraint(f"= {self.version}")
        return tuple(
            Requirement(
                name=f"{self.name}/{short}",
                constraint=exact,
                head=self.version.head,
            )
            for short in names
        )

    def all_dependencies(self) -> tuple[Requirement, ...]:
        return self.dependencies + self.subspec_dependencies()

    def with_head(self, head: bool) -> Specification:
        if self.version.head == head:
            return self
        return replace(self, version=self.version.with_head(head))

    def __str__(self) -> str:
        suffix = " HEAD" if self.version.head else ""
        return f"{self.name} ({self.version}{suffix})"


# ---------------------------------------------------------------------------
# PackageSet
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PackageSet:
    """Every known version of one root package, sorted oldest first.

    Attributes:
        name: Root package name.
        specifications: Specifications ordered by ascending version, at most
            one per version.
    """

    name: str
    specifications: tuple[Specification, ...] = ()

    @classmethod
    def from_specifications(
        cls, name: str, specifications: Iterable[Specification]
    ) -> PackageSet:
        """Build a set, keeping the first specification seen for each version."""
        by_version: dict[Version, Specification] = {}
        for spec in specifications:
            by_version.setdefault(spec.version, spec)
        ordered = sorted(by_version.values(), key=lambda s: s.version)
        return cls(name=name, specifications=tuple(ordered))

    @classmethod
    def external(cls, specification: Specification) -> PackageSet:
        """A set holding just one pinned specification."""
        return cls(name=specification.root_name, specifications=(specification,))

    def merge(self, other: PackageSet) -> PackageSet:
        return PackageSet.from_specifications(
            self.name, self.specifications + other.specifications
        )

    @property
    def versions(self) -> list[Version]:
        return [s.version for s in self.specifications]

    @property
    def highest(self) -> Specification | None:
        return self.specifications[-1] if self.specifications else None

    def __len__(self) -> int:
        return len(self.specifications)
