"""specresolve exception hierarchy.

All public exceptions inherit from SpecResolveError, giving callers a single
base class to catch when they want to handle any specresolve-specific failure
without swallowing unrelated errors.

``ResolutionError`` groups the user-actionable "resolution failed" outcomes.
``InvalidState`` is deliberately outside that group: it signals a bug in the
calling code, not a problem with the user's dependency data.
"""

from __future__ import annotations

from typing import Any, Sequence


class SpecResolveError(Exception):
    """Base exception for all specresolve errors."""


class ResolutionError(SpecResolveError):
    """Raised when dependency resolution fails for a user-actionable reason.

    Covers missing packages, unsatisfiable version constraints, circular
    dependencies, and platform incompatibilities.
    """


class NoSpecificationFound(ResolutionError):
    """Raised when a dependency's root package has no usable version.

    Attributes:
        package_name: The name of the dependency that could not be found.
        reason: Optional detail on why no version qualified.
    """

    def __init__(self, package_name: str, reason: str = "") -> None:
        self.package_name = package_name
        self.reason = reason
        message = f"Unable to find a specification for `{package_name}`"
        if reason:
            message += f" ({reason})"
        super().__init__(message + ".")


class ResolutionConflict(ResolutionError):
    """Raised when the search exhausted every candidate combination.

    Attributes:
        conflicts: The conflict table recorded during the search, keyed by
            requirement name.
    """

    def __init__(self, conflicts: dict[str, Any]) -> None:
        self.conflicts = dict(conflicts)
        lines = ["Unable to satisfy the following requirements:"]
        for name in sorted(self.conflicts):
            lines.append("")
            lines.append(self.conflicts[name].describe())
        super().__init__("\n".join(lines))

    @property
    def package_names(self) -> list[str]:
        """Return the sorted root names of every package implicated."""
        return sorted({c.root_name for c in self.conflicts.values()})


class PlatformIncompatible(ResolutionError):
    """Raised when a resolved specification does not support a target's platform.

    Attributes:
        consumer_name: Name of the consumer (target) being projected.
        consumer_platform: The platform the consumer builds for.
        specification_name: Name and version of the offending specification.
        supported_platforms: Platforms the specification is available on.
    """

    def __init__(
        self,
        consumer_name: str,
        consumer_platform: Any,
        specification_name: str,
        supported_platforms: Sequence[Any],
    ) -> None:
        self.consumer_name = consumer_name
        self.consumer_platform = consumer_platform
        self.specification_name = specification_name
        self.supported_platforms = list(supported_platforms)
        platforms = " - ".join(str(p) for p in self.supported_platforms)
        super().__init__(
            f"The platform of the target `{consumer_name}` ({consumer_platform}) "
            f"is not compatible with `{specification_name}` which has a minimum "
            f"requirement of {platforms}."
        )


class CircularDependency(ResolutionError):
    """Raised when the dependencies of the resolved packages form a cycle.

    Attributes:
        vertices: Names of the vertices on the cycle, in edge order.
    """

    def __init__(self, vertices: Sequence[str]) -> None:
        self.vertices = list(vertices)
        super().__init__(
            "There is a circular dependency between "
            + " and ".join(self.vertices)
        )


class InvalidState(SpecResolveError):
    """Raised when the caller violated a contract of the resolver.

    For example, declaring an external-source dependency without
    pre-loading its pinned specification.
    """


class ManifestError(SpecResolveError):
    """Raised when a project manifest or index document is malformed."""


class LockfileError(SpecResolveError):
    """Raised when a lockfile cannot be parsed or is internally inconsistent."""


class SourceError(SpecResolveError):
    """Raised when a remote package index cannot be fetched."""
