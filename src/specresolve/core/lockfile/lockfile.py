"""Lockfile core class: package management and serialization.

The ``Lockfile`` class is the in-memory form of a ``spec-lock.json`` file.
It records the version resolved for every package, the packages each target
received, and which of them came from a head source. Its
``locked_dependencies()`` feed the next resolution so that versions stay put
until explicitly updated.

Determinism guarantee: ``to_json()`` and ``to_dict()`` sort packages,
targets and keys, so two lockfiles with the same content always produce
byte-identical JSON.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

from specresolve import __version__
from specresolve.core.dependency.constraints import root_name
from specresolve.core.dependency.resolver import LockedDependency
from specresolve.core.lockfile.models import LockedPackage, LockfileMetadata


class Lockfile:
    """Resolved state of a project, analogous to a package manager lock.

    Example::

        lf = Lockfile()
        lf.add_package(LockedPackage(name="AFNetworking", version="2.6.3"))
        lf.set_target("App", ["AFNetworking"])
        lf.write(Path("spec-lock.json"))
    """

    LOCKFILE_VERSION: str = "1.0"

    def __init__(self) -> None:
        self._packages: dict[str, LockedPackage] = {}
        self._targets: dict[str, list[str]] = {}
        self._metadata = LockfileMetadata()

    # -- Package management -------------------------------------------------

    def add_package(self, package: LockedPackage) -> None:
        """Add a locked package, replacing any entry with the same name."""
        self._packages[package.name] = package
        self._metadata.total_packages = len(self._packages)

    def get_package(self, name: str) -> LockedPackage | None:
        return self._packages.get(name)

    @property
    def package_count(self) -> int:
        return len(self._packages)

    @property
    def package_names(self) -> list[str]:
        return sorted(self._packages)

    def set_target(self, name: str, package_names: Iterable[str]) -> None:
        self._targets[name] = sorted(package_names)

    @property
    def targets(self) -> dict[str, list[str]]:
        return {name: list(self._targets[name]) for name in sorted(self._targets)}

    def locked_dependencies(self, exclude: Iterable[str] = ()) -> list[LockedDependency]:
        """Return one lock per root package, skipping names in *exclude*.

        Head and external-source packages are not locked: their version
        comes from the source they point at.

        Args:
            exclude: Names to leave unlocked, e.g. packages being updated.
                Subspec names release the lock on their whole root package.
        """
        skipped = {root_name(name) for name in exclude}
        locks: dict[str, LockedDependency] = {}
        for name in sorted(self._packages):
            package = self._packages[name]
            root = package.root_name
            if root in skipped or package.head or package.external_source:
                continue
            locks.setdefault(root, LockedDependency.parse(root, package.version))
        return list(locks.values())

    # -- Serialization ------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize the lockfile to a dict matching the schema."""
        packages: dict[str, Any] = {}
        for name in sorted(self._packages):
            package = self._packages[name]
            entry: dict[str, Any] = {
                "version": package.version,
                "dependencies": sorted(package.dependencies),
            }
            if package.head:
                entry["head"] = True
            if package.external_source:
                entry["external_source"] = package.external_source
            packages[name] = entry

        return {
            "lockfile_version": self.LOCKFILE_VERSION,
            "generated_by": f"specresolve {__version__}",
            "packages": packages,
            "targets": self.targets,
            "metadata": {
                "total_packages": self._metadata.total_packages,
                "resolution_strategy": self._metadata.resolution_strategy,
            },
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)

    def write(self, path: Path) -> None:
        """Write the lockfile to disk as JSON, creating parent directories."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json() + "\n", encoding="utf-8")

    # -- Metadata access ----------------------------------------------------

    @property
    def metadata(self) -> LockfileMetadata:
        return self._metadata

    @metadata.setter
    def metadata(self, value: LockfileMetadata) -> None:
        self._metadata = value
