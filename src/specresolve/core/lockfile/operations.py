"""Lockfile operations: deserialization, validation, and diffing.

This module extends the ``Lockfile`` class (defined in ``lockfile.py``) with:

- **Deserialization:** ``from_dict``, ``from_json``, ``read`` (disk).
- **Validation:** internal consistency checks.
- **Diffing:** structured comparison of two lockfiles.

These are attached to the ``Lockfile`` class at import time (in
``__init__.py``) to keep each source file focused.
"""

from __future__ import annotations

import json
from collections import defaultdict
from pathlib import Path
from typing import Any

from specresolve.core.dependency.constraints import Version
from specresolve.core.lockfile.models import LockedPackage, LockfileMetadata
from specresolve.exceptions import LockfileError


def _from_dict(cls: type, data: dict[str, Any]) -> Any:
    """Deserialize a lockfile from a dict (parsed JSON).

    Fields not present in the dict use default values, so lockfiles written
    by older versions still load.

    Raises:
        LockfileError: If the document does not have the expected shape.
    """
    if not isinstance(data, dict):
        raise LockfileError("A lockfile must be a JSON object")
    packages = data.get("packages", {})
    targets = data.get("targets", {})
    if not isinstance(packages, dict) or not isinstance(targets, dict):
        raise LockfileError("`packages` and `targets` must be JSON objects")

    lf = cls()
    for name, entry in packages.items():
        if not isinstance(entry, dict) or "version" not in entry:
            raise LockfileError(f"Package {name!r} has no version")
        lf._packages[name] = LockedPackage(
            name=name,
            version=str(entry["version"]),
            dependencies=list(entry.get("dependencies", [])),
            head=bool(entry.get("head", False)),
            external_source=entry.get("external_source", ""),
        )
    for name, package_names in targets.items():
        lf._targets[name] = sorted(package_names)

    meta = data.get("metadata", {})
    lf._metadata = LockfileMetadata(
        total_packages=meta.get("total_packages", len(lf._packages)),
        resolution_strategy=meta.get("resolution_strategy", "backtracking"),
    )
    return lf


def _from_json(cls: type, json_str: str) -> Any:
    """Deserialize from a JSON string.

    Raises:
        LockfileError: If the string is not valid JSON.
    """
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as exc:
        raise LockfileError(f"Lockfile is not valid JSON: {exc}") from exc
    return cls.from_dict(data)


def _read(cls: type, path: Path) -> Any:
    """Read a lockfile from disk.

    Raises:
        FileNotFoundError: If the file does not exist.
        LockfileError: If the file is not a valid lockfile.
    """
    text = path.read_text(encoding="utf-8")
    return cls.from_json(text)


def _validate(self: Any) -> list[str]:
    """Validate the lockfile for internal consistency.

    Checks:

    1. **Versions parse:** every package version is a valid version.
    2. **Single version per root:** a package and its subspecs share one
       version.
    3. **Target completeness:** every package a target lists is locked.
    4. **Metadata consistency:** ``total_packages`` matches the entries.

    Returns:
        List of validation error messages. Empty means the lockfile is valid.
    """
    errors: list[str] = []

    versions_by_root: dict[str, set[Version]] = defaultdict(set)
    for name, package in self._packages.items():
        try:
            versions_by_root[package.root_name].add(Version.parse(package.version))
        except ValueError:
            errors.append(f"Package {name!r} has invalid version {package.version!r}")

    for root in sorted(versions_by_root):
        versions = versions_by_root[root]
        if len(versions) > 1:
            listed = ", ".join(sorted(str(v) for v in versions))
            errors.append(f"Package {root!r} is locked to several versions: {listed}")

    for target, names in self._targets.items():
        for name in names:
            if name not in self._packages:
                errors.append(f"Target {target!r} lists {name!r} which is not locked")

    if self._metadata.total_packages != len(self._packages):
        errors.append(
            f"Metadata total_packages ({self._metadata.total_packages}) "
            f"does not match actual count ({len(self._packages)})"
        )
    return errors


def _diff(self: Any, other: Any) -> dict[str, Any]:
    """Compare two lockfiles and return differences.

    - **added**: Packages present in ``other`` but not in ``self``.
    - **removed**: Packages present in ``self`` but not in ``other``.
    - **changed**: Packages present in both with a different version.

    Args:
        other: The lockfile to compare against (typically the newer one).
    """
    self_names = set(self._packages)
    other_names = set(other._packages)

    changes: list[dict[str, Any]] = []
    for name in sorted(self_names & other_names):
        old = self._packages[name]
        new = other._packages[name]
        if old.version != new.version:
            changes.append({"name": name, "old": old.version, "new": new.version})

    return {
        "added": sorted(other_names - self_names),
        "removed": sorted(self_names - other_names),
        "changed": changes,
    }
