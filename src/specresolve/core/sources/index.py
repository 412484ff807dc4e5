"""Parsing of package index documents into specifications.

An index maps each root package name to a list of version entries::

    {
      "AFNetworking": [
        {
          "version": "2.6.3",
          "platforms": {"ios": "7.0", "osx": "10.9"},
          "dependencies": {"Reachability": ">= 3.0"},
          "subspecs": [{"name": "Security", "dependencies": {}}],
          "default_subspecs": ["Security"]
        }
      ]
    }

The same shape is used by the ``sources`` block of a project manifest and by
remote JSON indices.
"""

from __future__ import annotations

from typing import Any, Mapping

from specresolve.core.dependency.constraints import (
    ExternalSource,
    Requirement,
    Version,
    VersionConstraint,
)
from specresolve.core.dependency.specification import Platform, Specification
from specresolve.exceptions import ManifestError

_EXTERNAL_KEYS = ("git", "path", "http")
_REFERENCE_KEYS = ("tag", "branch", "commit")


def parse_requirement(name: str, value: Any) -> Requirement:
    """Parse one ``name: value`` dependency entry.

    *value* may be a constraint string, None or ``""`` (any version),
    ``"HEAD"``, or a mapping with a ``git``/``path``/``http`` key for an
    external source.

    Raises:
        ManifestError: If the entry is malformed.
    """
    try:
        if value is None:
            return Requirement(name=name)
        if isinstance(value, Mapping):
            return _parse_external(name, value)
        if isinstance(value, (list, tuple)):
            value = ", ".join(str(v) for v in value)
        return Requirement.parse(name, str(value))
    except ValueError as exc:
        raise ManifestError(f"Invalid dependency `{name}`: {exc}") from exc


def _parse_external(name: str, value: Mapping[str, Any]) -> Requirement:
    kind = next((k for k in _EXTERNAL_KEYS if k in value), None)
    if kind is None:
        return Requirement(
            name=name,
            constraint=VersionConstraint(str(value.get("version") or "*")),
            allow_prerelease=bool(value.get("prerelease", False)),
            head=bool(value.get("head", False)),
        )
    reference = next((str(value[k]) for k in _REFERENCE_KEYS if k in value), "")
    return Requirement(
        name=name,
        external_source=ExternalSource(kind, str(value[kind]), reference),
    )


def parse_requirements(data: Any, context: str) -> tuple[Requirement, ...]:
    if data is None:
        return ()
    if not isinstance(data, Mapping):
        raise ManifestError(f"`dependencies` of {context} must be a mapping")
    return tuple(parse_requirement(str(name), value) for name, value in data.items())


def parse_platforms(data: Any, context: str) -> tuple[Platform, ...]:
    if data is None:
        return ()
    if not isinstance(data, Mapping):
        raise ManifestError(f"`platforms` of {context} must be a mapping")
    try:
        return tuple(
            Platform.parse(str(name), None if target is None else str(target))
            for name, target in data.items()
        )
    except ValueError as exc:
        raise ManifestError(f"Invalid platform in {context}: {exc}") from exc


def parse_default_subspecs(data: Any, context: str) -> tuple[str, ...]:
    """Accept a single subspec name or a list of names."""
    if data is None:
        return ()
    if isinstance(data, str):
        return (data,)
    if not isinstance(data, list):
        raise ManifestError(f"`default_subspecs` of {context} must be a name or a list")
    return tuple(str(s) for s in data)


def _parse_subspec(entry: Any, version: Version, context: str) -> Specification:
    if not isinstance(entry, Mapping) or "name" not in entry:
        raise ManifestError(f"Every subspec of {context} needs a `name`")
    name = str(entry["name"])
    where = f"{context}/{name}"
    return Specification(
        name=name,
        version=version,
        dependencies=parse_requirements(entry.get("dependencies"), where),
        platforms=parse_platforms(entry.get("platforms"), where),
        subspecs=tuple(_parse_subspec(s, version, where) for s in entry.get("subspecs") or ()),
        default_subspecs=parse_default_subspecs(entry.get("default_subspecs"), where),
    )


def parse_specification(name: str, entry: Any) -> Specification:
    """Parse one version entry of package *name*.

    Raises:
        ManifestError: If the entry is malformed.
    """
    if not isinstance(entry, Mapping) or "version" not in entry:
        raise ManifestError(f"Every entry of `{name}` needs a `version`")
    try:
        version = Version.parse(str(entry["version"]))
    except ValueError as exc:
        raise ManifestError(f"Invalid version for `{name}`: {exc}") from exc
    context = f"`{name} ({version})`"
    return Specification(
        name=name,
        version=version,
        dependencies=parse_requirements(entry.get("dependencies"), context),
        platforms=parse_platforms(entry.get("platforms"), context),
        subspecs=tuple(_parse_subspec(s, version, context) for s in entry.get("subspecs") or ()),
        default_subspecs=parse_default_subspecs(entry.get("default_subspecs"), context),
    )


def parse_index(data: Any) -> list[Specification]:
    """Parse a whole index document into a flat list of specifications.

    Raises:
        ManifestError: If the document is not a mapping of name to entries.
    """
    if data is None:
        return []
    if not isinstance(data, Mapping):
        raise ManifestError("A package index must map package names to version lists")
    specs: list[Specification] = []
    for name, entries in data.items():
        if isinstance(entries, Mapping):
            entries = [entries]
        if not isinstance(entries, list):
            raise ManifestError(f"`{name}` must list its versions")
        specs.extend(parse_specification(str(name), e) for e in entries)
    return specs
