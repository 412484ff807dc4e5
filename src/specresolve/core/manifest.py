"""YAML project manifest loading.

A manifest declares the package sources, the pinned specifications of
external-source dependencies, and the targets to resolve::

    sources:
      AFNetworking:
        - version: "2.6.3"
          platforms: {ios: "7.0"}
    source_urls:
      - https://example.org/index.json
    external:
      Internal:
        git: https://example.org/internal.git
        tag: v0.3
        version: "0.3"
    targets:
      - name: App
        platform: {ios: "9.0"}
        dependencies:
          AFNetworking: "~> 2.6"
          Internal: {git: https://example.org/internal.git}
    lockfile: spec-lock.json

Remote indices listed under ``source_urls`` are fetched while loading, so
everything is in memory before resolution starts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping

import yaml

from specresolve.core.dependency.projector import Consumer
from specresolve.core.dependency.provider import SpecificationSource
from specresolve.core.dependency.specification import Platform
from specresolve.core.sources.index import (
    parse_index,
    parse_requirements,
    parse_specification,
)
from specresolve.core.sources.memory import AggregateSource, InMemorySource, PinnedStore
from specresolve.core.sources.remote import fetch_index
from specresolve.exceptions import ManifestError

logger = logging.getLogger(__name__)

DEFAULT_LOCKFILE_NAME = "spec-lock.json"


@dataclass
class Project:
    """Everything a resolution run needs, loaded from a manifest.

    Attributes:
        consumers: The targets, in manifest order.
        source: Aggregate of the inline and remote package sources.
        pinned: Pinned specifications for external-source dependencies.
        lockfile_path: Where the lockfile is read from and written to.
        external_sources: Root name to external-source description.
    """

    consumers: list[Consumer]
    source: SpecificationSource
    pinned: PinnedStore
    lockfile_path: Path
    external_sources: dict[str, str] = field(default_factory=dict)


def _parse_platform(value: Any, target: str) -> Platform | None:
    if value is None:
        return None
    try:
        if isinstance(value, str):
            return Platform.parse(value)
        if isinstance(value, Mapping) and len(value) == 1:
            (name, version), = value.items()
            return Platform.parse(str(name), None if version is None else str(version))
    except ValueError as exc:
        raise ManifestError(f"Invalid platform for target `{target}`: {exc}") from exc
    raise ManifestError(f"Target `{target}` must declare exactly one platform")


def _parse_target(entry: Any) -> Consumer:
    if not isinstance(entry, Mapping) or "name" not in entry:
        raise ManifestError("Every target needs a `name`")
    name = str(entry["name"])
    return Consumer(
        name=name,
        requirements=parse_requirements(entry.get("dependencies"), f"target `{name}`"),
        platform=_parse_platform(entry.get("platform"), name),
    )


def parse_manifest(
    data: Any,
    base_dir: Path | None = None,
    fetch: Callable[[str], SpecificationSource] = fetch_index,
) -> Project:
    """Build a ``Project`` from an already parsed manifest document.

    Args:
        data: The parsed YAML document.
        base_dir: Directory relative paths are resolved against.
        fetch: Loader for the indices listed under ``source_urls``.

    Raises:
        ManifestError: If the document is malformed.
        SourceError: If a remote index cannot be fetched.
    """
    if not isinstance(data, Mapping):
        raise ManifestError("A manifest must be a YAML mapping")
    base_dir = base_dir or Path.cwd()

    targets = data.get("targets")
    if not isinstance(targets, list) or not targets:
        raise ManifestError("A manifest must declare at least one target")
    consumers = [_parse_target(t) for t in targets]
    names = [c.name for c in consumers]
    if len(set(names)) != len(names):
        raise ManifestError("Target names must be unique")

    sources: list[SpecificationSource] = [
        InMemorySource(parse_index(data.get("sources")), name="manifest")
    ]
    for url in data.get("source_urls") or ():
        sources.append(fetch(str(url)))

    pinned = PinnedStore()
    external_sources: dict[str, str] = {}
    external = data.get("external") or {}
    if not isinstance(external, Mapping):
        raise ManifestError("`external` must map package names to specifications")
    for name, entry in external.items():
        pinned.add(parse_specification(str(name), entry))
        location = next((entry[k] for k in ("git", "path", "http") if k in entry), "")
        external_sources[str(name)] = str(location)

    lockfile_path = base_dir / str(data.get("lockfile") or DEFAULT_LOCKFILE_NAME)
    logger.debug(
        "Manifest declares %d target(s) and %d source(s)", len(consumers), len(sources)
    )
    return Project(
        consumers=consumers,
        source=AggregateSource(sources),
        pinned=pinned,
        lockfile_path=lockfile_path,
        external_sources=external_sources,
    )


def load_manifest(
    path: Path,
    fetch: Callable[[str], SpecificationSource] = fetch_index,
) -> Project:
    """Read and parse the YAML manifest at *path*.

    Raises:
        ManifestError: If the file is not valid YAML or is malformed.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ManifestError(f"{path} is not valid YAML: {exc}") from exc
    return parse_manifest(data, base_dir=path.parent, fetch=fetch)
