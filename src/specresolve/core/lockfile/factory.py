"""Lockfile factory: constructing lockfiles from resolution results.

The normal workflow::

    result = resolve(consumers, source, locked_dependencies=previous.locked_dependencies())
    lockfile = Lockfile.from_resolution(result)
    lockfile.write(Path("spec-lock.json"))
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from specresolve.core.dependency.projector import Consumer
from specresolve.core.dependency.specification import Specification
from specresolve.core.lockfile.models import LockedPackage


def _from_resolution(
    cls: type,
    resolution: Mapping[Consumer, Sequence[Specification]],
    pinned_sources: Mapping[str, str] | None = None,
) -> Any:
    """Create a lockfile from the output of ``resolve()``.

    Args:
        resolution: Mapping from consumer to its resolved specifications.
        pinned_sources: Optional root name to external-source description
            for packages resolved from an external source.
    """
    pinned_sources = pinned_sources or {}
    lf = cls()
    for consumer, specs in resolution.items():
        for spec in specs:
            if lf.get_package(spec.name) is None:
                lf.add_package(LockedPackage(
                    name=spec.name,
                    version=str(spec.version),
                    dependencies=[str(r) for r in spec.all_dependencies()],
                    head=spec.version.head,
                    external_source=pinned_sources.get(spec.root_name, ""),
                ))
        lf.set_target(consumer.name, [s.name for s in specs])
    return lf
