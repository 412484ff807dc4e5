"""Post-resolution projection of the graph onto consumers.

Once the search has produced a consistent graph, every consumer receives the
closure of the vertices it depends on, sorted by name, after checking that
each specification supports the consumer's platform.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from specresolve.core.dependency.constraints import Requirement
from specresolve.core.dependency.graph import DependencyGraph
from specresolve.core.dependency.provider import HeadStore
from specresolve.core.dependency.specification import Platform, Specification
from specresolve.exceptions import InvalidState, PlatformIncompatible

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Consumer:
    """A build target declaring its own top-level dependencies.

    Attributes:
        name: Target name, e.g. ``"App"``.
        requirements: Top-level requirements declared by the target.
        platform: Platform the target builds for. None disables the
            platform check.
    """

    name: str
    requirements: tuple[Requirement, ...] = ()
    platform: Platform | None = None

    @property
    def dependency_names(self) -> list[str]:
        return [r.name for r in self.requirements]


def validate_platform(specification: Specification, consumer: Consumer) -> None:
    """Ensure *specification* is usable on the consumer's platform.

    Raises:
        PlatformIncompatible: If none of the specification's platforms is
            supported by the consumer's platform.
    """
    if consumer.platform is None:
        return
    if not specification.supports_platform(consumer.platform):
        raise PlatformIncompatible(
            consumer.name,
            consumer.platform,
            str(specification),
            specification.available_platforms,
        )


def specifications_for(graph: DependencyGraph, consumer: Consumer) -> list[Specification]:
    """Collect the consumer's resolved closure, one entry per name, sorted."""
    by_name: dict[str, Specification] = {}
    for name in consumer.dependency_names:
        vertex = graph.vertex_named(name)
        if vertex is None or vertex.payload is None:
            raise InvalidState(f"`{name}` required by `{consumer.name}` was not resolved")
        for node in [vertex, *graph.recursive_successors(name)]:
            if node.payload is not None:
                by_name.setdefault(node.name, node.payload)
    return [by_name[name] for name in sorted(by_name)]


def project(
    graph: DependencyGraph,
    consumers: Iterable[Consumer],
    head_store: HeadStore | None = None,
) -> dict[Consumer, list[Specification]]:
    """Group the resolved specifications by consumer.

    Head versions are reported to *head_store* by root package name, only
    after every consumer passed the platform check.

    Raises:
        PlatformIncompatible: If a consumer receives a specification that
            does not support its platform.
    """
    result: dict[Consumer, list[Specification]] = {}
    for consumer in consumers:
        specs = specifications_for(graph, consumer)
        for spec in specs:
            validate_platform(spec, consumer)
        logger.debug("Target %s receives %d specification(s)", consumer.name, len(specs))
        result[consumer] = specs

    if head_store is not None:
        heads = {s.root_name for specs in result.values() for s in specs if s.version.head}
        for name in sorted(heads):
            head_store.store_head(name)
    return result
