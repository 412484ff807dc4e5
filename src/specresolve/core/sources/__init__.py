"""Package sources, pinned specifications, and head-usage records.

- ``index``: parsing of index documents into specifications.
- ``memory``: in-memory implementations of the resolver's collaborators.
- ``remote``: fetching JSON indices over HTTP before resolution.
"""

from specresolve.core.sources.index import (
    parse_index,
    parse_requirement,
    parse_requirements,
    parse_specification,
)
from specresolve.core.sources.memory import (
    AggregateSource,
    HeadRegistry,
    InMemorySource,
    PinnedStore,
)
from specresolve.core.sources.remote import fetch_index

__all__ = [
    "AggregateSource",
    "HeadRegistry",
    "InMemorySource",
    "PinnedStore",
    "fetch_index",
    "parse_index",
    "parse_requirement",
    "parse_requirements",
    "parse_specification",
]
