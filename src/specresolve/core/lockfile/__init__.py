"""Project lockfile: reproducible resolutions.

The package is split into focused submodules:

- ``models``: Data classes (``LockedPackage``, ``LockfileMetadata``).
- ``lockfile``: The ``Lockfile`` class with package management,
  serialization, and conversion to locked dependencies.
- ``operations``: Deserialization (``from_dict``, ``from_json``, ``read``),
  validation, and diffing.
- ``factory``: The ``from_resolution`` factory method.

All public names are re-exported here.
"""

from specresolve.core.lockfile.models import LockedPackage, LockfileMetadata
from specresolve.core.lockfile.lockfile import Lockfile

# Attach operations to Lockfile as methods/classmethods
from specresolve.core.lockfile import operations as _ops
from specresolve.core.lockfile import factory as _factory

Lockfile.from_dict = classmethod(_ops._from_dict)
Lockfile.from_json = classmethod(_ops._from_json)
Lockfile.read = classmethod(_ops._read)
Lockfile.validate = _ops._validate
Lockfile.diff = _ops._diff
Lockfile.from_resolution = classmethod(_factory._from_resolution)

__all__ = [
    "Lockfile",
    "LockedPackage",
    "LockfileMetadata",
]
