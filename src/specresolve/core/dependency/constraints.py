"""Versions, version constraints, and requirements.

This module provides the foundational value types for declaring what a
consumer or a specification needs: comparable ``Version`` values, the closed
set of constraint operators, and ``Requirement`` edges that name a package
and the versions acceptable for it.

Version syntax is dot-separated numeric components with an optional
prerelease suffix (``1.0``, ``1.2.3``, ``2.0-beta.1``). Trailing zero
components are insignificant, so ``1.0`` and ``1.0.0`` are equal.

Constraint operators: exact (``=``/``==``), not-equal (``!=``), range
(``>``, ``>=``, ``<``, ``<=``), pessimistic (``~>``), caret (``^``),
tilde (``~``) and wildcard (``*``). Comma-separated atoms are conjunctive.
"""

from __future__ import annotations

import enum
import functools
import re
from dataclasses import dataclass, field, replace


def root_name(name: str) -> str:
    """Return the root package name of a possibly subspec-qualified name."""
    return name.split("/", 1)[0]


# ---------------------------------------------------------------------------
# Version: comparable version value
# ---------------------------------------------------------------------------

_VERSION_RE = re.compile(
    r"^\s*(?P<release>\d+(?:\.\d+)*)"
    r"(?:-(?P<pre>[0-9A-Za-z][0-9A-Za-z.\-]*))?\s*$"
)


def _identifier_key(identifier: str) -> tuple[int, int | str]:
    # Numeric identifiers sort before alphanumeric ones.
    if identifier.isdigit():
        return (0, int(identifier))
    return (1, identifier)


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """A concrete version of a specification.

    Ordering is component-wise on the release segments, with prerelease
    versions sorting below their release counterpart. The ``head`` flag marks
    a version taken from an unreleased source; it is carried along but takes
    no part in equality, hashing or ordering.

    Attributes:
        segments: Numeric release components as written.
        prerelease: Dot-separated prerelease identifiers, empty for releases.
        head: True when the version stands for a bleeding-edge checkout.
    """

    segments: tuple[int, ...]
    prerelease: tuple[str, ...] = ()
    head: bool = False

    @classmethod
    def parse(cls, text: str | Version) -> Version:
        """Parse a version string such as ``"1.2"`` or ``"1.0-beta.2"``.

        Raises:
            ValueError: If the string is not a valid version.
        """
        if isinstance(text, Version):
            return text
        m = _VERSION_RE.match(str(text))
        if not m:
            raise ValueError(f"Invalid version: {text!r}")
        segments = tuple(int(part) for part in m.group("release").split("."))
        pre = m.group("pre")
        prerelease = tuple(pre.split(".")) if pre else ()
        return cls(segments=segments, prerelease=prerelease)

    @property
    def release(self) -> tuple[int, ...]:
        """Release segments with insignificant trailing zeros removed."""
        segments = list(self.segments)
        while segments and segments[-1] == 0:
            segments.pop()
        return tuple(segments)

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def sort_key(self) -> tuple:
        pre_key = tuple(_identifier_key(p) for p in self.prerelease)
        return (self.release, 0 if self.prerelease else 1, pre_key)

    def with_head(self, head: bool) -> Version:
        """Return a copy of this version with the ``head`` flag set to *head*."""
        if head == self.head:
            return self
        return replace(self, head=head)

    def bump(self) -> Version:
        """Return the exclusive upper bound used by the pessimistic operator.

        ``1.2.3`` bumps to ``1.3`` and ``1.2`` bumps to ``2``.
        """
        segments = list(self.segments)
        if len(segments) > 1:
            segments.pop()
        segments[-1] += 1
        return Version(segments=tuple(segments))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.sort_key() == other.sort_key()

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __hash__(self) -> int:
        return hash(self.sort_key())

    def __str__(self) -> str:
        text = ".".join(str(s) for s in self.segments)
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        return text

    def __repr__(self) -> str:
        suffix = ", head" if self.head else ""
        return f"Version({str(self)!r}{suffix})"


# ---------------------------------------------------------------------------
# Constraint kinds: a closed set evaluated by one pure function
# ---------------------------------------------------------------------------


class ConstraintOp(enum.Enum):
    """Supported version constraint operators."""

    EQ = "="
    NE = "!="
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="
    PESSIMISTIC = "~>"
    CARET = "^"
    TILDE = "~"
    ANY = "*"


_OP_ALIASES: dict[str, ConstraintOp] = {"==": ConstraintOp.EQ}

_CONSTRAINT_ATOM_RE = re.compile(
    r"^\s*(?P<op>~>|==|!=|>=|<=|=|>|<|\^|~)?\s*(?P<ver>[0-9][0-9A-Za-z.\-]*)\s*$"
)


def _evaluate(op: ConstraintOp, target: Version, version: Version) -> bool:
    """Evaluate a single constraint atom against a version."""
    if op is ConstraintOp.ANY:
        return True
    if op is ConstraintOp.EQ:
        return version == target
    if op is ConstraintOp.NE:
        return version != target
    if op is ConstraintOp.GT:
        return version > target
    if op is ConstraintOp.GE:
        return version >= target
    if op is ConstraintOp.LT:
        return version < target
    if op is ConstraintOp.LE:
        return version <= target
    if op is ConstraintOp.PESSIMISTIC:
        return target <= version < target.bump()
    if op is ConstraintOp.CARET:
        # Same major; with a zero major, same major.minor.
        width = 2 if target.release[:1] in ((), (0,)) else 1
        padded_t = target.segments + (0,) * 3
        padded_v = version.segments + (0,) * 3
        return padded_v[:width] == padded_t[:width] and version >= target
    if op is ConstraintOp.TILDE:
        padded_t = target.segments + (0,) * 3
        padded_v = version.segments + (0,) * 3
        return padded_v[:2] == padded_t[:2] and version >= target
    raise ValueError(f"Unknown operator: {op!r}")  # pragma: no cover


@dataclass(frozen=True)
class ConstraintAtom:
    """One ``operator version`` clause of a constraint."""

    op: ConstraintOp
    version: Version

    @classmethod
    def parse(cls, text: str) -> ConstraintAtom:
        stripped = text.strip()
        if stripped in ("", "*"):
            return cls(ConstraintOp.ANY, Version(segments=(0,)))
        m = _CONSTRAINT_ATOM_RE.match(stripped)
        if not m:
            raise ValueError(f"Invalid constraint atom: {text!r}")
        op_text = m.group("op") or "="
        op = _OP_ALIASES.get(op_text) or ConstraintOp(op_text)
        return cls(op, Version.parse(m.group("ver")))

    def satisfies(self, version: Version) -> bool:
        return _evaluate(self.op, self.version, version)

    def __str__(self) -> str:
        if self.op is ConstraintOp.ANY:
            return "*"
        return f"{self.op.value} {self.version}"


@dataclass(frozen=True)
class VersionConstraint:
    """A conjunction of constraint atoms, e.g. ``">= 1.0, < 2.0"``.

    Two constraints are equal when they parse to the same atoms, regardless
    of whitespace in the authored string.

    Attributes:
        raw: The constraint string as authored.
    """

    raw: str = "*"
    atoms: tuple[ConstraintAtom, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        parts = [p for p in self.raw.split(",") if p.strip()]
        atoms = tuple(ConstraintAtom.parse(p) for p in parts)
        object.__setattr__(
            self, "atoms", tuple(a for a in atoms if a.op is not ConstraintOp.ANY)
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VersionConstraint):
            return NotImplemented
        return self.atoms == other.atoms

    def __hash__(self) -> int:
        return hash(self.atoms)

    @property
    def is_any(self) -> bool:
        return not self.atoms

    @property
    def mentions_prerelease(self) -> bool:
        """True if any atom names a prerelease version."""
        return any(a.version.is_prerelease for a in self.atoms)

    def satisfies(self, version: Version | str) -> bool:
        """Check whether *version* satisfies every atom of this constraint.

        Raises:
            ValueError: If *version* is a string that is not a valid version.
        """
        version = Version.parse(version)
        return all(atom.satisfies(version) for atom in self.atoms)

    def __str__(self) -> str:
        if self.is_any:
            return "*"
        return ", ".join(str(a) for a in self.atoms)

    def __repr__(self) -> str:
        return f"VersionConstraint({self.raw!r})"


ANY_VERSION = VersionConstraint("*")


# ---------------------------------------------------------------------------
# Requirement: a named dependency edge
# ---------------------------------------------------------------------------


class RequirementKind(enum.Enum):
    """How the candidates of a requirement are found."""

    SOURCE_SEARCH = "source_search"
    EXTERNAL = "external"


@dataclass(frozen=True)
class ExternalSource:
    """A direct reference to a single, already materialized specification.

    Attributes:
        kind: Reference type, e.g. ``"git"`` or ``"path"``.
        location: URL or filesystem path of the reference.
        reference: Optional branch, tag or commit.
    """

    kind: str
    location: str
    reference: str = ""

    def __str__(self) -> str:
        text = f"{self.kind} `{self.location}`"
        if self.reference:
            text += f" @ {self.reference}"
        return text


_REQUIREMENT_RE = re.compile(
    r"^\s*(?P<name>[^\s()]+)\s*(?:\((?P<req>[^)]*)\))?\s*$"
)


@dataclass(frozen=True)
class Requirement:
    """A dependency on a package (or subspec) with acceptable versions.

    Attributes:
        name: Package name, optionally subspec-qualified (``"A/Sub"``).
        constraint: Versions that satisfy the requirement.
        allow_prerelease: Accept prerelease candidates even when the
            constraint names no prerelease version.
        head: Resolve against the bleeding-edge source of the package.
        external_source: When set, the requirement is resolved by looking up
            a single pinned specification rather than searching versions.
    """

    name: str
    constraint: VersionConstraint = ANY_VERSION
    allow_prerelease: bool = False
    head: bool = False
    external_source: ExternalSource | None = None

    @classmethod
    def parse(cls, text: str, constraint: str | None = None) -> Requirement:
        """Build a requirement from ``"Name (>= 1.0)"`` or ``("Name", ">= 1.0")``.

        The special constraint ``HEAD`` yields a head requirement that
        accepts any version.
        """
        m = _REQUIREMENT_RE.match(text)
        if not m:
            raise ValueError(f"Invalid requirement: {text!r}")
        req = constraint if constraint is not None else (m.group("req") or "")
        req = req.strip()
        if req.upper() == "HEAD":
            return cls(name=m.group("name"), head=True)
        return cls(name=m.group("name"), constraint=VersionConstraint(req or "*"))

    @property
    def root_name(self) -> str:
        return root_name(self.name)

    @property
    def kind(self) -> RequirementKind:
        if self.external_source is not None:
            return RequirementKind.EXTERNAL
        return RequirementKind.SOURCE_SEARCH

    @property
    def accepts_prerelease(self) -> bool:
        return self.allow_prerelease or self.constraint.mentions_prerelease

    def is_satisfied_by(self, version: Version) -> bool:
        return self.constraint.satisfies(version)

    def __str__(self) -> str:
        if self.external_source is not None:
            return f"{self.name} (from {self.external_source})"
        if self.head:
            return f"{self.name} (HEAD)"
        if self.constraint.is_any:
            return self.name
        return f"{self.name} ({self.constraint})"
