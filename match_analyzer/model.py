"""
Data model for the exhaustiveness engine.

Two groups of types live here:

1. Engine types: subjects, the universe of cases, clause descriptors.
2. Host shapes: the plain data a host (see python_host) hands to the engine
   for one switch construct, so the engine never touches a syntax tree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Protocol, Sequence, Union


@dataclass(frozen=True)
class SourceSpan:
    """A location in analyzed source. Lines and columns are 1-based."""

    path: str
    line: int
    column: int
    end_line: Optional[int] = None
    end_column: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "line": self.line,
            "column": self.column,
            "end_line": self.end_line,
            "end_column": self.end_column,
        }

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.column}"


# --- Subjects -----------------------------------------------------------------


@dataclass(frozen=True)
class EnumSubject:
    """Switch subject whose static type is an enumeration."""

    type_name: str
    members: tuple[str, ...]
    aliases: Mapping[str, str] = field(default_factory=dict)
    nullable: bool = False


@dataclass(frozen=True)
class ClosedHierarchySubject:
    """Switch subject whose static type declares its permitted subtypes."""

    type_name: str
    permitted: tuple[str, ...]
    # Reference types: None may always reach the match
    nullable: bool = True


Subject = Union[EnumSubject, ClosedHierarchySubject]


# --- Universe -----------------------------------------------------------------


@dataclass(frozen=True)
class UniverseMember:
    """
    One case a checked switch must account for.

    For enums `name` is the member name. For hierarchies it is the qualified
    name of a leaf type, and `ancestors` lists the closed types above it
    (root first), any of which covers it when matched.
    """

    name: str
    ancestors: tuple[str, ...] = ()

    @property
    def display_name(self) -> str:
        return self.name

    def is_covered_by(self, target: str) -> bool:
        return target == self.name or target in self.ancestors


@dataclass(frozen=True)
class Universe:
    """Ordered set of cases for one subject."""

    subject: Subject
    members: tuple[UniverseMember, ...]
    # Every name a clause may legitimately match: members plus, for
    # hierarchies, the root and closed intermediate types
    targets: frozenset[str] = frozenset()

    @property
    def is_enum(self) -> bool:
        return isinstance(self.subject, EnumSubject)

    @property
    def member_names(self) -> list[str]:
        return [m.name for m in self.members]

    def canonical_target(self, name: str) -> Optional[str]:
        """Map a matched name to a universe target, following enum aliases."""
        if isinstance(self.subject, EnumSubject):
            name = self.subject.aliases.get(name, name)
        if name in self.targets:
            return name
        return None


# --- Clause descriptors -------------------------------------------------------


class ClauseKind(Enum):
    """What a single case label contributes to coverage."""

    UNIVERSE_PATTERN = "universe_pattern"
    WILDCARD = "wildcard"
    NULL_PATTERN = "null_pattern"
    UNSUPPORTED = "unsupported"


class UnsupportedReason(Enum):
    GUARD = "guard clause present"
    UNRECOGNIZED = "unrecognized clause kind"


@dataclass(frozen=True)
class CaseClause:
    """Canonical descriptor for one case label of a switch."""

    kind: ClauseKind
    span: SourceSpan
    source_text: str = ""
    target: Optional[str] = None
    reason: Optional[UnsupportedReason] = None
    guard_span: Optional[SourceSpan] = None

    @property
    def has_guard(self) -> bool:
        return self.guard_span is not None


# --- Host shapes --------------------------------------------------------------


class PatternShape(Enum):
    """Syntactic shape of a case label as seen by the host."""

    MEMBER = "member"  # value pattern naming an enum member
    TYPE = "type"  # class pattern with no refining sub-patterns
    WILDCARD = "wildcard"  # `_` or a bare capture
    NONE = "none"  # the None singleton
    OTHER = "other"


class ArgKind(Enum):
    """How an argument of a raised call relates to the switch subject."""

    SUBJECT = "subject"
    SUBJECT_TYPE = "subject_type"
    OTHER = "other"


@dataclass(frozen=True)
class RaiseShape:
    """A top-level `raise <target>(...)` in a clause body."""

    target: Optional[str]
    args: tuple[ArgKind, ...] = ()
    keywords: tuple[tuple[str, ArgKind], ...] = ()


@dataclass(frozen=True)
class ClauseShape:
    """
    One case label as supplied by the host.

    Or-patterns produce one shape per alternative; all alternatives of a
    clause share `clause_index`, `guard_span` and `raises`.
    """

    clause_index: int
    pattern: PatternShape
    span: SourceSpan
    source_text: str
    target: Optional[str] = None
    guard_span: Optional[SourceSpan] = None
    raises: tuple[RaiseShape, ...] = ()


@dataclass(frozen=True)
class SwitchConstruct:
    """A switch-like construct with its subject already resolved by the host."""

    span: SourceSpan
    subject_text: str
    subject_type: Optional[str]
    nullable: bool
    clauses: tuple[ClauseShape, ...]


class TypeOracle(Protocol):
    """Queries the engine needs answered about declared types."""

    def enum_members(self, type_name: str) -> Optional[Sequence[str]]:
        """Member names in declaration order, or None if not an enum."""
        ...

    def enum_aliases(self, type_name: str) -> Mapping[str, str]:
        """Alias name -> canonical member name."""
        ...

    def closed_subtypes(self, type_name: str) -> Optional[Sequence[str]]:
        """Permitted direct subtypes in declared order, or None if not closed."""
        ...

    def declaration_span(self, type_name: str) -> Optional[SourceSpan]:
        ...
