"""
Universe Model Builder.

Turns the declared shape of a switch subject's type into the ordered set of
cases a checked switch must handle:

- enum: members in declaration order
- closed hierarchy: permitted subtypes expanded depth-first, a closed
  subtype contributing its own permitted subtypes in place

Closed declarations are walked as an arena of nodes (each holding the
indices of its children) with an explicit stack and a depth ceiling, so
cyclic declarations end in a diagnostic rather than a loop.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .config import DEFAULT_MAX_CLOSURE_DEPTH
from .diagnostics import DiagnosticCode
from .model import (
    ClosedHierarchySubject,
    EnumSubject,
    SourceSpan,
    TypeOracle,
    Universe,
    UniverseMember,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UniverseError:
    """A malformed closed declaration found while building a universe."""

    code: DiagnosticCode
    type_name: str
    span: Optional[SourceSpan] = None
    depth: Optional[int] = None


@dataclass(frozen=True)
class UniverseResult:
    """
    Outcome of building a universe.

    Exactly one of `universe` and `error` is set, or neither when the type is
    not a closed universe at all (the switch is then out of scope).
    """

    universe: Optional[Universe] = None
    error: Optional[UniverseError] = None

    @property
    def in_scope(self) -> bool:
        return self.universe is not None or self.error is not None


@dataclass
class _Node:
    name: str
    depth: int
    parent: Optional[int]
    children: list[int] = field(default_factory=list)


class UniverseBuilder:
    """Build (and cache, per instance) the universe of a subject type."""

    def __init__(self, oracle: TypeOracle, max_depth: int = DEFAULT_MAX_CLOSURE_DEPTH):
        self.oracle = oracle
        self.max_depth = max_depth
        self._cache: dict[tuple[str, bool], UniverseResult] = {}

    def build(self, type_name: str, nullable: bool = False) -> UniverseResult:
        """
        Build the universe for a subject type.

        Args:
            type_name: Qualified name of the subject's static type
            nullable: Whether the subject may be None

        Returns:
            UniverseResult with a universe, a declaration error, or neither
        """
        key = (type_name, nullable)
        if key not in self._cache:
            self._cache[key] = self._build(type_name, nullable)
        return self._cache[key]

    def _build(self, type_name: str, nullable: bool) -> UniverseResult:
        members = self.oracle.enum_members(type_name)
        if members is not None:
            return UniverseResult(universe=self._build_enum(type_name, members, nullable))

        permitted = self.oracle.closed_subtypes(type_name)
        if permitted is not None:
            return self._build_hierarchy(type_name, tuple(permitted))

        logger.debug(f"{type_name} is neither an enum nor declared closed")
        return UniverseResult()

    def _build_enum(self, type_name: str, members, nullable: bool) -> Universe:
        names = tuple(members)
        subject = EnumSubject(
            type_name=type_name,
            members=names,
            aliases=dict(self.oracle.enum_aliases(type_name)),
            nullable=nullable,
        )
        return Universe(
            subject=subject,
            members=tuple(UniverseMember(name) for name in names),
            targets=frozenset(names),
        )

    def _build_hierarchy(self, type_name: str, permitted: tuple[str, ...]) -> UniverseResult:
        arena = [_Node(type_name, depth=0, parent=None)]
        stack = [0]
        members: list[UniverseMember] = []
        seen: set[str] = set()
        targets = {type_name}

        while stack:
            index = stack.pop()
            node = arena[index]
            subtypes = permitted if index == 0 else self.oracle.closed_subtypes(node.name)

            if subtypes is None:
                targets.add(node.name)
                if node.name not in seen:
                    seen.add(node.name)
                    members.append(UniverseMember(node.name, self._ancestors(arena, index)))
                continue

            if not subtypes:
                return UniverseResult(error=UniverseError(
                    code=DiagnosticCode.CLOSED_EMPTY,
                    type_name=node.name,
                    span=self.oracle.declaration_span(node.name),
                ))

            if node.depth >= self.max_depth:
                logger.debug(f"Closure of {type_name} reached depth {node.depth} at {node.name}")
                return UniverseResult(error=UniverseError(
                    code=DiagnosticCode.CLOSED_DEPTH,
                    type_name=type_name,
                    span=self.oracle.declaration_span(type_name),
                    depth=self.max_depth,
                ))

            targets.add(node.name)
            for subtype in subtypes:
                arena.append(_Node(subtype, depth=node.depth + 1, parent=index))
                node.children.append(len(arena) - 1)
            # Reversed so the first declared child is expanded first
            stack.extend(reversed(node.children))

        subject = ClosedHierarchySubject(type_name=type_name, permitted=permitted)
        return UniverseResult(universe=Universe(
            subject=subject,
            members=tuple(members),
            targets=frozenset(targets),
        ))

    @staticmethod
    def _ancestors(arena: list[_Node], index: int) -> tuple[str, ...]:
        chain = []
        parent = arena[index].parent
        while parent is not None:
            chain.append(arena[parent].name)
            parent = arena[parent].parent
        return tuple(reversed(chain))
