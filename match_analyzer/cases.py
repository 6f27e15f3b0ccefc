"""
Case Extractor.

Classifies each case label of a switch against the subject's universe.
A label either names a universe target, is a wildcard, is the None
singleton on a nullable subject, or is unsupported (guarded, or a shape
the engine does not reason about).
"""

import logging
from typing import Optional, Sequence

from exhaustive_match import ExhaustiveMatch

from .model import (
    CaseClause,
    ClauseKind,
    ClauseShape,
    PatternShape,
    Universe,
    UnsupportedReason,
)

logger = logging.getLogger(__name__)


class CaseExtractor:
    """Turn host clause shapes into canonical clause descriptors."""

    def __init__(self, universe: Universe):
        self.universe = universe

    @staticmethod
    def find_fallback(shapes: Sequence[ClauseShape]) -> Optional[ClauseShape]:
        """The last unguarded wildcard label, which every value reaches."""
        for shape in reversed(shapes):
            if shape.pattern is PatternShape.WILDCARD and shape.guard_span is None:
                return shape
        return None

    def extract(self, shapes: Sequence[ClauseShape]) -> list[CaseClause]:
        """
        Classify clause shapes in source order.

        A guarded clause yields a single GUARD descriptor however many
        alternatives its pattern has; every other label yields its own
        descriptor.
        """
        clauses: list[CaseClause] = []
        guarded: set[int] = set()

        for shape in shapes:
            if shape.guard_span is not None:
                if shape.clause_index not in guarded:
                    guarded.add(shape.clause_index)
                    clauses.append(CaseClause(
                        kind=ClauseKind.UNSUPPORTED,
                        span=shape.span,
                        source_text=shape.source_text,
                        reason=UnsupportedReason.GUARD,
                        guard_span=shape.guard_span,
                    ))
                continue

            clauses.append(self._classify(shape))

        return clauses

    def _classify(self, shape: ClauseShape) -> CaseClause:
        match shape.pattern:
            case PatternShape.WILDCARD:
                return CaseClause(ClauseKind.WILDCARD, shape.span, shape.source_text)
            case PatternShape.NONE:
                if self.universe.subject.nullable:
                    return CaseClause(ClauseKind.NULL_PATTERN, shape.span, shape.source_text)
            case PatternShape.MEMBER:
                if self.universe.is_enum:
                    target = self._enum_target(shape.target)
                    if target is not None:
                        return self._pattern(shape, target)
            case PatternShape.TYPE:
                if not self.universe.is_enum and shape.target is not None:
                    target = self.universe.canonical_target(shape.target)
                    if target is not None:
                        return self._pattern(shape, target)
            case PatternShape.OTHER:
                pass
            case _:
                raise ExhaustiveMatch.failed(shape.pattern)

        logger.debug(f"Unrecognized clause {shape.source_text!r} at {shape.span}")
        return CaseClause(
            kind=ClauseKind.UNSUPPORTED,
            span=shape.span,
            source_text=shape.source_text,
            reason=UnsupportedReason.UNRECOGNIZED,
        )

    def _enum_target(self, reference: Optional[str]) -> Optional[str]:
        """Member name for a qualified `Enum.MEMBER` reference of the subject's enum."""
        if reference is None or "." not in reference:
            return None
        owner, member = reference.rsplit(".", 1)
        if owner != self.universe.subject.type_name:
            return None
        return self.universe.canonical_target(member)

    @staticmethod
    def _pattern(shape: ClauseShape, target: str) -> CaseClause:
        return CaseClause(
            kind=ClauseKind.UNIVERSE_PATTERN,
            span=shape.span,
            source_text=shape.source_text,
            target=target,
        )
