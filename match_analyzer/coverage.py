"""
Coverage Analyzer.

Universe minus the targets matched by clauses, in universe order. A target
naming a closed intermediate type (or the subject type itself) covers every
member beneath it. None is never a universe member, so it is never missing.
"""

from typing import Sequence

from .model import CaseClause, ClauseKind, Universe, UniverseMember


class CoverageAnalyzer:
    """Compute the members of a universe left unhandled by a switch."""

    def covered_targets(self, clauses: Sequence[CaseClause]) -> set[str]:
        # Guarded and unsupported clauses never count: they may not match
        return {
            c.target
            for c in clauses
            if c.kind is ClauseKind.UNIVERSE_PATTERN and c.target is not None
        }

    def missing(
        self, universe: Universe, clauses: Sequence[CaseClause]
    ) -> tuple[UniverseMember, ...]:
        """
        Ordered Coverage Result for a switch.

        Matching a member more than once is harmless; removal is idempotent.
        """
        targets = self.covered_targets(clauses)
        return tuple(
            member
            for member in universe.members
            if not any(member.is_covered_by(t) for t in targets)
        )
