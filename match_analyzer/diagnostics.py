"""
Diagnostic records and the reporter that produces them.

Every finding of the engine is an error-severity Diagnostic with a stable
code. The reporter maps clause descriptors, coverage results and
declaration problems to records; it never merges distinct problems.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from exhaustive_match import ExhaustiveMatch

from .model import (
    CaseClause,
    ClauseKind,
    SourceSpan,
    Universe,
    UniverseMember,
    UnsupportedReason,
)

SEVERITY = "error"
MEMBER_SEPARATOR = ", "


class DiagnosticCode(Enum):
    ENUM_INCOMPLETE = "EM-ENUM-INCOMPLETE"
    HIERARCHY_INCOMPLETE = "EM-HIERARCHY-INCOMPLETE"
    GUARD_UNSUPPORTED = "EM-GUARD-UNSUPPORTED"
    CLAUSE_UNSUPPORTED = "EM-CLAUSE-UNSUPPORTED"
    CLOSED_EMPTY = "EM-CLOSED-EMPTY"
    CLOSED_DEPTH = "EM-CLOSED-DEPTH"


MESSAGES = {
    DiagnosticCode.ENUM_INCOMPLETE: "Some values of the enum are not processed by switch: {missing}",
    DiagnosticCode.HIERARCHY_INCOMPLETE: "Some subtypes are not processed by switch: {missing}",
    DiagnosticCode.GUARD_UNSUPPORTED: "When clauses are not supported in an exhaustive switch",
    DiagnosticCode.CLAUSE_UNSUPPORTED: "Case clause type not supported in exhaustive switch: {clause}",
    DiagnosticCode.CLOSED_EMPTY: "Closed type declares no permitted subtypes: {type}",
    DiagnosticCode.CLOSED_DEPTH: "Closed type hierarchy exceeds maximum depth of {depth}: {type}",
}

# Declaration problems are reported once per declaration, not once per switch
CONFIGURATION_CODES = frozenset({DiagnosticCode.CLOSED_EMPTY, DiagnosticCode.CLOSED_DEPTH})


@dataclass(frozen=True)
class Diagnostic:
    """A finding about the analyzed code."""

    code: DiagnosticCode
    message: str
    locations: tuple[SourceSpan, ...]
    severity: str = SEVERITY

    @property
    def location(self) -> SourceSpan:
        return self.locations[0]

    def to_dict(self) -> dict:
        return {
            "code": self.code.value,
            "severity": self.severity,
            "message": self.message,
            "locations": [loc.to_dict() for loc in self.locations],
        }

    def format(self) -> str:
        return f"{self.location}: {self.severity} {self.code.value} {self.message}"


def make_diagnostic(code: DiagnosticCode, span: SourceSpan, **values: object) -> Diagnostic:
    return Diagnostic(
        code=code,
        message=MESSAGES[code].format(**values),
        locations=(span,),
    )


class DiagnosticReporter:
    """Turn engine findings for one switch into ordered diagnostics."""

    def report(
        self,
        switch_span: SourceSpan,
        universe: Universe,
        clauses: Sequence[CaseClause],
        missing: Sequence[UniverseMember],
    ) -> list[Diagnostic]:
        """
        Diagnostics for one checked switch.

        Clause diagnostics come first in source order, then the coverage
        diagnostic. An unrecognized clause withholds the coverage diagnostic
        because the covered set is then indeterminate.
        """
        diagnostics = [
            d for d in (self.unsupported(clause) for clause in clauses) if d is not None
        ]

        indeterminate = any(
            c.reason is UnsupportedReason.UNRECOGNIZED for c in clauses
        )
        if missing and not indeterminate:
            diagnostics.append(self.coverage(switch_span, universe, missing))

        return diagnostics

    def coverage(
        self,
        switch_span: SourceSpan,
        universe: Universe,
        missing: Sequence[UniverseMember],
    ) -> Diagnostic:
        code = (
            DiagnosticCode.ENUM_INCOMPLETE
            if universe.is_enum
            else DiagnosticCode.HIERARCHY_INCOMPLETE
        )
        names = MEMBER_SEPARATOR.join(m.display_name for m in missing)
        return make_diagnostic(code, switch_span, missing=names)

    def unsupported(self, clause: CaseClause) -> Optional[Diagnostic]:
        match clause.kind:
            case ClauseKind.UNIVERSE_PATTERN | ClauseKind.WILDCARD | ClauseKind.NULL_PATTERN:
                return None
            case ClauseKind.UNSUPPORTED:
                pass
            case _:
                raise ExhaustiveMatch.failed(clause.kind)

        match clause.reason:
            case UnsupportedReason.GUARD:
                return make_diagnostic(
                    DiagnosticCode.GUARD_UNSUPPORTED,
                    clause.guard_span or clause.span,
                )
            case UnsupportedReason.UNRECOGNIZED:
                return make_diagnostic(
                    DiagnosticCode.CLAUSE_UNSUPPORTED,
                    clause.span,
                    clause=clause.source_text,
                )
            case _:
                raise ExhaustiveMatch.failed(clause.reason)

    def configuration(
        self,
        code: DiagnosticCode,
        type_name: str,
        span: SourceSpan,
        depth: Optional[int] = None,
    ) -> Diagnostic:
        return make_diagnostic(code, span, type=type_name, depth=depth)
