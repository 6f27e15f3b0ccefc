"""
Per-switch analysis.

Universe Model Builder and Case Extractor feed the Assertion Detector and
Coverage Analyzer; the Diagnostic Reporter turns the findings into records.
All state for one switch lives in a single analyze() call.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .assertions import AssertionDetector
from .cases import CaseExtractor
from .config import AnalyzerConfig
from .coverage import CoverageAnalyzer
from .diagnostics import Diagnostic, DiagnosticReporter
from .model import SourceSpan, SwitchConstruct, TypeOracle, UniverseMember
from .universe import UniverseBuilder

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwitchReport:
    """What the engine concluded about one switch construct."""

    span: SourceSpan
    subject_type: Optional[str]
    checked: bool
    idiom: Optional[str] = None
    missing: tuple[UniverseMember, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()

    def to_dict(self) -> dict:
        return {
            "location": self.span.to_dict(),
            "subject_type": self.subject_type,
            "checked": self.checked,
            "idiom": self.idiom,
            "missing": [m.display_name for m in self.missing],
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


class SwitchAnalyzer:
    """Check switch constructs against the universes of their subjects."""

    def __init__(
        self,
        oracle: TypeOracle,
        config: Optional[AnalyzerConfig] = None,
        universe_builder: Optional[UniverseBuilder] = None,
    ):
        self.config = config or AnalyzerConfig()
        self.oracle = oracle
        self.universes = universe_builder or UniverseBuilder(
            oracle, max_depth=self.config.max_closure_depth
        )
        self.detector = AssertionDetector(self.config.failure_idioms)
        self.coverage = CoverageAnalyzer()
        self.reporter = DiagnosticReporter()

    def analyze(self, switch: SwitchConstruct) -> SwitchReport:
        """
        Analyze one switch construct.

        Switches whose subject is not a closed universe, or whose fallback
        arm is not an exhaustiveness assertion, are out of scope and come
        back unchecked with no diagnostics.
        """
        unchecked = SwitchReport(span=switch.span, subject_type=switch.subject_type, checked=False)

        if switch.subject_type is None:
            logger.debug(f"Switch at {switch.span}: subject {switch.subject_text!r} has no known type")
            return unchecked

        result = self.universes.build(switch.subject_type, nullable=switch.nullable)
        if not result.in_scope:
            return unchecked

        subject_is_enum = result.universe is not None and result.universe.is_enum
        fallback = CaseExtractor.find_fallback(switch.clauses)
        idiom = self.detector.detect(fallback, subject_is_enum)
        if idiom is None:
            logger.debug(f"Switch at {switch.span} has no exhaustiveness assertion")
            return unchecked

        if result.error is not None:
            error = result.error
            diagnostic = self.reporter.configuration(
                error.code,
                error.type_name,
                error.span or switch.span,
                depth=error.depth,
            )
            return SwitchReport(
                span=switch.span,
                subject_type=switch.subject_type,
                checked=True,
                idiom=idiom.name,
                diagnostics=(diagnostic,),
            )

        universe = result.universe
        clauses = CaseExtractor(universe).extract(switch.clauses)
        missing = self.coverage.missing(universe, clauses)
        diagnostics = self.reporter.report(switch.span, universe, clauses, missing)

        logger.debug(
            f"Switch at {switch.span} on {switch.subject_type}: "
            f"{len(universe.members) - len(missing)}/{len(universe.members)} cases handled"
        )
        return SwitchReport(
            span=switch.span,
            subject_type=switch.subject_type,
            checked=True,
            idiom=idiom.name,
            missing=missing,
            diagnostics=tuple(diagnostics),
        )
