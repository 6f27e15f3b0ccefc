"""
Match Analyzer

Fails the build when a `match` over an enum or a closed class hierarchy
stops handling every case.

Core components:
- UniverseBuilder: Enum members / closed subtypes a switch must handle
- CaseExtractor: Classifies each case label against that universe
- AssertionDetector: Decides whether the fallback arm opts into checking
- CoverageAnalyzer: Ordered list of unhandled cases
- DiagnosticReporter: Turns findings into error diagnostics

Usage:
    from match_analyzer import check_paths

    report = check_paths(["src/"])
    for d in report.diagnostics:
        print(d.format())
"""

from .assertions import FAILURE_IDIOMS, AssertionDetector, FailureIdiom
from .cases import CaseExtractor
from .checker import (
    CheckReport,
    check_paths,
    check_sources,
    describe_universe,
    print_diagnostics,
)
from .config import AnalyzerConfig
from .coverage import CoverageAnalyzer
from .diagnostics import Diagnostic, DiagnosticCode, DiagnosticReporter
from .engine import SwitchAnalyzer, SwitchReport
from .model import (
    CaseClause,
    ClauseKind,
    ClosedHierarchySubject,
    EnumSubject,
    SourceSpan,
    Universe,
    UniverseMember,
)
from .python_host import DeclarationIndex, collect_switches
from .universe import UniverseBuilder, UniverseResult

__all__ = [
    # Main entry points
    "check_paths",
    "check_sources",
    "describe_universe",
    "print_diagnostics",
    # Engine
    "AnalyzerConfig",
    "AssertionDetector",
    "CaseExtractor",
    "CoverageAnalyzer",
    "DiagnosticReporter",
    "SwitchAnalyzer",
    "UniverseBuilder",
    "FAILURE_IDIOMS",
    "FailureIdiom",
    # Python host
    "DeclarationIndex",
    "collect_switches",
    # Data structures
    "CaseClause",
    "CheckReport",
    "ClauseKind",
    "ClosedHierarchySubject",
    "Diagnostic",
    "DiagnosticCode",
    "EnumSubject",
    "SourceSpan",
    "SwitchReport",
    "Universe",
    "UniverseMember",
    "UniverseResult",
]
