"""
Exhaustive Match Checker - run the engine over Python source files.

The problem: a `match` over an enum or a closed class hierarchy with a
`case _: raise ...` fallback compiles and runs fine after someone adds a new
member. The new member silently lands in the fallback at runtime.

This module finds those switches before runtime by:
1. Indexing the declarations (enums, @closed classes, imports) of every file
2. Resolving the static type of each `match` subject from its annotation
3. Checking each switch whose fallback is an exhaustiveness assertion

Usage:
    match-analyzer check src/

    # Or programmatically
    from match_analyzer.checker import check_paths
    report = check_paths(["src/"])

Example:
    >>> report = check_paths(["shapes.py"])
    >>> for d in report.diagnostics:
    ...     print(d.format())
    shapes.py:24:5: error EM-HIERARCHY-INCOMPLETE Some subtypes are not processed by switch: shapes.Triangle
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .config import AnalyzerConfig
from .diagnostics import CONFIGURATION_CODES, Diagnostic
from .engine import SwitchAnalyzer, SwitchReport
from .model import Universe
from .python_host import (
    DeclarationIndex,
    collect_switches,
    module_name_for,
    package_directories,
)
from .universe import UniverseBuilder, UniverseResult

logger = logging.getLogger(__name__)

SKIPPED_DIRECTORIES = {"__pycache__", ".git", ".tox", ".venv", "venv", "node_modules"}


@dataclass
class CheckReport:
    """Outcome of checking a set of files."""

    diagnostics: list[Diagnostic] = field(default_factory=list)
    switches: list[SwitchReport] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    files_analyzed: int = 0

    @property
    def switches_checked(self) -> int:
        return sum(1 for s in self.switches if s.checked)

    def by_code(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for d in self.diagnostics:
            counts[d.code.value] = counts.get(d.code.value, 0) + 1
        return dict(sorted(counts.items()))

    def to_dict(self) -> dict:
        return {
            "files_analyzed": self.files_analyzed,
            "switches_found": len(self.switches),
            "switches_checked": self.switches_checked,
            "total_diagnostics": len(self.diagnostics),
            "by_code": self.by_code(),
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


def build_index(
    sources: dict[str, str],
    config: AnalyzerConfig,
    warnings: list[str],
) -> DeclarationIndex:
    """
    Index every parseable source; syntax errors become warnings.

    Package directories are taken from the `__init__.py` paths among the
    sources, then from the filesystem. Two files with the same module name
    are both checked; imports of that name resolve to the later one.
    """
    index = DeclarationIndex(closed_decorators=config.closed_decorators)
    packages = package_directories(sources)
    indexed: dict[str, str] = {}
    for path, source in sources.items():
        name = module_name_for(path, packages)
        try:
            index.add_module(source, path, module_name=name)
        except SyntaxError as e:
            warnings.append(f"Syntax error in {path}: {e.msg} (line {e.lineno})")
            logger.warning(f"Syntax error in {path}: {e.msg} (line {e.lineno})")
            continue
        if name in indexed:
            warnings.append(
                f"Module {name} defined by both {indexed[name]} and {path}; "
                f"imports of {name} resolve to {path}"
            )
        indexed[name] = path
    return index


def check_sources(
    sources: dict[str, str],
    config: Optional[AnalyzerConfig] = None,
) -> CheckReport:
    """
    Check in-memory sources.

    Args:
        sources: Mapping of file path -> source text. Paths name the modules
            (see python_host.module_name_for; an `__init__.py` key marks its
            directory as a package) and appear in diagnostics.
        config: Analyzer settings

    Returns:
        CheckReport with diagnostics in file order, then source order
    """
    config = config or AnalyzerConfig()
    report = CheckReport()
    index = build_index(sources, config, report.warnings)
    analyzer = SwitchAnalyzer(index, config)
    reported_declarations: set[tuple] = set()

    for module in index.modules:
        report.files_analyzed += 1
        for switch in collect_switches(index, module):
            outcome = analyzer.analyze(switch)
            report.switches.append(outcome)

            for diagnostic in outcome.diagnostics:
                if diagnostic.code.value in config.ignore:
                    continue
                if diagnostic.code in CONFIGURATION_CODES:
                    key = (diagnostic.code, diagnostic.location)
                    if key in reported_declarations:
                        continue
                    reported_declarations.add(key)
                report.diagnostics.append(diagnostic)

    logger.debug(
        f"Checked {report.switches_checked}/{len(report.switches)} switches "
        f"in {report.files_analyzed} files"
    )
    return report


def discover_files(paths: list[str], warnings: list[str]) -> list[Path]:
    """Python files named by paths (files, or directories searched recursively)."""
    files: list[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_file():
            files.append(path)
        elif path.is_dir():
            for py_file in sorted(path.rglob("*.py")):
                if SKIPPED_DIRECTORIES.intersection(py_file.relative_to(path).parts):
                    continue
                files.append(py_file)
        else:
            warnings.append(f"Path not found: {path}")
            logger.warning(f"Path not found: {path}")
    return files


def read_sources(paths: list[str], warnings: list[str]) -> dict[str, str]:
    sources: dict[str, str] = {}
    for file_path in discover_files(paths, warnings):
        try:
            with open(file_path, "r", encoding="utf-8", errors="replace") as f:
                sources[str(file_path)] = f.read()
        except PermissionError:
            warnings.append(f"Permission denied reading: {file_path}")
            logger.warning(f"Permission denied reading: {file_path}")
        except OSError as e:
            warnings.append(f"Error reading {file_path}: {e}")
            logger.warning(f"Error reading {file_path}: {e}")
    return sources


def check_paths(
    paths: list[str],
    config: Optional[AnalyzerConfig] = None,
) -> CheckReport:
    """
    Main entry point: check the `match` statements of files and directories.

    Example:
        >>> report = check_paths(["src/"])
        >>> print(f"{len(report.diagnostics)} problems, {len(report.warnings)} warnings")
    """
    warnings: list[str] = []
    sources = read_sources(paths, warnings)
    report = check_sources(sources, config)
    report.warnings = warnings + report.warnings
    return report


def describe_universe(
    paths: list[str],
    type_name: str,
    config: Optional[AnalyzerConfig] = None,
) -> tuple[Optional[str], UniverseResult, list[str]]:
    """
    Build the universe of one declared type.

    Returns:
        Tuple of (qualified name or None if not found, result, warnings)
    """
    config = config or AnalyzerConfig()
    warnings: list[str] = []
    index = build_index(read_sources(paths, warnings), config, warnings)
    qualified = index.find_type(type_name)
    if qualified is None:
        return None, UniverseResult(), warnings
    builder = UniverseBuilder(index, max_depth=config.max_closure_depth)
    return qualified, builder.build(qualified), warnings


def format_universe(universe: Universe) -> list[str]:
    lines = []
    for member in universe.members:
        if member.ancestors[1:]:
            lines.append(f"{member.display_name}  (via {' > '.join(member.ancestors[1:])})")
        else:
            lines.append(member.display_name)
    return lines


def print_diagnostics(report: CheckReport) -> None:
    """Pretty-print diagnostics to console."""
    if not report.diagnostics:
        print("No exhaustiveness problems found.")
        return

    print(f"\n{'='*70}")
    print(f"EXHAUSTIVENESS: {len(report.diagnostics)} problems")
    print(f"{'='*70}\n")

    for diagnostic in report.diagnostics:
        print(diagnostic.format())
