"""
Match Analyzer CLI

Commands:
    check     - Check match statements for exhaustiveness
    universe  - Show the cases a switch on a type must handle
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s"
)
logger = logging.getLogger(__name__)


def _config_from_args(args):
    from match_analyzer.config import AnalyzerConfig

    return AnalyzerConfig(
        max_closure_depth=args.max_depth,
        ignore=frozenset(args.ignore or ()),
    )


def cmd_check(args):
    """Check match statements and report exhaustiveness problems."""
    from match_analyzer.checker import check_paths, print_diagnostics

    missing = [p for p in args.paths if not Path(p).exists()]
    if missing:
        for p in missing:
            logger.error(f"Path not found: {p}")
        return 1

    try:
        config = _config_from_args(args)
    except ValueError as e:
        logger.error(str(e))
        return 1

    report = check_paths(args.paths, config)

    # Show any warnings about files we couldn't process
    if report.warnings and args.verbose:
        print(f"\nWarnings ({len(report.warnings)}):")
        for w in report.warnings[:5]:
            print(f"  - {w}")
        if len(report.warnings) > 5:
            print(f"  ... and {len(report.warnings) - 5} more")

    if args.format == "json":
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(f"\n{'='*60}")
        print("Match Analyzer - Exhaustiveness Check")
        print(f"{'='*60}")
        print(f"Files: {report.files_analyzed}")
        print(f"Switches: {len(report.switches)} found, {report.switches_checked} checked")
        print_diagnostics(report)

    # Output to file if requested
    if args.output:
        output_path = Path(args.output)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(report.to_dict(), f, indent=2)
            f.write("\n")
        print(f"\nWrote {len(report.diagnostics)} diagnostics to {output_path}")

    return 1 if report.diagnostics else 0


def cmd_universe(args):
    """Print the universe of cases for a declared type."""
    from match_analyzer.checker import describe_universe, format_universe

    path = Path(args.path)
    if not path.exists():
        logger.error(f"Path not found: {path}")
        return 1

    try:
        config = _config_from_args(args)
    except ValueError as e:
        logger.error(str(e))
        return 1

    qualified, result, warnings = describe_universe([args.path], args.type_name, config)
    for w in warnings:
        logger.warning(w)

    if qualified is None:
        logger.error(f"Type not found (or ambiguous): {args.type_name}")
        return 1

    if result.error is not None:
        from match_analyzer.diagnostics import DiagnosticReporter
        from match_analyzer.model import SourceSpan

        diagnostic = DiagnosticReporter().configuration(
            result.error.code,
            result.error.type_name,
            result.error.span or SourceSpan(args.path, 1, 1),
            depth=result.error.depth,
        )
        print(diagnostic.format())
        return 1

    if result.universe is None:
        print(f"{qualified} is neither an enum nor declared closed")
        return 1

    kind = "enum" if result.universe.is_enum else "closed hierarchy"
    print(f"{qualified} ({kind}, {len(result.universe.members)} cases):")
    for line in format_universe(result.universe):
        print(f"  {line}")
    return 0


def main():
    parser = argparse.ArgumentParser(
        prog="match-analyzer",
        description="Check that match statements over enums and closed hierarchies are exhaustive"
    )
    subparsers = parser.add_subparsers(dest="command")

    # Check command (the main feature!)
    check_p = subparsers.add_parser(
        "check",
        help="Check match statements for exhaustiveness",
        description="Reports match statements whose exhaustiveness assertion fallback can be reached"
    )
    check_p.add_argument("paths", nargs="+", help="Python files or directories")
    check_p.add_argument("-v", "--verbose", action="store_true", help="Show warnings and debug logging")
    check_p.add_argument("-o", "--output", help="Also write the JSON report to a file")
    check_p.add_argument("--format", choices=["text", "json"], default="text")
    check_p.add_argument("--max-depth", type=int, default=32, help="Maximum nesting of closed declarations")
    check_p.add_argument("--ignore", action="append", metavar="CODE", help="Diagnostic code to drop (repeatable)")
    check_p.set_defaults(func=cmd_check)

    # Universe command
    universe_p = subparsers.add_parser("universe", help="Show the cases a switch on a type must handle")
    universe_p.add_argument("path", help="File or directory declaring the type")
    universe_p.add_argument("type_name", help="Qualified or unqualified class name")
    universe_p.add_argument("-v", "--verbose", action="store_true")
    universe_p.add_argument("--max-depth", type=int, default=32)
    universe_p.set_defaults(func=cmd_universe, ignore=None)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        print("\nQuick start:")
        print("  1. End a match with:  case _: raise ExhaustiveMatch.failed(subject)")
        print("  2. Check it:          match-analyzer check src/")
        return 0

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
