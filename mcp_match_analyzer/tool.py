"""
MCP Tool Handler for match_analyzer.check

Wraps the match-analyzer engine to provide an MCP-compatible interface.
Accepts sources inline, as artifact references, or as filesystem paths.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

# Import from the engine (sibling package)
from match_analyzer.checker import CheckReport, check_sources, read_sources
from match_analyzer.config import AnalyzerConfig, DEFAULT_MAX_CLOSURE_DEPTH
from match_analyzer.diagnostics import Diagnostic

FAIL_ON_CHOICES = ("none", "any")


def handle(
    request: dict[str, Any],
    *,
    artifact_resolver: Optional[Callable[[str], bytes]] = None,
) -> dict[str, Any]:
    """
    MCP tool handler for match_analyzer.check.

    Args:
        request: Request dict matching the request schema.
        artifact_resolver: Optional callable to resolve artifact_id -> bytes.
            If not provided, falls back to locator-as-path.

    Returns:
        Response dict matching the response schema.
    """
    try:
        # 1. Load sources
        sources, warnings = _load_sources(
            request,
            artifact_resolver=artifact_resolver,
        )
        config = _load_config(request)
    except FileNotFoundError as e:
        return _error_response(f"Source file not found: {e}")
    except UnicodeDecodeError as e:
        return _error_response(f"Source is not valid UTF-8: {e}")
    except ValueError as e:
        return _error_response(str(e))
    except Exception as e:
        return _error_response(f"Failed to load sources: {e}")

    # 2. Analyze
    try:
        report = check_sources(sources, config)
    except Exception as e:
        return _error_response(f"Analysis failed: {e}")
    warnings.extend(report.warnings)

    # 3. Compute exit code BEFORE limit so gating sees every diagnostic
    fail_on = request.get("fail_on", "none")
    exit_code = _compute_exit_code(report.diagnostics, fail_on)

    # 4. Build result, applying limit to the listed diagnostics only
    result = report.to_dict()
    limit = request.get("limit")
    if limit and limit > 0:
        result["diagnostics"] = result["diagnostics"][:limit]

    response: dict[str, Any] = {
        "exit_code": exit_code,
        "result": result,
        "warnings": sorted(warnings),
    }

    # 5. Add text output if requested
    if request.get("format") == "text":
        response["text"] = _format_text_output(report, limit)

    return response


def _load_sources(
    request: dict[str, Any],
    *,
    artifact_resolver: Optional[Callable[[str], bytes]] = None,
) -> tuple[dict[str, str], list[str]]:
    """
    Collect sources from inline entries, artifact references and paths.

    Raises:
        ValueError: If the request shape is invalid.
        FileNotFoundError: If an artifact locator doesn't exist.
    """
    files = request.get("files", [])
    paths = request.get("paths", [])
    if not isinstance(files, list) or not isinstance(paths, list):
        raise ValueError("files and paths must be arrays")
    if not files and not paths:
        raise ValueError("request must contain 'files' or 'paths'")

    sources: dict[str, str] = {}
    warnings: list[str] = []

    for entry in files:
        if not isinstance(entry, dict):
            raise ValueError("each file entry must be an object")

        # Artifact reference
        if "artifact_id" in entry:
            path = entry.get("path") or entry.get("locator") or entry["artifact_id"]
            if artifact_resolver is not None:
                raw = artifact_resolver(entry["artifact_id"])
                sources[path] = raw.decode("utf-8")
                continue

            locator = entry.get("locator")
            if not locator:
                raise ValueError(
                    "artifact reference requires either artifact_resolver or locator"
                )
            with open(locator, "r", encoding="utf-8") as f:
                sources[path] = f.read()
            continue

        # Inline source
        if "path" not in entry or "content" not in entry:
            raise ValueError("inline file entries must contain 'path' and 'content'")
        sources[entry["path"]] = entry["content"]

    if paths:
        sources.update(read_sources([str(p) for p in paths], warnings))

    return sources, warnings


def _load_config(request: dict[str, Any]) -> AnalyzerConfig:
    fail_on = request.get("fail_on", "none")
    if fail_on not in FAIL_ON_CHOICES:
        raise ValueError(f"fail_on must be one of {', '.join(FAIL_ON_CHOICES)}")
    ignore = request.get("ignore", [])
    if not isinstance(ignore, list) or not all(isinstance(c, str) for c in ignore):
        raise ValueError("ignore must be an array of diagnostic codes")

    return AnalyzerConfig(
        max_closure_depth=request.get("max_depth", DEFAULT_MAX_CLOSURE_DEPTH),
        ignore=frozenset(ignore),
    )


def _compute_exit_code(diagnostics: list[Diagnostic], fail_on: str) -> int:
    """
    Compute exit code based on diagnostics and threshold.

    Returns:
        0 = success, 2 = threshold met.
    """
    if fail_on == "any" and diagnostics:
        return 2
    return 0


def _format_text_output(report: CheckReport, limit: Optional[int] = None) -> str:
    """Format human-readable text output."""
    lines = []
    lines.append("=" * 60)
    lines.append("match-analyzer")
    lines.append("=" * 60)
    lines.append(f"Files analyzed: {report.files_analyzed}")
    lines.append(
        f"Switches: {len(report.switches)} found, {report.switches_checked} checked"
    )
    lines.append("")

    lines.append(f"Problems: {len(report.diagnostics)}")
    for code, count in report.by_code().items():
        lines.append(f"  {code}: {count}")
    lines.append("")

    shown = report.diagnostics[:limit] if limit and limit > 0 else report.diagnostics
    for d in shown:
        lines.append(f"  {d.format()}")
    if len(shown) < len(report.diagnostics):
        lines.append(f"  ... and {len(report.diagnostics) - len(shown)} more")

    return "\n".join(lines)


def _error_response(message: str) -> dict[str, Any]:
    """Build an error response."""
    return {
        "exit_code": 1,
        "result": {
            "files_analyzed": 0,
            "switches_found": 0,
            "switches_checked": 0,
            "total_diagnostics": 0,
            "by_code": {},
            "diagnostics": [],
        },
        "warnings": [message],
    }
