"""Tests for the MCP adapter (mcp_match_analyzer.tool)."""

import textwrap
from pathlib import Path

import pytest

from match_analyzer.diagnostics import DiagnosticCode, make_diagnostic
from match_analyzer.model import SourceSpan
from mcp_match_analyzer.tool import (
    handle,
    _compute_exit_code,
    _error_response,
    _load_sources,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"

SHAPES_SOURCE = (FIXTURES_DIR / "shapes.py").read_text(encoding="utf-8")

GUARDED_SOURCE = textwrap.dedent("""\
    from exhaustive_match import ExhaustiveMatch, closed


    @closed("Square", "Circle")
    class Shape:
        pass


    class Square(Shape):
        pass


    class Circle(Shape):
        pass


    def describe(shape: Shape) -> str:
        match shape:
            case Square() if True:
                return "square"
            case Circle() if True:
                return "circle"
            case _:
                raise ExhaustiveMatch.failed(shape)
""")


class TestLoadSources:
    """Tests for _load_sources helper."""

    def test_inline_files(self):
        """Test inline path/content entries."""
        sources, warnings = _load_sources({
            "files": [{"path": "shapes.py", "content": SHAPES_SOURCE}],
        })

        assert sources == {"shapes.py": SHAPES_SOURCE}
        assert warnings == []

    def test_artifact_with_resolver(self):
        """Test artifact references resolved by the host."""
        def resolver(artifact_id):
            assert artifact_id == "art-1"
            return SHAPES_SOURCE.encode("utf-8")

        sources, _ = _load_sources(
            {"files": [{"artifact_id": "art-1", "path": "shapes.py"}]},
            artifact_resolver=resolver,
        )

        assert sources == {"shapes.py": SHAPES_SOURCE}

    def test_artifact_with_locator(self, tmp_path):
        """Test artifact references read from their locator."""
        source_file = tmp_path / "shapes.py"
        source_file.write_text(SHAPES_SOURCE, encoding="utf-8")

        sources, _ = _load_sources({
            "files": [{"artifact_id": "art-1", "locator": str(source_file)}],
        })

        assert sources == {str(source_file): SHAPES_SOURCE}

    def test_artifact_without_locator(self):
        """Test artifact references need a resolver or a locator."""
        with pytest.raises(ValueError, match="requires either artifact_resolver or locator"):
            _load_sources({"files": [{"artifact_id": "art-1"}]})

    def test_artifact_locator_missing(self, tmp_path):
        """Test a missing locator raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            _load_sources({
                "files": [{"artifact_id": "art-1", "locator": str(tmp_path / "nope.py")}],
            })

    def test_paths(self):
        """Test filesystem paths are read like the CLI reads them."""
        sources, warnings = _load_sources({"paths": [str(FIXTURES_DIR / "days.py")]})

        assert list(sources) == [str(FIXTURES_DIR / "days.py")]
        assert warnings == []

    def test_missing_path_is_warning(self, tmp_path):
        """Test a missing filesystem path becomes a warning."""
        _, warnings = _load_sources({"paths": [str(tmp_path / "nope.py")]})

        assert warnings == [f"Path not found: {tmp_path / 'nope.py'}"]

    def test_empty_request(self):
        """Test requests must name some sources."""
        with pytest.raises(ValueError, match="must contain 'files' or 'paths'"):
            _load_sources({})

    def test_inline_entry_missing_content(self):
        """Test inline entries need both path and content."""
        with pytest.raises(ValueError, match="must contain 'path' and 'content'"):
            _load_sources({"files": [{"path": "shapes.py"}]})

    def test_files_not_list(self):
        """Test files must be an array."""
        with pytest.raises(ValueError, match="must be arrays"):
            _load_sources({"files": "shapes.py"})


class TestComputeExitCode:
    """Tests for _compute_exit_code helper."""

    DIAGNOSTIC = make_diagnostic(DiagnosticCode.GUARD_UNSUPPORTED, SourceSpan("a.py", 1, 1))

    def test_fail_on_none(self):
        """Test fail_on=none never fails."""
        assert _compute_exit_code([self.DIAGNOSTIC], "none") == 0

    def test_fail_on_any(self):
        """Test fail_on=any fails on any diagnostic."""
        assert _compute_exit_code([self.DIAGNOSTIC], "any") == 2
        assert _compute_exit_code([], "any") == 0


class TestErrorResponse:
    """Tests for _error_response helper."""

    def test_error_response_structure(self):
        """Test error response has the result shape with zero counts."""
        response = _error_response("Something went wrong")

        assert response["exit_code"] == 1
        assert response["warnings"] == ["Something went wrong"]
        assert response["result"]["total_diagnostics"] == 0
        assert response["result"]["diagnostics"] == []


class TestHandle:
    """Tests for the main handle() function."""

    def test_inline_source(self):
        """Test a full request with inline source."""
        response = handle({"files": [{"path": "shapes.py", "content": SHAPES_SOURCE}]})

        assert response["exit_code"] == 0
        result = response["result"]
        assert result["files_analyzed"] == 1
        assert result["switches_found"] == 1
        assert result["switches_checked"] == 1
        assert result["total_diagnostics"] == 1
        diagnostic = result["diagnostics"][0]
        assert diagnostic["code"] == "EM-HIERARCHY-INCOMPLETE"
        assert diagnostic["message"] == "Some subtypes are not processed by switch: shapes.Triangle"
        assert diagnostic["severity"] == "error"
        assert diagnostic["locations"][0]["line"] == 24

    def test_fail_on_any(self):
        """Test exit code 2 when diagnostics are found."""
        response = handle({
            "files": [{"path": "shapes.py", "content": SHAPES_SOURCE}],
            "fail_on": "any",
        })

        assert response["exit_code"] == 2

    def test_invalid_fail_on(self):
        """Test unknown thresholds are request errors."""
        response = handle({
            "files": [{"path": "shapes.py", "content": SHAPES_SOURCE}],
            "fail_on": "sometimes",
        })

        assert response["exit_code"] == 1
        assert "fail_on must be one of" in response["warnings"][0]

    def test_invalid_max_depth(self):
        """Test a non-positive ceiling is a request error."""
        response = handle({
            "files": [{"path": "shapes.py", "content": SHAPES_SOURCE}],
            "max_depth": 0,
        })

        assert response["exit_code"] == 1

    def test_limit_applies_after_exit_code(self):
        """Test limit trims the list but not the counts or gating."""
        response = handle({
            "files": [{"path": "shapes.py", "content": GUARDED_SOURCE}],
            "fail_on": "any",
            "limit": 1,
        })

        assert response["exit_code"] == 2
        assert response["result"]["total_diagnostics"] == 3
        assert len(response["result"]["diagnostics"]) == 1

    def test_ignore(self):
        """Test ignored codes are dropped before gating."""
        response = handle({
            "files": [{"path": "shapes.py", "content": GUARDED_SOURCE}],
            "ignore": ["EM-GUARD-UNSUPPORTED"],
            "fail_on": "any",
        })

        assert response["exit_code"] == 2
        assert response["result"]["by_code"] == {"EM-HIERARCHY-INCOMPLETE": 1}

    def test_ignore_must_be_array(self):
        """Test a bare string for ignore is a request error."""
        response = handle({
            "files": [{"path": "shapes.py", "content": GUARDED_SOURCE}],
            "ignore": "EM-GUARD-UNSUPPORTED",
        })

        assert response["exit_code"] == 1
        assert response["warnings"] == ["ignore must be an array of diagnostic codes"]

    def test_inline_package(self):
        """Test re-exports inside an inline package resolve."""
        response = handle({
            "files": [
                {
                    "path": "pkg/__init__.py",
                    "content": "from .shapes import Shape, Square, Circle\n",
                },
                {
                    "path": "pkg/shapes.py",
                    "content": textwrap.dedent("""\
                        from exhaustive_match import closed


                        @closed("Square", "Circle")
                        class Shape:
                            pass


                        class Square(Shape):
                            pass


                        class Circle(Shape):
                            pass
                    """),
                },
                {
                    "path": "app.py",
                    "content": textwrap.dedent("""\
                        from exhaustive_match import ExhaustiveMatch
                        from pkg import Shape, Square


                        def describe(shape: Shape) -> str:
                            match shape:
                                case Square():
                                    return "square"
                                case _:
                                    raise ExhaustiveMatch.failed(shape)
                    """),
                },
            ],
            "fail_on": "any",
        })

        assert response["exit_code"] == 2
        result = response["result"]
        assert result["switches_checked"] == 1
        assert result["by_code"] == {"EM-HIERARCHY-INCOMPLETE": 1}
        assert result["diagnostics"][0]["message"] == (
            "Some subtypes are not processed by switch: pkg.shapes.Circle"
        )

    def test_syntax_error_warning(self):
        """Test unparseable files come back as sorted warnings."""
        response = handle({
            "files": [
                {"path": "z_broken.py", "content": "def oops(:\n"},
                {"path": "a_broken.py", "content": "class (:\n"},
            ],
        })

        assert response["exit_code"] == 0
        assert len(response["warnings"]) == 2
        assert response["warnings"] == sorted(response["warnings"])
        assert response["warnings"][0].startswith("Syntax error in a_broken.py")

    def test_text_format(self):
        """Test the optional human-readable rendering."""
        response = handle({
            "files": [{"path": "shapes.py", "content": GUARDED_SOURCE}],
            "format": "text",
            "limit": 2,
        })

        text = response["text"]
        assert "match-analyzer" in text
        assert "Problems: 3" in text
        assert "EM-GUARD-UNSUPPORTED: 2" in text
        assert "... and 1 more" in text

    def test_no_text_by_default(self):
        """Test text is only added on request."""
        response = handle({"files": [{"path": "shapes.py", "content": SHAPES_SOURCE}]})

        assert "text" not in response

    def test_artifact_resolver_failure(self):
        """Test resolver exceptions become error responses."""
        def resolver(artifact_id):
            raise RuntimeError("store offline")

        response = handle(
            {"files": [{"artifact_id": "art-1"}]},
            artifact_resolver=resolver,
        )

        assert response["exit_code"] == 1
        assert "store offline" in response["warnings"][0]
