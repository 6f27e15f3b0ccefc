"""Tests for match_analyzer.universe module."""

import pytest

from match_analyzer.diagnostics import DiagnosticCode
from match_analyzer.model import ClosedHierarchySubject, EnumSubject, SourceSpan
from match_analyzer.universe import UniverseBuilder


class FakeOracle:
    """TypeOracle backed by dicts, counting closed_subtypes lookups."""

    def __init__(self, enums=None, aliases=None, closed=None):
        self.enums = enums or {}
        self.aliases = aliases or {}
        self.closed = closed or {}
        self.closed_lookups = 0

    def enum_members(self, type_name):
        return self.enums.get(type_name)

    def enum_aliases(self, type_name):
        return self.aliases.get(type_name, {})

    def closed_subtypes(self, type_name):
        self.closed_lookups += 1
        return self.closed.get(type_name)

    def declaration_span(self, type_name):
        return SourceSpan(f"{type_name}.py", 1, 1)


class TestEnumUniverse:
    """Tests for enum subjects."""

    def test_members_in_declaration_order(self):
        """Test enum universe keeps declaration order."""
        oracle = FakeOracle(enums={"m.Color": ["RED", "GREEN", "BLUE"]})
        result = UniverseBuilder(oracle).build("m.Color")

        assert result.error is None
        assert result.universe.member_names == ["RED", "GREEN", "BLUE"]
        assert result.universe.is_enum
        assert isinstance(result.universe.subject, EnumSubject)

    def test_aliases_map_to_canonical_member(self):
        """Test alias names resolve to the member they alias."""
        oracle = FakeOracle(
            enums={"m.Color": ["RED", "GREEN"]},
            aliases={"m.Color": {"CRIMSON": "RED"}},
        )
        universe = UniverseBuilder(oracle).build("m.Color").universe

        assert universe.canonical_target("CRIMSON") == "RED"
        assert universe.canonical_target("GREEN") == "GREEN"
        assert universe.canonical_target("PURPLE") is None
        assert "CRIMSON" not in universe.member_names

    def test_enum_takes_priority_over_closed(self):
        """Test a type that is an enum is never treated as a hierarchy."""
        oracle = FakeOracle(enums={"m.E": ["A"]}, closed={"m.E": ["m.X"]})
        universe = UniverseBuilder(oracle).build("m.E").universe

        assert universe.is_enum

    def test_nullable_flag_carried(self):
        """Test nullable enum subjects keep the flag."""
        oracle = FakeOracle(enums={"m.Color": ["RED"]})
        universe = UniverseBuilder(oracle).build("m.Color", nullable=True).universe

        assert universe.subject.nullable is True


class TestHierarchyUniverse:
    """Tests for closed hierarchy subjects."""

    def test_flat_hierarchy(self):
        """Test permitted subtypes become leaves in declared order."""
        oracle = FakeOracle(closed={"m.Shape": ["m.Square", "m.Circle", "m.Triangle"]})
        universe = UniverseBuilder(oracle).build("m.Shape").universe

        assert universe.member_names == ["m.Square", "m.Circle", "m.Triangle"]
        assert isinstance(universe.subject, ClosedHierarchySubject)
        assert universe.subject.nullable is True

    def test_nested_closed_subtype_expanded_in_place(self):
        """Test a closed intermediate contributes its own subtypes depth-first."""
        oracle = FakeOracle(closed={
            "m.Root": ["m.A", "m.B", "m.C"],
            "m.C": ["m.C1", "m.C2"],
        })
        universe = UniverseBuilder(oracle).build("m.Root").universe

        assert universe.member_names == ["m.A", "m.B", "m.C1", "m.C2"]
        c2 = universe.members[-1]
        assert c2.ancestors == ("m.Root", "m.C")
        assert c2.is_covered_by("m.C")
        assert c2.is_covered_by("m.Root")
        assert not c2.is_covered_by("m.C1")

    def test_intermediate_expanded_before_later_siblings(self):
        """Test depth-first order: a closed child's leaves precede later siblings."""
        oracle = FakeOracle(closed={
            "m.Root": ["m.A", "m.B"],
            "m.A": ["m.A1", "m.A2"],
        })
        universe = UniverseBuilder(oracle).build("m.Root").universe

        assert universe.member_names == ["m.A1", "m.A2", "m.B"]

    def test_targets_include_root_and_intermediates(self):
        """Test the root and closed intermediates are valid match targets."""
        oracle = FakeOracle(closed={
            "m.Root": ["m.A", "m.C"],
            "m.C": ["m.C1"],
        })
        universe = UniverseBuilder(oracle).build("m.Root").universe

        assert universe.targets == {"m.Root", "m.A", "m.C", "m.C1"}

    def test_leaf_reachable_twice_listed_once(self):
        """Test diamond-shaped declarations keep the first position only."""
        oracle = FakeOracle(closed={
            "m.Root": ["m.A", "m.B"],
            "m.A": ["m.Leaf", "m.X"],
            "m.B": ["m.Leaf", "m.Y"],
        })
        universe = UniverseBuilder(oracle).build("m.Root").universe

        assert universe.member_names == ["m.Leaf", "m.X", "m.Y"]
        assert universe.members[0].ancestors == ("m.Root", "m.A")

    def test_not_closed_is_out_of_scope(self):
        """Test a plain class yields neither universe nor error."""
        result = UniverseBuilder(FakeOracle()).build("m.Plain")

        assert result.universe is None
        assert result.error is None
        assert not result.in_scope


class TestMalformedDeclarations:
    """Tests for empty and cyclic closed declarations."""

    def test_empty_root(self):
        """Test a closed type with no subtypes is a configuration error."""
        oracle = FakeOracle(closed={"m.Empty": []})
        result = UniverseBuilder(oracle).build("m.Empty")

        assert result.universe is None
        assert result.in_scope
        assert result.error.code is DiagnosticCode.CLOSED_EMPTY
        assert result.error.type_name == "m.Empty"
        assert result.error.span == SourceSpan("m.Empty.py", 1, 1)

    def test_empty_intermediate_reported_at_intermediate(self):
        """Test the error names the empty intermediate, not the root."""
        oracle = FakeOracle(closed={"m.Root": ["m.A", "m.Mid"], "m.Mid": []})
        result = UniverseBuilder(oracle).build("m.Root")

        assert result.error.code is DiagnosticCode.CLOSED_EMPTY
        assert result.error.type_name == "m.Mid"

    def test_cycle_hits_depth_ceiling(self):
        """Test a cyclic declaration terminates with a depth error."""
        oracle = FakeOracle(closed={"m.A": ["m.B"], "m.B": ["m.A"]})
        result = UniverseBuilder(oracle, max_depth=8).build("m.A")

        assert result.universe is None
        assert result.error.code is DiagnosticCode.CLOSED_DEPTH
        assert result.error.type_name == "m.A"
        assert result.error.depth == 8

    def test_self_cycle(self):
        """Test a type listing itself as a permitted subtype."""
        oracle = FakeOracle(closed={"m.A": ["m.A"]})
        result = UniverseBuilder(oracle).build("m.A")

        assert result.error.code is DiagnosticCode.CLOSED_DEPTH
        assert result.error.depth == 32

    @pytest.mark.parametrize("max_depth,ok", [(2, False), (3, True)])
    def test_depth_ceiling_boundary(self, max_depth, ok):
        """Test three levels of closed declarations against the ceiling."""
        oracle = FakeOracle(closed={
            "m.Root": ["m.Mid"],
            "m.Mid": ["m.Inner"],
            "m.Inner": ["m.Leaf"],
        })
        result = UniverseBuilder(oracle, max_depth=max_depth).build("m.Root")

        if ok:
            assert result.universe.member_names == ["m.Leaf"]
        else:
            assert result.error.code is DiagnosticCode.CLOSED_DEPTH


class TestCaching:
    """Tests for the per-builder cache."""

    def test_result_cached_per_type(self):
        """Test repeated builds do not query the oracle again."""
        oracle = FakeOracle(closed={"m.Shape": ["m.Square", "m.Circle"]})
        builder = UniverseBuilder(oracle)

        first = builder.build("m.Shape")
        lookups = oracle.closed_lookups
        second = builder.build("m.Shape")

        assert first is second
        assert oracle.closed_lookups == lookups

    def test_cache_keyed_by_nullability(self):
        """Test nullable and non-nullable enum subjects are cached apart."""
        oracle = FakeOracle(enums={"m.Color": ["RED"]})
        builder = UniverseBuilder(oracle)

        plain = builder.build("m.Color").universe
        nullable = builder.build("m.Color", nullable=True).universe

        assert plain.subject.nullable is False
        assert nullable.subject.nullable is True
