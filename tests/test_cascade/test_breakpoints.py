"""Tests for the breakpoint table and media query resolution."""

import pytest

from tailshift.cascade.breakpoints import (
    DEFAULT_SCREENS,
    BreakpointTable,
    MediaQueryKind,
    parse_length_px,
    parse_media_query,
    resolve_media_query,
)


@pytest.fixture()
def table() -> BreakpointTable:
    return BreakpointTable.default()


# ---------------------------------------------------------------------------
# Lengths
# ---------------------------------------------------------------------------


class TestParseLength:
    @pytest.mark.parametrize(
        "value, expected",
        [("768px", 768.0), ("48rem", 768.0), ("40em", 640.0), ("1024", 1024.0), (".5rem", 8.0)],
    )
    def test_units(self, value: str, expected: float) -> None:
        assert parse_length_px(value) == expected

    @pytest.mark.parametrize("value", ["", "50%", "auto", "10vw"])
    def test_rejects(self, value: str) -> None:
        assert parse_length_px(value) is None


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------


class TestBreakpointTable:
    def test_default_table(self, table: BreakpointTable) -> None:
        assert table.names == ("sm", "md", "lg", "xl", "2xl")
        assert len(table) == len(DEFAULT_SCREENS)
        assert "md" in table
        assert "tablet" not in table

    def test_sorted_by_width(self) -> None:
        table = BreakpointTable.from_screens({"lg": "1024px", "sm": "640px", "md": "48rem"})
        assert table.names == ("sm", "md", "lg")
        assert table.rank("lg") == 2
        assert table.rank("xs") is None

    def test_pairs_and_mappings_use_min(self) -> None:
        table = BreakpointTable.from_screens(
            {"desktop": ["1200px", "1600px"], "wide": {"min": "90rem"}, "tablet": "600px"}
        )
        assert [(b.name, b.min_width_px) for b in table] == [
            ("tablet", 600.0),
            ("desktop", 1200.0),
            ("wide", 1440.0),
        ]

    def test_invalid_width_raises(self) -> None:
        with pytest.raises(ValueError, match="phone"):
            BreakpointTable.from_screens({"phone": "small"})

    def test_negative_tolerance_raises(self) -> None:
        with pytest.raises(ValueError):
            BreakpointTable([], tolerance=-0.1)

    def test_exact_match(self, table: BreakpointTable) -> None:
        found = table.find(768)
        assert found is not None and found.name == "md"

    def test_snaps_within_tolerance(self, table: BreakpointTable) -> None:
        found = table.find(760)
        assert found is not None and found.name == "md"

    def test_no_match_outside_tolerance(self, table: BreakpointTable) -> None:
        assert table.find(500) is None
        assert table.find(700) is None

    def test_zero_tolerance_needs_exact(self) -> None:
        strict = BreakpointTable.default(tolerance=0.0)
        assert strict.find(760) is None
        assert strict.find(1024) is not None

    def test_empty_table(self) -> None:
        assert BreakpointTable([]).find(768) is None


# ---------------------------------------------------------------------------
# Media queries
# ---------------------------------------------------------------------------


class TestMediaQueries:
    def test_parse_min_width(self) -> None:
        query = parse_media_query("(min-width: 48rem)")
        assert query.kind is MediaQueryKind.MIN_WIDTH
        assert query.value_px == 768.0

    def test_parse_max_width(self) -> None:
        assert parse_media_query("(max-width:600px)").kind is MediaQueryKind.MAX_WIDTH

    @pytest.mark.parametrize(
        "params",
        ["print", "screen and (min-width: 768px)", "(orientation: landscape)", "(min-width: 50%)"],
    )
    def test_parse_unsupported(self, params: str) -> None:
        assert parse_media_query(params).kind is MediaQueryKind.UNSUPPORTED

    def test_resolve_supported(self, table: BreakpointTable) -> None:
        resolution = resolve_media_query("(min-width: 1024px)", table)
        assert resolution.supported
        assert resolution.variant == "lg"
        assert resolution.reason is None

    def test_resolve_no_breakpoint(self, table: BreakpointTable) -> None:
        resolution = resolve_media_query("(min-width: 500px)", table)
        assert not resolution.supported
        assert resolution.reason == "No matching breakpoint for min-width: 500px"

    def test_resolve_max_width(self, table: BreakpointTable) -> None:
        resolution = resolve_media_query("(max-width: 768px)", table)
        assert resolution.reason == (
            "Skipped media query ((max-width: 768px)): max-width is unsupported"
        )

    def test_resolve_compound(self, table: BreakpointTable) -> None:
        resolution = resolve_media_query("screen and (min-width: 768px)", table)
        assert not resolution.supported
        assert "unsupported condition" in (resolution.reason or "")

    def test_custom_table(self) -> None:
        table = BreakpointTable.from_screens({"tablet": "600px"})
        assert resolve_media_query("(min-width: 600px)", table).variant == "tablet"
        assert resolve_media_query("(min-width: 768px)", table).variant is None
