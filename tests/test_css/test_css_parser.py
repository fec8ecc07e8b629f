"""Tests for the lark-based CSS parser and AST."""

import pytest

from tailshift.parser import AtRule, Comment, Declaration, ParseError, Rule, Stylesheet, parse_css


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParseRules:
    def test_single_rule(self) -> None:
        sheet = parse_css(".a { color: red; margin: 0 }")
        assert len(sheet.rules) == 1
        rule = sheet.rules[0]
        assert rule.selector == ".a"
        assert [(d.prop, d.value) for d in rule.declarations] == [
            ("color", "red"),
            ("margin", "0"),
        ]

    def test_selector_whitespace_normalized(self) -> None:
        sheet = parse_css(".blog-main\n    h1 {\n}")
        assert sheet.rules[0].selector == ".blog-main h1"

    def test_empty_input(self) -> None:
        sheet = parse_css("  \n ")
        assert isinstance(sheet, Stylesheet)
        assert sheet.is_empty
        assert sheet.serialize() == ""

    def test_value_keeps_case_and_urls(self) -> None:
        sheet = parse_css(".a { background: url(http://example.com/A.png); }")
        assert sheet.rules[0].declarations[0].value == "url(http://example.com/A.png)"

    def test_semicolon_inside_string(self) -> None:
        sheet = parse_css('.a::before { content: "a;b"; }')
        assert sheet.rules[0].declarations[0].value == '"a;b"'

    def test_important_flag(self) -> None:
        decl = parse_css(".a { color: red !important; }").rules[0].declarations[0]
        assert decl.important
        assert decl.value == "red !important"

    def test_custom_property(self) -> None:
        decl = parse_css(":root { --brand: #123456; }").rules[0].declarations[0]
        assert decl.is_custom_property
        assert decl.prop == "--brand"

    def test_comments_are_nodes(self) -> None:
        sheet = parse_css("/* header */\n.a { /* inner */ color: red; }")
        assert isinstance(sheet.children[0], Comment)
        assert isinstance(sheet.rules[0].children[0], Comment)


class TestParseAtRules:
    def test_media_block(self) -> None:
        sheet = parse_css("@media (min-width: 768px) { .b { padding: 4px; } }")
        media = sheet.at_rules[0]
        assert media.name == "media"
        assert media.params == "(min-width: 768px)"
        assert media.has_block
        assert media.rules[0].selector == ".b"

    def test_statement_at_rule(self) -> None:
        sheet = parse_css('@import url("base.css");\n.a { color: red; }')
        imported = sheet.at_rules[0]
        assert not imported.has_block
        assert imported.params == 'url("base.css")'
        assert len(sheet.rules) == 1

    def test_walk_reaches_nested_rules(self) -> None:
        sheet = parse_css(".a { color: red; } @media (min-width: 640px) { .b { color: blue; } }")
        assert [r.selector for r in sheet.walk_rules()] == [".a", ".b"]


class TestParseErrors:
    def test_unclosed_block(self) -> None:
        with pytest.raises(ParseError):
            parse_css(".a { color: red;")

    def test_stray_closing_brace_has_location(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_css(".a { color: red; } }")
        assert exc_info.value.line == 1
        assert exc_info.value.location.startswith("line 1")

    def test_declaration_without_colon(self) -> None:
        with pytest.raises(ParseError, match="Invalid declaration"):
            parse_css(".a { color }")


# ---------------------------------------------------------------------------
# Tree editing and serialization
# ---------------------------------------------------------------------------


class TestSerialize:
    def test_rule_layout(self) -> None:
        sheet = parse_css(".a{color:red;margin:0}")
        assert sheet.serialize() == ".a {\n  color: red;\n  margin: 0;\n}\n"

    def test_nested_layout(self) -> None:
        sheet = parse_css("@media (min-width: 768px) { .b { padding: 4px; } }")
        assert sheet.serialize() == (
            "@media (min-width: 768px) {\n  .b {\n    padding: 4px;\n  }\n}\n"
        )

    def test_statement_layout(self) -> None:
        assert parse_css("@charset 'utf-8';").serialize() == "@charset 'utf-8';\n"

    def test_remove_declaration(self) -> None:
        sheet = parse_css(".a { color: red; margin: 0; }")
        sheet.rules[0].declarations[0].remove()
        assert sheet.serialize() == ".a {\n  margin: 0;\n}\n"

    def test_remove_rule(self) -> None:
        sheet = parse_css(".a { color: red; }\n.b { margin: 0; }")
        rule = sheet.rules[0]
        rule.remove()
        assert rule.parent is None
        assert [r.selector for r in sheet.rules] == [".b"]

    def test_remove_detached_is_noop(self) -> None:
        decl = Declaration("color", "red")
        decl.remove()
        assert decl.parent is None

    def test_built_tree(self) -> None:
        media = AtRule("media", "(min-width: 640px)", [Rule(".a", [Declaration("color", "red")])])
        sheet = Stylesheet([media])
        assert media.parent is sheet
        assert sheet.serialize() == (
            "@media (min-width: 640px) {\n  .a {\n    color: red;\n  }\n}\n"
        )


class TestParseErrorSummary:
    def test_summary_is_one_line_with_location(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_css(".a { color }")
        summary = exc_info.value.summary
        assert "\n" not in summary
        assert summary.startswith("Invalid declaration 'color'")
        assert summary.endswith("(line 1, column 6)")

    def test_plain_error(self) -> None:
        assert ParseError("Bad thing.\nmore").summary == "Bad thing"
