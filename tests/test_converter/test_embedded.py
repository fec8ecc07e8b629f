"""Tests for converting <style> blocks inside HTML documents."""

from tailshift.converter import StylesheetConverter


class TestConvertEmbedded:
    def test_emptied_block_is_removed(self) -> None:
        html = (
            "<html><head><style>\n.a { color: red; }\n</style></head>"
            '<body><p class="a">x</p></body></html>'
        )
        new_html, results = StylesheetConverter().convert_embedded(html, "page.html")
        assert new_html == '<html><head></head><body><p class="a">x</p></body></html>'
        [result] = results
        assert result.source == "page.html<style#1>"
        assert result.outcomes[0].converted_tokens == ("text-red-500",)

    def test_leftovers_are_reserialized(self) -> None:
        html = "<style>.a { color: red; transition: all 1s; }</style>"
        new_html, _ = StylesheetConverter().convert_embedded(html)
        assert new_html == "<style>\n.a {\n  transition: all 1s;\n}\n</style>"

    def test_unchanged_block_is_byte_identical(self) -> None:
        html = '<style media="screen">  .a > .b { color: red; }  </style>'
        new_html, results = StylesheetConverter().convert_embedded(html)
        assert new_html == html
        assert not results[0].has_changes

    def test_parse_error_leaves_block(self) -> None:
        html = "<style>.a { color: red;</style><p>x</p>"
        new_html, [result] = StylesheetConverter().convert_embedded(html, "bad.html")
        assert new_html == html
        [diagnostic] = result.diagnostics
        assert diagnostic.code == "parse_error"
        assert diagnostic.is_warning
        assert diagnostic.source == "bad.html<style#1>"

    def test_results_in_document_order(self) -> None:
        html = "<style>.a { color: red; }</style><div></div><style>.b { padding: 16px; }</style>"
        new_html, results = StylesheetConverter().convert_embedded(html, "p.html")
        assert new_html == "<div></div>"
        assert [r.source for r in results] == ["p.html<style#1>", "p.html<style#2>"]
        assert [r.outcomes[0].converted_tokens for r in results] == [
            ("text-red-500",),
            ("p-4",),
        ]

    def test_no_style_blocks(self) -> None:
        html = "<p>plain</p>"
        assert StylesheetConverter().convert_embedded(html) == (html, [])


class TestCollectEmbeddedVariables:
    def test_counts_definitions(self) -> None:
        converter = StylesheetConverter()
        html = "<style>:root { --c: blue; --d: red; }</style><style>.a {</style>"
        assert converter.collect_embedded_variables(html, "v.html") == 2
        assert "--c" in converter.registry
