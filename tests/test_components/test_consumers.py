"""Tests for deciding which selectors scanned markup can take utilities for."""

from tailshift.cascade.selectors import classify
from tailshift.components import scan_components
from tailshift.consumers import ConsumerIndex
from tailshift.markup import MarkupArena


def _index(html: str = "", jsx: str = "") -> ConsumerIndex:
    index = ConsumerIndex()
    if html:
        index.add(MarkupArena.from_html(html, "index.html"))
    if jsx:
        index.add(scan_components(jsx, "App.jsx"))
    return index


class TestConsumerIndex:
    def test_used_in_html_or_jsx(self) -> None:
        index = _index('<p class="a">x</p>', 'const x = <div className="b" />;')
        assert index.unused_reason(classify(".a")) is None
        assert index.unused_reason(classify(".b:hover")) is None
        assert index.unused_reason(classify("div")) is None
        assert len(index) == 2

    def test_unused(self) -> None:
        index = _index('<p class="a">x</p>')
        assert index.unused_reason(classify(".c")) == "No scanned element matches .c"
        assert index.unused_reason(classify("span")) == "No scanned element matches span"

    def test_empty_index(self) -> None:
        assert ConsumerIndex().unused_reason(classify(".a")) == "No scanned element matches .a"

    def test_computed_class_name_blocks(self) -> None:
        index = _index('<p class="a">x</p>', "const x = <div className={on ? 'a' : 'b'} />;")
        assert index.unused_reason(classify(".a")) == (
            ".a also matches <div> (line 1) in App.jsx, whose classes cannot be rewritten"
        )

    def test_descendant_scope(self) -> None:
        jsx = (
            "const x = (\n"
            '  <div className="card">\n'
            "    <p>a</p>\n"
            "  </div>\n"
            ");\n"
            "const y = <section className={cls}><p>b</p></section>;\n"
        )
        index = _index(jsx=jsx)
        assert index.unused_reason(classify(".card p")) is None
        assert index.unused_reason(classify(".box p")) == "No scanned element matches .box p"

    def test_computed_ancestor_blocks_descendant(self) -> None:
        jsx = "const y = <section className={open ? 'menu' : ''}><a href='/'>b</a></section>;"
        index = _index(jsx=jsx)
        assert index.unused_reason(classify(".menu a")) == (
            ".menu a also matches <section> (line 1) in App.jsx, "
            "whose classes cannot be rewritten"
        )
