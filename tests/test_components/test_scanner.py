"""Tests for finding JSX elements in component sources."""

from tailshift.components import (
    ValueKind,
    css_property_name,
    parse_style_object,
    possible_classes,
    scan_components,
)
from tailshift.model.selector import SelectorTarget, TargetKind

CARD = SelectorTarget(TargetKind.CLASS, "card")


def _names(code: str) -> list[str]:
    return [n.name for n in scan_components(code)]


# ---------------------------------------------------------------------------
# Element discovery
# ---------------------------------------------------------------------------


class TestScanComponents:
    def test_nesting_and_parents(self) -> None:
        code = (
            "export default function App() {\n"
            "  return (\n"
            '    <main className="app">\n'
            "      <h1>Title</h1>\n"
            "      <ul>{items.map((i) => <li key={i}>{i}</li>)}</ul>\n"
            "    </main>\n"
            "  );\n"
            "}\n"
        )
        arena = scan_components(code, "App.jsx")
        assert [n.name for n in arena] == ["main", "h1", "ul", "li"]
        assert [n.parent for n in arena] == [None, 0, 0, 2]
        assert [n.line for n in arena] == [3, 4, 5, 5]
        assert arena.source == "App.jsx"

    def test_comparisons_and_generics_are_not_elements(self) -> None:
        code = (
            "const small = a < b && c > d;\n"
            "const list = useState<string[]>([]);\n"
            "const id = <T extends object>(x: T) => x;\n"
            "const el = <p>ok</p>;\n"
        )
        assert _names(code) == ["p"]

    def test_strings_comments_and_regexes_are_skipped(self) -> None:
        code = (
            'const html = "<div class=\\"x\\">";\n'
            "// return <span />;\n"
            "/* <section> */\n"
            "const tpl = `<em>${value}</em>`;\n"
            "const re = /<b>/g;\n"
            "const ok = <i />;\n"
        )
        assert _names(code) == ["i"]

    def test_fragments_and_member_components(self) -> None:
        code = (
            "const x = (\n  <>\n    <ui.Box>\n"
            "      <a href='/'>home</a>\n    </ui.Box>\n  </>\n);\n"
        )
        arena = scan_components(code)
        assert [n.name for n in arena] == ["ui.Box", "a"]
        assert arena.nodes[1].parent == 0
        assert arena.nodes[0].is_component

    def test_elements_inside_text_are_children(self) -> None:
        code = "const x = <p>Don't <b>stop</b> {count > 1 ? <em>s</em> : null}</p>;"
        arena = scan_components(code)
        assert [n.name for n in arena] == ["p", "b", "em"]
        assert [n.parent for n in arena] == [None, 0, 0]


# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------


class TestAttributes:
    def test_attribute_forms(self) -> None:
        code = (
            "const x = <input disabled type='text' value={name} {...rest} "
            'className="field wide" />;'
        )
        [node] = scan_components(code)
        assert [a.name for a in node.attributes] == [
            "disabled",
            "type",
            "value",
            None,
            "className",
        ]
        assert node.attribute("type").kind is ValueKind.STRING
        assert node.attribute("type").quote == "'"
        assert node.attribute("value").kind is ValueKind.EXPRESSION
        assert node.attribute("value").value == "name"
        assert node.attributes[3].is_spread
        assert node.self_closing
        assert node.classes == ["field", "wide"]

    def test_static_class_name_forms(self) -> None:
        for value in ('"card big"', '{"card big"}', "{'card big'}", "{`card big`}"):
            [node] = scan_components(f"const x = <div className={value} />;")
            assert node.static_classes == ["card", "big"]
            assert node.writable

    def test_computed_class_name(self) -> None:
        code = "const x = <div className={cn(`card ${size}`, active && 'on', styles.box)} />;"
        [node] = scan_components(code)
        assert node.static_classes is None
        assert node.classes == ["on", "card", "box"]
        assert node.matches(CARD)
        assert not node.writable

    def test_spread_after_class_name_is_not_writable(self) -> None:
        [before, after] = scan_components(
            'const x = [<p {...a} className="card" />, <p className="card" {...b} />];'
        )
        assert before.writable
        assert not after.writable

    def test_components_never_match_elements(self) -> None:
        [node] = scan_components('const x = <Button className="card" />;')
        assert node.is_component
        assert not node.writable
        assert node.matches(CARD)
        assert not node.matches(SelectorTarget(TargetKind.ELEMENT, "button"))

    def test_element_names_compare_lowercase(self) -> None:
        [node] = scan_components("const x = <svg />;")
        assert node.matches(SelectorTarget(TargetKind.ELEMENT, "svg"))
        assert node.label == "<svg> (line 1)"


class TestPossibleClasses:
    def test_quoted_template_and_member_names(self) -> None:
        assert possible_classes("clsx('a b', `c ${d} e`, styles.f, styles['g-h'])") == [
            "a",
            "b",
            "g-h",
            "c",
            "e",
            "f",
        ]

    def test_non_class_text_ignored(self) -> None:
        assert possible_classes("x ? '#fff' : '1px'") == []


# ---------------------------------------------------------------------------
# Style objects
# ---------------------------------------------------------------------------


class TestStyleObject:
    def test_property_names(self) -> None:
        assert css_property_name("backgroundColor") == "background-color"
        assert css_property_name("WebkitTransform") == "-webkit-transform"
        assert css_property_name("msFlex") == "-ms-flex"
        assert css_property_name("--gap") == "--gap"
        assert css_property_name("z-index") == "z-index"

    def test_literal_values(self) -> None:
        style = parse_style_object(
            "{ padding: 16, margin: 0, zIndex: 10, color: 'red', 'font-weight': \"bold\" }"
        )
        assert [(d.prop, d.value) for d in style.declarations] == [
            ("padding", "16px"),
            ("margin", "0"),
            ("z-index", "10"),
            ("color", "red"),
            ("font-weight", "bold"),
        ]
        assert style.dynamic == []

    def test_dynamic_entries(self) -> None:
        style = parse_style_object("{ ...base, width, height: h * 2, color: `red`, [key]: 1 }")
        assert [(d.prop, d.value) for d in style.declarations] == [("color", "red")]
        assert style.dynamic == ["...base", "width", "height: h * 2", "[key]: 1"]
        assert style.entry_of == [3]

    def test_render_without_dropped(self) -> None:
        style = parse_style_object("{ padding: 16, width: w, color: 'red' }")
        assert style.render([0]) == "{{ width: w, color: 'red' }}"
        assert style.render([0, 1]) == "{{ width: w }}"

    def test_not_an_object(self) -> None:
        assert parse_style_object("styles.card") is None
        assert parse_style_object("cond ? a : b") is None
