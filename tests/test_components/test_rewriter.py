"""Tests for rewriting ``className`` and ``style`` in component sources."""

from tailshift.cascade.variables import VariableRegistry, VariableScope
from tailshift.components import ComponentRewriter
from tailshift.converter import StylesheetConverter
from tailshift.model.outcome import ConversionOutcome


def _outcomes(css: str) -> list[ConversionOutcome]:
    return StylesheetConverter().convert(css).converted_outcomes


def _rewrite(code: str, css: str = "", **kwargs):
    return ComponentRewriter(**kwargs).rewrite(code, _outcomes(css) if css else [], "App.jsx")


# ---------------------------------------------------------------------------
# className
# ---------------------------------------------------------------------------


class TestClassNames:
    def test_appends_to_static_class_name(self) -> None:
        result = _rewrite('const a = <div className="card">x</div>;', ".card { padding: 16px; }")
        assert result.html == 'const a = <div className="card p-4">x</div>;'
        assert result.changed
        assert result.elements_updated == 1
        assert result.classes_added == 1

    def test_keeps_quote_style(self) -> None:
        result = _rewrite("const a = <p className='card'/>;", ".card { color: red; }")
        assert result.html == "const a = <p className='card text-red-500'/>;"

    def test_expression_string_becomes_plain_attribute(self) -> None:
        result = _rewrite('const a = <p className={"card"} />;', ".card { color: red; }")
        assert result.html == 'const a = <p className="card text-red-500" />;'

    def test_element_selector_adds_class_name(self) -> None:
        code = "const a = (\n  <section id=\"s\">\n    <h1>Hi</h1>\n  </section>\n);"
        result = _rewrite(code, "section h1 { font-weight: bold; }")
        assert '<h1 className="font-bold">Hi</h1>' in result.html
        assert '<section id="s">' in result.html

    def test_descendant_needs_ancestor(self) -> None:
        code = 'const a = [<div className="card"><b>x</b></div>, <b>y</b>];'
        result = _rewrite(code, ".card b { color: red; }")
        assert result.html == (
            'const a = [<div className="card"><b className="text-red-500">x</b></div>, <b>y</b>];'
        )

    def test_components_and_computed_classes_untouched(self) -> None:
        code = (
            'const a = <Card className="card" />;\n'
            "const b = <div className={active ? 'card' : ''} />;\n"
            'const c = <div className="card" {...props} />;\n'
        )
        result = _rewrite(code, ".card { color: red; }")
        assert not result.changed
        assert result.html == code

    def test_token_already_present(self) -> None:
        code = 'const a = <p className="card text-red-500" />;'
        result = _rewrite(code, ".card { color: red; }")
        assert not result.changed

    def test_formatting_outside_attributes_is_kept(self) -> None:
        code = (
            "export function A() {\n"
            "  // <p> in a comment\n"
            "  return <p\n"
            '    className="card"   // trailing\n'
            "    onClick={() => go('<p>')}\n"
            "  >x</p>;\n"
            "}\n"
        )
        result = _rewrite(code, ".card { color: red; }")
        assert result.html == code.replace('"card"', '"card text-red-500"')


# ---------------------------------------------------------------------------
# style={{ ... }}
# ---------------------------------------------------------------------------


class TestStyleObjects:
    def test_fully_converted_style_is_removed(self) -> None:
        result = _rewrite("const a = <div style={{ padding: 16 }}>x</div>;")
        assert result.html == 'const a = <div className="p-4">x</div>;'
        assert result.inline_converted == 1

    def test_dynamic_entries_stay(self) -> None:
        code = 'const a = <div className="box" style={{ color: "red", width: w }} />;'
        result = _rewrite(code)
        assert result.html == (
            'const a = <div className="box text-red-500" style={{ width: w }} />;'
        )
        [diagnostic] = result.diagnostics
        assert diagnostic.code == "inline_style"
        assert diagnostic.message == "Inline style on <div> (line 1) kept: width: w"

    def test_inline_wins_over_stylesheet(self) -> None:
        code = 'const a = <p className="card" style={{ color: "blue" }} />;'
        result = _rewrite(code, ".card { color: red; }")
        assert result.html == 'const a = <p className="card text-blue-500" />;'

    def test_dynamic_style_warns(self) -> None:
        result = _rewrite("const a = <div style={styles.box} />;")
        assert not result.changed
        [diagnostic] = result.diagnostics
        assert diagnostic.code == "dynamic_style"
        assert diagnostic.message == "Skipped dynamic style on <div> (line 1)"

    def test_computed_class_name_keeps_style(self) -> None:
        code = "const a = <div className={cls} style={{ padding: 16 }} />;"
        result = _rewrite(code)
        assert not result.changed
        assert result.diagnostics[0].code == "dynamic_class_name"

    def test_component_style_prop_left_alone(self) -> None:
        code = "const a = <Box style={{ padding: 16 }} />;"
        result = _rewrite(code)
        assert not result.changed
        assert result.diagnostics == []

    def test_resolves_variables(self) -> None:
        registry = VariableRegistry()
        registry.define("--accent", "red", VariableScope.global_scope())
        code = "const a = <p style={{ color: 'var(--accent)' }} />;"
        result = _rewrite(code, registry=registry)
        assert result.html == 'const a = <p className="text-red-500" />;'

    def test_skip_inline(self) -> None:
        code = "const a = <div style={{ padding: 16 }} />;"
        result = _rewrite(code, convert_inline=False)
        assert not result.changed
        assert result.diagnostics == []
