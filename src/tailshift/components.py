"""JSX/TSX components: find elements in source text and rewrite them in place.

Component sources are not parsed into a syntax tree. A scanner walks the
text with an explicit stack of modes (script code, element children),
skipping strings, template literals, comments and regular expressions, and
records every JSX opening tag with the offsets of its attributes. Rewrites
are applied as text edits, so everything outside the edited attributes keeps
its exact formatting.

Only intrinsic elements (``<div>``, ``<a>``) with a static ``className``
receive utilities. Component elements (``<Card>``, ``<ui.Box>``) and elements
whose classes are computed are still recorded: their possible classes are
what lets the project pipeline keep the stylesheet rules they may rely on.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from tailshift.markup import InlineStyle, MarkupArena, MarkupResult, MarkupRewriter
from tailshift.model.diagnostic import Diagnostic, Severity
from tailshift.model.outcome import ConversionOutcome
from tailshift.model.selector import SelectorTarget, TargetKind
from tailshift.parser.ast import Declaration

__all__ = [
    "ComponentRewriter",
    "JsxAttribute",
    "JsxElement",
    "StyleObject",
    "UNITLESS_PROPERTIES",
    "ValueKind",
    "css_property_name",
    "parse_style_object",
    "possible_classes",
    "scan_components",
]

logger = logging.getLogger(__name__)

_TAG_NAME = re.compile(r"[A-Za-z_$][\w$.:-]*")
_ATTR_NAME = re.compile(r"[A-Za-z_$][\w$:-]*")
_CLOSING_TAG = re.compile(r"</\s*([A-Za-z_$][\w$.:-]*)?\s*>")
_SCRIPT_STOP = re.compile(r"[\"'`/{}<]")
_TEXT_STOP = re.compile(r"[{<]")
_KEYWORD_BEFORE = re.compile(r"(?<![\w$])(?:return|yield|await|default|case|else|do)$")
# A JSX element or a regular expression can start after one of these.
_EXPRESSION_PRECEDERS = frozenset("(,=:?&|{[;!>")

_STATIC_STRING = re.compile(r"""\s*(?:"([^"\\]*)"|'([^'\\]*)'|`([^`\\$]*)`)\s*""", re.DOTALL)
_QUOTED = re.compile(r"""["']([^"']+)["']""")
_TEMPLATE = re.compile(r"`([^`]*)`")
_INTERPOLATION = re.compile(r"\$\{[^}]*\}")
_MEMBER = re.compile(r"\.\s*([A-Za-z_][\w-]*)|\[\s*[\"']([^\"']+)[\"']\s*\]")
_CLASS_TOKEN = re.compile(r"-?[A-Za-z_][\w-]*")

_CAMEL_HUMP = re.compile(r"([a-z0-9])([A-Z])")
_VENDOR_PREFIX = re.compile(r"^(webkit|moz|ms|o)-")
_NUMBER = re.compile(r"-?(?:\d+\.?\d*|\.\d+)")
_STYLE_KEY = re.compile(
    r"""\s*(?:([A-Za-z_$][\w$]*)|"([^"\\]*)"|'([^'\\]*)')\s*:\s*(.*)""", re.DOTALL
)
_STYLE_STRING = re.compile(r"""(?:"([^"\\]*)"|'([^'\\]*)'|`([^`\\$]*)`)""", re.DOTALL)

# Numeric style values React leaves without a unit.
UNITLESS_PROPERTIES = frozenset(
    {
        "aspect-ratio",
        "column-count",
        "flex",
        "flex-grow",
        "flex-shrink",
        "font-weight",
        "line-height",
        "opacity",
        "order",
        "orphans",
        "tab-size",
        "widows",
        "z-index",
        "zoom",
    }
)


class ValueKind(Enum):
    STRING = "string"
    EXPRESSION = "expression"


@dataclass(frozen=True)
class JsxAttribute:
    """One attribute of an opening tag.

    ``start``/``end`` span the whole attribute; ``value_start`` is the offset
    of the opening quote or brace. ``value`` is the text between the quotes,
    or between the braces of an expression. A spread has no name.
    """

    name: str | None
    start: int
    end: int
    kind: ValueKind | None = None
    value_start: int = -1
    value: str = ""
    quote: str = '"'

    @property
    def is_spread(self) -> bool:
        return self.name is None

    @property
    def static_value(self) -> str | None:
        """The literal string value, or None when it is computed."""
        if self.kind is ValueKind.STRING:
            return self.value
        if self.kind is ValueKind.EXPRESSION:
            match = _STATIC_STRING.fullmatch(self.value)
            if match:
                return next(g for g in match.groups() if g is not None)
            return None
        return ""


@dataclass
class JsxElement:
    index: int
    name: str
    parent: int | None
    start: int
    end: int
    attrs_end: int
    line: int
    attributes: list[JsxAttribute] = field(default_factory=list)
    self_closing: bool = False

    def attribute(self, name: str) -> JsxAttribute | None:
        found = None
        for attr in self.attributes:
            if attr.name == name:
                found = attr
        return found

    @property
    def is_component(self) -> bool:
        return not self.name[:1].islower() or "." in self.name

    @property
    def label(self) -> str:
        return f"<{self.name}> (line {self.line})"

    @property
    def static_classes(self) -> list[str] | None:
        attr = self.attribute("className")
        if attr is None:
            return []
        value = attr.static_value
        return None if value is None else value.split()

    @property
    def classes(self) -> list[str]:
        """Static classes, or every class name the ``className`` expression may yield."""
        static = self.static_classes
        if static is not None:
            return static
        attr = self.attribute("className")
        return possible_classes(attr.value) if attr is not None else []

    @property
    def writable(self) -> bool:
        if self.is_component or self.static_classes is None:
            return False
        # A spread after className (or without one) may replace it at runtime.
        attr = self.attribute("className")
        after = attr.end if attr is not None else -1
        return not any(a.is_spread and a.start > after for a in self.attributes)

    def matches(self, target: SelectorTarget) -> bool:
        if target.kind is TargetKind.CLASS:
            return target.name in self.classes
        return not self.is_component and self.name.lower() == target.name


def possible_classes(expression: str) -> list[str]:
    """Class names a computed ``className`` expression may produce."""
    found: list[str] = []
    texts = _QUOTED.findall(expression)
    texts.extend(_INTERPOLATION.sub(" ", t) for t in _TEMPLATE.findall(expression))
    for dotted, keyed in _MEMBER.findall(expression):
        texts.append(dotted or keyed)
    for text in texts:
        for token in text.split():
            if _CLASS_TOKEN.fullmatch(token) and token not in found:
                found.append(token)
    return found


class _Mode(Enum):
    SCRIPT = "script"
    CHILDREN = "children"


@dataclass
class _Frame:
    mode: _Mode
    element: int | None = None
    name: str = ""
    depth: int = 0


class _Scanner:
    def __init__(self, code: str) -> None:
        self.code = code
        self.elements: list[JsxElement] = []
        self.stack: list[_Frame] = [_Frame(_Mode.SCRIPT)]

    def scan(self) -> list[JsxElement]:
        i, n = 0, len(self.code)
        while i < n:
            frame = self.stack[-1]
            if frame.mode is _Mode.CHILDREN:
                i = self._children_step(i)
            else:
                i = self._script_step(i, frame)
        return self.elements

    # ---- modes ----

    def _script_step(self, i: int, frame: _Frame) -> int:
        code = self.code
        match = _SCRIPT_STOP.search(code, i)
        if match is None:
            return len(code)
        i = match.start()
        ch = code[i]
        if ch in "\"'":
            return self._skip_string(i)
        if ch == "`":
            return self._skip_template(i)
        if ch == "/":
            if code.startswith("//", i):
                end = code.find("\n", i)
                return len(code) if end == -1 else end + 1
            if code.startswith("/*", i):
                end = code.find("*/", i + 2)
                return len(code) if end == -1 else end + 2
            if self._expression_expected(i):
                return self._skip_regex(i)
            return i + 1
        if ch == "{":
            frame.depth += 1
            return i + 1
        if ch == "}":
            if frame.depth == 0 and len(self.stack) > 1:
                self.stack.pop()
            else:
                frame.depth = max(0, frame.depth - 1)
            return i + 1
        # ch == "<"
        if self._expression_expected(i):
            end = self._open_tag(i)
            if end is not None:
                return end
        return i + 1

    def _children_step(self, i: int) -> int:
        code = self.code
        match = _TEXT_STOP.search(code, i)
        if match is None:
            return len(code)
        i = match.start()
        if code[i] == "{":
            self.stack.append(_Frame(_Mode.SCRIPT))
            return i + 1
        if code.startswith("</", i):
            closing = _CLOSING_TAG.match(code, i)
            if closing is None:
                return i + 1
            self._close(closing.group(1) or "")
            return closing.end()
        end = self._open_tag(i)
        return i + 1 if end is None else end

    # ---- tags ----

    def _open_tag(self, i: int) -> int | None:
        code = self.code
        if code.startswith("<>", i):
            self.stack.append(_Frame(_Mode.CHILDREN))
            return i + 2
        name_match = _TAG_NAME.match(code, i + 1)
        if name_match is None:
            return None
        name = name_match.group()
        j = attrs_end = name_match.end()
        attributes: list[JsxAttribute] = []
        while True:
            j = self._skip_space(j)
            if j >= len(code):
                return None
            if code.startswith("/>", j):
                self_closing, end = True, j + 2
                break
            if code[j] == ">":
                self_closing, end = False, j + 1
                break
            if code[j] == "{":
                close = self._skip_braces(j)
                if close is None or not code[j + 1 : close - 1].lstrip().startswith("..."):
                    return None
                attributes.append(JsxAttribute(None, j, close))
                j = attrs_end = close
                continue
            attr_match = _ATTR_NAME.match(code, j)
            if attr_match is None:
                return None
            attr = self._attribute(attr_match)
            if attr is None:
                return None
            attributes.append(attr)
            j = attrs_end = attr.end

        # <T extends U>(...) => in a .tsx file is a generic, not an element.
        if attributes and attributes[0].name == "extends" and name[:1].isupper():
            return None

        parent = next(
            (f.element for f in reversed(self.stack) if f.element is not None), None
        )
        element = JsxElement(
            index=len(self.elements),
            name=name,
            parent=parent,
            start=i,
            end=end,
            attrs_end=attrs_end,
            line=code.count("\n", 0, i) + 1,
            attributes=attributes,
            self_closing=self_closing,
        )
        self.elements.append(element)
        if not self_closing:
            self.stack.append(_Frame(_Mode.CHILDREN, element=element.index, name=name))
        return end

    def _attribute(self, name_match: re.Match[str]) -> JsxAttribute | None:
        code = self.code
        start, name = name_match.start(), name_match.group()
        k = self._skip_space(name_match.end())
        if k >= len(code) or code[k] != "=":
            return JsxAttribute(name, start, name_match.end())
        k = self._skip_space(k + 1)
        if k >= len(code):
            return None
        if code[k] in "\"'":
            close = code.find(code[k], k + 1)
            if close == -1:
                return None
            return JsxAttribute(
                name, start, close + 1, ValueKind.STRING, k, code[k + 1 : close], code[k]
            )
        if code[k] == "{":
            close = self._skip_braces(k)
            if close is None:
                return None
            return JsxAttribute(name, start, close, ValueKind.EXPRESSION, k, code[k + 1 : close - 1])
        return None

    def _close(self, name: str) -> None:
        for depth in range(len(self.stack) - 1, 0, -1):
            frame = self.stack[depth]
            if frame.mode is _Mode.CHILDREN and frame.name == name:
                del self.stack[depth:]
                return
        logger.debug("Unmatched closing tag </%s>", name)

    # ---- lexical helpers ----

    def _expression_expected(self, i: int) -> bool:
        j = i - 1
        code = self.code
        while j >= 0 and code[j].isspace():
            j -= 1
        if j < 0:
            return True
        if code[j] in _EXPRESSION_PRECEDERS:
            return True
        return bool(_KEYWORD_BEFORE.search(code, max(0, j - 7), j + 1))

    def _skip_space(self, i: int) -> int:
        code = self.code
        while i < len(code):
            if code[i].isspace():
                i += 1
            elif code.startswith("//", i):
                end = code.find("\n", i)
                i = len(code) if end == -1 else end + 1
            elif code.startswith("/*", i):
                end = code.find("*/", i + 2)
                i = len(code) if end == -1 else end + 2
            else:
                break
        return i

    def _skip_string(self, i: int) -> int:
        code, quote = self.code, self.code[i]
        j = i + 1
        while j < len(code):
            ch = code[j]
            if ch == "\\":
                j += 2
                continue
            if ch == quote or ch == "\n":
                return j + 1
            j += 1
        return len(code)

    def _skip_template(self, i: int) -> int:
        code = self.code
        j = i + 1
        while j < len(code):
            ch = code[j]
            if ch == "\\":
                j += 2
            elif ch == "`":
                return j + 1
            elif code.startswith("${", j):
                close = self._skip_braces(j + 1)
                j = len(code) if close is None else close
            else:
                j += 1
        return len(code)

    def _skip_regex(self, i: int) -> int:
        code = self.code
        j, in_class = i + 1, False
        while j < len(code):
            ch = code[j]
            if ch == "\\":
                j += 2
                continue
            if ch == "\n":
                return i + 1
            if in_class:
                in_class = ch != "]"
            elif ch == "[":
                in_class = True
            elif ch == "/":
                j += 1
                while j < len(code) and code[j].isalpha():
                    j += 1
                return j
            j += 1
        return i + 1

    def _skip_braces(self, i: int) -> int | None:
        """Offset just past the brace matching the one at *i*, or None."""
        code = self.code
        depth, j = 0, i
        while j < len(code):
            ch = code[j]
            if ch in "\"'":
                j = self._skip_string(j)
            elif ch == "`":
                j = self._skip_template(j)
            elif code.startswith("//", j):
                end = code.find("\n", j)
                j = len(code) if end == -1 else end + 1
            elif code.startswith("/*", j):
                end = code.find("*/", j + 2)
                j = len(code) if end == -1 else end + 2
            else:
                if ch == "{":
                    depth += 1
                elif ch == "}":
                    depth -= 1
                    if depth == 0:
                        return j + 1
                j += 1
        return None


def scan_components(code: str, source: str = "<string>") -> MarkupArena:
    """Every JSX element of *code* in source order, as an arena."""
    elements = _Scanner(code).scan()
    logger.debug("%s: %d JSX element(s)", source, len(elements))
    return MarkupArena(elements, source)


# ---- style={{ ... }} ----


@dataclass
class StyleObject:
    """A literal ``style={{ ... }}`` object.

    ``entries`` holds the source text of every property. ``declarations``
    holds the properties with literal values, and ``entry_of`` maps a
    declaration index back to its entry.
    """

    entries: list[str]
    declarations: list[Declaration]
    entry_of: list[int]
    dynamic: list[str]

    def render(self, dropped: Iterable[int]) -> str | None:
        """The object without the *dropped* declarations, or None if nothing is left."""
        gone = {self.entry_of[i] for i in dropped}
        kept = [e for i, e in enumerate(self.entries) if i not in gone]
        if not kept:
            return None
        return "{{ " + ", ".join(kept) + " }}"


def css_property_name(key: str) -> str:
    """``backgroundColor`` -> ``background-color``; ``WebkitBoxFlex`` -> ``-webkit-box-flex``."""
    if key.startswith("--"):
        return key
    if "-" in key:
        return key.lower()
    name = _CAMEL_HUMP.sub(r"\1-\2", key).lower()
    return _VENDOR_PREFIX.sub(r"-\1-", name)


def _split_entries(body: str) -> list[str]:
    entries: list[str] = []
    depth, start, i = 0, 0, 0
    while i < len(body):
        ch = body[i]
        if ch in "\"'`":
            close = body.find(ch, i + 1)
            i = len(body) if close == -1 else close + 1
            continue
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
        elif ch == "," and depth == 0:
            entries.append(body[start:i])
            start = i + 1
        i += 1
    entries.append(body[start:])
    return [e.strip() for e in entries if e.strip()]


def parse_style_object(expression: str) -> StyleObject | None:
    """Parse the expression of a ``style`` attribute.

    Returns None unless the expression is an object literal. Properties
    whose key or value is computed are kept aside in ``dynamic``.
    """
    text = expression.strip()
    if not (text.startswith("{") and text.endswith("}")):
        return None
    style = StyleObject([], [], [], [])
    for entry in _split_entries(text[1:-1]):
        style.entries.append(entry)
        match = _STYLE_KEY.fullmatch(entry)
        if entry.startswith("...") or match is None:
            style.dynamic.append(entry)
            continue
        key = next(g for g in match.groups()[:3] if g is not None)
        raw = match.group(4).strip()
        prop = css_property_name(key)
        string = _STYLE_STRING.fullmatch(raw)
        if string:
            value = next(g for g in string.groups() if g is not None)
        elif _NUMBER.fullmatch(raw):
            number = raw
            if prop in UNITLESS_PROPERTIES or float(raw) == 0:
                value = number
            else:
                value = f"{number}px"
        else:
            style.dynamic.append(entry)
            continue
        style.entry_of.append(len(style.entries) - 1)
        style.declarations.append(Declaration(prop, value))
    return style


def _jsx_string(text: str, quote: str = '"') -> str:
    if quote not in text:
        return f"{quote}{text}{quote}"
    other = "'" if quote == '"' else '"'
    if other not in text:
        return f"{other}{text}{other}"
    return "{" + json.dumps(text) + "}"


class ComponentRewriter(MarkupRewriter):
    """Rewrite one JSX/TSX source against a set of conversion outcomes.

    Matching and conflict resolution are those of :class:`MarkupRewriter`;
    only parsing and editing differ. A converted ``style={{ ... }}`` object
    loses the converted properties and disappears once it is empty.
    """

    def rewrite(
        self,
        html: str,
        outcomes: Iterable[ConversionOutcome],
        source: str = "<string>",
    ) -> MarkupResult:
        code = html
        arena = scan_components(code, source)
        result = MarkupResult(html=code)

        inline: dict[int, InlineStyle] = {}
        objects: dict[int, StyleObject] = {}
        if self.convert_inline:
            for node in arena:
                style = self._style_object(node, source, result)
                if style is None or not style.declarations:
                    continue
                origin = "style={" + node.attribute("style").value + "}"
                candidates = self.inline_candidates(
                    node, style.declarations, origin, source, result
                )
                if candidates:
                    inline[node.index] = InlineStyle(style.declarations, candidates)
                    objects[node.index] = style

        edits: list[tuple[int, int, str]] = []
        for node, survivors in self.plan(arena, outcomes, inline):
            existing = node.classes
            added = self.new_tokens(existing, survivors)
            if added:
                edits.append(self._class_edit(node, existing + added))
            dropped: set[int] = set()
            style = inline.get(node.index)
            if style is not None:
                dropped = style.converted_indexes(survivors)
            if dropped:
                edits.append(self._style_edit(code, node, objects[node.index], dropped))
                result.inline_converted += len(dropped)
            if added or dropped:
                result.elements_updated += 1
            result.classes_added += len(added)

        for start, end, text in sorted(edits, reverse=True):
            code = code[:start] + text + code[end:]
        if edits:
            result.changed = True
            result.html = code
        logger.debug(
            "%s: %d element(s) updated, %d class(es) added",
            source,
            result.elements_updated,
            result.classes_added,
        )
        return result

    def _style_object(
        self, node: JsxElement, source: str, result: MarkupResult
    ) -> StyleObject | None:
        attr = node.attribute("style")
        if attr is None or node.is_component:
            return None
        style = None
        if attr.kind is ValueKind.EXPRESSION:
            style = parse_style_object(attr.value)
        if style is None:
            self._report(result, source, "dynamic_style", f"Skipped dynamic style on {node.label}")
            return None
        if not node.writable:
            self._report(
                result,
                source,
                "dynamic_class_name",
                f"Skipped style on {node.label}: its className is not a static string",
            )
            return None
        for entry in style.dynamic:
            self._report(
                result, source, "inline_style", f"Inline style on {node.label} kept: {entry}"
            )
        return style

    @staticmethod
    def _report(result: MarkupResult, source: str, code: str, message: str) -> None:
        logger.info("%s: %s", source, message)
        result.diagnostics.append(
            Diagnostic(code=code, severity=Severity.WARNING, message=message, source=source)
        )

    @staticmethod
    def _class_edit(node: JsxElement, classes: list[str]) -> tuple[int, int, str]:
        attr = node.attribute("className")
        if attr is None:
            return node.attrs_end, node.attrs_end, f" className={_jsx_string(' '.join(classes))}"
        quote = attr.quote if attr.kind is ValueKind.STRING else '"'
        return attr.value_start, attr.end, _jsx_string(" ".join(classes), quote)

    @staticmethod
    def _style_edit(
        code: str, node: JsxElement, style: StyleObject, dropped: set[int]
    ) -> tuple[int, int, str]:
        attr = node.attribute("style")
        remaining = style.render(dropped)
        if remaining is not None:
            return attr.value_start, attr.end, remaining
        # Remove the attribute along with the whitespace before it.
        start = attr.start
        while start > node.start and code[start - 1].isspace():
            start -= 1
        return start, attr.end, ""
