"""Specificity model: structural specificity counting and comparison.

Selectors are scanned character by character rather than matched with
regular expressions, so nested functional pseudo-classes such as
``:not(.a .b)`` are counted by their arguments, the way browsers do.
"""

from __future__ import annotations

from tailshift.model.selector import ParsedSelector, SelectorShape, TargetKind
from tailshift.model.specificity import INLINE_SPECIFICITY, Specificity

__all__ = [
    "specificity_of",
    "specificity_of_descendant",
    "specificity_of_parsed",
    "compare",
]

# Legacy single-colon pseudo-elements; these weigh nothing.
_PSEUDO_ELEMENTS = frozenset(
    {
        "before",
        "after",
        "first-line",
        "first-letter",
        "selection",
        "marker",
        "placeholder",
        "backdrop",
    }
)

# Functional pseudo-classes whose argument is not a selector list.
_OPAQUE_FUNCTIONS = ("nth-", "lang", "dir", "where")

_COMBINATORS = " \t\r\n>+~,("


def _is_ident_start(ch: str) -> bool:
    return ch.isalpha() or ch in "_-\\" or ord(ch) > 127


def _read_ident(text: str, start: int) -> tuple[str, int]:
    """Read an identifier starting at *start*; returns it and the next index."""
    i = start
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            i += 2
        elif ch.isalnum() or ch in "_-" or ord(ch) > 127:
            i += 1
        else:
            break
    return text[start:i], i


def _skip_group(text: str, start: int, opening: str, closing: str) -> int:
    """Return the index just past the bracket that closes the one at *start*."""
    depth = 0
    i = start
    while i < len(text):
        ch = text[i]
        if ch == opening:
            depth += 1
        elif ch == closing:
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return len(text)


def specificity_of(selector: str) -> Specificity:
    """Count ids, class-like parts and elements of *selector*.

    Returns ``(0, ids, classes, elements)``; a ``style=`` origin returns the
    dominant inline sentinel ``(1, 0, 0, 0)``.
    """
    text = selector.strip()
    if text.startswith("style="):
        return INLINE_SPECIFICITY

    ids = classes = elements = 0
    compound_start = True
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "#":
            name, i = _read_ident(text, i + 1)
            if name:
                ids += 1
            compound_start = False
        elif ch == ".":
            name, i = _read_ident(text, i + 1)
            if name:
                classes += 1
            compound_start = False
        elif ch == "[":
            classes += 1
            i = _skip_group(text, i, "[", "]")
            compound_start = False
        elif ch == ":":
            double = text.startswith("::", i)
            name, i = _read_ident(text, i + (2 if double else 1))
            lowered = name.lower()
            if i < len(text) and text[i] == "(":
                if lowered.startswith(_OPAQUE_FUNCTIONS):
                    if not lowered.startswith("where"):
                        classes += 1
                    i = _skip_group(text, i, "(", ")")
                    compound_start = False
                else:
                    # Argument selectors are counted in place.
                    i += 1
                    compound_start = True
                continue
            if name and not double and lowered not in _PSEUDO_ELEMENTS:
                classes += 1
            compound_start = False
        elif ch in _COMBINATORS:
            compound_start = True
            i += 1
        elif ch == "*":
            compound_start = False
            i += 1
        elif compound_start and _is_ident_start(ch):
            name, i = _read_ident(text, i)
            elements += 1
            compound_start = False
        else:
            compound_start = False
            i += 1
    return Specificity(0, ids, classes, elements)


def _unit(kind: TargetKind) -> Specificity:
    if kind is TargetKind.CLASS:
        return Specificity(class_like=1)
    return Specificity(element=1)


def specificity_of_descendant(parent_kind: TargetKind, target_kind: TargetKind) -> Specificity:
    """Specificity of a ``parent target`` pair; the combinator adds nothing."""
    return _unit(parent_kind) + _unit(target_kind)


def specificity_of_parsed(parsed: ParsedSelector) -> Specificity:
    """Specificity of a classified selector occurrence."""
    if parsed.shape is SelectorShape.DESCENDANT and parsed.parent and parsed.target:
        return specificity_of_descendant(parsed.parent.kind, parsed.target.kind)
    return specificity_of(parsed.raw)


def compare(a: Specificity, b: Specificity) -> int:
    """Lexicographic comparison; a positive result means *a* wins."""
    for left, right in zip(a.as_tuple(), b.as_tuple()):
        if left != right:
            return left - right
    return 0
