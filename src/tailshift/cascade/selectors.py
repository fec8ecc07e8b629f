"""Selector classifier: sorts raw selectors into the shapes the converter models.

Only simple selectors (``.card``, ``h1``), one-level descendant selectors
(``.blog-main h1``) and a class with one allowlisted pseudo-class
(``.card:hover``) are convertible. Everything else is reported as
unsupported with a reason naming what was found.
"""

from __future__ import annotations

import re

from tailshift.model.selector import ParsedSelector, SelectorShape, SelectorTarget, TargetKind

__all__ = ["PSEUDO_VARIANTS", "classify", "split_selector_list"]

# Pseudo-class (or legacy pseudo-element) name -> variant name.
PSEUDO_VARIANTS: dict[str, str] = {
    "hover": "hover",
    "focus": "focus",
    "active": "active",
    "disabled": "disabled",
    "visited": "visited",
    "first-child": "first",
    "last-child": "last",
    "before": "before",
    "after": "after",
}

_CLASS_RE = re.compile(r"^\.([a-zA-Z_-][a-zA-Z0-9_-]*)$")
_ELEMENT_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9]*$")
_FUNCTIONAL_PSEUDO_RE = re.compile(r":{1,2}[a-zA-Z-]+\(")
_PSEUDO_SPLIT_RE = re.compile(r"::?")

_COMBINATOR_REASONS = (
    (">", "Skipped child combinator selector"),
    ("+", "Skipped adjacent sibling selector"),
    ("~", "Skipped general sibling selector"),
)


def _unsupported(raw: str, reason: str) -> ParsedSelector:
    return ParsedSelector(raw=raw, shape=SelectorShape.UNSUPPORTED, reason=reason)


def _parse_part(part: str) -> SelectorTarget | None:
    """Parse one whitespace-free part as ``.class`` or a bare element name."""
    match = _CLASS_RE.match(part)
    if match:
        return SelectorTarget(TargetKind.CLASS, match.group(1))
    if _ELEMENT_RE.match(part):
        return SelectorTarget(TargetKind.ELEMENT, part.lower())
    return None


def classify(selector: str) -> ParsedSelector:
    """Classify a single selector (already split on top-level commas).

    The result is deterministic: the same input always yields the same shape
    and, for unsupported selectors, the same reason string.
    """
    raw = selector.strip()
    if not raw:
        return _unsupported(raw, "Empty selector")
    if "," in raw:
        return _unsupported(raw, f"Skipped comma-separated selector ({raw})")
    for symbol, reason in _COMBINATOR_REASONS:
        if symbol in raw:
            return _unsupported(raw, f"{reason} ({raw})")
    if "[" in raw:
        return _unsupported(raw, f"Skipped attribute selector ({raw})")
    if _FUNCTIONAL_PSEUDO_RE.search(raw):
        return _unsupported(raw, f"Skipped pseudo-class with argument ({raw})")

    segments = _PSEUDO_SPLIT_RE.split(raw)
    if len(segments) > 2:
        return _unsupported(raw, f"Skipped complex pseudo chain ({raw})")

    variants: tuple[str, ...] = ()
    base = raw
    if len(segments) == 2:
        base, pseudo = segments[0], segments[1].lower()
        if base[-1:].isspace():
            return _unsupported(raw, f"Unsupported pseudo selector pattern: {raw}")
        if pseudo not in PSEUDO_VARIANTS:
            return _unsupported(raw, f"Unsupported pseudo selector :{pseudo}")
        variants = (PSEUDO_VARIANTS[pseudo],)

    parts = base.split()
    if len(parts) > 2:
        return _unsupported(raw, f"Skipped multi-level descendant selector ({raw})")

    if len(parts) == 2:
        if variants:
            return _unsupported(raw, f"Skipped pseudo on descendant selector ({raw})")
        parent = _parse_part(parts[0])
        target = _parse_part(parts[1])
        if parent is None or target is None:
            return _unsupported(raw, f"Invalid selector part in ({raw})")
        return ParsedSelector(
            raw=raw, shape=SelectorShape.DESCENDANT, target=target, parent=parent
        )

    if not parts:
        return _unsupported(raw, f"Unsupported pseudo selector pattern: {raw}")
    target = _parse_part(parts[0])
    if target is None:
        return _unsupported(raw, f"Invalid selector part ({parts[0]})")
    if variants:
        if target.kind is not TargetKind.CLASS:
            return _unsupported(raw, f"Pseudo selector requires a class base ({raw})")
        return ParsedSelector(
            raw=raw, shape=SelectorShape.PSEUDO_VARIANT, target=target, variants=variants
        )
    shape = (
        SelectorShape.SIMPLE_CLASS
        if target.kind is TargetKind.CLASS
        else SelectorShape.SIMPLE_ELEMENT
    )
    return ParsedSelector(raw=raw, shape=shape, target=target)


def split_selector_list(text: str) -> list[str]:
    """Split a rule prelude on top-level commas.

    Commas nested in parentheses, brackets or quoted strings do not split.
    Empty entries are dropped.
    """
    parts: list[str] = []
    depth = 0
    quote = ""
    current: list[str] = []
    for ch in text:
        if quote:
            current.append(ch)
            if ch == quote:
                quote = ""
            continue
        if ch in "\"'":
            quote = ch
        elif ch in "([":
            depth += 1
        elif ch in ")]":
            depth = max(depth - 1, 0)
        elif ch == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    parts.append("".join(current).strip())
    return [p for p in parts if p]
