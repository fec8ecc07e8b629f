"""Utility mapper: literal CSS declarations to utility tokens.

``UtilityMapper.convert`` is a pure function of the property, the value and
the theme it was built with. A declaration converts all-or-nothing: a
shorthand whose parts do not all map produces no tokens, so removing a
converted declaration never drops part of its effect.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from tailshift.mapper.theme import Theme

__all__ = ["SPACING_TOLERANCE", "MappedUtility", "MapResult", "UtilityMapper"]

logger = logging.getLogger(__name__)

# Relative distance within which a length snaps to the closest spacing step.
SPACING_TOLERANCE = 0.2

_LENGTH_RE = re.compile(r"^(-?(?:\d+(?:\.\d+)?|\.\d+))(px|rem)$")
_NUMERIC_RE = re.compile(r"^-?(?:\d+(?:\.\d+)?|\.\d+)(px|rem|em|%|vh|vw|ch|ex|vmin|vmax)?$")
_NUMBER_RE = re.compile(r"^-?(?:\d+(?:\.\d+)?|\.\d+)$")
_HEX_RE = re.compile(r"^#(?:[0-9a-f]{3,4}|[0-9a-f]{6}|[0-9a-f]{8})$")
_COLOR_FUNCTION_RE = re.compile(r"^(?:rgba?|hsla?)\([^()]*\)$")

_DISPLAY = {
    "block": "block",
    "inline": "inline",
    "inline-block": "inline-block",
    "flex": "flex",
    "inline-flex": "inline-flex",
    "grid": "grid",
    "inline-grid": "inline-grid",
    "contents": "contents",
    "flow-root": "flow-root",
    "table": "table",
    "table-row": "table-row",
    "table-cell": "table-cell",
    "list-item": "list-item",
    "none": "hidden",
}

_KEYWORD_PROPERTIES: dict[str, dict[str, str]] = {
    "position": {v: v for v in ("static", "fixed", "absolute", "relative", "sticky")},
    "visibility": {"visible": "visible", "hidden": "invisible", "collapse": "collapse"},
    "box-sizing": {"border-box": "box-border", "content-box": "box-content"},
    "float": {"left": "float-left", "right": "float-right", "none": "float-none"},
    "clear": {"left": "clear-left", "right": "clear-right", "both": "clear-both", "none": "clear-none"},
    "font-style": {"italic": "italic", "normal": "not-italic"},
    "font-weight": {
        "100": "font-thin",
        "200": "font-extralight",
        "300": "font-light",
        "400": "font-normal",
        "normal": "font-normal",
        "500": "font-medium",
        "600": "font-semibold",
        "700": "font-bold",
        "bold": "font-bold",
        "800": "font-extrabold",
        "900": "font-black",
    },
    "text-align": {
        v: f"text-{v}" for v in ("left", "center", "right", "justify", "start", "end")
    },
    "text-decoration": {
        "underline": "underline",
        "overline": "overline",
        "line-through": "line-through",
        "none": "no-underline",
    },
    "text-transform": {
        "uppercase": "uppercase",
        "lowercase": "lowercase",
        "capitalize": "capitalize",
        "none": "normal-case",
    },
    "white-space": {
        v: f"whitespace-{v}" for v in ("normal", "nowrap", "pre", "pre-line", "pre-wrap")
    },
    "word-break": {"normal": "break-normal", "break-all": "break-all", "keep-all": "break-keep"},
    "flex-direction": {
        "row": "flex-row",
        "row-reverse": "flex-row-reverse",
        "column": "flex-col",
        "column-reverse": "flex-col-reverse",
    },
    "flex-wrap": {"wrap": "flex-wrap", "nowrap": "flex-nowrap", "wrap-reverse": "flex-wrap-reverse"},
    "justify-content": {
        "flex-start": "justify-start",
        "start": "justify-start",
        "flex-end": "justify-end",
        "end": "justify-end",
        "center": "justify-center",
        "space-between": "justify-between",
        "space-around": "justify-around",
        "space-evenly": "justify-evenly",
    },
    "align-items": {
        "flex-start": "items-start",
        "start": "items-start",
        "flex-end": "items-end",
        "end": "items-end",
        "center": "items-center",
        "baseline": "items-baseline",
        "stretch": "items-stretch",
    },
    "align-content": {
        "flex-start": "content-start",
        "flex-end": "content-end",
        "center": "content-center",
        "space-between": "content-between",
        "space-around": "content-around",
        "space-evenly": "content-evenly",
        "stretch": "content-stretch",
    },
    "align-self": {
        "auto": "self-auto",
        "flex-start": "self-start",
        "flex-end": "self-end",
        "center": "self-center",
        "stretch": "self-stretch",
        "baseline": "self-baseline",
    },
    "flex-grow": {"0": "grow-0", "1": "grow"},
    "flex-shrink": {"0": "shrink-0", "1": "shrink"},
    "flex": {
        "1": "flex-1",
        "1 1 0%": "flex-1",
        "auto": "flex-auto",
        "1 1 auto": "flex-auto",
        "initial": "flex-initial",
        "0 1 auto": "flex-initial",
        "none": "flex-none",
        "0 0 auto": "flex-none",
    },
    "overflow": {v: f"overflow-{v}" for v in ("auto", "hidden", "visible", "scroll", "clip")},
    "overflow-x": {v: f"overflow-x-{v}" for v in ("auto", "hidden", "visible", "scroll", "clip")},
    "overflow-y": {v: f"overflow-y-{v}" for v in ("auto", "hidden", "visible", "scroll", "clip")},
    "object-fit": {v: f"object-{v}" for v in ("contain", "cover", "fill", "none", "scale-down")},
    "cursor": {
        v: f"cursor-{v}"
        for v in ("auto", "default", "pointer", "wait", "text", "move", "not-allowed", "help")
    },
    "pointer-events": {"none": "pointer-events-none", "auto": "pointer-events-auto"},
    "user-select": {v: f"select-{v}" for v in ("none", "text", "all", "auto")},
    "list-style-type": {"none": "list-none", "disc": "list-disc", "decimal": "list-decimal"},
    "aspect-ratio": {
        "auto": "aspect-auto",
        "1 / 1": "aspect-square",
        "1/1": "aspect-square",
        "16 / 9": "aspect-video",
        "16/9": "aspect-video",
    },
    "border-style": {
        v: f"border-{v}" for v in ("solid", "dashed", "dotted", "double", "hidden", "none")
    },
}

_SPACING_PREFIXES = {
    "margin": "m",
    "margin-top": "mt",
    "margin-right": "mr",
    "margin-bottom": "mb",
    "margin-left": "ml",
    "padding": "p",
    "padding-top": "pt",
    "padding-right": "pr",
    "padding-bottom": "pb",
    "padding-left": "pl",
    "gap": "gap",
    "row-gap": "gap-y",
    "column-gap": "gap-x",
    "top": "top",
    "right": "right",
    "bottom": "bottom",
    "left": "left",
    "inset": "inset",
}

# Properties whose spacing utilities accept a leading minus.
_NEGATIVE_PREFIXES = frozenset({"m", "mt", "mr", "mb", "ml", "top", "right", "bottom", "left", "inset"})

_SIZE_PREFIXES = {
    "width": "w",
    "height": "h",
    "min-width": "min-w",
    "max-width": "max-w",
    "min-height": "min-h",
    "max-height": "max-h",
}

_SIZE_KEYWORDS = {
    "auto": "auto",
    "100%": "full",
    "min-content": "min",
    "max-content": "max",
    "fit-content": "fit",
    "50%": "1/2",
    "33.333333%": "1/3",
    "33.333%": "1/3",
    "33.33%": "1/3",
    "66.666667%": "2/3",
    "66.666%": "2/3",
    "66.67%": "2/3",
    "25%": "1/4",
    "75%": "3/4",
    "20%": "1/5",
    "40%": "2/5",
    "60%": "3/5",
    "80%": "4/5",
    "none": "none",
}

_SCREEN_KEYWORDS = {
    "width": ("100vw", "w-screen"),
    "height": ("100vh", "h-screen"),
    "min-height": ("100vh", "min-h-screen"),
}

_BORDER_WIDTHS = {"0": "0", "0px": "0", "1px": "", "2px": "2", "4px": "4", "8px": "8"}
_BORDER_SIDES = {"border-top": "t", "border-right": "r", "border-bottom": "b", "border-left": "l"}
_BORDER_STYLES = frozenset({"solid", "dashed", "dotted", "double", "hidden", "none"})


@dataclass(frozen=True)
class MappedUtility:
    """A utility token and the CSS property it sets."""

    token: str
    css_property: str


@dataclass(frozen=True)
class MapResult:
    utilities: tuple[MappedUtility, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def tokens(self) -> tuple[str, ...]:
        return tuple(u.token for u in self.utilities)

    @property
    def converted(self) -> bool:
        return bool(self.utilities)

    @classmethod
    def single(cls, token: str, css_property: str) -> MapResult:
        return cls(utilities=(MappedUtility(token, css_property),))

    @classmethod
    def skip(cls, reason: str) -> MapResult:
        return cls(warnings=(reason,))


def _split_value(value: str) -> list[str]:
    """Split on top-level whitespace; function arguments stay whole."""
    parts: list[str] = []
    depth = 0
    current = ""
    for ch in value:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(depth - 1, 0)
        if ch.isspace() and depth == 0:
            if current:
                parts.append(current)
            current = ""
            continue
        current += ch
    if current:
        parts.append(current)
    return parts


def _px(value: str) -> float | None:
    """Pixels for ``Npx``/``Nrem`` (and bare ``0``), else ``None``."""
    if value == "0":
        return 0.0
    match = _LENGTH_RE.match(value)
    if not match:
        return None
    number = float(match.group(1))
    return number * 16 if match.group(2) == "rem" else number


def _is_color(value: str) -> bool:
    return bool(_HEX_RE.match(value) or _COLOR_FUNCTION_RE.match(value))


class UtilityMapper:
    """Convert ``property: value`` pairs into utility tokens.

    Args:
        theme: Scales to convert against; defaults to the stock theme.
        spacing_tolerance: Relative distance within which a length snaps to
            the closest spacing or radius step.
        allow_arbitrary: Whether ``prefix-[value]`` tokens may be produced
            for values that are not on a scale.
    """

    def __init__(
        self,
        theme: Theme | None = None,
        spacing_tolerance: float = SPACING_TOLERANCE,
        allow_arbitrary: bool = True,
    ) -> None:
        self.theme = theme or Theme()
        self.spacing_tolerance = spacing_tolerance
        self.allow_arbitrary = allow_arbitrary
        self._spacing = self.theme.spacing_scale()
        self._font_sizes = self.theme.font_size_scale()
        self._radii = self.theme.radius_scale()
        self._line_heights = {v: k for k, v in self.theme.line_height.items()}
        self._letter_spacing = {v: k for k, v in self.theme.letter_spacing.items()}
        self._handlers: dict[str, Callable[[str, str], MapResult]] = {
            "display": self._display,
            "font-size": self._font_size,
            "line-height": self._line_height,
            "letter-spacing": self._letter_spacing_value,
            "color": self._text_color,
            "background-color": self._background_color,
            "background": self._background,
            "border-radius": self._border_radius,
            "border": self._border_shorthand,
            "border-width": self._border_width,
            "border-color": self._border_color,
            "flex-basis": self._flex_basis,
            "opacity": self._opacity,
            "z-index": self._z_index,
            "order": self._order,
        }

    # ---- public API ----

    def convert(self, prop: str, value: str) -> MapResult:
        """Map one declaration; an empty result carries the reason in ``warnings``."""
        prop = prop.strip().lower()
        value = " ".join(value.split()).lower()
        if prop.startswith("--"):
            return MapResult.skip(f"CSS variable declaration: {prop}")
        if not value:
            return MapResult.skip(f"Empty value for {prop}")
        if "!important" in value.replace(" ", ""):
            return MapResult.skip(f"!important declaration: {prop}: {value}")

        handler = self._handlers.get(prop)
        if handler is not None:
            result = handler(prop, value)
        elif prop in ("margin", "padding"):
            result = self._spacing_shorthand(prop, value)
        elif prop in _SPACING_PREFIXES:
            result = self._spacing_single(prop, value)
        elif prop in _SIZE_PREFIXES:
            result = self._size(prop, value)
        elif prop in _BORDER_SIDES:
            result = self._border_shorthand(prop, value)
        elif prop in _KEYWORD_PROPERTIES:
            result = self._keyword(prop, value)
        else:
            result = MapResult.skip(f"Unsupported property: {prop}")

        if result.converted:
            logger.debug("Mapped %s: %s -> %s", prop, value, " ".join(result.tokens))
        return result

    # ---- helpers ----

    def _arbitrary(self, prefix: str, value: str, prop: str) -> MapResult:
        if not self.allow_arbitrary:
            return MapResult.skip(f"Arbitrary values are disabled ({prop}: {value})")
        return MapResult.single(f"{prefix}-[{value.replace(' ', '_')}]", prop)

    def _nearest(self, scale: dict[float, str], px: float) -> str | None:
        if px in scale:
            return scale[px]
        if not scale or px <= 0:
            return None
        closest = min(scale, key=lambda step: (abs(step - px), step))
        if abs(closest - px) / px < self.spacing_tolerance:
            return scale[closest]
        return None

    def _spacing_token(self, prefix: str, value: str) -> str | None:
        """``prefix-key`` for a spacing value, arbitrary fallback, or ``None``."""
        if value == "auto" and prefix in _NEGATIVE_PREFIXES | {"mx", "my"}:
            return f"{prefix}-auto"
        if value.startswith("-") and prefix in _NEGATIVE_PREFIXES | {"mx", "my"}:
            px = _px(value[1:])
            key = self._nearest(self._spacing, px) if px is not None else None
            if key is not None:
                return f"-{prefix}-{key}"
        else:
            px = _px(value)
            key = self._nearest(self._spacing, px) if px is not None else None
            if key is not None:
                return f"{prefix}-{key}"
        if _NUMERIC_RE.match(value) and self.allow_arbitrary:
            return f"{prefix}-[{value}]"
        return None

    # ---- handlers ----

    def _keyword(self, prop: str, value: str) -> MapResult:
        token = _KEYWORD_PROPERTIES[prop].get(value)
        if token is None:
            if prop in ("flex-grow", "flex-shrink") and _NUMBER_RE.match(value):
                return self._arbitrary(prop.replace("flex-", ""), value, prop)
            if prop in ("flex", "aspect-ratio"):
                return self._arbitrary(prop.replace("-ratio", ""), value, prop)
            return MapResult.skip(f"Unsupported {prop} value: {value}")
        return MapResult.single(token, prop)

    def _display(self, prop: str, value: str) -> MapResult:
        token = _DISPLAY.get(value)
        if token is None:
            return MapResult.skip(f"Unknown display value: {value}")
        return MapResult.single(token, prop)

    def _spacing_single(self, prop: str, value: str) -> MapResult:
        prefix = _SPACING_PREFIXES[prop]
        if prefix in ("top", "right", "bottom", "left", "inset") and value == "100%":
            return MapResult.single(f"{prefix}-full", prop)
        token = self._spacing_token(prefix, value)
        if token is None:
            return MapResult.skip(f"Unsupported {prop} value: {value}")
        return MapResult.single(token, prop)

    def _spacing_shorthand(self, prop: str, value: str) -> MapResult:
        """Expand 1-4 value ``margin``/``padding`` shorthands."""
        prefix = "m" if prop == "margin" else "p"
        parts = _split_value(value)
        layouts = {
            1: [("", prop)],
            2: [("y", f"{prop}-y"), ("x", f"{prop}-x")],
            3: [("t", f"{prop}-top"), ("x", f"{prop}-x"), ("b", f"{prop}-bottom")],
            4: [
                ("t", f"{prop}-top"),
                ("r", f"{prop}-right"),
                ("b", f"{prop}-bottom"),
                ("l", f"{prop}-left"),
            ],
        }
        layout = layouts.get(len(parts))
        if layout is None:
            return MapResult.skip(f"Invalid {prop} shorthand: {value}")
        utilities = []
        for part, (side, css_property) in zip(parts, layout):
            token = self._spacing_token(prefix + side, part)
            if token is None:
                return MapResult.skip(f"Unsupported {prop} value: {part}")
            utilities.append(MappedUtility(token, css_property))
        return MapResult(utilities=tuple(utilities))

    def _size(self, prop: str, value: str) -> MapResult:
        prefix = _SIZE_PREFIXES[prop]
        screen = _SCREEN_KEYWORDS.get(prop)
        if screen and value == screen[0]:
            return MapResult.single(screen[1], prop)
        keyword = _SIZE_KEYWORDS.get(value)
        constrained = prop.startswith(("min-", "max-"))
        if keyword in ("full", "min", "max", "fit"):
            return MapResult.single(f"{prefix}-{keyword}", prop)
        if keyword == "none" and prop.startswith("max-"):
            return MapResult.single(f"{prefix}-none", prop)
        if keyword is not None and keyword != "none" and not constrained:
            return MapResult.single(f"{prefix}-{keyword}", prop)
        px = _px(value)
        if px is not None:
            key = self._nearest(self._spacing, px)
            if key is not None:
                return MapResult.single(f"{prefix}-{key}", prop)
        if _NUMERIC_RE.match(value):
            return self._arbitrary(prefix, value, prop)
        return MapResult.skip(f"Unsupported {prop} value: {value}")

    def _font_size(self, prop: str, value: str) -> MapResult:
        px = _px(value)
        if px is not None and px in self._font_sizes:
            return MapResult.single(f"text-{self._font_sizes[px]}", prop)
        if _NUMERIC_RE.match(value):
            return self._arbitrary("text", value, prop)
        return MapResult.skip(f"Non-standard font-size: {value}")

    def _line_height(self, prop: str, value: str) -> MapResult:
        key = self._line_heights.get(value)
        if key is None and value.startswith("0."):
            key = self._line_heights.get(value[1:])
        if key is not None:
            return MapResult.single(f"leading-{key}", prop)
        if _NUMERIC_RE.match(value):
            return self._arbitrary("leading", value, prop)
        return MapResult.skip(f"Unknown line-height: {value}")

    def _letter_spacing_value(self, prop: str, value: str) -> MapResult:
        key = self._letter_spacing.get(value)
        if key is not None:
            return MapResult.single(f"tracking-{key}", prop)
        if _NUMERIC_RE.match(value):
            return self._arbitrary("tracking", value, prop)
        return MapResult.skip(f"Unknown letter-spacing: {value}")

    def _color_token(self, prefix: str, value: str) -> str | None:
        named = self.theme.colors.get(value)
        if named is not None:
            return f"{prefix}-{named}"
        if _is_color(value) and self.allow_arbitrary:
            return f"{prefix}-[{value.replace(', ', ',').replace(' ', '_')}]"
        return None

    def _text_color(self, prop: str, value: str) -> MapResult:
        token = self._color_token("text", value)
        if token is None:
            return MapResult.skip(f"Unsupported color: {value}")
        return MapResult.single(token, prop)

    def _background_color(self, prop: str, value: str) -> MapResult:
        token = self._color_token("bg", value)
        if token is None:
            return MapResult.skip(f"Unsupported background-color: {value}")
        return MapResult.single(token, prop)

    def _background(self, prop: str, value: str) -> MapResult:
        if value == "none":
            return MapResult.single("bg-none", "background-image")
        token = self._color_token("bg", value)
        if token is None:
            return MapResult.skip(f"Complex background shorthand: {value}")
        return MapResult.single(token, "background-color")

    def _border_radius(self, prop: str, value: str) -> MapResult:
        if value in ("50%", "9999px"):
            return MapResult.single("rounded-full", prop)
        px = _px(value)
        if px is not None:
            key = self._nearest(self._radii, px)
            if key is not None:
                return MapResult.single(f"rounded-{key}" if key else "rounded", prop)
        if _NUMERIC_RE.match(value):
            return self._arbitrary("rounded", value, prop)
        return MapResult.skip(f"Complex border-radius: {value}")

    def _border_width_token(self, prefix: str, value: str) -> str | None:
        step = _BORDER_WIDTHS.get(value)
        if step is not None:
            return f"{prefix}-{step}" if step else prefix
        if _NUMERIC_RE.match(value) and self.allow_arbitrary:
            return f"{prefix}-[{value}]"
        return None

    def _border_width(self, prop: str, value: str) -> MapResult:
        token = self._border_width_token("border", value)
        if token is None:
            return MapResult.skip(f"Unsupported border-width: {value}")
        return MapResult.single(token, prop)

    def _border_color(self, prop: str, value: str) -> MapResult:
        token = self._color_token("border", value)
        if token is None:
            return MapResult.skip(f"Unsupported border-color: {value}")
        return MapResult.single(token, prop)

    def _border_shorthand(self, prop: str, value: str) -> MapResult:
        """``border``/``border-<side>``: width, style and color in any order."""
        side = _BORDER_SIDES.get(prop, "")
        prefix = f"border-{side}" if side else "border"
        css_prefix = prop
        if value in ("none", "0"):
            if side:
                return MapResult.single(f"{prefix}-0", f"{css_prefix}-width")
            token = "border-none" if value == "none" else "border-0"
            css_property = "border-style" if value == "none" else "border-width"
            return MapResult.single(token, css_property)

        utilities: list[MappedUtility] = []
        seen: set[str] = set()
        for part in _split_value(value):
            if part in _BORDER_STYLES and "style" not in seen:
                seen.add("style")
                utilities.append(MappedUtility(f"border-{part}", "border-style"))
                continue
            if "width" not in seen:
                token = self._border_width_token(prefix, part)
                if token is not None:
                    seen.add("width")
                    utilities.append(MappedUtility(token, f"{css_prefix}-width"))
                    continue
            if "color" not in seen:
                token = self._color_token(prefix, part)
                if token is not None:
                    seen.add("color")
                    utilities.append(MappedUtility(token, f"{css_prefix}-color"))
                    continue
            return MapResult.skip(f"Unsupported {prop} value: {value}")
        return MapResult(utilities=tuple(utilities))

    def _flex_basis(self, prop: str, value: str) -> MapResult:
        if value in ("auto", "100%"):
            return MapResult.single(f"basis-{_SIZE_KEYWORDS[value]}", prop)
        token = self._spacing_token("basis", value)
        if token is None:
            return MapResult.skip(f"Unsupported flex-basis: {value}")
        return MapResult.single(token, prop)

    def _opacity(self, prop: str, value: str) -> MapResult:
        if value.endswith("%") and _NUMBER_RE.match(value[:-1]):
            amount = float(value[:-1]) / 100
        elif _NUMBER_RE.match(value):
            amount = float(value)
        else:
            return MapResult.skip(f"Unsupported opacity: {value}")
        percent = round(amount * 100, 4)
        if 0 <= percent <= 100 and percent == int(percent) and int(percent) % 5 == 0:
            return MapResult.single(f"opacity-{int(percent)}", prop)
        return self._arbitrary("opacity", value, prop)

    def _z_index(self, prop: str, value: str) -> MapResult:
        if value == "auto" or value in ("0", "10", "20", "30", "40", "50"):
            return MapResult.single(f"z-{value}", prop)
        if value.startswith("-") and value[1:] in ("10", "20", "30", "40", "50"):
            return MapResult.single(f"-z-{value[1:]}", prop)
        if _NUMBER_RE.match(value) and "." not in value:
            return self._arbitrary("z", value, prop)
        return MapResult.skip(f"Unsupported z-index: {value}")

    def _order(self, prop: str, value: str) -> MapResult:
        named = {"-9999": "order-first", "9999": "order-last", "0": "order-none"}
        if value in named:
            return MapResult.single(named[value], prop)
        if value.isdigit() and 1 <= int(value) <= 12:
            return MapResult.single(f"order-{value}", prop)
        if _NUMBER_RE.match(value):
            return self._arbitrary("order", value, prop)
        return MapResult.skip(f"Unsupported order: {value}")
