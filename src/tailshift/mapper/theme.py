"""Theme scales the utility mapper converts values against.

The defaults mirror the stock utility framework theme; the project
configuration can replace the spacing scale, font sizes and screens.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field

from tailshift.cascade.breakpoints import DEFAULT_SCREENS, parse_length_px

__all__ = ["Theme", "DEFAULT_SPACING", "DEFAULT_FONT_SIZE", "DEFAULT_BORDER_RADIUS"]

DEFAULT_SPACING: dict[str, str] = {
    "0": "0px",
    "px": "1px",
    "0.5": "0.125rem",
    "1": "0.25rem",
    "1.5": "0.375rem",
    "2": "0.5rem",
    "2.5": "0.625rem",
    "3": "0.75rem",
    "3.5": "0.875rem",
    "4": "1rem",
    "5": "1.25rem",
    "6": "1.5rem",
    "7": "1.75rem",
    "8": "2rem",
    "9": "2.25rem",
    "10": "2.5rem",
    "11": "2.75rem",
    "12": "3rem",
    "14": "3.5rem",
    "16": "4rem",
    "20": "5rem",
    "24": "6rem",
    "28": "7rem",
    "32": "8rem",
    "36": "9rem",
    "40": "10rem",
    "44": "11rem",
    "48": "12rem",
    "52": "13rem",
    "56": "14rem",
    "60": "15rem",
    "64": "16rem",
    "72": "18rem",
    "80": "20rem",
    "96": "24rem",
}

DEFAULT_FONT_SIZE: dict[str, str] = {
    "xs": "0.75rem",
    "sm": "0.875rem",
    "base": "1rem",
    "lg": "1.125rem",
    "xl": "1.25rem",
    "2xl": "1.5rem",
    "3xl": "1.875rem",
    "4xl": "2.25rem",
    "5xl": "3rem",
    "6xl": "3.75rem",
    "7xl": "4.5rem",
    "8xl": "6rem",
    "9xl": "8rem",
}

# Suffix "" renders as the bare ``rounded`` token.
DEFAULT_BORDER_RADIUS: dict[str, str] = {
    "none": "0px",
    "sm": "0.125rem",
    "": "0.25rem",
    "md": "0.375rem",
    "lg": "0.5rem",
    "xl": "0.75rem",
    "2xl": "1rem",
    "3xl": "1.5rem",
}

# CSS color keyword -> color token suffix.
DEFAULT_COLORS: dict[str, str] = {
    "transparent": "transparent",
    "currentcolor": "current",
    "inherit": "inherit",
    "white": "white",
    "black": "black",
    "red": "red-500",
    "orange": "orange-500",
    "yellow": "yellow-500",
    "green": "green-500",
    "blue": "blue-500",
    "purple": "purple-500",
    "pink": "pink-500",
    "gray": "gray-500",
    "grey": "gray-500",
}

DEFAULT_LINE_HEIGHT: dict[str, str] = {
    "none": "1",
    "tight": "1.25",
    "snug": "1.375",
    "normal": "1.5",
    "relaxed": "1.625",
    "loose": "2",
    "3": ".75rem",
    "4": "1rem",
    "5": "1.25rem",
    "6": "1.5rem",
    "7": "1.75rem",
    "8": "2rem",
    "9": "2.25rem",
    "10": "2.5rem",
}

DEFAULT_LETTER_SPACING: dict[str, str] = {
    "tighter": "-0.05em",
    "tight": "-0.025em",
    "normal": "0em",
    "wide": "0.025em",
    "wider": "0.05em",
    "widest": "0.1em",
}


def _px_scale(scale: Mapping[str, str]) -> dict[float, str]:
    """Invert a ``key -> length`` scale into ``pixels -> key``."""
    inverted: dict[float, str] = {}
    for key, value in scale.items():
        px = parse_length_px(value)
        if px is not None and px not in inverted:
            inverted[px] = key
    return inverted


@dataclass(frozen=True)
class Theme:
    """Scales used to turn literal CSS values into utility suffixes."""

    spacing: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_SPACING))
    font_size: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_FONT_SIZE))
    border_radius: Mapping[str, str] = field(
        default_factory=lambda: dict(DEFAULT_BORDER_RADIUS)
    )
    colors: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_COLORS))
    line_height: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_LINE_HEIGHT))
    letter_spacing: Mapping[str, str] = field(
        default_factory=lambda: dict(DEFAULT_LETTER_SPACING)
    )
    screens: Mapping[str, object] = field(default_factory=lambda: dict(DEFAULT_SCREENS))

    def with_overrides(
        self,
        spacing: Mapping[str, str] | None = None,
        font_size: Mapping[str, str] | None = None,
        screens: Mapping[str, object] | None = None,
    ) -> Theme:
        """Return a copy with extended spacing and font sizes and replaced screens."""
        changes: dict[str, Mapping[str, object]] = {}
        if spacing:
            changes["spacing"] = {**self.spacing, **spacing}
        if font_size:
            changes["font_size"] = {**self.font_size, **font_size}
        if screens:
            changes["screens"] = dict(screens)
        return dataclasses.replace(self, **changes)

    def spacing_scale(self) -> dict[float, str]:
        return _px_scale(self.spacing)

    def font_size_scale(self) -> dict[float, str]:
        return _px_scale(self.font_size)

    def radius_scale(self) -> dict[float, str]:
        return _px_scale(self.border_radius)
