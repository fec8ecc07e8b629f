"""Breakpoint resolver: maps ``min-width`` media conditions to responsive variants.

The breakpoint table is an explicit, caller-owned object built from the
``screens`` configuration (or the default five breakpoints). Nothing is cached
at module level.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum

__all__ = [
    "BREAKPOINT_TOLERANCE",
    "DEFAULT_SCREENS",
    "Breakpoint",
    "BreakpointTable",
    "MediaQueryKind",
    "MediaQuery",
    "MediaResolution",
    "parse_length_px",
    "parse_media_query",
    "resolve_media_query",
]

logger = logging.getLogger(__name__)

# Relative distance within which a media query snaps to the closest breakpoint.
BREAKPOINT_TOLERANCE = 0.05

ROOT_FONT_SIZE_PX = 16.0

DEFAULT_SCREENS: dict[str, str] = {
    "sm": "640px",
    "md": "768px",
    "lg": "1024px",
    "xl": "1280px",
    "2xl": "1536px",
}

_LENGTH_RE = re.compile(r"^(\d+(?:\.\d+)?|\.\d+)\s*(px|rem|em)?$", re.IGNORECASE)
_WIDTH_QUERY_RE = re.compile(
    r"^\(\s*(min|max)-width\s*:\s*(\d+(?:\.\d+)?|\.\d+)\s*(px|rem|em)\s*\)$",
    re.IGNORECASE,
)


def parse_length_px(value: str) -> float | None:
    """Convert ``"768px"``, ``"48rem"`` or ``"48em"`` to pixels.

    Bare numbers are taken as pixels. Returns ``None`` for anything else.
    """
    match = _LENGTH_RE.match(value.strip())
    if not match:
        return None
    number = float(match.group(1))
    unit = (match.group(2) or "px").lower()
    if unit in ("rem", "em"):
        return number * ROOT_FONT_SIZE_PX
    return number


@dataclass(frozen=True)
class Breakpoint:
    """A named responsive breakpoint."""

    name: str
    min_width_px: float


class BreakpointTable:
    """Breakpoints sorted ascending by ``min_width_px``."""

    def __init__(
        self, breakpoints: Iterable[Breakpoint], tolerance: float = BREAKPOINT_TOLERANCE
    ) -> None:
        if tolerance < 0:
            raise ValueError("Breakpoint tolerance must be non-negative")
        self._breakpoints = tuple(sorted(breakpoints, key=lambda b: b.min_width_px))
        self.tolerance = tolerance

    @classmethod
    def from_screens(
        cls, screens: Mapping[str, object], tolerance: float = BREAKPOINT_TOLERANCE
    ) -> BreakpointTable:
        """Build a table from a ``screens`` mapping.

        Values may be a length string, a ``[min, max]`` pair or a
        ``{"min": ...}`` mapping; only the minimum width is used.
        """
        breakpoints = []
        for name, value in screens.items():
            raw = value
            if isinstance(value, (list, tuple)):
                raw = value[0] if value else ""
            elif isinstance(value, Mapping):
                raw = value.get("min", "")
            width = parse_length_px(str(raw))
            if width is None:
                raise ValueError(f"Invalid width for breakpoint {name!r}: {value!r}")
            breakpoints.append(Breakpoint(name, width))
        return cls(breakpoints, tolerance=tolerance)

    @classmethod
    def default(cls, tolerance: float = BREAKPOINT_TOLERANCE) -> BreakpointTable:
        return cls.from_screens(DEFAULT_SCREENS, tolerance=tolerance)

    def __iter__(self) -> Iterator[Breakpoint]:
        return iter(self._breakpoints)

    def __len__(self) -> int:
        return len(self._breakpoints)

    def __contains__(self, name: object) -> bool:
        return any(b.name == name for b in self._breakpoints)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(b.name for b in self._breakpoints)

    def rank(self, name: str) -> int | None:
        """Position of *name* in ascending width order, or ``None``."""
        for index, breakpoint in enumerate(self._breakpoints):
            if breakpoint.name == name:
                return index
        return None

    def find(self, min_width_px: float) -> Breakpoint | None:
        """Exact match, else the closest breakpoint within the tolerance."""
        if not self._breakpoints:
            return None
        for breakpoint in self._breakpoints:
            if breakpoint.min_width_px == min_width_px:
                return breakpoint
        closest = min(
            self._breakpoints,
            key=lambda b: (abs(b.min_width_px - min_width_px), b.min_width_px),
        )
        distance = abs(closest.min_width_px - min_width_px)
        if distance <= self.tolerance * min_width_px:
            return closest
        return None


class MediaQueryKind(Enum):
    MIN_WIDTH = "min-width"
    MAX_WIDTH = "max-width"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class MediaQuery:
    raw: str
    kind: MediaQueryKind
    value_px: float | None = None


@dataclass(frozen=True)
class MediaResolution:
    """A resolved responsive variant, or the reason there is none."""

    query: MediaQuery
    variant: str | None = None
    reason: str | None = None

    @property
    def supported(self) -> bool:
        return self.variant is not None


def parse_media_query(params: str) -> MediaQuery:
    """Recognise a single ``(min-width: N)`` or ``(max-width: N)`` condition.

    Media types, ``and`` compounds, orientation and every other feature are
    unsupported.
    """
    raw = " ".join(params.split())
    match = _WIDTH_QUERY_RE.match(raw)
    if not match:
        return MediaQuery(raw=raw, kind=MediaQueryKind.UNSUPPORTED)
    value = parse_length_px(match.group(2) + match.group(3))
    kind = MediaQueryKind.MIN_WIDTH if match.group(1).lower() == "min" else MediaQueryKind.MAX_WIDTH
    return MediaQuery(raw=raw, kind=kind, value_px=value)


def resolve_media_query(params: str, table: BreakpointTable) -> MediaResolution:
    """Resolve ``@media`` params against *table*."""
    query = parse_media_query(params)
    if query.kind is MediaQueryKind.MAX_WIDTH:
        return MediaResolution(
            query, reason=f"Skipped media query ({query.raw}): max-width is unsupported"
        )
    if query.kind is MediaQueryKind.UNSUPPORTED or query.value_px is None:
        return MediaResolution(
            query, reason=f"Skipped media query ({query.raw}): unsupported condition"
        )
    breakpoint = table.find(query.value_px)
    if breakpoint is None:
        return MediaResolution(
            query, reason=f"No matching breakpoint for min-width: {query.value_px:g}px"
        )
    if breakpoint.min_width_px != query.value_px:
        logger.debug(
            "Snapped min-width %spx to breakpoint %s (%spx)",
            query.value_px,
            breakpoint.name,
            breakpoint.min_width_px,
        )
    return MediaResolution(query, variant=breakpoint.name)
