"""Variant assembler: canonical variant ordering and ``variant:token`` rendering."""

from __future__ import annotations

from collections.abc import Iterable

from tailshift.cascade.breakpoints import BreakpointTable

__all__ = [
    "STATE_VARIANT_ORDER",
    "VariantOrder",
    "normalize_variants",
    "variant_key",
    "assemble_utility",
    "merge_utilities",
]

STATE_VARIANT_ORDER = (
    "hover",
    "focus",
    "active",
    "disabled",
    "visited",
    "first",
    "last",
    "before",
    "after",
)

_STATE_RANK = {name: index for index, name in enumerate(STATE_VARIANT_ORDER)}


class VariantOrder:
    """Canonical ordering of variant names against one breakpoint table.

    Responsive variants come first (by breakpoint width), then state variants
    in fixed priority, then anything else lexicographically.
    """

    def __init__(self, breakpoints: BreakpointTable | None = None) -> None:
        if breakpoints is None:
            breakpoints = BreakpointTable.default()
        self.breakpoints = breakpoints

    def _sort_key(self, variant: str) -> tuple[int, int, str]:
        rank = self.breakpoints.rank(variant)
        if rank is not None:
            return (0, rank, "")
        if variant in _STATE_RANK:
            return (1, _STATE_RANK[variant], "")
        return (2, 0, variant)

    def normalize(self, variants: Iterable[str]) -> tuple[str, ...]:
        """Deduplicate and sort *variants*; input order never matters."""
        return tuple(sorted({v for v in variants if v}, key=self._sort_key))

    def key(self, variants: Iterable[str]) -> str:
        """Canonical rendering used as the conflict grouping key."""
        return ":".join(self.normalize(variants))

    def assemble(self, token: str, variants: Iterable[str]) -> str:
        normalized = self.normalize(variants)
        if not normalized:
            return token
        return ":".join(normalized + (token,))

    def merge(
        self, items: Iterable[tuple[str, Iterable[str]]]
    ) -> list[tuple[str, tuple[str, ...]]]:
        """Union the variant sets of repeated tokens, in first-seen token order."""
        merged: dict[str, set[str]] = {}
        for token, variants in items:
            merged.setdefault(token, set()).update(variants)
        return [(token, self.normalize(variants)) for token, variants in merged.items()]


def normalize_variants(variants: Iterable[str]) -> tuple[str, ...]:
    return VariantOrder().normalize(variants)


def variant_key(variants: Iterable[str]) -> str:
    return VariantOrder().key(variants)


def assemble_utility(token: str, variants: Iterable[str]) -> str:
    return VariantOrder().assemble(token, variants)


def merge_utilities(
    items: Iterable[tuple[str, Iterable[str]]],
) -> list[tuple[str, tuple[str, ...]]]:
    return VariantOrder().merge(items)
