"""Utility candidates and the conflict records produced while resolving them."""

from __future__ import annotations

from dataclasses import dataclass

from tailshift.model.specificity import Specificity

__all__ = ["UtilityCandidate", "ConflictRecord", "BASE_VARIANT_KEY"]

# Rendering of the empty variant set in conflict records and logs.
BASE_VARIANT_KEY = "(base)"


@dataclass(frozen=True)
class UtilityCandidate:
    """One proposed utility token plus the cascade metadata that ranks it.

    Attributes:
        token: Bare utility token, without variant prefixes (``"p-4"``).
        css_property: The CSS property the token sets; grouping key for conflicts.
        specificity: Specificity of the selector occurrence that produced it.
        source_order: Position in the conversion run; later wins ties.
        variants: Responsive/state variants scoping the token.
        origin_selector: Raw selector of the rule the token came from.
        declaration_index: Index of the producing declaration within its rule,
            or ``None`` for candidates that do not come from a stylesheet rule.
    """

    token: str
    css_property: str
    specificity: Specificity
    source_order: int
    variants: tuple[str, ...] = ()
    origin_selector: str = ""
    declaration_index: int | None = None


@dataclass(frozen=True)
class ConflictRecord:
    """A group of candidates for one property and variant set, with its winner."""

    winner: UtilityCandidate
    losers: tuple[UtilityCandidate, ...]
    css_property: str
    variant_key: str

    def __str__(self) -> str:
        dropped = ", ".join(
            f"{c.token} ({c.origin_selector} #{c.source_order})" for c in self.losers
        )
        return (
            f"{self.css_property} [{self.variant_key}]: "
            f"{self.winner.token} ({self.winner.origin_selector} "
            f"#{self.winner.source_order}) over {dropped}"
        )
