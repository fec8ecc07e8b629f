"""Conflict resolver: one winning utility per CSS property and variant set.

Candidates are grouped by ``(css_property, canonical variant key)``. Within a
group the candidate with the greatest specificity wins; equal specificity is
decided by source order, later wins. Different properties, or the same
property under different variant sets, never compete.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from tailshift.cascade.specificity import compare
from tailshift.cascade.variants import VariantOrder
from tailshift.model.candidate import BASE_VARIANT_KEY, ConflictRecord, UtilityCandidate

__all__ = ["ConflictResolution", "group_candidates", "rank_candidates", "resolve_conflicts"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConflictResolution:
    """Survivors (one per group) and the conflicts that were decided."""

    survivors: tuple[UtilityCandidate, ...]
    conflicts: tuple[ConflictRecord, ...]


def _cascade_cmp(a: UtilityCandidate, b: UtilityCandidate) -> int:
    result = compare(a.specificity, b.specificity)
    if result:
        return result
    return a.source_order - b.source_order


def rank_candidates(candidates: Iterable[UtilityCandidate]) -> list[UtilityCandidate]:
    """Sort *candidates* strongest first: specificity, then source order."""
    return sorted(candidates, key=functools.cmp_to_key(_cascade_cmp), reverse=True)


def group_candidates(
    candidates: Iterable[UtilityCandidate], order: VariantOrder | None = None
) -> dict[tuple[str, str], list[UtilityCandidate]]:
    """Group candidates by property and canonical variant key, in first-seen order."""
    order = order or VariantOrder()
    groups: dict[tuple[str, str], list[UtilityCandidate]] = {}
    for candidate in candidates:
        key = (candidate.css_property, order.key(candidate.variants))
        groups.setdefault(key, []).append(candidate)
    return groups


def resolve_conflicts(
    candidates: Iterable[UtilityCandidate], order: VariantOrder | None = None
) -> ConflictResolution:
    """Keep exactly one candidate per ``(property, variant set)`` group.

    Survivors are returned in the order their groups first appeared, so
    resolving an already-resolved list returns it unchanged.
    """
    survivors: list[UtilityCandidate] = []
    conflicts: list[ConflictRecord] = []
    for (css_property, key), group in group_candidates(candidates, order).items():
        if len(group) == 1:
            survivors.append(group[0])
            continue
        ranked = rank_candidates(group)
        winner, losers = ranked[0], tuple(ranked[1:])
        record = ConflictRecord(
            winner=winner,
            losers=losers,
            css_property=css_property,
            variant_key=key or BASE_VARIANT_KEY,
        )
        logger.debug("Conflict resolved: %s", record)
        survivors.append(winner)
        conflicts.append(record)
    return ConflictResolution(survivors=tuple(survivors), conflicts=tuple(conflicts))
