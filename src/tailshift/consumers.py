"""Which scanned markup a stylesheet selector applies to.

A declaration is only removed from a stylesheet once its utilities land on
an element, so the project pipeline asks every scanned document and
component source about each selector before converting it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from tailshift.markup import ArenaNode, MarkupArena
from tailshift.model.selector import ParsedSelector

__all__ = ["ConsumerIndex"]

logger = logging.getLogger(__name__)


class ConsumerIndex:
    """Every element the stylesheets of a project are applied to.

    A selector is *unused* when no scanned element matches it, and
    *blocked* when an element matches it whose classes cannot be rewritten
    (a component, or a computed ``className``). Either way the selector
    keeps its declarations.
    """

    def __init__(self, arenas: Iterable[MarkupArena] = ()) -> None:
        self.arenas: list[MarkupArena] = list(arenas)

    def add(self, arena: MarkupArena) -> None:
        self.arenas.append(arena)

    def __len__(self) -> int:
        return sum(len(arena) for arena in self.arenas)

    def unused_reason(self, parsed: ParsedSelector) -> str | None:
        if parsed.target is None:
            return None
        used = False
        for arena in self.arenas:
            for node in arena:
                if not node.matches(parsed.target):
                    continue
                holders: list[ArenaNode] = []
                if parsed.parent is not None:
                    holders = [a for a in arena.ancestors(node) if a.matches(parsed.parent)]
                    if not holders:
                        continue
                # A computed ancestor may not carry the parent class at runtime.
                blocker = next((n for n in [node, *holders] if not n.writable), None)
                if blocker is not None:
                    return (
                        f"{parsed.raw} also matches {blocker.label} in {arena.source}, "
                        "whose classes cannot be rewritten"
                    )
                used = True
        if used:
            return None
        logger.debug("No scanned element matches %s", parsed.raw)
        return f"No scanned element matches {parsed.raw}"
