"""Markup rewriter: inject converted utilities into HTML ``class`` attributes.

The document is flattened into an arena of element nodes, each pointing at
its parent by index, so descendant matching walks indices instead of
recursing through the tree. For every element the rewriter gathers the
surviving candidates of each matching outcome plus the candidates of its
inline ``style`` attribute (inline specificity), resolves them as one
element scope and appends the assembled tokens to ``class``.

The arena and the planning step are shared with
:mod:`tailshift.components`, which does the same for JSX/TSX sources.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from bs4 import BeautifulSoup, Tag

from tailshift.cascade.conflicts import resolve_conflicts
from tailshift.cascade.variables import ResolutionContext, VariableRegistry
from tailshift.cascade.variants import VariantOrder
from tailshift.converter import exclusion_reason, resolved_exclusion
from tailshift.mapper.utilities import UtilityMapper
from tailshift.model.candidate import UtilityCandidate
from tailshift.model.diagnostic import Diagnostic, Severity
from tailshift.model.outcome import ConversionOutcome
from tailshift.model.selector import SelectorTarget, TargetKind
from tailshift.model.specificity import INLINE_SPECIFICITY
from tailshift.parser.ast import Declaration
from tailshift.parser.errors import ParseError
from tailshift.parser.transformer import parse_css

__all__ = [
    "ArenaNode",
    "ElementNode",
    "InlineStyle",
    "MarkupArena",
    "MarkupResult",
    "MarkupRewriter",
]

logger = logging.getLogger(__name__)

# Inline candidates rank after every stylesheet candidate of the same run.
_INLINE_ORDER_BASE = 1_000_000


class ArenaNode(Protocol):
    """One element of a markup arena."""

    index: int
    parent: int | None

    @property
    def name(self) -> str: ...

    @property
    def classes(self) -> list[str]: ...

    @property
    def writable(self) -> bool:
        """Whether utilities can be added to this element's classes."""
        ...

    @property
    def label(self) -> str: ...

    def matches(self, target: SelectorTarget) -> bool: ...


@dataclass
class ElementNode:
    index: int
    tag: Tag
    parent: int | None

    @property
    def name(self) -> str:
        return self.tag.name.lower()

    @property
    def classes(self) -> list[str]:
        value = self.tag.get("class") or []
        if isinstance(value, str):
            return value.split()
        return list(value)

    @property
    def writable(self) -> bool:
        return True

    @property
    def label(self) -> str:
        return f"<{self.name}>"

    def matches(self, target: SelectorTarget) -> bool:
        if target.kind is TargetKind.CLASS:
            return target.name in self.classes
        return self.name == target.name


class MarkupArena:
    """Element nodes of a parsed document in document order."""

    def __init__(self, nodes: Sequence[ArenaNode], source: str = "<string>") -> None:
        self.nodes = list(nodes)
        self.source = source

    @classmethod
    def from_soup(cls, soup: BeautifulSoup, source: str = "<string>") -> MarkupArena:
        nodes: list[ElementNode] = []
        stack: list[tuple[Tag, int | None]] = [
            (child, None) for child in reversed(soup.find_all(True, recursive=False))
        ]
        while stack:
            tag, parent = stack.pop()
            node = ElementNode(len(nodes), tag, parent)
            nodes.append(node)
            children = tag.find_all(True, recursive=False)
            stack.extend((child, node.index) for child in reversed(children))
        return cls(nodes, source)

    @classmethod
    def from_html(cls, html: str, source: str = "<string>") -> MarkupArena:
        return cls.from_soup(BeautifulSoup(html, "html.parser"), source)

    def __iter__(self) -> Iterator[ArenaNode]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def ancestors(self, node: ArenaNode) -> Iterator[ArenaNode]:
        current = node.parent
        while current is not None:
            ancestor = self.nodes[current]
            yield ancestor
            current = ancestor.parent

    def select(self, outcome: ConversionOutcome) -> list[ArenaNode]:
        """Elements addressed by a converted outcome."""
        if outcome.target is None:
            return []
        return self.select_target(outcome.target, outcome.parent)

    def select_target(
        self, target: SelectorTarget, parent: SelectorTarget | None = None
    ) -> list[ArenaNode]:
        matched = [n for n in self.nodes if n.matches(target)]
        if parent is None:
            return matched
        return [n for n in matched if any(a.matches(parent) for a in self.ancestors(n))]


@dataclass
class MarkupResult:
    html: str
    changed: bool = False
    elements_updated: int = 0
    classes_added: int = 0
    inline_converted: int = 0
    diagnostics: list[Diagnostic] = field(default_factory=list)


@dataclass
class InlineStyle:
    """Declarations of one element's inline style and the candidates they produced."""

    declarations: list[Declaration]
    candidates: list[UtilityCandidate]

    def converted_indexes(self, survivors: Iterable[UtilityCandidate]) -> set[int]:
        return {
            c.declaration_index
            for c in survivors
            if c.specificity == INLINE_SPECIFICITY and c.declaration_index is not None
        }


class MarkupRewriter:
    """Rewrite one HTML document against a set of conversion outcomes.

    Args:
        mapper: Mapper used for inline ``style`` declarations.
        registry: Variables visible to inline styles.
        variant_order: Canonical variant ordering for token assembly.
        convert_inline: Whether inline ``style`` attributes are converted.
    """

    def __init__(
        self,
        mapper: UtilityMapper | None = None,
        registry: VariableRegistry | None = None,
        variant_order: VariantOrder | None = None,
        convert_inline: bool = True,
    ) -> None:
        self.mapper = mapper or UtilityMapper()
        self.registry = registry or VariableRegistry()
        self.variant_order = variant_order or VariantOrder()
        self.convert_inline = convert_inline

    def rewrite(
        self,
        html: str,
        outcomes: Iterable[ConversionOutcome],
        source: str = "<string>",
    ) -> MarkupResult:
        soup = BeautifulSoup(html, "html.parser")
        arena = MarkupArena.from_soup(soup, source)
        result = MarkupResult(html=html)

        inline: dict[int, InlineStyle] = {}
        if self.convert_inline:
            for node in arena:
                style = self._inline_style(node, source, result)
                if style is not None and style.candidates:
                    inline[node.index] = style

        for node, survivors in self.plan(arena, outcomes, inline):
            added = self._inject(node, survivors)
            style = inline.get(node.index)
            if style is not None:
                result.inline_converted += self._strip_inline(node, style, survivors)
            if added or style is not None:
                result.elements_updated += 1
            result.classes_added += added

        if result.elements_updated:
            result.changed = True
            result.html = str(soup)
        logger.debug(
            "%s: %d element(s) updated, %d class(es) added",
            source,
            result.elements_updated,
            result.classes_added,
        )
        return result

    def plan(
        self,
        arena: MarkupArena,
        outcomes: Iterable[ConversionOutcome],
        inline: dict[int, InlineStyle],
    ) -> list[tuple[ArenaNode, tuple[UtilityCandidate, ...]]]:
        """Surviving candidates per writable element, in document order."""
        # Worklist: element index -> candidates from every matching outcome.
        worklist: dict[int, list[UtilityCandidate]] = {}
        for outcome in outcomes:
            if not outcome.converted:
                continue
            for node in arena.select(outcome):
                if node.writable:
                    worklist.setdefault(node.index, []).extend(outcome.candidates)
        for index, style in inline.items():
            worklist.setdefault(index, []).extend(style.candidates)

        planned = []
        for index in sorted(worklist):
            resolution = resolve_conflicts(worklist[index], self.variant_order)
            planned.append((arena.nodes[index], resolution.survivors))
        return planned

    def new_tokens(self, existing: list[str], survivors: Iterable[UtilityCandidate]) -> list[str]:
        """Assembled tokens of *survivors* that *existing* does not hold yet."""
        tokens: list[str] = []
        for candidate in survivors:
            token = self.variant_order.assemble(candidate.token, candidate.variants)
            if token not in existing and token not in tokens:
                tokens.append(token)
        return tokens

    def _inject(self, node: ElementNode, survivors: Iterable[UtilityCandidate]) -> int:
        classes = node.classes
        added = self.new_tokens(classes, survivors)
        if added:
            node.tag["class"] = classes + added
        return len(added)

    def _inline_style(
        self, node: ElementNode, source: str, result: MarkupResult
    ) -> InlineStyle | None:
        style = node.tag.get("style")
        if not isinstance(style, str) or not style.strip():
            return None
        try:
            sheet = parse_css("inline {" + style + "}")
        except ParseError as e:
            result.diagnostics.append(
                Diagnostic(
                    code="parse_error",
                    severity=Severity.WARNING,
                    message=f"Could not parse inline style on <{node.name}>: {e.summary}",
                    source=source,
                )
            )
            return None
        declarations = sheet.rules[0].declarations if sheet.rules else []
        candidates = self.inline_candidates(
            node, declarations, f'style="{style}"', source, result
        )
        return InlineStyle(declarations, candidates)

    def inline_candidates(
        self,
        node: ArenaNode,
        declarations: Sequence[Declaration],
        origin: str,
        source: str,
        result: MarkupResult,
    ) -> list[UtilityCandidate]:
        """Candidates for the inline declarations of *node*.

        Variables resolve in the context of the element's first class, or of
        its tag name when it has none. Declarations that stay inline are
        reported on *result*.
        """
        classes = node.classes
        selector = f".{classes[0]}" if classes else node.name
        context = ResolutionContext(selector, INLINE_SPECIFICITY)

        candidates: list[UtilityCandidate] = []
        for index, decl in enumerate(declarations):
            if decl.is_custom_property:
                continue
            exclusion = exclusion_reason(decl)
            message = exclusion[1] if exclusion else None
            if message is None:
                resolved = self.registry.resolve_value(decl.value, context)
                exclusion = resolved_exclusion(decl, resolved.value)
                if resolved.has_unresolved:
                    message = f"Unresolved variable: {', '.join(resolved.unresolved)}"
                elif exclusion is not None:
                    message = exclusion[1]
                else:
                    mapped = self.mapper.convert(decl.prop, resolved.value)
                    if mapped.converted:
                        for utility in mapped.utilities:
                            candidates.append(
                                UtilityCandidate(
                                    token=utility.token,
                                    css_property=utility.css_property,
                                    specificity=INLINE_SPECIFICITY,
                                    source_order=_INLINE_ORDER_BASE + index,
                                    origin_selector=origin,
                                    declaration_index=index,
                                )
                            )
                        continue
                    message = "; ".join(mapped.warnings)
            result.diagnostics.append(
                Diagnostic(
                    code="inline_style",
                    severity=Severity.WARNING,
                    message=f"Inline style on {node.label} kept: {message}",
                    source=source,
                )
            )
        return candidates

    def _strip_inline(
        self,
        node: ElementNode,
        style: InlineStyle,
        survivors: Iterable[UtilityCandidate],
    ) -> int:
        """Drop converted declarations from ``style``; returns how many were dropped."""
        converted = style.converted_indexes(survivors)
        remaining = [d for i, d in enumerate(style.declarations) if i not in converted]
        if remaining:
            node.tag["style"] = "; ".join(f"{d.prop}: {d.value}" for d in remaining) + ";"
        else:
            del node.tag["style"]
        return len(style.declarations) - len(remaining)
