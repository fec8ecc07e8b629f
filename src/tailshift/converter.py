"""Conversion orchestrator: one cascade-aware pass over a stylesheet.

A conversion runs through fixed phases::

    INIT -> VARIABLE_COLLECTION -> MEDIA_RULE_SCAN -> RULE_SCAN -> CLEANUP -> DONE

Variable collection only happens for an owned registry; a borrowed registry
is fed by the caller before converting. Supported ``@media`` blocks tag
their rules with a responsive variant, unsupported ones are left alone with
a warning. Every declaration that maps to a surviving utility is removed
from the stylesheet; everything else stays exactly where it was.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from tailshift.cascade.breakpoints import MediaResolution, resolve_media_query
from tailshift.cascade.conflicts import resolve_conflicts
from tailshift.cascade.selectors import classify, split_selector_list
from tailshift.cascade.specificity import specificity_of, specificity_of_parsed
from tailshift.cascade.variables import (
    BorrowedRegistry,
    OwnedRegistry,
    ResolutionContext,
    VariableRegistry,
    VariableScope,
)
from tailshift.cascade.variants import VariantOrder
from tailshift.config import TailshiftConfig
from tailshift.mapper.utilities import UtilityMapper
from tailshift.model.candidate import UtilityCandidate
from tailshift.model.diagnostic import Diagnostic, Severity
from tailshift.model.outcome import ConversionOutcome, ConversionResult
from tailshift.model.selector import ParsedSelector
from tailshift.parser.ast import AtRule, Declaration, Rule, Stylesheet
from tailshift.parser.errors import ParseError
from tailshift.parser.transformer import parse_css

__all__ = [
    "DYNAMIC_FUNCTIONS",
    "NO_CONVERTIBLE_DECLARATIONS",
    "ConversionPhase",
    "SelectorConsumers",
    "StylesheetConverter",
    "dynamic_function",
    "exclusion_reason",
    "resolved_exclusion",
]

logger = logging.getLogger(__name__)

DYNAMIC_FUNCTIONS = ("calc", "env", "min", "max", "clamp", "attr", "expression")
NO_CONVERTIBLE_DECLARATIONS = "No convertible declarations"

_DYNAMIC_RE = re.compile(r"\b(" + "|".join(DYNAMIC_FUNCTIONS) + r")\s*\(", re.IGNORECASE)
_STYLE_BLOCK_RE = re.compile(r"(<style\b[^>]*>)(.*?)(</style\s*>)", re.IGNORECASE | re.DOTALL)


class ConversionPhase(Enum):
    INIT = "init"
    VARIABLE_COLLECTION = "variable-collection"
    MEDIA_RULE_SCAN = "media-rule-scan"
    RULE_SCAN = "rule-scan"
    CLEANUP = "cleanup"
    DONE = "done"


class SelectorConsumers(Protocol):
    """The markup a stylesheet is applied to."""

    def unused_reason(self, parsed: ParsedSelector) -> str | None:
        """Why no element can take the utilities of *parsed*, or None if one can."""
        ...


@dataclass
class _RunState:
    """Mutable bookkeeping for one ``convert`` call."""

    sheet: Stylesheet
    result: ConversionResult
    media: dict[int, MediaResolution]
    touched_media: set[int]
    consumers: SelectorConsumers | None = None
    changed: bool = False


def dynamic_function(value: str) -> str | None:
    """Lowercased name of the first dynamic function called in *value*."""
    match = _DYNAMIC_RE.search(value)
    return match.group(1).lower() if match else None


def exclusion_reason(decl: Declaration) -> tuple[str, str] | None:
    """``(code, message)`` for declarations that can never be converted."""
    if decl.important:
        return "important_declaration", f"Skipped !important declaration: {decl.prop}"
    function = dynamic_function(decl.value)
    if function is not None:
        return (
            "dynamic_value",
            f"Skipped dynamic value {function}() in {decl.prop}: {decl.value}",
        )
    return None


def resolved_exclusion(decl: Declaration, resolved: str) -> tuple[str, str] | None:
    """Exclusion for a value that only becomes dynamic once its variables resolve."""
    if resolved == decl.value:
        return None
    function = dynamic_function(resolved)
    if function is None:
        return None
    return (
        "dynamic_value",
        f"Skipped dynamic value {function}() in {decl.prop}: {decl.value} resolves to {resolved}",
    )


class StylesheetConverter:
    """Convert stylesheets into per-rule outcomes and a cleaned stylesheet.

    Args:
        mapper: Utility mapper; defaults to the one derived from *config*.
        config: Project configuration; defaults to :class:`TailshiftConfig`.
        registry: :class:`OwnedRegistry` (cleared and filled on every
            conversion) or :class:`BorrowedRegistry` (fed by the caller).
    """

    def __init__(
        self,
        mapper: UtilityMapper | None = None,
        config: TailshiftConfig | None = None,
        registry: OwnedRegistry | BorrowedRegistry | None = None,
    ) -> None:
        self.config = config or TailshiftConfig()
        self.mapper = mapper or self.config.mapper()
        self.breakpoints = self.config.breakpoint_table()
        self.variant_order = VariantOrder(self.breakpoints)
        self.ownership = registry or OwnedRegistry()
        self.phase = ConversionPhase.INIT
        self._source_order = 0

    @property
    def registry(self) -> VariableRegistry:
        return self.ownership.registry

    def _enter(self, phase: ConversionPhase, source: str) -> None:
        self.phase = phase
        logger.debug("%s: %s", source, phase.value)

    def _next_order(self) -> int:
        self._source_order += 1
        return self._source_order

    # ---- public API ----

    def collect_variables(self, css: str, source: str = "<string>") -> int:
        """Register the custom properties of *css*; returns how many were added."""
        sheet = parse_css(css)
        return self._collect(sheet, self._resolve_media(sheet), source)

    def collect_embedded_variables(self, html: str, source: str = "<string>") -> int:
        """Register the custom properties of every parseable ``<style>`` block."""
        count = 0
        for index, match in enumerate(_STYLE_BLOCK_RE.finditer(html)):
            block_source = f"{source}<style#{index + 1}>"
            try:
                count += self.collect_variables(match.group(2), block_source)
            except ParseError as e:
                # convert_embedded reports the same block as a diagnostic.
                logger.debug("No variables collected from %s: %s", block_source, e)
        return count

    def convert(
        self,
        css: str,
        source: str = "<string>",
        consumers: SelectorConsumers | None = None,
    ) -> ConversionResult:
        """Convert one stylesheet.

        With *consumers*, a selector no element can take utilities for is
        skipped and its declarations stay in the stylesheet.

        Raises:
            ParseError: If *css* cannot be parsed; nothing is modified.
        """
        self._enter(ConversionPhase.INIT, source)
        sheet = parse_css(css)
        state = _RunState(
            sheet=sheet,
            result=ConversionResult(css=css, source=source),
            media=self._resolve_media(sheet),
            touched_media=set(),
            consumers=consumers,
        )

        if not self.ownership.shared:
            self._source_order = 0
            self.registry.clear()
            self._enter(ConversionPhase.VARIABLE_COLLECTION, source)
            self._collect(sheet, state.media, source)

        self._enter(ConversionPhase.MEDIA_RULE_SCAN, source)
        self._report_media(state)

        self._enter(ConversionPhase.RULE_SCAN, source)
        for rule, variants in self._scoped_rules(sheet, state.media):
            self._convert_rule(rule, variants, state)

        self._enter(ConversionPhase.CLEANUP, source)
        self._cleanup(state)

        self._enter(ConversionPhase.DONE, source)
        return state.result

    def convert_embedded(
        self,
        html: str,
        source: str = "<string>",
        consumers: SelectorConsumers | None = None,
    ) -> tuple[str, list[ConversionResult]]:
        """Convert every ``<style>`` block of an HTML document.

        Blocks are processed last to first so earlier offsets stay valid.
        A block that became empty is removed; one that fails to parse is
        left untouched and reported. Results are returned in document order.
        """
        blocks = list(_STYLE_BLOCK_RE.finditer(html))
        results: list[ConversionResult] = []
        for index, match in reversed(list(enumerate(blocks))):
            block_source = f"{source}<style#{index + 1}>"
            css = match.group(2)
            try:
                result = self.convert(css, block_source, consumers)
            except ParseError as e:
                logger.info("Leaving %s untouched: %s", block_source, e)
                result = ConversionResult(css=css, source=block_source)
                result.diagnostics.append(
                    Diagnostic(
                        code="parse_error",
                        severity=Severity.WARNING,
                        message=f"Could not parse embedded stylesheet: {e.summary}",
                        source=block_source,
                    )
                )
                results.append(result)
                continue
            results.append(result)
            if not result.has_changes:
                continue
            if result.can_delete:
                html = html[: match.start()] + html[match.end() :]
            else:
                replacement = match.group(1) + "\n" + result.css + match.group(3)
                html = html[: match.start()] + replacement + html[match.end() :]
        results.reverse()
        return html, results

    # ---- phases ----

    def _resolve_media(self, sheet: Stylesheet) -> dict[int, MediaResolution]:
        return {
            id(node): resolve_media_query(node.params, self.breakpoints)
            for node in sheet.at_rules
            if node.name.lower() == "media" and node.has_block
        }

    def _scoped_rules(
        self, sheet: Stylesheet, media: dict[int, MediaResolution]
    ) -> Iterator[tuple[Rule, tuple[str, ...]]]:
        """Top-level rules and rules of supported media blocks, in document order."""
        for node in list(sheet.children):
            if isinstance(node, Rule):
                yield node, ()
            elif isinstance(node, AtRule) and id(node) in media:
                resolution = media[id(node)]
                if resolution.variant is None:
                    continue
                for rule in node.rules:
                    yield rule, (resolution.variant,)

    def _collect(
        self, sheet: Stylesheet, media: dict[int, MediaResolution], source: str
    ) -> int:
        count = 0
        for rule, media_variants in self._scoped_rules(sheet, media):
            custom = [d for d in rule.declarations if d.is_custom_property]
            if not custom:
                continue
            for selector in split_selector_list(rule.selector):
                parsed = classify(selector)
                variants = self.variant_order.normalize(media_variants + parsed.variants)
                scope = VariableScope.for_selector(selector)
                specificity = specificity_of(selector)
                for decl in custom:
                    self.registry.define(
                        decl.prop.strip(), decl.value, scope, specificity, variants
                    )
                    count += 1
        logger.debug("%s: collected %d variable definition(s)", source, count)
        return count

    def _report_media(self, state: _RunState) -> None:
        for node in state.sheet.at_rules:
            resolution = state.media.get(id(node))
            if resolution is None or resolution.supported:
                continue
            reason = resolution.reason or f"Unsupported media query ({node.params})"
            logger.info("%s: %s", state.result.source, reason)
            state.result.diagnostics.append(
                Diagnostic(
                    code="unsupported_media",
                    severity=Severity.WARNING,
                    message=reason,
                    source=state.result.source,
                )
            )

    def _warn(
        self, state: _RunState, code: str, message: str, selector: str | None = None
    ) -> None:
        logger.info("%s: %s", state.result.source, message)
        state.result.diagnostics.append(
            Diagnostic(
                code=code,
                severity=Severity.WARNING,
                message=message,
                selector=selector,
                source=state.result.source,
            )
        )

    def _convert_rule(
        self, rule: Rule, media_variants: tuple[str, ...], state: _RunState
    ) -> None:
        declarations = [d for d in rule.declarations if not d.is_custom_property]
        if not declarations:
            return
        pairs = tuple((d.prop, d.value) for d in declarations)
        selectors = split_selector_list(rule.selector)
        parsed_list = [classify(s) for s in selectors]

        ignored = [s for s in selectors if self.config.is_ignored_selector(s)]
        if ignored:
            logger.debug("Ignoring rule %r: configured ignored selector", rule.selector)
            state.result.outcomes.append(
                ConversionOutcome(
                    selector=rule.selector,
                    element_key=rule.selector,
                    declarations=pairs,
                    skip_reason=f"Ignored selector ({ignored[0]})",
                )
            )
            return

        unsupported = next((p for p in parsed_list if p.is_complex), None)
        if unsupported is not None or not parsed_list:
            reason = (unsupported.reason if unsupported else None) or "Empty selector"
            self._warn(state, "unsupported_selector", reason, rule.selector)
            state.result.outcomes.append(
                ConversionOutcome(
                    selector=rule.selector,
                    element_key=" ".join(rule.selector.split()),
                    declarations=pairs,
                    skip_reason=reason,
                )
            )
            return

        eligible: list[tuple[int, Declaration]] = []
        for index, decl in enumerate(declarations):
            if self.config.is_ignored_property(decl.prop):
                continue
            exclusion = exclusion_reason(decl)
            if exclusion is not None:
                self._warn(state, exclusion[0], exclusion[1], rule.selector)
                continue
            eligible.append((index, decl))

        outcomes = []
        for parsed in parsed_list:
            unused = state.consumers.unused_reason(parsed) if state.consumers else None
            if unused is not None:
                self._warn(state, "unused_selector", unused, parsed.raw)
                outcomes.append(
                    ConversionOutcome(
                        selector=parsed.raw,
                        element_key=parsed.element_key,
                        is_descendant=parsed.is_descendant,
                        parent=parsed.parent,
                        target=parsed.target,
                        variants=self.variant_order.normalize(media_variants + parsed.variants),
                        declarations=pairs,
                        skip_reason=unused,
                    )
                )
                continue
            outcomes.append(
                self._convert_selector(parsed, media_variants, pairs, eligible, state)
            )
        state.result.outcomes.extend(outcomes)

        # A declaration is only removed when every selector of the rule converted it.
        removable = set.intersection(*(set(o.converted_declarations) for o in outcomes))
        if not removable:
            return
        for index in sorted(removable):
            declarations[index].remove()
        state.changed = True
        parent = rule.parent
        if not rule.declarations:
            rule.remove()
            if isinstance(parent, AtRule):
                state.touched_media.add(id(parent))

    def _convert_selector(
        self,
        parsed: ParsedSelector,
        media_variants: tuple[str, ...],
        pairs: tuple[tuple[str, str], ...],
        eligible: list[tuple[int, Declaration]],
        state: _RunState,
    ) -> ConversionOutcome:
        variants = self.variant_order.normalize(media_variants + parsed.variants)
        specificity = specificity_of_parsed(parsed)
        context = ResolutionContext(parsed.raw, specificity, variants)

        candidates: list[UtilityCandidate] = []
        reasons: list[str] = []
        for index, decl in eligible:
            resolved = self.registry.resolve_value(decl.value, context)
            if resolved.has_unresolved:
                names = ", ".join(resolved.unresolved)
                if resolved.is_circular:
                    code, message = "circular_variable", f"Circular variable reference: {names}"
                else:
                    code, message = "unresolved_variable", f"Unresolved variable: {names}"
                self._warn(state, code, f"{message} in {parsed.raw} {{ {decl.prop} }}", parsed.raw)
                reasons.append(message)
                continue
            exclusion = resolved_exclusion(decl, resolved.value)
            if exclusion is not None:
                self._warn(state, exclusion[0], exclusion[1], parsed.raw)
                reasons.append(exclusion[1])
                continue

            mapped = self.mapper.convert(decl.prop, resolved.value)
            if not mapped.converted:
                for warning in mapped.warnings:
                    self._warn(state, "unmapped_declaration", warning, parsed.raw)
                reasons.extend(mapped.warnings)
                continue

            for utility in mapped.utilities:
                candidates.append(
                    UtilityCandidate(
                        token=utility.token,
                        css_property=utility.css_property,
                        specificity=specificity,
                        source_order=self._next_order(),
                        variants=variants,
                        origin_selector=parsed.raw,
                        declaration_index=index,
                    )
                )

        resolution = resolve_conflicts(candidates, self.variant_order)
        tokens: list[str] = []
        for survivor in resolution.survivors:
            token = self.variant_order.assemble(survivor.token, survivor.variants)
            if token not in tokens:
                tokens.append(token)
        converted = tuple(
            sorted(
                {
                    c.declaration_index
                    for c in resolution.survivors
                    if c.declaration_index is not None
                }
            )
        )

        fully = bool(converted) and len(converted) == len(pairs)
        partially = bool(converted) and not fully
        skip_reason = None
        if not converted:
            skip_reason = reasons[0] if reasons else NO_CONVERTIBLE_DECLARATIONS
            logger.debug("Skipped %s: %s", parsed.raw, skip_reason)

        return ConversionOutcome(
            selector=parsed.raw,
            element_key=parsed.element_key,
            is_descendant=parsed.is_descendant,
            parent=parsed.parent,
            target=parsed.target,
            variants=variants,
            declarations=pairs,
            candidates=resolution.survivors,
            converted_tokens=tuple(tokens),
            converted_declarations=converted,
            fully_converted=fully,
            partially_converted=partially,
            skip_reason=skip_reason,
        )

    def _cleanup(self, state: _RunState) -> None:
        result = state.result
        for node in state.sheet.at_rules:
            if id(node) in state.touched_media and node.is_empty:
                node.remove()

        # Element scopes: every surviving candidate addressing the same element.
        by_element: dict[str, list[UtilityCandidate]] = {}
        for outcome in result.outcomes:
            if outcome.converted:
                by_element.setdefault(outcome.element_key, []).extend(outcome.candidates)
        for key, candidates in by_element.items():
            resolution = resolve_conflicts(candidates, self.variant_order)
            tokens: list[str] = []
            for survivor in resolution.survivors:
                token = self.variant_order.assemble(survivor.token, survivor.variants)
                if token not in tokens:
                    tokens.append(token)
            result.element_utilities[key] = tuple(tokens)
            result.conflicts.extend(resolution.conflicts)

        result.has_changes = state.changed
        result.can_delete = state.sheet.is_empty
        if state.changed:
            result.css = state.sheet.serialize()
        logger.debug(
            "%s: %d outcome(s), %d conflict(s), changed=%s",
            result.source,
            len(result.outcomes),
            len(result.conflicts),
            result.has_changes,
        )
