"""Variable registry: scoped, cascade-ranked custom-property resolution.

Definitions are kept in a multi-map keyed by name; nothing is overwritten.
A reference is resolved against the definitions whose scope and variants
match the usage context, preferring the highest specificity and then the
latest source order, the same way the cascade picks a declaration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from tailshift.cascade.selectors import classify
from tailshift.model.specificity import ZERO_SPECIFICITY, Specificity

__all__ = [
    "GLOBAL_SELECTORS",
    "ScopeKind",
    "VariableScope",
    "VariableDefinition",
    "ResolutionContext",
    "ResolutionSource",
    "Resolution",
    "ResolvedValue",
    "VarReference",
    "VariableRegistry",
    "OwnedRegistry",
    "BorrowedRegistry",
    "contains_var",
    "find_var_references",
    "is_custom_property",
    "parse_var_expression",
    "scope_key",
]

logger = logging.getLogger(__name__)

# Selectors whose custom properties are visible everywhere.
GLOBAL_SELECTORS = frozenset({":root", "html"})


def scope_key(selector: str) -> str:
    """Structural identity of *selector* used to match selector scopes."""
    return classify(selector).element_key


def is_custom_property(prop: str) -> bool:
    return prop.strip().startswith("--")


class ScopeKind(Enum):
    GLOBAL = "global"
    SELECTOR = "selector"


@dataclass(frozen=True)
class VariableScope:
    """Where a definition is visible: everywhere, or on one element scope."""

    kind: ScopeKind
    key: str | None = None

    @classmethod
    def global_scope(cls) -> VariableScope:
        return cls(ScopeKind.GLOBAL)

    @classmethod
    def selector_scope(cls, selector: str) -> VariableScope:
        return cls(ScopeKind.SELECTOR, scope_key(selector))

    @classmethod
    def for_selector(cls, selector: str) -> VariableScope:
        """Global scope for ``:root``/``html``, selector scope otherwise."""
        if selector.strip().lower() in GLOBAL_SELECTORS:
            return cls.global_scope()
        return cls.selector_scope(selector)

    def matches(self, key: str) -> bool:
        return self.kind is ScopeKind.GLOBAL or self.key == key


@dataclass(frozen=True)
class VariableDefinition:
    name: str
    value: str
    scope: VariableScope
    specificity: Specificity = ZERO_SPECIFICITY
    source_order: int = 0
    variants: tuple[str, ...] = ()


@dataclass(frozen=True)
class ResolutionContext:
    """The cascade position at which a ``var()`` reference is used."""

    selector: str
    specificity: Specificity = ZERO_SPECIFICITY
    variants: tuple[str, ...] = ()

    @property
    def key(self) -> str:
        return scope_key(self.selector)


class ResolutionSource(Enum):
    RESOLVED = "resolved"
    FALLBACK = "fallback"
    UNDEFINED = "undefined"
    NO_MATCH = "no-match"
    CIRCULAR = "circular"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class Resolution:
    name: str
    value: str | None
    source: ResolutionSource
    definition: VariableDefinition | None = None

    @property
    def resolved(self) -> bool:
        return self.source in (ResolutionSource.RESOLVED, ResolutionSource.FALLBACK)


@dataclass(frozen=True)
class ResolvedValue:
    """A value with every ``var()`` substituted, or the reason it could not be."""

    value: str
    has_unresolved: bool = False
    is_circular: bool = False
    unresolved: tuple[str, ...] = ()


@dataclass(frozen=True)
class VarReference:
    """One ``var(--name, fallback)`` occurrence and its span in the source text."""

    name: str
    fallback: str | None
    start: int
    end: int


def _closing_paren(text: str, start: int) -> int:
    """Index of the ``)`` matching the ``(`` at *start*, or -1."""
    depth = 0
    quote = ""
    for i in range(start, len(text)):
        ch = text[i]
        if quote:
            if ch == quote:
                quote = ""
        elif ch in "\"'":
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return i
    return -1


def _split_reference(body: str) -> tuple[str, str | None]:
    depth = 0
    for i, ch in enumerate(body):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        elif ch == "," and depth == 0:
            return body[:i].strip(), body[i + 1 :].strip()
    return body.strip(), None


def find_var_references(value: str) -> list[VarReference]:
    """Top-level ``var()`` calls in *value*, left to right.

    References nested inside a fallback are not listed; they are reached when
    the fallback itself is resolved.
    """
    references: list[VarReference] = []
    lowered = value.lower()
    i = 0
    while True:
        start = lowered.find("var(", i)
        if start == -1:
            return references
        if start > 0 and (lowered[start - 1].isalnum() or lowered[start - 1] in "-_"):
            i = start + 4
            continue
        end = _closing_paren(value, start + 3)
        if end == -1:
            return references
        name, fallback = _split_reference(value[start + 4 : end])
        references.append(VarReference(name, fallback, start, end + 1))
        i = end + 1


def contains_var(value: str) -> bool:
    return bool(find_var_references(value))


def parse_var_expression(value: str) -> VarReference | None:
    """Parse *value* when it is exactly one ``var()`` call."""
    text = value.strip()
    references = find_var_references(text)
    if len(references) == 1 and references[0].start == 0 and references[0].end == len(text):
        return references[0]
    return None


class VariableRegistry:
    """Multi-map of custom-property definitions with cascade-ranked lookup."""

    def __init__(self) -> None:
        self._definitions: dict[str, list[VariableDefinition]] = {}
        self._order = 0

    def allocate_order(self) -> int:
        """Next source order; monotonically increasing until :meth:`clear`."""
        self._order += 1
        return self._order

    def register(self, definition: VariableDefinition) -> None:
        self._definitions.setdefault(definition.name, []).append(definition)
        logger.debug(
            "Registered %s=%s scope=%s variants=%s order=%d",
            definition.name,
            definition.value,
            definition.scope.key or definition.scope.kind.value,
            ":".join(definition.variants) or "-",
            definition.source_order,
        )

    def define(
        self,
        name: str,
        value: str,
        scope: VariableScope,
        specificity: Specificity = ZERO_SPECIFICITY,
        variants: tuple[str, ...] = (),
    ) -> VariableDefinition:
        """Register a definition stamped with the next source order."""
        definition = VariableDefinition(
            name=name,
            value=value,
            scope=scope,
            specificity=specificity,
            source_order=self.allocate_order(),
            variants=variants,
        )
        self.register(definition)
        return definition

    def definitions(self, name: str) -> tuple[VariableDefinition, ...]:
        return tuple(self._definitions.get(name, ()))

    def has(self, name: str) -> bool:
        return name in self._definitions

    __contains__ = has

    def names(self) -> tuple[str, ...]:
        return tuple(self._definitions)

    def __len__(self) -> int:
        return sum(len(defs) for defs in self._definitions.values())

    def clear(self) -> None:
        """Drop every definition and reset the source order.

        A caller sharing one registry across files must not clear it
        between files.
        """
        self._definitions.clear()
        self._order = 0

    # ---- resolution ----

    def _best_match(self, name: str, context: ResolutionContext) -> VariableDefinition | None:
        key = context.key
        available = set(context.variants)
        matches = [
            d
            for d in self._definitions.get(name, ())
            if d.scope.matches(key) and set(d.variants) <= available
        ]
        if not matches:
            return None
        return max(matches, key=lambda d: (d.specificity, d.source_order))

    def resolve(
        self, name: str, context: ResolutionContext, fallback: str | None = None
    ) -> Resolution:
        """Resolve one variable name under *context*."""
        return self._resolve(name, context, fallback, frozenset({name}))

    def resolve_value(self, expr: str, context: ResolutionContext) -> ResolvedValue:
        """Substitute every ``var()`` in *expr*, recursively.

        Text without references is returned unchanged. A name that reappears
        within one resolution chain stops resolution and is reported as
        circular instead of looping.
        """
        return self._resolve_value(expr, context, frozenset())

    def _resolve(
        self,
        name: str,
        context: ResolutionContext,
        fallback: str | None,
        visiting: frozenset[str],
    ) -> Resolution:
        definition = self._best_match(name, context)
        circular = False
        if definition is not None:
            inner = self._resolve_value(definition.value, context, visiting)
            if not inner.has_unresolved:
                return Resolution(name, inner.value, ResolutionSource.RESOLVED, definition)
            circular = inner.is_circular

        if fallback is not None:
            alternative = self._resolve_value(fallback, context, visiting)
            if not alternative.has_unresolved:
                return Resolution(name, alternative.value, ResolutionSource.FALLBACK, definition)
            circular = circular or alternative.is_circular

        if circular:
            source = ResolutionSource.CIRCULAR
        elif definition is not None:
            source = ResolutionSource.UNRESOLVED
        elif self.has(name):
            source = ResolutionSource.NO_MATCH
        else:
            source = ResolutionSource.UNDEFINED
        logger.debug("Variable %s unresolved for %s: %s", name, context.selector, source.value)
        return Resolution(name, None, source, definition)

    def _resolve_value(
        self, expr: str, context: ResolutionContext, visiting: frozenset[str]
    ) -> ResolvedValue:
        references = find_var_references(expr)
        if not references:
            return ResolvedValue(expr)
        pieces: list[str] = []
        last = 0
        for reference in references:
            pieces.append(expr[last : reference.start])
            if reference.name in visiting:
                logger.debug("Circular reference to %s in %r", reference.name, expr)
                return ResolvedValue(
                    expr, has_unresolved=True, is_circular=True, unresolved=(reference.name,)
                )
            resolution = self._resolve(
                reference.name, context, reference.fallback, visiting | {reference.name}
            )
            if not resolution.resolved or resolution.value is None:
                return ResolvedValue(
                    expr,
                    has_unresolved=True,
                    is_circular=resolution.source is ResolutionSource.CIRCULAR,
                    unresolved=(reference.name,),
                )
            pieces.append(resolution.value)
            last = reference.end
        pieces.append(expr[last:])
        return ResolvedValue("".join(pieces))


@dataclass(frozen=True, eq=False)
class OwnedRegistry:
    """A registry whose lifecycle belongs to the converter.

    The converter clears it and collects definitions at the start of every
    conversion.
    """

    registry: VariableRegistry = field(default_factory=VariableRegistry)

    @property
    def shared(self) -> bool:
        return False


@dataclass(frozen=True, eq=False)
class BorrowedRegistry:
    """A registry owned by the caller, typically shared across files.

    The converter never clears it; the caller feeds every file's definitions
    through ``collect_variables`` before converting.
    """

    registry: VariableRegistry

    @property
    def shared(self) -> bool:
        return True
