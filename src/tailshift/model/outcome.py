"""Outcome model: per-rule conversion outcomes and per-stylesheet results."""

from __future__ import annotations

from dataclasses import dataclass, field

from tailshift.model.candidate import ConflictRecord, UtilityCandidate
from tailshift.model.diagnostic import Diagnostic
from tailshift.model.selector import SelectorTarget


@dataclass(frozen=True)
class ConversionOutcome:
    """What happened to one selector of one rule.

    ``fully_converted`` is true iff every declaration of the rule produced at
    least one surviving token, ``partially_converted`` iff some but not all
    did. A rule where none did carries a ``skip_reason`` instead.
    """

    selector: str
    element_key: str
    is_descendant: bool = False
    parent: SelectorTarget | None = None
    target: SelectorTarget | None = None
    variants: tuple[str, ...] = ()
    declarations: tuple[tuple[str, str], ...] = ()
    candidates: tuple[UtilityCandidate, ...] = ()
    converted_tokens: tuple[str, ...] = ()
    converted_declarations: tuple[int, ...] = ()
    fully_converted: bool = False
    partially_converted: bool = False
    skip_reason: str | None = None

    def __post_init__(self) -> None:
        if self.fully_converted and self.partially_converted:
            raise ValueError("An outcome cannot be both fully and partially converted")
        if self.skip_reason is not None and self.converted:
            raise ValueError("A skipped outcome cannot carry converted declarations")
        if self.skip_reason is None and not self.converted:
            raise ValueError("An outcome without conversions needs a skip reason")

    @property
    def converted(self) -> bool:
        return self.fully_converted or self.partially_converted

    @property
    def skipped(self) -> bool:
        return self.skip_reason is not None


@dataclass
class ConversionResult:
    """Result of converting one stylesheet.

    Attributes:
        css: The cleaned stylesheet text.
        outcomes: One outcome per (rule, selector) that had declarations.
        diagnostics: Warnings gathered during the run.
        conflicts: Candidate conflicts across the whole stylesheet, per element scope.
        element_utilities: Final tokens per element key after cross-rule resolution.
        has_changes: Whether any declaration or rule was removed.
        can_delete: Whether the stylesheet became empty.
    """

    css: str
    source: str = "<string>"
    outcomes: list[ConversionOutcome] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    conflicts: list[ConflictRecord] = field(default_factory=list)
    element_utilities: dict[str, tuple[str, ...]] = field(default_factory=dict)
    has_changes: bool = False
    can_delete: bool = False

    @property
    def warnings(self) -> list[str]:
        return [d.message for d in self.diagnostics]

    @property
    def converted_outcomes(self) -> list[ConversionOutcome]:
        return [o for o in self.outcomes if o.converted]
