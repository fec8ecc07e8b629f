"""Tailshift model layer -- public type re-exports."""

from tailshift.model.candidate import BASE_VARIANT_KEY, ConflictRecord, UtilityCandidate
from tailshift.model.diagnostic import Diagnostic, Severity
from tailshift.model.outcome import ConversionOutcome, ConversionResult
from tailshift.model.selector import ParsedSelector, SelectorShape, SelectorTarget, TargetKind
from tailshift.model.specificity import INLINE_SPECIFICITY, ZERO_SPECIFICITY, Specificity

__all__ = [
    # specificity
    "Specificity",
    "ZERO_SPECIFICITY",
    "INLINE_SPECIFICITY",
    # selector
    "TargetKind",
    "SelectorTarget",
    "SelectorShape",
    "ParsedSelector",
    # candidate
    "UtilityCandidate",
    "ConflictRecord",
    "BASE_VARIANT_KEY",
    # outcome
    "ConversionOutcome",
    "ConversionResult",
    # diagnostic
    "Severity",
    "Diagnostic",
]
