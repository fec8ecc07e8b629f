"""Cascade engine: selectors, breakpoints, specificity, variables, conflicts, variants."""

from tailshift.cascade.breakpoints import (
    BREAKPOINT_TOLERANCE,
    Breakpoint,
    BreakpointTable,
    MediaResolution,
    parse_media_query,
    resolve_media_query,
)
from tailshift.cascade.conflicts import ConflictResolution, resolve_conflicts
from tailshift.cascade.selectors import PSEUDO_VARIANTS, classify, split_selector_list
from tailshift.cascade.specificity import (
    compare,
    specificity_of,
    specificity_of_descendant,
    specificity_of_parsed,
)
from tailshift.cascade.variables import (
    BorrowedRegistry,
    OwnedRegistry,
    ResolutionContext,
    ResolutionSource,
    VariableDefinition,
    VariableRegistry,
    VariableScope,
    is_custom_property,
    parse_var_expression,
)
from tailshift.cascade.variants import VariantOrder, assemble_utility, normalize_variants

__all__ = [
    "BREAKPOINT_TOLERANCE",
    "Breakpoint",
    "BreakpointTable",
    "MediaResolution",
    "parse_media_query",
    "resolve_media_query",
    "ConflictResolution",
    "resolve_conflicts",
    "PSEUDO_VARIANTS",
    "classify",
    "split_selector_list",
    "compare",
    "specificity_of",
    "specificity_of_descendant",
    "specificity_of_parsed",
    "BorrowedRegistry",
    "OwnedRegistry",
    "ResolutionContext",
    "ResolutionSource",
    "VariableDefinition",
    "VariableRegistry",
    "VariableScope",
    "is_custom_property",
    "parse_var_expression",
    "VariantOrder",
    "assemble_utility",
    "normalize_variants",
]
