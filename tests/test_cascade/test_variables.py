"""Tests for the scoped variable registry."""

import pytest

from tailshift.cascade.variables import (
    BorrowedRegistry,
    OwnedRegistry,
    ResolutionContext,
    ResolutionSource,
    ScopeKind,
    VariableRegistry,
    VariableScope,
    find_var_references,
    parse_var_expression,
)
from tailshift.model.specificity import Specificity

CLASS = Specificity(class_like=1)


@pytest.fixture()
def registry() -> VariableRegistry:
    return VariableRegistry()


def _ctx(selector: str = ".card", variants: tuple[str, ...] = ()) -> ResolutionContext:
    return ResolutionContext(selector, CLASS, variants)


# ---------------------------------------------------------------------------
# Scopes
# ---------------------------------------------------------------------------


class TestScopes:
    def test_root_and_html_are_global(self) -> None:
        assert VariableScope.for_selector(":root").kind is ScopeKind.GLOBAL
        assert VariableScope.for_selector("html").kind is ScopeKind.GLOBAL

    def test_other_selectors_are_scoped_by_element_key(self) -> None:
        scope = VariableScope.for_selector(".card:hover")
        assert scope.kind is ScopeKind.SELECTOR
        assert scope.key == ".card"
        assert scope.matches(".card")
        assert not scope.matches(".other")

    def test_global_matches_everything(self) -> None:
        assert VariableScope.global_scope().matches(".anything")


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


class TestRegistration:
    def test_define_allocates_increasing_order(self, registry: VariableRegistry) -> None:
        first = registry.define("--a", "1px", VariableScope.global_scope())
        second = registry.define("--a", "2px", VariableScope.global_scope())
        assert second.source_order > first.source_order
        assert len(registry.definitions("--a")) == 2
        assert len(registry) == 2

    def test_membership(self, registry: VariableRegistry) -> None:
        registry.define("--a", "1px", VariableScope.global_scope())
        assert "--a" in registry
        assert registry.has("--a")
        assert not registry.has("--b")
        assert registry.names() == ("--a",)

    def test_clear_resets_order(self, registry: VariableRegistry) -> None:
        registry.define("--a", "1px", VariableScope.global_scope())
        registry.clear()
        assert len(registry) == 0
        assert registry.allocate_order() == 1


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class TestResolve:
    def test_global_definition(self, registry: VariableRegistry) -> None:
        registry.define("--color", "red", VariableScope.global_scope())
        resolution = registry.resolve("--color", _ctx())
        assert resolution.source is ResolutionSource.RESOLVED
        assert resolution.value == "red"

    def test_higher_specificity_wins_over_later_order(self, registry: VariableRegistry) -> None:
        registry.define("--color", "blue", VariableScope.for_selector(".card"), CLASS)
        registry.define("--color", "red", VariableScope.global_scope())
        assert registry.resolve("--color", _ctx()).value == "blue"

    def test_later_order_breaks_ties(self, registry: VariableRegistry) -> None:
        registry.define("--gap", "4px", VariableScope.global_scope())
        registry.define("--gap", "8px", VariableScope.global_scope())
        assert registry.resolve("--gap", _ctx()).value == "8px"

    def test_selector_scope_only_applies_to_its_element(self, registry: VariableRegistry) -> None:
        registry.define("--pad", "8px", VariableScope.for_selector(".card"), CLASS)
        assert registry.resolve("--pad", _ctx(".card:hover")).value == "8px"
        resolution = registry.resolve("--pad", _ctx(".other"))
        assert resolution.source is ResolutionSource.NO_MATCH
        assert resolution.value is None

    def test_variant_definitions_need_matching_context(self, registry: VariableRegistry) -> None:
        registry.define("--size", "12px", VariableScope.global_scope())
        registry.define("--size", "16px", VariableScope.global_scope(), variants=("md",))
        assert registry.resolve("--size", _ctx()).value == "12px"
        assert registry.resolve("--size", _ctx(variants=("md", "hover"))).value == "16px"

    def test_undefined(self, registry: VariableRegistry) -> None:
        assert registry.resolve("--nope", _ctx()).source is ResolutionSource.UNDEFINED

    def test_fallback(self, registry: VariableRegistry) -> None:
        resolution = registry.resolve("--nope", _ctx(), fallback="4px")
        assert resolution.source is ResolutionSource.FALLBACK
        assert resolution.value == "4px"

    def test_definition_with_unresolvable_value(self, registry: VariableRegistry) -> None:
        registry.define("--a", "var(--missing)", VariableScope.global_scope())
        assert registry.resolve("--a", _ctx()).source is ResolutionSource.UNRESOLVED


class TestResolveValue:
    def test_plain_text_unchanged(self, registry: VariableRegistry) -> None:
        resolved = registry.resolve_value("16px", _ctx())
        assert resolved.value == "16px"
        assert not resolved.has_unresolved

    def test_substitutes_every_reference(self, registry: VariableRegistry) -> None:
        registry.define("--y", "4px", VariableScope.global_scope())
        registry.define("--x", "8px", VariableScope.global_scope())
        resolved = registry.resolve_value("var(--y) var(--x)", _ctx())
        assert resolved.value == "4px 8px"

    def test_chained_definitions(self, registry: VariableRegistry) -> None:
        registry.define("--brand", "blue", VariableScope.global_scope())
        registry.define("--link", "var(--brand)", VariableScope.global_scope())
        assert registry.resolve_value("var(--link)", _ctx()).value == "blue"

    def test_nested_fallbacks(self, registry: VariableRegistry) -> None:
        resolved = registry.resolve_value("var(--x, var(--y, 3px))", _ctx())
        assert resolved.value == "3px"
        assert not resolved.has_unresolved

    def test_unresolved_reports_name(self, registry: VariableRegistry) -> None:
        resolved = registry.resolve_value("var(--missing)", _ctx())
        assert resolved.has_unresolved
        assert not resolved.is_circular
        assert resolved.unresolved == ("--missing",)
        assert resolved.value == "var(--missing)"

    def test_circular_reference(self, registry: VariableRegistry) -> None:
        registry.define("--a", "var(--b)", VariableScope.global_scope())
        registry.define("--b", "var(--a)", VariableScope.global_scope())
        resolved = registry.resolve_value("var(--a)", _ctx())
        assert resolved.has_unresolved
        assert resolved.is_circular

    def test_self_reference(self, registry: VariableRegistry) -> None:
        registry.define("--a", "var(--a)", VariableScope.global_scope())
        assert registry.resolve_value("var(--a)", _ctx()).is_circular

    def test_circular_definition_uses_fallback(self, registry: VariableRegistry) -> None:
        registry.define("--a", "var(--a)", VariableScope.global_scope())
        resolved = registry.resolve_value("var(--a, 2px)", _ctx())
        assert resolved.value == "2px"


# ---------------------------------------------------------------------------
# Reference scanning and ownership
# ---------------------------------------------------------------------------


class TestReferences:
    def test_find_inside_functions(self) -> None:
        refs = find_var_references("calc(var(--a) + 1px)")
        assert [r.name for r in refs] == ["--a"]

    def test_ignores_identifiers_ending_in_var(self) -> None:
        assert find_var_references("somevar(--x)") == []

    def test_parse_single_expression(self) -> None:
        ref = parse_var_expression(" var(--a, 1px) ")
        assert ref is not None
        assert ref.name == "--a"
        assert ref.fallback == "1px"

    def test_parse_rejects_mixed_text(self) -> None:
        assert parse_var_expression("1px var(--a)") is None


class TestOwnership:
    def test_owned_registry_is_private(self) -> None:
        owned = OwnedRegistry()
        assert not owned.shared
        assert isinstance(owned.registry, VariableRegistry)
        assert OwnedRegistry().registry is not owned.registry

    def test_borrowed_registry_is_shared(self) -> None:
        registry = VariableRegistry()
        borrowed = BorrowedRegistry(registry)
        assert borrowed.shared
        assert borrowed.registry is registry
