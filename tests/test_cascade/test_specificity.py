"""Tests for specificity counting and comparison."""

import pytest

from tailshift.cascade.selectors import classify
from tailshift.cascade.specificity import (
    compare,
    specificity_of,
    specificity_of_descendant,
    specificity_of_parsed,
)
from tailshift.model.selector import TargetKind
from tailshift.model.specificity import INLINE_SPECIFICITY, ZERO_SPECIFICITY, Specificity


# ---------------------------------------------------------------------------
# Value type
# ---------------------------------------------------------------------------


class TestSpecificityValue:
    def test_defaults_to_zero(self) -> None:
        assert Specificity() == ZERO_SPECIFICITY
        assert ZERO_SPECIFICITY.as_tuple() == (0, 0, 0, 0)

    def test_inline_sentinel(self) -> None:
        assert INLINE_SPECIFICITY.as_tuple() == (1, 0, 0, 0)

    def test_negative_component_rejected(self) -> None:
        with pytest.raises(ValueError, match="class_like"):
            Specificity(class_like=-1)

    def test_ordering_is_lexicographic(self) -> None:
        assert Specificity(id=1) > Specificity(class_like=100)
        assert Specificity(class_like=1) > Specificity(element=9)
        assert INLINE_SPECIFICITY > Specificity(id=50)

    def test_addition(self) -> None:
        total = Specificity(class_like=1) + Specificity(element=2)
        assert total == Specificity(0, 0, 1, 2)

    def test_str(self) -> None:
        assert str(Specificity(0, 1, 2, 3)) == "(0, 1, 2, 3)"


# ---------------------------------------------------------------------------
# Counting
# ---------------------------------------------------------------------------


class TestSpecificityOf:
    @pytest.mark.parametrize(
        "selector, expected",
        [
            (".card", (0, 0, 1, 0)),
            ("h1", (0, 0, 0, 1)),
            ("#main", (0, 1, 0, 0)),
            ("#main .card p", (0, 1, 1, 1)),
            (".blog-main h1", (0, 0, 1, 1)),
            ("a:hover", (0, 0, 1, 1)),
            (".card:hover", (0, 0, 2, 0)),
            ("div > p", (0, 0, 0, 2)),
            ("input[type=text]", (0, 0, 1, 1)),
            ("*", (0, 0, 0, 0)),
        ],
    )
    def test_counts(self, selector: str, expected: tuple[int, int, int, int]) -> None:
        assert specificity_of(selector).as_tuple() == expected

    def test_pseudo_elements_weigh_nothing(self) -> None:
        assert specificity_of("p::before").as_tuple() == (0, 0, 0, 1)
        assert specificity_of("p:after").as_tuple() == (0, 0, 0, 1)

    def test_nth_child_counts_once(self) -> None:
        assert specificity_of("li:nth-child(2n + 1)").as_tuple() == (0, 0, 1, 1)

    def test_not_counts_its_argument(self) -> None:
        assert specificity_of(":not(.a)").as_tuple() == (0, 0, 1, 0)
        assert specificity_of("p:not(#x)").as_tuple() == (0, 1, 0, 1)

    def test_where_counts_nothing(self) -> None:
        assert specificity_of(":where(.a, #b)").as_tuple() == (0, 0, 0, 0)

    def test_inline_origin(self) -> None:
        assert specificity_of("style=color: red") == INLINE_SPECIFICITY


class TestDescendantSpecificity:
    def test_class_then_element(self) -> None:
        result = specificity_of_descendant(TargetKind.CLASS, TargetKind.ELEMENT)
        assert result == Specificity(0, 0, 1, 1)

    def test_two_classes(self) -> None:
        result = specificity_of_descendant(TargetKind.CLASS, TargetKind.CLASS)
        assert result == Specificity(0, 0, 2, 0)

    def test_parsed_descendant_matches_counting(self) -> None:
        parsed = classify(".blog-main h1")
        assert specificity_of_parsed(parsed) == specificity_of(".blog-main h1")

    def test_parsed_pseudo_variant(self) -> None:
        assert specificity_of_parsed(classify(".card:hover")) == Specificity(0, 0, 2, 0)


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------


class TestCompare:
    def test_positive_when_first_wins(self) -> None:
        assert compare(Specificity(id=1), Specificity(class_like=3)) > 0

    def test_antisymmetric(self) -> None:
        a, b = Specificity(class_like=2), Specificity(class_like=1, element=4)
        assert compare(a, b) == -compare(b, a)

    def test_equal_is_zero(self) -> None:
        assert compare(Specificity(element=1), Specificity(element=1)) == 0
