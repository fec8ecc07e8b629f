"""Specificity value type: the 4-component cascade weight of a selector."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["Specificity", "ZERO_SPECIFICITY", "INLINE_SPECIFICITY"]


@dataclass(frozen=True, order=True)
class Specificity:
    """Cascade weight ``(inline, id, class_like, element)``.

    Ordering is lexicographic, most significant component first, so
    ``Specificity(0, 1, 0, 0) > Specificity(0, 0, 100, 0)``.

    Attributes:
        inline: 1 for declarations coming from a ``style`` attribute.
        id: Number of id selectors.
        class_like: Classes, attribute selectors and simple pseudo-classes.
        element: Type (element) selectors.
    """

    inline: int = 0
    id: int = 0
    class_like: int = 0
    element: int = 0

    def __post_init__(self) -> None:
        for name in ("inline", "id", "class_like", "element"):
            if getattr(self, name) < 0:
                raise ValueError(f"Specificity.{name} must be non-negative")

    def __add__(self, other: Specificity) -> Specificity:
        if not isinstance(other, Specificity):
            return NotImplemented
        return Specificity(
            inline=self.inline + other.inline,
            id=self.id + other.id,
            class_like=self.class_like + other.class_like,
            element=self.element + other.element,
        )

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.inline, self.id, self.class_like, self.element)

    def __str__(self) -> str:
        return "({}, {}, {}, {})".format(*self.as_tuple())


ZERO_SPECIFICITY = Specificity()
INLINE_SPECIFICITY = Specificity(inline=1)
