"""Selector model: classified selectors and the targets they address."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

__all__ = ["TargetKind", "SelectorTarget", "SelectorShape", "ParsedSelector"]


class TargetKind(Enum):
    """What a single selector part matches on."""

    CLASS = "class"
    ELEMENT = "element"


@dataclass(frozen=True)
class SelectorTarget:
    """One node of a (possibly descendant) selector."""

    kind: TargetKind
    name: str

    def __str__(self) -> str:
        if self.kind is TargetKind.CLASS:
            return f".{self.name}"
        return self.name


class SelectorShape(Enum):
    """Classification of a raw selector."""

    SIMPLE_CLASS = "simple-class"
    SIMPLE_ELEMENT = "simple-element"
    DESCENDANT = "descendant"
    PSEUDO_VARIANT = "pseudo-variant"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class ParsedSelector:
    """The classification of one selector.

    Supported shapes carry a ``target`` (and a ``parent`` for descendant
    selectors); ``UNSUPPORTED`` carries only a ``reason``.
    """

    raw: str
    shape: SelectorShape
    target: SelectorTarget | None = None
    parent: SelectorTarget | None = None
    variants: tuple[str, ...] = ()
    reason: str | None = None

    @property
    def is_complex(self) -> bool:
        return self.shape is SelectorShape.UNSUPPORTED

    @property
    def is_descendant(self) -> bool:
        return self.shape is SelectorShape.DESCENDANT

    @property
    def element_key(self) -> str:
        """Structural identity of the element scope this selector addresses.

        Descendant selectors render as ``"parent target"``; pseudo variants
        collapse onto their base class. Unsupported selectors fall back to
        their whitespace-normalized raw text.
        """
        if self.target is None:
            return " ".join(self.raw.split())
        if self.parent is not None:
            return f"{self.parent} {self.target}"
        return str(self.target)

    def __str__(self) -> str:
        if self.is_complex:
            return f"unsupported({self.reason})"
        return self.element_key
