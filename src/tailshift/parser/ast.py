"""Stylesheet AST: rules, at-rules, declarations and comments.

Nodes keep a reference to their parent container so the converter can
remove declarations and rules in place, then serialize the tree back to text.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

__all__ = ["Node", "Container", "Stylesheet", "Rule", "AtRule", "Declaration", "Comment"]

INDENT = "  "


class Node:
    """Base class for every AST node."""

    def __init__(self) -> None:
        self.parent: Container | None = None

    def remove(self) -> None:
        """Detach this node from its parent; a detached node is left alone."""
        if self.parent is not None:
            self.parent.remove_child(self)

    def serialize(self, depth: int = 0) -> str:
        raise NotImplementedError


class Comment(Node):
    def __init__(self, text: str) -> None:
        super().__init__()
        self.text = text

    def serialize(self, depth: int = 0) -> str:
        return f"{INDENT * depth}{self.text}"

    def __repr__(self) -> str:
        return f"Comment({self.text!r})"


class Declaration(Node):
    """A ``property: value`` pair; ``value`` keeps any ``!important`` suffix."""

    def __init__(self, prop: str, value: str) -> None:
        super().__init__()
        self.prop = prop
        self.value = value

    @property
    def important(self) -> bool:
        return self.value.replace(" ", "").lower().endswith("!important")

    @property
    def is_custom_property(self) -> bool:
        return self.prop.startswith("--")

    def serialize(self, depth: int = 0) -> str:
        return f"{INDENT * depth}{self.prop}: {self.value};"

    def __repr__(self) -> str:
        return f"Declaration({self.prop!r}, {self.value!r})"


class Container(Node):
    """A node holding an ordered list of children."""

    def __init__(self, children: Iterable[Node] = ()) -> None:
        super().__init__()
        self.children: list[Node] = []
        for child in children:
            self.append(child)

    def append(self, child: Node) -> None:
        child.parent = self
        self.children.append(child)

    def remove_child(self, child: Node) -> None:
        self.children = [c for c in self.children if c is not child]
        child.parent = None

    @property
    def is_empty(self) -> bool:
        return not self.children

    @property
    def declarations(self) -> list[Declaration]:
        return [c for c in self.children if isinstance(c, Declaration)]

    @property
    def rules(self) -> list[Rule]:
        return [c for c in self.children if isinstance(c, Rule)]

    @property
    def at_rules(self) -> list[AtRule]:
        return [c for c in self.children if isinstance(c, AtRule)]

    def walk(self) -> Iterator[Node]:
        """Yield every descendant in document order."""
        stack: list[Node] = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            if isinstance(node, Container):
                stack.extend(reversed(node.children))

    def walk_rules(self) -> Iterator[Rule]:
        for node in self.walk():
            if isinstance(node, Rule):
                yield node

    def _serialize_block(self, depth: int) -> str:
        if not self.children:
            return "{}"
        inner = "\n".join(child.serialize(depth + 1) for child in self.children)
        return "{\n" + inner + "\n" + INDENT * depth + "}"


class Stylesheet(Container):
    """Root of a parsed stylesheet."""

    def serialize(self, depth: int = 0) -> str:
        if not self.children:
            return ""
        return "\n\n".join(child.serialize(depth) for child in self.children) + "\n"

    def __repr__(self) -> str:
        return f"Stylesheet({len(self.children)} nodes)"


class Rule(Container):
    def __init__(self, selector: str, children: Iterable[Node] = ()) -> None:
        super().__init__(children)
        self.selector = selector

    def serialize(self, depth: int = 0) -> str:
        return f"{INDENT * depth}{self.selector} {self._serialize_block(depth)}"

    def __repr__(self) -> str:
        return f"Rule({self.selector!r}, {len(self.children)} nodes)"


class AtRule(Container):
    """An at-rule; ``has_block`` is false for statements such as ``@import``."""

    def __init__(
        self,
        name: str,
        params: str = "",
        children: Iterable[Node] = (),
        has_block: bool = True,
    ) -> None:
        super().__init__(children)
        self.name = name
        self.params = params
        self.has_block = has_block

    def serialize(self, depth: int = 0) -> str:
        head = f"{INDENT * depth}@{self.name}"
        if self.params:
            head += f" {self.params}"
        if not self.has_block:
            return head + ";"
        return f"{head} {self._serialize_block(depth)}"

    def __repr__(self) -> str:
        return f"AtRule({self.name!r}, {self.params!r})"
