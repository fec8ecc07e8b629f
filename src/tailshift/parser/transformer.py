"""Lark Transformer that converts a CSS parse tree into a Stylesheet AST."""

from __future__ import annotations

import functools
from pathlib import Path

from lark import Lark, Token, Transformer
from lark.exceptions import LarkError, VisitError

from tailshift.parser.ast import AtRule, Comment, Declaration, Node, Rule, Stylesheet
from tailshift.parser.errors import ParseError

GRAMMAR_PATH = Path(__file__).parent / "grammar.lark"


def _build_declaration(token: Token) -> Declaration:
    """Split a declaration chunk on its first colon."""
    text = str(token).strip()
    prop, sep, value = text.partition(":")
    prop = prop.strip()
    if not sep or not prop:
        raise ParseError(
            f"Invalid declaration {text!r}", line=token.line, column=token.column
        )
    return Declaration(prop, value.strip())


class CssTransformer(Transformer):  # type: ignore[type-arg]
    """Transform a Lark parse tree into AST nodes."""

    def comment(self, items: list[Token]) -> Comment:
        return Comment(str(items[0]))

    def declaration(self, items: list[Token]) -> Declaration:
        return _build_declaration(items[0])

    def trailing_declaration(self, items: list[Token]) -> Declaration:
        return _build_declaration(items[0])

    def block(self, items: list[Node]) -> list[Node]:
        return list(items)

    def rule(self, items: list[object]) -> Rule:
        selector = " ".join(str(items[0]).split())
        return Rule(selector, items[1])  # type: ignore[arg-type]

    def block_at_rule(self, items: list[object]) -> AtRule:
        name = str(items[0])[1:]
        params = " ".join(str(items[1]).split()) if len(items) == 3 else ""
        return AtRule(name, params, items[-1])  # type: ignore[arg-type]

    def statement_at_rule(self, items: list[Token]) -> AtRule:
        name = str(items[0])[1:]
        params = " ".join(str(items[1]).split()) if len(items) == 2 else ""
        return AtRule(name, params, has_block=False)

    def start(self, items: list[Node]) -> Stylesheet:
        return Stylesheet(items)


@functools.lru_cache(maxsize=1)
def _parser() -> Lark:
    return Lark(
        GRAMMAR_PATH.read_text(),
        parser="lalr",
        start="start",
    )


def parse_css(source: str) -> Stylesheet:
    """Parse CSS source text into a Stylesheet AST."""
    try:
        tree = _parser().parse(source)
    except LarkError as e:
        # UnexpectedInput subclasses carry the position of the offending token.
        line = getattr(e, "line", None)
        column = getattr(e, "column", None)
        raise ParseError(str(e), line=line, column=column) from e
    try:
        return CssTransformer().transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, ParseError):
            raise e.orig_exc from e
        raise
