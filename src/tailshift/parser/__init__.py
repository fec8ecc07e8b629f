"""CSS parser: lark grammar, transformer and AST."""

from tailshift.parser.ast import AtRule, Comment, Container, Declaration, Node, Rule, Stylesheet
from tailshift.parser.errors import ParseError
from tailshift.parser.transformer import parse_css

__all__ = [
    "AtRule",
    "Comment",
    "Container",
    "Declaration",
    "Node",
    "Rule",
    "Stylesheet",
    "ParseError",
    "parse_css",
]
