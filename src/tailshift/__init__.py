"""Tailshift -- cascade-aware CSS to utility-class codemod."""

__version__ = "0.1.0"
