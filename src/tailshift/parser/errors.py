"""Stylesheet parse errors."""

from __future__ import annotations


class ParseError(Exception):
    """Raised when stylesheet text cannot be parsed.

    ``line`` and ``column`` are 1-based and only set when the parser could
    point at the offending input.
    """

    def __init__(
        self, message: str, line: int | None = None, column: int | None = None
    ):
        if line is not None and line < 1:
            line = column = None
        self.line = line
        self.column = column
        super().__init__(message)

    @property
    def location(self) -> str:
        if self.line is None:
            return ""
        if self.column is None:
            return f"line {self.line}"
        return f"line {self.line}, column {self.column}"

    @property
    def summary(self) -> str:
        """First line of the message, with the location appended if missing."""
        lines = str(self).strip().splitlines()
        first = lines[0].rstrip(". ") if lines else "Invalid stylesheet"
        if self.location and self.location not in first:
            return f"{first} ({self.location})"
        return first
