"""Diagnostic model: structured warnings produced while converting styles."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Severity(Enum):
    """Severity level for a diagnostic message."""

    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


@dataclass(frozen=True)
class Diagnostic:
    """A single finding about a stylesheet or markup document.

    Attributes:
        code: Identifier for the check that produced this diagnostic
            (``"unsupported_selector"``, ``"unresolved_variable"``, ...).
        severity: How serious the issue is.
        message: Human-readable description of the problem.
        selector: The selector involved, if applicable.
        source: The file or pseudo-file the diagnostic refers to.
    """

    code: str
    severity: Severity
    message: str
    selector: str | None = None
    source: str | None = None

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    @property
    def is_warning(self) -> bool:
        return self.severity is Severity.WARNING

    def __str__(self) -> str:
        location = ""
        if self.source:
            location = f" [{self.source}]"
        return f"{self.severity.value}{location}: {self.message}"
