"""Unified diff previews for rewritten files."""

from __future__ import annotations

import difflib
from dataclasses import dataclass

__all__ = ["FileDiff", "make_diff"]


@dataclass(frozen=True)
class FileDiff:
    file_path: str
    original_content: str
    modified_content: str
    diff_text: str  # unified diff format

    @property
    def added(self) -> int:
        return sum(
            1
            for line in self.diff_text.splitlines()
            if line.startswith("+") and not line.startswith("+++")
        )

    @property
    def removed(self) -> int:
        return sum(
            1
            for line in self.diff_text.splitlines()
            if line.startswith("-") and not line.startswith("---")
        )

    @property
    def is_empty(self) -> bool:
        return not self.diff_text


def make_diff(file_path: str, original: str, modified: str) -> FileDiff:
    """Diff *original* against *modified*; a deleted file diffs against ``""``."""
    diff_lines = list(
        difflib.unified_diff(
            original.splitlines(keepends=True),
            modified.splitlines(keepends=True),
            fromfile=f"a/{file_path}",
            tofile=f"b/{file_path}",
        )
    )
    # Keep the hunk text line-oriented when a file lacks a trailing newline.
    diff_text = "".join(line if line.endswith("\n") else line + "\n" for line in diff_lines)
    return FileDiff(
        file_path=file_path,
        original_content=original,
        modified_content=modified,
        diff_text=diff_text,
    )
