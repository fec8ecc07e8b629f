"""Tests for unified diff previews."""

from tailshift.diff import make_diff


class TestMakeDiff:
    def test_counts_changes(self) -> None:
        diff = make_diff("a.css", ".a {\n  color: red;\n}\n", "")
        assert diff.removed == 3
        assert diff.added == 0
        assert diff.diff_text.startswith("--- a/a.css\n+++ b/a.css\n")

    def test_modified_lines(self) -> None:
        diff = make_diff("index.html", "<p>\nx\n</p>\n", '<p class="p-4">\nx\n</p>\n')
        assert (diff.added, diff.removed) == (1, 1)
        assert '+<p class="p-4">\n' in diff.diff_text

    def test_identical_content(self) -> None:
        diff = make_diff("a.css", "x\n", "x\n")
        assert diff.is_empty
        assert diff.added == diff.removed == 0

    def test_missing_trailing_newline(self) -> None:
        diff = make_diff("a.css", "a", "b")
        assert diff.diff_text.endswith("+b\n")
