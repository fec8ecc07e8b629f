"""Tests for writing results back to disk with backups."""

from __future__ import annotations

from pathlib import Path

from tailshift.config import TailshiftConfig
from tailshift.project import scan_project, transform_project
from tailshift.writer import BACKUP_DIRNAME, FileWriter

STAMP = "20260101-120000"

# Markup the .a rules apply to; stylesheet rules without one are kept.
PAGE = '<p class="a">x</p>\n'


def _project(root: Path, files: dict[str, str], config: TailshiftConfig | None = None):
    for name, text in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    config = config or TailshiftConfig()
    return transform_project(scan_project(root, config), config)


class TestFileWriter:
    def test_writes_changed_files_with_backup(self, tmp_path: Path) -> None:
        original = ".a { color: red; padding: 1px 2px 3px 4px 5px; }\n"
        result = _project(
            tmp_path,
            {"css/a.css": original, "b.css": ".b > p { color: red; }\n", "index.html": PAGE},
        )
        report = FileWriter(tmp_path, timestamp=STAMP).write(result.files)

        assert report.written == [tmp_path / "css" / "a.css", tmp_path / "index.html"]
        assert (tmp_path / "css" / "a.css").read_text() == (
            ".a {\n  padding: 1px 2px 3px 4px 5px;\n}\n"
        )
        backup = tmp_path / BACKUP_DIRNAME / STAMP / "css" / "a.css"
        assert report.backups == [backup, tmp_path / BACKUP_DIRNAME / STAMP / "index.html"]
        assert backup.read_text() == original
        assert report.backup_dir == tmp_path / BACKUP_DIRNAME / STAMP

    def test_deletes_emptied_stylesheets(self, tmp_path: Path) -> None:
        result = _project(
            tmp_path,
            {"a.css": ".a { color: red; }\n", "a.html": PAGE},
            TailshiftConfig(delete_css=True),
        )
        report = FileWriter(tmp_path, timestamp=STAMP).write(result.files)
        assert report.deleted == [tmp_path / "a.css"]
        assert not (tmp_path / "a.css").exists()
        assert (tmp_path / BACKUP_DIRNAME / STAMP / "a.css").exists()

    def test_nothing_to_write(self, tmp_path: Path) -> None:
        result = _project(tmp_path, {"a.css": ".a > p { color: red; }\n"})
        report = FileWriter(tmp_path, timestamp=STAMP).write(result.files)
        assert report.written == []
        assert report.backup_dir is None
        assert not (tmp_path / BACKUP_DIRNAME).exists()

    def test_failed_files_untouched(self, tmp_path: Path) -> None:
        result = _project(tmp_path, {"bad.css": ".a { color: red;\n"})
        report = FileWriter(tmp_path, timestamp=STAMP).write(result.files)
        assert report.written == []
        assert (tmp_path / "bad.css").read_text() == ".a { color: red;\n"

    def test_unapplied_rules_stay(self, tmp_path: Path) -> None:
        result = _project(tmp_path, {"a.css": ".a { color: red; }\n"})
        report = FileWriter(tmp_path, timestamp=STAMP).write(result.files)
        assert report.written == []
        assert (tmp_path / "a.css").read_text() == ".a { color: red; }\n"

    def test_without_backups(self, tmp_path: Path) -> None:
        result = _project(tmp_path, {"a.css": ".a { color: red; }\n", "a.html": PAGE})
        report = FileWriter(tmp_path, backup=False).write(result.files)
        assert report.written == [tmp_path / "a.css", tmp_path / "a.html"]
        assert report.backups == []
        assert report.backup_dir is None

    def test_backups_are_not_rescanned(self, tmp_path: Path) -> None:
        result = _project(tmp_path, {"a.css": ".a { color: red; }\n", "a.html": PAGE})
        FileWriter(tmp_path, timestamp=STAMP).write(result.files)
        assert [f.relative for f in scan_project(tmp_path)] == ["a.css", "a.html"]
