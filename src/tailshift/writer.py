"""File writer: persist rewritten files, keeping a backup of every original."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from tailshift.project import FileResult

__all__ = ["BACKUP_DIRNAME", "FileWriter", "WriteReport"]

logger = logging.getLogger(__name__)

BACKUP_DIRNAME = ".tailshift-backups"


@dataclass
class WriteReport:
    written: list[Path] = field(default_factory=list)
    deleted: list[Path] = field(default_factory=list)
    backups: list[Path] = field(default_factory=list)
    backup_dir: Path | None = None


class FileWriter:
    """Write changed files under *root*.

    Originals are copied to ``<root>/.tailshift-backups/<timestamp>/`` with
    their relative paths before anything is overwritten or deleted.
    """

    def __init__(self, root: str | Path, backup: bool = True, timestamp: str | None = None) -> None:
        self.root = Path(root)
        self.backup_enabled = backup
        stamp = timestamp or datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        self.backup_dir = self.root / BACKUP_DIRNAME / stamp

    def backup(self, result: FileResult) -> Path:
        target = self.backup_dir / result.file.relative
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(result.file.path, target)
        return target

    def write(self, results: Iterable[FileResult]) -> WriteReport:
        report = WriteReport(backup_dir=self.backup_dir if self.backup_enabled else None)
        for result in results:
            if not result.changed or result.failed:
                continue
            if self.backup_enabled:
                report.backups.append(self.backup(result))
            if result.delete:
                result.file.path.unlink()
                report.deleted.append(result.file.path)
                logger.info("Deleted %s", result.file.relative)
                continue
            result.file.path.write_text(result.content, encoding="utf-8")
            report.written.append(result.file.path)
            logger.info("Wrote %s", result.file.relative)
        if not report.backups:
            report.backup_dir = None
        return report
