"""Project pipeline: scan a directory and run the three conversion passes.

1. Collect custom properties from every stylesheet into one shared registry,
   and index the elements of every HTML document and JSX/TSX component.
2. Convert each stylesheet against that registry. A selector that no
   indexed element can take utilities for keeps its declarations.
3. Rewrite each HTML document (embedded ``<style>`` blocks, inline styles
   and class injection), then each component source (``className`` and
   ``style={{ ... }}``) against every converted outcome.

Files are only read here; writing is left to :mod:`tailshift.writer`.
"""

from __future__ import annotations

import fnmatch
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from tailshift.cascade.variables import BorrowedRegistry, VariableRegistry
from tailshift.components import ComponentRewriter, scan_components
from tailshift.config import TailshiftConfig
from tailshift.consumers import ConsumerIndex
from tailshift.converter import StylesheetConverter
from tailshift.markup import MarkupArena, MarkupResult, MarkupRewriter
from tailshift.model.candidate import ConflictRecord
from tailshift.model.diagnostic import Diagnostic, Severity
from tailshift.model.outcome import ConversionOutcome, ConversionResult
from tailshift.parser.errors import ParseError

__all__ = [
    "FileKind",
    "ProjectFile",
    "FileResult",
    "SummaryStats",
    "ProjectResult",
    "matches_glob",
    "scan_project",
    "transform_project",
]

logger = logging.getLogger(__name__)

STYLESHEET_SUFFIXES = frozenset({".css"})
MARKUP_SUFFIXES = frozenset({".html", ".htm"})
COMPONENT_SUFFIXES = frozenset({".js", ".jsx", ".tsx"})


class FileKind(Enum):
    STYLESHEET = "stylesheet"
    MARKUP = "markup"
    COMPONENT = "component"


@dataclass(frozen=True)
class ProjectFile:
    path: Path
    relative: str
    kind: FileKind


def matches_glob(relative: str, pattern: str) -> bool:
    """Match a POSIX relative path; a leading ``**/`` also matches the root."""
    if fnmatch.fnmatch(relative, pattern):
        return True
    return pattern.startswith("**/") and fnmatch.fnmatch(relative, pattern[3:])


def _kind_of(path: Path) -> FileKind | None:
    suffix = path.suffix.lower()
    if suffix in STYLESHEET_SUFFIXES:
        return FileKind.STYLESHEET
    if suffix in MARKUP_SUFFIXES:
        return FileKind.MARKUP
    if suffix in COMPONENT_SUFFIXES:
        return FileKind.COMPONENT
    return None


def scan_project(root: str | Path, config: TailshiftConfig | None = None) -> list[ProjectFile]:
    """Stylesheets, HTML documents and component sources under *root*, by relative path."""
    config = config or TailshiftConfig()
    root = Path(root)
    files: list[ProjectFile] = []
    for path in sorted(root.rglob("*")):
        if not path.is_file():
            continue
        kind = _kind_of(path)
        if kind is None:
            continue
        relative = path.relative_to(root).as_posix()
        if not any(matches_glob(relative, p) for p in config.include):
            continue
        if any(matches_glob(relative, p) for p in config.exclude):
            logger.debug("Excluded %s", relative)
            continue
        files.append(ProjectFile(path, relative, kind))
    logger.info("Scanned %s: %d file(s)", root, len(files))
    return files


@dataclass
class FileResult:
    """What the pipeline decided for one file."""

    file: ProjectFile
    original: str
    content: str
    conversions: list[ConversionResult] = field(default_factory=list)
    markup: MarkupResult | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)
    delete: bool = False

    @property
    def changed(self) -> bool:
        return self.delete or self.content != self.original

    @property
    def failed(self) -> bool:
        return any(d.is_error for d in self.diagnostics)

    @property
    def outcomes(self) -> list[ConversionOutcome]:
        return [o for c in self.conversions for o in c.outcomes]

    @property
    def conflicts(self) -> list[ConflictRecord]:
        return [r for c in self.conversions for r in c.conflicts]

    @property
    def all_diagnostics(self) -> list[Diagnostic]:
        found = [d for c in self.conversions for d in c.diagnostics]
        if self.markup is not None:
            found.extend(self.markup.diagnostics)
        return found + self.diagnostics


@dataclass
class SummaryStats:
    files_scanned: int = 0
    stylesheets: int = 0
    markup_files: int = 0
    components: int = 0
    files_changed: int = 0
    files_deleted: int = 0
    files_failed: int = 0
    rules_converted: int = 0
    rules_partial: int = 0
    rules_skipped: int = 0
    classes_added: int = 0
    inline_converted: int = 0
    conflicts: int = 0
    warnings: int = 0

    @classmethod
    def from_results(cls, results: Iterable[FileResult]) -> SummaryStats:
        stats = cls()
        for result in results:
            stats.files_scanned += 1
            if result.file.kind is FileKind.STYLESHEET:
                stats.stylesheets += 1
            elif result.file.kind is FileKind.MARKUP:
                stats.markup_files += 1
            else:
                stats.components += 1
            stats.files_changed += result.changed
            stats.files_deleted += result.delete
            stats.files_failed += result.failed
            for outcome in result.outcomes:
                if outcome.fully_converted:
                    stats.rules_converted += 1
                elif outcome.partially_converted:
                    stats.rules_partial += 1
                else:
                    stats.rules_skipped += 1
            if result.markup is not None:
                stats.classes_added += result.markup.classes_added
                stats.inline_converted += result.markup.inline_converted
            stats.conflicts += len(result.conflicts)
            stats.warnings += sum(1 for d in result.all_diagnostics if d.is_warning)
        return stats


@dataclass
class ProjectResult:
    files: list[FileResult]
    stats: SummaryStats
    registry: VariableRegistry


def _read(file: ProjectFile) -> str:
    return file.path.read_text(encoding="utf-8")


def _parse_failure(file: ProjectFile, text: str, error: ParseError) -> FileResult:
    logger.warning("Could not parse %s: %s", file.relative, error.summary)
    return FileResult(
        file=file,
        original=text,
        content=text,
        diagnostics=[
            Diagnostic(
                code="parse_error",
                severity=Severity.ERROR,
                message=f"Parse error: {error.summary}",
                source=file.relative,
            )
        ],
    )


def transform_project(
    files: Sequence[ProjectFile], config: TailshiftConfig | None = None
) -> ProjectResult:
    """Run the three passes over *files* and return every file's new content."""
    config = config or TailshiftConfig()
    registry = VariableRegistry()
    converter = StylesheetConverter(config=config, registry=BorrowedRegistry(registry))
    stylesheets = [f for f in files if f.kind is FileKind.STYLESHEET]
    documents = [f for f in files if f.kind is FileKind.MARKUP]
    sources = [f for f in files if f.kind is FileKind.COMPONENT]
    texts = {f.path: _read(f) for f in files}

    # Pass 1: variables from every stylesheet, in scan order, and the
    # elements every stylesheet may apply to.
    for file in stylesheets:
        try:
            converter.collect_variables(texts[file.path], file.relative)
        except ParseError as e:
            # Reported again by pass 2 for the same file.
            logger.debug("Skipping variables of %s: %s", file.relative, e)
    consumers = ConsumerIndex()
    for file in documents:
        consumers.add(MarkupArena.from_html(texts[file.path], file.relative))
    for file in sources:
        consumers.add(scan_components(texts[file.path], file.relative))
    logger.info("Collected %d variable definition(s)", len(registry))
    logger.info("Indexed %d element(s) in %d file(s)", len(consumers), len(consumers.arenas))

    # Pass 2: stylesheets.
    results: list[FileResult] = []
    external: list[ConversionOutcome] = []
    for file in stylesheets:
        text = texts[file.path]
        if config.skip_external:
            results.append(FileResult(file=file, original=text, content=text))
            continue
        try:
            conversion = converter.convert(text, file.relative, consumers=consumers)
        except ParseError as e:
            results.append(_parse_failure(file, text, e))
            continue
        external.extend(conversion.converted_outcomes)
        results.append(
            FileResult(
                file=file,
                original=text,
                content=conversion.css,
                conversions=[conversion],
                delete=config.delete_css and conversion.has_changes and conversion.can_delete,
            )
        )

    # Pass 3: documents, then component sources.
    rewriter = MarkupRewriter(
        mapper=converter.mapper,
        registry=registry,
        variant_order=converter.variant_order,
        convert_inline=not config.skip_inline,
    )
    for file in documents:
        html = texts[file.path]
        conversions: list[ConversionResult] = []
        if not config.skip_internal:
            converter.collect_embedded_variables(html, file.relative)
            local = ConsumerIndex([MarkupArena.from_html(html, file.relative)])
            html, conversions = converter.convert_embedded(html, file.relative, local)
        outcomes = external + [o for c in conversions for o in c.converted_outcomes]
        markup = rewriter.rewrite(html, outcomes, file.relative)
        results.append(
            FileResult(
                file=file,
                original=texts[file.path],
                content=markup.html,
                conversions=conversions,
                markup=markup,
            )
        )

    components = ComponentRewriter(
        mapper=converter.mapper,
        registry=registry,
        variant_order=converter.variant_order,
        convert_inline=not config.skip_inline,
    )
    for file in sources:
        text = texts[file.path]
        markup = components.rewrite(text, external, file.relative)
        results.append(FileResult(file=file, original=text, content=markup.html, markup=markup))

    order = {f.path: index for index, f in enumerate(files)}
    results.sort(key=lambda r: order[r.file.path])
    return ProjectResult(results, SummaryStats.from_results(results), registry)
