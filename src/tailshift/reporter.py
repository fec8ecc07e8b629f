"""Human and JSON reports for a project run."""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

from tailshift.cascade.variants import VariantOrder
from tailshift.diff import make_diff
from tailshift.model.outcome import ConversionOutcome
from tailshift.project import FileResult, ProjectResult, SummaryStats
from tailshift.writer import WriteReport

__all__ = [
    "build_report",
    "file_line",
    "format_inventory",
    "format_summary",
    "render_json",
    "utility_inventory",
]


def file_line(result: FileResult) -> str:
    """One status line for a file."""
    name = result.file.relative
    if result.failed:
        return f"  ! {name}: not converted ({result.diagnostics[0].message})"
    if result.delete:
        return f"  - {name}: deleted (all rules converted)"
    if not result.changed:
        return f"    {name}: unchanged"
    parts: list[str] = []
    outcomes = result.outcomes
    converted = sum(1 for o in outcomes if o.converted)
    if outcomes:
        parts.append(f"{converted}/{len(outcomes)} rule(s) converted")
    if result.markup is not None and result.markup.classes_added:
        parts.append(f"{result.markup.classes_added} class(es) added")
    if result.markup is not None and result.markup.inline_converted:
        parts.append(f"{result.markup.inline_converted} inline declaration(s) converted")
    diff = make_diff(name, result.original, result.content)
    parts.append(f"+{diff.added} -{diff.removed}")
    return f"  ~ {name}: " + ", ".join(parts)


def format_summary(stats: SummaryStats, dry_run: bool = False) -> str:
    kinds = f"{stats.stylesheets} stylesheet(s), {stats.markup_files} document(s)"
    if stats.components:
        kinds += f", {stats.components} component(s)"
    lines = [
        "Dry run, no files written." if dry_run else "Conversion complete.",
        f"  Files scanned:      {stats.files_scanned} ({kinds})",
        f"  Files changed:      {stats.files_changed}",
        f"  Rules converted:    {stats.rules_converted} full, {stats.rules_partial} partial, "
        f"{stats.rules_skipped} skipped",
        f"  Classes added:      {stats.classes_added}",
        f"  Conflicts resolved: {stats.conflicts}",
        f"  Warnings:           {stats.warnings}",
    ]
    if stats.inline_converted:
        lines.append(f"  Inline converted:   {stats.inline_converted}")
    if stats.files_deleted:
        lines.append(f"  Files deleted:      {stats.files_deleted}")
    if stats.files_failed:
        lines.append(f"  Files failed:       {stats.files_failed}")
    return "\n".join(lines)


def utility_inventory(
    outcomes: Iterable[ConversionOutcome], order: VariantOrder | None = None
) -> list[tuple[str, tuple[str, ...]]]:
    """Every converted token with the union of the variants it is used under."""
    order = order or VariantOrder()
    items = [(c.token, c.variants) for o in outcomes if o.converted for c in o.candidates]
    return order.merge(items)


def format_inventory(inventory: Iterable[tuple[str, tuple[str, ...]]]) -> str:
    lines = []
    for token, variants in inventory:
        lines.append(f"  {token} [{', '.join(variants)}]" if variants else f"  {token}")
    return "\n".join(lines)


def _outcome_dict(outcome: ConversionOutcome) -> dict[str, Any]:
    data: dict[str, Any] = {
        "selector": outcome.selector,
        "elementKey": outcome.element_key,
        "variants": list(outcome.variants),
        "tokens": list(outcome.converted_tokens),
        "status": (
            "full"
            if outcome.fully_converted
            else "partial"
            if outcome.partially_converted
            else "skipped"
        ),
    }
    if outcome.skip_reason:
        data["reason"] = outcome.skip_reason
    return data


def build_report(
    result: ProjectResult,
    write_report: WriteReport | None = None,
    dry_run: bool = False,
    order: VariantOrder | None = None,
) -> dict[str, Any]:
    """A JSON-serializable report of the whole run."""
    stats = result.stats
    files = []
    for file_result in result.files:
        files.append(
            {
                "path": file_result.file.relative,
                "kind": file_result.file.kind.value,
                "changed": file_result.changed,
                "deleted": file_result.delete,
                "outcomes": [_outcome_dict(o) for o in file_result.outcomes],
                "conflicts": [str(c) for c in file_result.conflicts],
                "diagnostics": [
                    {
                        "code": d.code,
                        "severity": d.severity.value,
                        "message": d.message,
                        "selector": d.selector,
                    }
                    for d in file_result.all_diagnostics
                ],
            }
        )
    outcomes = [o for f in result.files for o in f.outcomes]
    report: dict[str, Any] = {
        "dryRun": dry_run,
        "summary": {
            "filesScanned": stats.files_scanned,
            "components": stats.components,
            "filesChanged": stats.files_changed,
            "filesDeleted": stats.files_deleted,
            "filesFailed": stats.files_failed,
            "rulesConverted": stats.rules_converted,
            "rulesPartial": stats.rules_partial,
            "rulesSkipped": stats.rules_skipped,
            "classesAdded": stats.classes_added,
            "inlineConverted": stats.inline_converted,
            "conflicts": stats.conflicts,
            "warnings": stats.warnings,
            "variables": len(result.registry),
        },
        "utilities": [
            {"token": token, "variants": list(variants)}
            for token, variants in utility_inventory(outcomes, order)
        ],
        "files": files,
    }
    if write_report is not None:
        report["backupDir"] = str(write_report.backup_dir) if write_report.backup_dir else None
    return report


def render_json(report: dict[str, Any]) -> str:
    return json.dumps(report, indent=2)
