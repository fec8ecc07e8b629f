"""CLI command: tailshift convert -- rewrite a project to use utility classes."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from tailshift.config import ConfigValidationError, apply_overrides, load_config
from tailshift.diff import make_diff
from tailshift.project import scan_project, transform_project
from tailshift.reporter import build_report, file_line, format_summary, render_json
from tailshift.writer import FileWriter


def _configure_logging(log_level: str) -> None:
    level = {"silent": logging.WARNING, "verbose": logging.DEBUG}.get(log_level, logging.INFO)
    logger = logging.getLogger("tailshift")
    logger.setLevel(level)
    # Rebind on every invocation so the handler follows the current stderr.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)


def _echo_diff(text: str) -> None:
    for line in text.splitlines():
        if line.startswith("+") and not line.startswith("+++"):
            click.secho(line, fg="green")
        elif line.startswith("-") and not line.startswith("---"):
            click.secho(line, fg="red")
        elif line.startswith("@@"):
            click.secho(line, fg="cyan")
        else:
            click.echo(line)


@click.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.option("--dry-run", "--preview", "dry_run", is_flag=True,
              help="Show what would change without writing files.")
@click.option("--diff", "show_diff", is_flag=True, help="Print a unified diff per changed file.")
@click.option("--silent", is_flag=True, help="Only print errors.")
@click.option("--verbose", is_flag=True, help="Log every decision.")
@click.option("--json-report", "json_report", type=click.Path(dir_okay=False),
              default=None, help="Write a JSON report to this path ('-' for stdout).")
@click.option("--delete-css", "delete_css", is_flag=True,
              help="Delete stylesheets that end up empty.")
@click.option("--skip-external", "skip_external", is_flag=True,
              help="Leave .css files untouched.")
@click.option("--skip-internal", "skip_internal", is_flag=True,
              help="Leave <style> blocks untouched.")
@click.option("--skip-inline", "skip_inline", is_flag=True,
              help="Leave style=\"\" attributes untouched.")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
              help="Configuration file (default: tailshift.json in DIRECTORY).")
def convert(
    directory: str,
    dry_run: bool,
    show_diff: bool,
    silent: bool,
    verbose: bool,
    json_report: str | None,
    delete_css: bool,
    skip_external: bool,
    skip_internal: bool,
    skip_inline: bool,
    config_path: str | None,
) -> None:
    """Convert the stylesheets, HTML documents and components under DIRECTORY.

    Declarations are replaced by utility classes only where the cascade
    result is preserved; everything else is left in place and reported.
    """
    root = Path(directory)

    try:
        config = load_config(root, config_path)
    except ConfigValidationError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)

    log_level = "verbose" if verbose else "silent" if silent else None
    config = apply_overrides(
        config,
        output_mode="dry-run" if dry_run else None,
        log_level=log_level,
        delete_css=delete_css or None,
        skip_external=skip_external or None,
        skip_internal=skip_internal or None,
        skip_inline=skip_inline or None,
    )
    _configure_logging(config.log_level)
    quiet = config.log_level == "silent"

    try:
        files = scan_project(root, config)
        result = transform_project(files, config)
    except (OSError, UnicodeDecodeError) as exc:
        click.echo(f"Error reading project: {exc}", err=True)
        sys.exit(1)

    if not quiet:
        for file_result in result.files:
            click.echo(file_line(file_result))

    if show_diff:
        for file_result in result.files:
            if file_result.changed:
                modified = "" if file_result.delete else file_result.content
                diff = make_diff(file_result.file.relative, file_result.original, modified)
                _echo_diff(diff.diff_text)

    write_report = None
    if not config.dry_run:
        try:
            write_report = FileWriter(root).write(result.files)
        except OSError as exc:
            click.echo(f"Error writing files: {exc}", err=True)
            sys.exit(1)

    if not quiet:
        click.echo()
        click.echo(format_summary(result.stats, dry_run=config.dry_run))
        if write_report is not None and write_report.backup_dir is not None:
            click.echo(f"  Backups:            {write_report.backup_dir}")

    if json_report:
        text = render_json(build_report(result, write_report, dry_run=config.dry_run))
        if json_report == "-":
            click.echo(text)
        else:
            Path(json_report).write_text(text + "\n", encoding="utf-8")

    if result.stats.files_failed:
        sys.exit(1)
