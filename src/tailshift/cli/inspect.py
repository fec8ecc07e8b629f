"""CLI command: tailshift inspect -- show how a stylesheet would convert."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from tailshift.cascade.selectors import classify, split_selector_list
from tailshift.config import ConfigValidationError, load_config
from tailshift.converter import StylesheetConverter
from tailshift.parser import ParseError, parse_css


@click.command()
@click.argument("cssfile", type=click.Path(exists=True, dir_okay=False))
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
              help="Configuration file (default: tailshift.json beside CSSFILE).")
def inspect(cssfile: str, config_path: str | None) -> None:
    """Classify the selectors of CSSFILE and list the conversion outcomes.

    Nothing is written; the stylesheet is converted in memory only.
    """
    css_path = Path(cssfile)

    try:
        config = load_config(css_path.parent, config_path)
    except ConfigValidationError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)

    try:
        source = css_path.read_text(encoding="utf-8")
        sheet = parse_css(source)
        result = StylesheetConverter(config=config).convert(source, css_path.name)
    except ParseError as exc:
        click.echo(f"Parse error: {exc.summary}", err=True)
        sys.exit(1)

    # Selectors
    click.echo(f"Stylesheet: {css_path.name}")
    click.echo(f"Rules: {sum(1 for _ in sheet.walk_rules())}")
    click.echo()
    click.echo("Selectors:")
    for rule in sheet.walk_rules():
        for selector in split_selector_list(rule.selector):
            parsed = classify(selector)
            parts = [f"  {selector}", f"shape={parsed.shape.value}"]
            if parsed.variants:
                parts.append(f"variants={':'.join(parsed.variants)}")
            if parsed.reason:
                parts.append(f'reason="{parsed.reason}"')
            click.echo("  ".join(parts))
    click.echo()

    # Outcomes
    click.echo("Outcomes:")
    for outcome in result.outcomes:
        if outcome.fully_converted:
            status = "full"
        elif outcome.partially_converted:
            status = "partial"
        else:
            status = "skipped"
        parts = [f"  {outcome.selector}", f"status={status}"]
        if outcome.variants:
            parts.append(f"variants={':'.join(outcome.variants)}")
        if outcome.converted_tokens:
            parts.append(f'tokens="{" ".join(outcome.converted_tokens)}"')
        if outcome.skip_reason:
            parts.append(f'reason="{outcome.skip_reason}"')
        click.echo("  ".join(parts))

    if result.element_utilities:
        click.echo()
        click.echo("Elements:")
        for key, tokens in result.element_utilities.items():
            click.echo(f"  {key}: {' '.join(tokens)}")

    if result.conflicts:
        click.echo()
        click.echo("Conflicts:")
        for record in result.conflicts:
            click.echo(f"  {record}")

    if result.diagnostics:
        click.echo()
        for diag in result.diagnostics:
            click.echo(str(diag))
