"""Tailshift CLI entry point: Click group with subcommands."""

import click

from tailshift import __version__


@click.group()
@click.version_option(version=__version__, prog_name="tailshift")
def cli() -> None:
    """Tailshift - convert CSS rules into utility classes, safely."""


# Import and register subcommands
from tailshift.cli.convert import convert  # noqa: E402
from tailshift.cli.inspect import inspect  # noqa: E402

cli.add_command(convert)
cli.add_command(inspect)
