# ABOUTME: CLI package for Folio, built on Click.
# ABOUTME: Defines the root command group, logging setup, and registers subcommands.

import logging

import click
from rich.logging import RichHandler

from folio.cli.commands import lookup_cmd


@click.group()
@click.version_option(package_name="folio")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """Folio - resolve book metadata from an ISBN."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO; only worth seeing in verbose mode.
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


cli.add_command(lookup_cmd.lookup)
