"""CLI entry point for traceviewer."""

from __future__ import annotations

import click
from dotenv import load_dotenv

from traceviewer.commands.view.cmd import inspect, show

load_dotenv()


@click.group()
@click.version_option(version="0.1.0", prog_name="traceviewer")
def cli() -> None:
    """Browse recorded browser traces and replay their DOM snapshots."""


cli.add_command(inspect)
cli.add_command(show)


if __name__ == "__main__":
    cli()
