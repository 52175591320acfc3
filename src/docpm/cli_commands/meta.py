"""CLI commands that do not touch work items: instructions, version."""

from __future__ import annotations

import click

from docpm import __version__
from docpm.cli_common import echo_json, get_config
from docpm.templates import render_instructions


@click.command("instructions")
@click.pass_context
def instructions(ctx: click.Context) -> None:
    """Print guidelines for project contributors and AI agents."""
    click.echo(render_instructions(get_config(ctx)), nl=False)


@click.command("version")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def version_cmd(as_json: bool) -> None:
    """Show the docpm version."""
    if as_json:
        echo_json({"version": __version__})
        return
    click.echo(f"docpm {__version__}")


def register(cli: click.Group) -> None:
    """Register informational commands with the CLI group."""
    cli.add_command(instructions)
    cli.add_command(version_cmd)
