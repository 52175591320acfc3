"""CLI for docpm.

Usage:
    docpm new feature <name>                 # Create feature-<name> in the backlog
    docpm list active                        # List in-progress work items
    docpm status show <name>                 # Show a work item
    docpm status update <name> review        # Override the status
    docpm phase advance <name>               # Move to the next phase (gated)
    docpm phase tasks <name>                 # Tasks of the current phase
    docpm phase complete <name> 0            # Check off a current-phase task
    docpm progress show <name>               # Progress report
    docpm assign <name> agent                # Assign a work item
    docpm archive <name>                     # Move to completed + postmortem
    docpm instructions                       # Contributor guidelines
"""

from __future__ import annotations

from pathlib import Path

import click

from docpm import __version__
from docpm.cli_commands import items as _items
from docpm.cli_commands import meta as _meta
from docpm.cli_commands import phase as _phase
from docpm.cli_commands import progress as _progress
from docpm.logging import setup_console_logging


@click.group()
@click.version_option(version=__version__, prog_name="docpm")
@click.option(
    "--base-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory containing work-items/ (default: repository root)",
)
@click.option("--enable-git/--no-enable-git", default=None, help="Create branches for work items and phases")
@click.option(
    "--auto-detect-repo-root/--no-auto-detect-repo-root",
    default=None,
    help="Use the git repository root as the base directory",
)
@click.pass_context
def cli(
    ctx: click.Context,
    base_dir: Path | None,
    enable_git: bool | None,
    auto_detect_repo_root: bool | None,
) -> None:
    """docpm: track features, bugs and experiments as markdown work items."""
    ctx.ensure_object(dict)
    ctx.obj["overrides"] = {
        "base_dir": str(base_dir) if base_dir is not None else None,
        "enable_git": enable_git,
        "auto_detect_repo_root": auto_detect_repo_root,
    }
    setup_console_logging()


_items.register(cli)
_phase.register(cli)
_progress.register(cli)
_meta.register(cli)


if __name__ == "__main__":
    cli()
