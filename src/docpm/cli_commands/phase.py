"""CLI commands for the phase workflow: advance, set, tasks, complete."""

from __future__ import annotations

import click

from docpm.cli_common import echo_json, get_service, reporting_errors
from docpm.models import PHASES


@click.group("phase")
def phase_group() -> None:
    """Manage work item phases."""


@phase_group.command("advance")
@click.argument("name")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def advance(ctx: click.Context, name: str, as_json: bool) -> None:
    """Advance to the next phase. Every task of the current phase must be checked."""
    with reporting_errors(as_json=as_json):
        transition = get_service(ctx).advance_phase(name)
    if as_json:
        echo_json(transition.to_dict())
        return
    click.echo(f"Advanced {name}: {transition.from_status} -> {transition.to_status}")
    if transition.changes_phase:
        click.echo(f"  Phase: {transition.from_phase} -> {transition.to_phase}")


@phase_group.command("set")
@click.argument("name")
@click.argument("phase", type=click.Choice(PHASES, case_sensitive=False))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def set_phase(ctx: click.Context, name: str, phase: str, as_json: bool) -> None:
    """Set PHASE directly (admin override). Status and tasks are not checked."""
    with reporting_errors(as_json=as_json):
        item = get_service(ctx).set_phase(name, phase.lower())
    if as_json:
        echo_json(item.to_dict())
        return
    click.echo(f"Set {name} phase to {item.phase}")


@phase_group.command("tasks")
@click.argument("name")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def tasks(ctx: click.Context, name: str, as_json: bool) -> None:
    """List the current phase's tasks with their IDs."""
    with reporting_errors(as_json=as_json):
        phase_tasks = get_service(ctx).get_phase_tasks(name)
    if as_json:
        echo_json([{"id": i, **t.to_dict()} for i, t in enumerate(phase_tasks)])
        return
    if not phase_tasks:
        click.echo(f"No tasks found for current phase of {name}")
        return
    click.echo(f"Tasks for {name} ({phase_tasks[0].phase}):")
    for i, t in enumerate(phase_tasks):
        box = "[x]" if t.completed else "[ ]"
        suffix = f" ({t.assigned_to})" if t.assigned_to else ""
        click.echo(f"  {i}. {box} {t.description}{suffix}")


@phase_group.command("complete")
@click.argument("name")
@click.argument("task_id", type=int)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def complete(ctx: click.Context, name: str, task_id: int, as_json: bool) -> None:
    """Check off TASK_ID (as shown by 'phase tasks') and recompute progress."""
    with reporting_errors(as_json=as_json):
        item = get_service(ctx).complete_task(name, task_id)
    if as_json:
        echo_json(item.to_dict())
        return
    click.echo(f"Completed task {task_id} of {name} ({item.progress}% overall)")


def register(cli: click.Group) -> None:
    """Register phase commands with the CLI group."""
    cli.add_command(phase_group)
