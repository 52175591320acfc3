"""CLI commands for work item CRUD: new, list, status, assign, archive."""

from __future__ import annotations

import click

from docpm.cli_common import echo_json, get_service, reporting_errors
from docpm.models import (
    ACTIVE_STATUSES,
    ITEM_TYPES,
    STATUS_COMPLETED,
    STATUS_PROPOSED,
    STATUSES,
    ListFilter,
    WorkItem,
    normalize_status,
)


def _summary_line(item: WorkItem, *, detail: bool = False) -> str:
    line = f"  {item.name}"
    if item.title:
        line += f" - {item.title}"
    if detail:
        line += f" [{item.phase}]"
        if item.progress > 0:
            line += f" ({item.progress}%)"
    return line


def _echo_grouped(items: list[WorkItem], statuses: tuple[str, ...]) -> None:
    for status in statuses:
        group = [item for item in items if item.status == status]
        if not group:
            continue
        click.echo(f"\n{status}:")
        for item in group:
            click.echo(_summary_line(item, detail=True))


# ---------------------------------------------------------------------------
# new
# ---------------------------------------------------------------------------


@click.group("new")
def new_group() -> None:
    """Create a new work item."""


def _make_new_command(item_type: str) -> click.Command:
    @click.command(item_type)
    @click.argument("name")
    @click.option("--json", "as_json", is_flag=True, help="Output as JSON")
    @click.pass_context
    def new_cmd(ctx: click.Context, name: str, as_json: bool) -> None:
        service = get_service(ctx)
        with reporting_errors(as_json=as_json):
            item = service.create_work_item(item_type, name)
        if as_json:
            echo_json(item.to_dict())
            return
        click.echo(f"Created {item.name}")
        click.echo(f"  Path:  {item.path}")
        if item.title:
            click.echo(f"  Title: {item.title}")
        click.echo(f"\nNext: edit {item.path}, then docpm phase advance {item.name}")

    new_cmd.help = f"Create a new {item_type} named NAME."
    return new_cmd


for _item_type in ITEM_TYPES:
    new_group.add_command(_make_new_command(_item_type))


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


@click.group("list")
def list_group() -> None:
    """List work items."""


_type_option = click.option(
    "--type",
    "item_type",
    type=click.Choice(ITEM_TYPES),
    default=None,
    help="Only list items of this type",
)
_json_option = click.option("--json", "as_json", is_flag=True, help="Output as JSON")


@list_group.command("proposed")
@_type_option
@_json_option
@click.pass_context
def list_proposed(ctx: click.Context, item_type: str | None, as_json: bool) -> None:
    """List work items that have not started."""
    with reporting_errors(as_json=as_json):
        items = get_service(ctx).list_work_items(ListFilter(status=STATUS_PROPOSED, type=item_type or ""))
    if as_json:
        echo_json([item.to_dict() for item in items])
        return
    click.echo("Proposed work items:")
    if not items:
        click.echo("  No proposed work items found")
    for item in items:
        click.echo(_summary_line(item))


@list_group.command("active")
@_type_option
@_json_option
@click.pass_context
def list_active(ctx: click.Context, item_type: str | None, as_json: bool) -> None:
    """List in-progress work items, grouped by status."""
    with reporting_errors(as_json=as_json):
        items = get_service(ctx).list_work_items(ListFilter(type=item_type or ""))
    items = [item for item in items if item.status in ACTIVE_STATUSES]
    if as_json:
        echo_json([item.to_dict() for item in items])
        return
    click.echo("Active work items:")
    if not items:
        click.echo("  No active work items found")
        return
    _echo_grouped(items, ACTIVE_STATUSES)


@list_group.command("completed")
@_type_option
@_json_option
@click.pass_context
def list_completed(ctx: click.Context, item_type: str | None, as_json: bool) -> None:
    """List COMPLETED work items still in the backlog."""
    with reporting_errors(as_json=as_json):
        items = get_service(ctx).list_work_items(ListFilter(status=STATUS_COMPLETED, type=item_type or ""))
    if as_json:
        echo_json([item.to_dict() for item in items])
        return
    click.echo("Completed work items:")
    if not items:
        click.echo("  No completed work items found")
    for item in items:
        click.echo(_summary_line(item))


@list_group.command("all")
@_type_option
@_json_option
@click.pass_context
def list_all(ctx: click.Context, item_type: str | None, as_json: bool) -> None:
    """List every backlog work item, grouped by status."""
    with reporting_errors(as_json=as_json):
        items = get_service(ctx).list_work_items(ListFilter(type=item_type or ""))
    if as_json:
        echo_json([item.to_dict() for item in items])
        return
    click.echo("All work items:")
    if not items:
        click.echo("  No work items found")
        return
    _echo_grouped(items, STATUSES)
    unknown = [item for item in items if item.status not in STATUSES]
    if unknown:
        click.echo("\nOther:")
        for item in unknown:
            click.echo(f"{_summary_line(item, detail=True)} <{item.status}>")


@list_group.command("archived")
@_type_option
@_json_option
@click.pass_context
def list_archived(ctx: click.Context, item_type: str | None, as_json: bool) -> None:
    """List work items moved to the completed store."""
    with reporting_errors(as_json=as_json):
        items = get_service(ctx).list_completed_work_items(ListFilter(type=item_type or ""))
    if as_json:
        echo_json([item.to_dict() for item in items])
        return
    click.echo("Archived work items:")
    if not items:
        click.echo("  No archived work items found")
    for item in items:
        click.echo(_summary_line(item))


# ---------------------------------------------------------------------------
# status
# ---------------------------------------------------------------------------


@click.group("status")
def status_group() -> None:
    """Show or override work item status."""


@status_group.command("show")
@click.argument("name")
@_json_option
@click.pass_context
def status_show(ctx: click.Context, name: str, as_json: bool) -> None:
    """Show work item details."""
    with reporting_errors(as_json=as_json):
        item = get_service(ctx).get_work_item(name)
    if as_json:
        echo_json(item.to_dict())
        return

    click.echo(f"Work Item: {item.name}")
    if item.title:
        click.echo(f"Title:     {item.title}")
    click.echo(f"Status:    {item.status}")
    click.echo(f"Phase:     {item.phase}")
    if item.progress > 0:
        click.echo(f"Progress:  {item.progress}%")
    if item.assigned_to:
        click.echo(f"Assigned:  {item.assigned_to}")
    click.echo(f"Path:      {item.path}")
    if item.updated_at is not None:
        click.echo(f"Updated:   {item.updated_at:%Y-%m-%d %H:%M}")


@status_group.command("update")
@click.argument("name")
@click.argument("status")
@_json_option
@click.pass_context
def status_update(ctx: click.Context, name: str, status: str, as_json: bool) -> None:
    """Set STATUS directly (e.g. review, IN_PROGRESS_REVIEW). No phase change or gating."""
    token = normalize_status(status)
    with reporting_errors(as_json=as_json):
        item = get_service(ctx).update_status(name, token)
    if as_json:
        echo_json(item.to_dict())
        return
    click.echo(f"Updated {name} status to {item.status}")


# ---------------------------------------------------------------------------
# assign / archive
# ---------------------------------------------------------------------------


@click.command("assign")
@click.argument("name")
@click.argument("assignee")
@_json_option
@click.pass_context
def assign(ctx: click.Context, name: str, assignee: str, as_json: bool) -> None:
    """Assign a work item to a human or agent."""
    with reporting_errors(as_json=as_json):
        item = get_service(ctx).assign_work_item(name, assignee)
    if as_json:
        echo_json(item.to_dict())
        return
    click.echo(f"Assigned {name} to {item.assigned_to}")


@click.command("archive")
@click.argument("name")
@_json_option
@click.pass_context
def archive(ctx: click.Context, name: str, as_json: bool) -> None:
    """Move a work item to the completed store and generate a postmortem."""
    with reporting_errors(as_json=as_json):
        archived = get_service(ctx).archive_work_item(name)
    if as_json:
        echo_json({"name": name, "path": str(archived)})
        return
    click.echo(f"Archived {name} to {archived}")
    click.echo("Next: fill in POSTMORTEM.md")


def register(cli: click.Group) -> None:
    """Register work item commands with the CLI group."""
    cli.add_command(new_group)
    cli.add_command(list_group)
    cli.add_command(status_group)
    cli.add_command(assign)
    cli.add_command(archive)
