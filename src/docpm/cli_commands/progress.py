"""CLI commands for progress: show, update."""

from __future__ import annotations

import click

from docpm.cli_common import echo_json, get_service, reporting_errors
from docpm.progress import format_progress_report, phase_efficiency, predict_completion


@click.group("progress")
def progress_group() -> None:
    """Track work item progress."""


@progress_group.command("show")
@click.argument("name")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def show(ctx: click.Context, name: str, as_json: bool) -> None:
    """Show task metrics and a completion estimate."""
    with reporting_errors(as_json=as_json):
        metrics = get_service(ctx).get_progress_metrics(name)
    prediction = predict_completion(metrics)
    if as_json:
        data = dict(metrics.to_dict())
        data["prediction"] = prediction.to_dict()
        data["phase_efficiency"] = phase_efficiency(metrics)
        echo_json(data)
        return
    click.echo(format_progress_report(metrics), nl=False)
    click.echo(f"\nPrediction: {prediction.message}")
    if prediction.completion_at is not None:
        click.echo(f"Estimated completion: {prediction.completion_at:%Y-%m-%d %H:%M}")


@progress_group.command("update")
@click.argument("name")
@click.argument("percent", type=int)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def update(ctx: click.Context, name: str, percent: int, as_json: bool) -> None:
    """Set the progress line to PERCENT (0-100)."""
    with reporting_errors(as_json=as_json):
        item = get_service(ctx).update_progress(name, percent)
    if as_json:
        echo_json(item.to_dict())
        return
    click.echo(f"Updated {name} progress to {item.progress}%")


def register(cli: click.Group) -> None:
    """Register progress commands with the CLI group."""
    cli.add_command(progress_group)
