"""Progress metrics, reports and completion predictions.

Read-only: nothing here touches a document. Percentages truncate (2 of 3
tasks is 66%, not 67%).

Time in phase is an *estimate*. Documents do not record when a phase was
entered, so each phase is credited with the item's age divided by its
1-based position in the workflow. Predictions and efficiency figures built
on it are equally rough.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from docpm.models import PHASES, WorkItem, iso_timestamp, phase_index
from docpm.types.core import CompletionPredictionDict, PhaseProgressDict, WorkItemMetricsDict

REPORT_RULE = "=" * 32
_HOUR = timedelta(hours=1)


def _percent(completed: int, total: int) -> int:
    if total <= 0:
        return 0
    return (completed * 100) // total


def _hours(td: timedelta) -> float:
    return round(td.total_seconds() / 3600, 2)


def round_to_hour(td: timedelta) -> timedelta:
    """Round half away from zero to a whole number of hours."""
    hours = td / _HOUR
    whole = int(hours + 0.5) if hours >= 0 else -int(-hours + 0.5)
    return whole * _HOUR


def format_duration(td: timedelta) -> str:
    """Render a duration as whole hours, e.g. ``"36h"``."""
    return f"{int(round_to_hour(td) / _HOUR)}h"


def _format_ts(ts: datetime | None) -> str:
    return ts.strftime("%Y-%m-%d %H:%M") if ts is not None else "unknown"


@dataclass(frozen=True)
class PhaseProgress:
    phase: str
    total_tasks: int
    completed_tasks: int
    progress_percent: int
    time_spent: timedelta = timedelta(0)

    def to_dict(self) -> PhaseProgressDict:
        return {
            "phase": self.phase,
            "total_tasks": self.total_tasks,
            "completed_tasks": self.completed_tasks,
            "progress_percent": self.progress_percent,
            "estimated_hours": _hours(self.time_spent),
        }


@dataclass(frozen=True)
class WorkItemMetrics:
    name: str
    total_tasks: int
    completed_tasks: int
    overall_progress: int
    phase_progress: tuple[PhaseProgress, ...] = field(default_factory=tuple)
    total_time: timedelta = timedelta(0)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def remaining_tasks(self) -> int:
        return self.total_tasks - self.completed_tasks

    def for_phase(self, phase: str) -> PhaseProgress | None:
        for pp in self.phase_progress:
            if pp.phase == phase:
                return pp
        return None

    def to_dict(self) -> WorkItemMetricsDict:
        return {
            "name": self.name,
            "total_tasks": self.total_tasks,
            "completed_tasks": self.completed_tasks,
            "overall_progress": self.overall_progress,
            "phase_progress": [pp.to_dict() for pp in self.phase_progress],
            "estimated_total_hours": _hours(self.total_time),
            "created_at": iso_timestamp(self.created_at),
            "updated_at": iso_timestamp(self.updated_at),
        }


@dataclass(frozen=True)
class CompletionPrediction:
    completion_at: datetime | None
    message: str
    remaining: timedelta | None = None

    @property
    def available(self) -> bool:
        return self.completion_at is not None

    def to_dict(self) -> CompletionPredictionDict:
        return {
            "completion_at": iso_timestamp(self.completion_at),
            "message": self.message,
            "remaining_hours": _hours(self.remaining) if self.remaining is not None else None,
        }


def estimate_time_in_phase(item: WorkItem, phase: str, now: datetime) -> timedelta:
    """Heuristic time credited to *phase*: item age / (phase position + 1).

    Zero when the creation time is unknown, the phase is unrecognized, or the
    clock is behind the document timestamp.
    """
    idx = phase_index(phase)
    if item.created_at is None or idx < 0:
        return timedelta(0)
    age = now - item.created_at
    if age <= timedelta(0):
        return timedelta(0)
    return age / (idx + 1)


def calculate_phase_progress(item: WorkItem, phase: str, *, now: datetime | None = None) -> PhaseProgress:
    now = now or datetime.now(UTC)
    tasks = item.tasks_for_phase(phase)
    completed = sum(1 for t in tasks if t.completed)
    return PhaseProgress(
        phase=phase,
        total_tasks=len(tasks),
        completed_tasks=completed,
        progress_percent=_percent(completed, len(tasks)),
        time_spent=estimate_time_in_phase(item, phase, now),
    )


def calculate_metrics(item: WorkItem, *, now: datetime | None = None) -> WorkItemMetrics:
    """Overall and per-phase progress. All four phases are always present."""
    now = now or datetime.now(UTC)
    completed = sum(1 for t in item.tasks if t.completed)
    phases = tuple(calculate_phase_progress(item, phase, now=now) for phase in PHASES)
    return WorkItemMetrics(
        name=item.name,
        total_tasks=len(item.tasks),
        completed_tasks=completed,
        overall_progress=_percent(completed, len(item.tasks)),
        phase_progress=phases,
        total_time=sum((pp.time_spent for pp in phases), timedelta(0)),
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def predict_completion(metrics: WorkItemMetrics, *, now: datetime | None = None) -> CompletionPrediction:
    """Linear extrapolation of the remaining time from progress so far."""
    if metrics.overall_progress >= 100:
        return CompletionPrediction(metrics.updated_at, "Already completed", timedelta(0))
    if metrics.remaining_tasks <= 0:
        return CompletionPrediction(metrics.updated_at, "All tasks completed", timedelta(0))

    if metrics.total_time > timedelta(0) and metrics.overall_progress > 0:
        now = now or datetime.now(UTC)
        per_percent = metrics.total_time / metrics.overall_progress
        remaining = per_percent * (100 - metrics.overall_progress)
        return CompletionPrediction(
            now + remaining,
            f"Based on current progress rate: {format_duration(remaining)} remaining",
            remaining,
        )

    return CompletionPrediction(None, "Insufficient data for prediction")


def phase_efficiency(metrics: WorkItemMetrics) -> dict[str, float]:
    """1.0 for phases credited with any time, else 0.0.

    A presence signal, not a ratio: there are no per-phase estimates to
    compare against.
    """
    return {pp.phase: 1.0 if pp.time_spent > timedelta(0) else 0.0 for pp in metrics.phase_progress}


def format_progress_report(metrics: WorkItemMetrics) -> str:
    lines = [
        f"Progress Report for {metrics.name}",
        REPORT_RULE,
        f"Overall Progress: {metrics.overall_progress}% "
        f"({metrics.completed_tasks}/{metrics.total_tasks} tasks completed)",
        f"Total Time Spent (estimated): {format_duration(metrics.total_time)}",
        f"Created: {_format_ts(metrics.created_at)}",
        f"Updated: {_format_ts(metrics.updated_at)}",
        "",
        "Phase Progress:",
    ]
    for pp in metrics.phase_progress:
        line = f"  {pp.phase}: {pp.progress_percent}% ({pp.completed_tasks}/{pp.total_tasks} tasks)"
        if pp.time_spent > timedelta(0):
            line += f" - Spent: {format_duration(pp.time_spent)}"
        lines.append(line)
    return "\n".join(lines) + "\n"
