"""Foundational TypedDicts for dataclass to_dict() returns."""

from __future__ import annotations

from typing import NewType, TypedDict

ISOTimestamp = NewType("ISOTimestamp", str)


class ProjectConfig(TypedDict, total=False):
    """Shape of docpm.json."""

    base_dir: str
    backlog_dir: str
    completed_dir: str
    auto_detect_repo_root: bool
    phase_timeout_days: int
    auto_assign_agent: bool
    enable_git: bool


class TaskDict(TypedDict):
    description: str
    completed: bool
    phase: str
    assigned_to: str


class WorkItemDict(TypedDict):
    name: str
    title: str
    type: str
    status: str
    phase: str
    progress: int
    assigned_to: str
    path: str
    created_at: ISOTimestamp | None
    updated_at: ISOTimestamp | None
    tasks: list[TaskDict]


class TransitionDict(TypedDict):
    name: str
    from_phase: str
    to_phase: str
    from_status: str
    to_status: str


class PhaseProgressDict(TypedDict):
    phase: str
    total_tasks: int
    completed_tasks: int
    progress_percent: int
    estimated_hours: float


class WorkItemMetricsDict(TypedDict):
    name: str
    total_tasks: int
    completed_tasks: int
    overall_progress: int
    phase_progress: list[PhaseProgressDict]
    estimated_total_hours: float
    created_at: ISOTimestamp | None
    updated_at: ISOTimestamp | None


class CompletionPredictionDict(TypedDict):
    completion_at: ISOTimestamp | None
    message: str
    remaining_hours: float | None
