"""Work item domain model.

Plain dataclasses with no knowledge of markdown. The codec builds them from
document text; the service and metrics layers only read their fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from docpm.types.core import ISOTimestamp, TaskDict, WorkItemDict

ITEM_TYPES: tuple[str, ...] = ("feature", "bug", "experiment")
STATUSES: tuple[str, ...] = (
    "PROPOSED",
    "IN_PROGRESS_DISCOVERY",
    "IN_PROGRESS_PLANNING",
    "IN_PROGRESS_EXECUTION",
    "IN_PROGRESS_CLEANUP",
    "IN_PROGRESS_REVIEW",
    "COMPLETED",
)
PHASES: tuple[str, ...] = ("discovery", "planning", "execution", "cleanup")

VALID_ITEM_TYPES: frozenset[str] = frozenset(ITEM_TYPES)
VALID_STATUSES: frozenset[str] = frozenset(STATUSES)
VALID_PHASES: frozenset[str] = frozenset(PHASES)
ACTIVE_STATUSES: tuple[str, ...] = STATUSES[1:-1]

STATUS_PROPOSED = "PROPOSED"
STATUS_COMPLETED = "COMPLETED"
STATUS_UNKNOWN = "UNKNOWN"
DEFAULT_PHASE = "discovery"

# Assignee value that auto-assignment is allowed to replace.
HUMAN_ASSIGNEE = "human"

# Short CLI aliases accepted in place of the full status tokens.
STATUS_ALIASES: dict[str, str] = {
    "proposed": "PROPOSED",
    "discovery": "IN_PROGRESS_DISCOVERY",
    "planning": "IN_PROGRESS_PLANNING",
    "execution": "IN_PROGRESS_EXECUTION",
    "cleanup": "IN_PROGRESS_CLEANUP",
    "review": "IN_PROGRESS_REVIEW",
    "completed": "COMPLETED",
}


def normalize_status(value: str) -> str:
    """Map a CLI spelling (``review``, ``in_progress_review``) to its status token.

    Unrecognized values are returned upper-cased so validation can reject them
    with the caller's spelling intact.
    """
    cleaned = value.strip()
    alias = STATUS_ALIASES.get(cleaned.lower())
    if alias is not None:
        return alias
    return cleaned.upper()


def item_type_from_name(name: str) -> str:
    """Infer the item type from a ``{type}-{slug}`` name, or ``""`` if unrecognized."""
    for item_type in ITEM_TYPES:
        if name.startswith(f"{item_type}-"):
            return item_type
    return ""


def work_item_dir_name(item_type: str, name: str) -> str:
    return f"{item_type}-{name}"


def phase_index(phase: str) -> int:
    """Zero-based position of *phase* in the workflow, or -1 when unknown."""
    try:
        return PHASES.index(phase)
    except ValueError:
        return -1


def iso_timestamp(ts: datetime | None) -> ISOTimestamp | None:
    if ts is None:
        return None
    return ISOTimestamp(ts.isoformat(timespec="seconds"))


@dataclass
class Task:
    description: str
    completed: bool = False
    phase: str = DEFAULT_PHASE
    assigned_to: str = ""

    def to_dict(self) -> TaskDict:
        return {
            "description": self.description,
            "completed": self.completed,
            "phase": self.phase,
            "assigned_to": self.assigned_to,
        }


@dataclass
class WorkItem:
    name: str
    title: str = ""
    type: str = ""
    status: str = STATUS_UNKNOWN
    phase: str = DEFAULT_PHASE
    progress: int = 0
    assigned_to: str = ""
    path: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    tasks: list[Task] = field(default_factory=list)

    def tasks_for_phase(self, phase: str) -> list[Task]:
        return [t for t in self.tasks if t.phase == phase]

    @property
    def current_phase_tasks(self) -> list[Task]:
        return self.tasks_for_phase(self.phase)

    def to_dict(self) -> WorkItemDict:
        return {
            "name": self.name,
            "title": self.title,
            "type": self.type,
            "status": self.status,
            "phase": self.phase,
            "progress": self.progress,
            "assigned_to": self.assigned_to,
            "path": self.path,
            "created_at": iso_timestamp(self.created_at),
            "updated_at": iso_timestamp(self.updated_at),
            "tasks": [t.to_dict() for t in self.tasks],
        }


@dataclass(frozen=True)
class CreateRequest:
    """Parameters for creating a work item. ``name`` excludes the type prefix."""

    type: str
    name: str

    @property
    def dir_name(self) -> str:
        return work_item_dir_name(self.type, self.name)


@dataclass(frozen=True)
class ListFilter:
    """Listing filter. Empty fields match everything."""

    status: str = ""
    type: str = ""

    def matches(self, item: WorkItem) -> bool:
        if self.status and item.status != self.status:
            return False
        return not (self.type and item.type != self.type)
