"""Phase state machine.

Work items move linearly through PROPOSED -> DISCOVERY -> PLANNING ->
EXECUTION -> CLEANUP -> REVIEW -> COMPLETED. The cleanup phase spans the last
three statuses, so the final two advances change only the status.

Everything here is pure: functions take a parsed WorkItem and return a
decision or raise. Persisting the result is the service's job.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from docpm.errors import PhaseError, ValidationError
from docpm.models import STATUS_PROPOSED, Task, WorkItem
from docpm.types.core import TransitionDict

logger = logging.getLogger(__name__)

# current status -> (next phase, next status)
TRANSITIONS: dict[str, tuple[str, str]] = {
    "PROPOSED": ("discovery", "IN_PROGRESS_DISCOVERY"),
    "IN_PROGRESS_DISCOVERY": ("planning", "IN_PROGRESS_PLANNING"),
    "IN_PROGRESS_PLANNING": ("execution", "IN_PROGRESS_EXECUTION"),
    "IN_PROGRESS_EXECUTION": ("cleanup", "IN_PROGRESS_CLEANUP"),
    "IN_PROGRESS_CLEANUP": ("cleanup", "IN_PROGRESS_REVIEW"),
    "IN_PROGRESS_REVIEW": ("cleanup", "COMPLETED"),
}


@dataclass(frozen=True)
class PhaseTransition:
    """A single legal advance, computed before anything is written."""

    name: str
    from_phase: str
    to_phase: str
    from_status: str
    to_status: str

    @property
    def changes_phase(self) -> bool:
        return self.from_phase != self.to_phase

    def to_dict(self) -> TransitionDict:
        return {
            "name": self.name,
            "from_phase": self.from_phase,
            "to_phase": self.to_phase,
            "from_status": self.from_status,
            "to_status": self.to_status,
        }


def next_transition(item: WorkItem) -> PhaseTransition:
    """Look up the advance for *item*'s status.

    Status, not phase, drives the table, so an item whose phase was overridden
    still advances from wherever its status says it is.
    """
    target = TRANSITIONS.get(item.status)
    if target is None:
        raise PhaseError(item.name, item.phase, "", f"cannot advance from current status {item.status}")
    to_phase, to_status = target
    return PhaseTransition(
        name=item.name,
        from_phase=item.phase,
        to_phase=to_phase,
        from_status=item.status,
        to_status=to_status,
    )


def phase_tasks(item: WorkItem) -> list[Task]:
    """Tasks under the item's current phase, in document order."""
    return item.current_phase_tasks


def check_phase_gate(item: WorkItem) -> None:
    """Raise PhaseError naming the first unfinished task of the current phase.

    Items still PROPOSED are exempt: nothing is expected before work starts.
    The error's target phase is the one the status would advance to, or
    empty when the status has no successor.
    """
    if item.status == STATUS_PROPOSED:
        return
    target_phase = TRANSITIONS.get(item.status, ("", ""))[0]
    for task in phase_tasks(item):
        if not task.completed:
            raise PhaseError(item.name, item.phase, target_phase, f"incomplete task: {task.description}")


def plan_advance(item: WorkItem) -> PhaseTransition:
    """Gate the current phase, then resolve the transition to apply."""
    check_phase_gate(item)
    transition = next_transition(item)
    logger.debug(
        "Planned advance for %s: %s/%s -> %s/%s",
        item.name,
        transition.from_phase,
        transition.from_status,
        transition.to_phase,
        transition.to_status,
    )
    return transition


def document_task_index(tasks: Sequence[Task], phase: str, local_index: int) -> int:
    """Translate a phase-local task index into a document-order index.

    *tasks* is the item's full task list. The result is the position of the
    *local_index*-th task whose phase is *phase*. Raises ValidationError when
    the phase has no such task.
    """
    if local_index >= 0:
        seen = 0
        for position, task in enumerate(tasks):
            if task.phase != phase:
                continue
            if seen == local_index:
                return position
            seen += 1
    raise ValidationError("task_id", local_index, "invalid task ID for current phase")
