"""Error taxonomy for docpm.

Core mutations raise these; advisory side effects (git branches,
auto-assignment, postmortems) log instead of raising.
"""

from __future__ import annotations


class DocpmError(Exception):
    """Base class for every error raised by docpm."""


class ValidationError(DocpmError, ValueError):
    """Caller supplied structurally invalid input."""

    def __init__(self, field: str, value: object, message: str) -> None:
        self.field = field
        self.value = "" if value is None else str(value)
        self.message = message
        super().__init__(f"validation error for {field} '{self.value}': {message}")


class NotFoundError(DocpmError, KeyError):
    """Referenced work item has no backing document."""

    def __init__(self, name: str, *, store: str = "backlog") -> None:
        self.name = name
        self.store = store
        super().__init__(name)

    def __str__(self) -> str:
        # KeyError.__str__ repr()-quotes its argument
        return f"work item not found in {self.store}: {self.name}"


class PhaseError(DocpmError, ValueError):
    """A workflow rule rejected a phase advance."""

    def __init__(self, work_item: str, current_phase: str, target_phase: str, reason: str) -> None:
        self.work_item = work_item
        self.current_phase = current_phase
        self.target_phase = target_phase
        self.reason = reason
        target = target_phase or "next phase"
        super().__init__(f"cannot advance {work_item} from {current_phase} to {target}: {reason}")


class WorkItemError(DocpmError):
    """A storage failure during a work item operation, tagged with op and item name."""

    def __init__(self, op: str, name: str, cause: BaseException | str) -> None:
        self.op = op
        self.name = name
        self.cause = cause
        super().__init__(f"docpm {op} {name}: {cause}")


class GitError(DocpmError):
    """A git command failed or git is unavailable."""
