"""Work item service: the only code that writes work item documents.

Every public operation is load, validate, mutate, persist against a single
README.md. Storage failures surface as WorkItemError tagged with the
operation and item name.

Side effects that follow a successful write (branch creation, auto-assignment,
progress recompute, postmortem generation) are *advisory*: the ``_advise_*``
methods log a warning and return False on failure instead of raising, since
the primary change is already on disk by the time they run.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

from docpm import codec
from docpm.config import Config
from docpm.errors import NotFoundError, ValidationError, WorkItemError
from docpm.models import (
    HUMAN_ASSIGNEE,
    VALID_ITEM_TYPES,
    VALID_PHASES,
    VALID_STATUSES,
    CreateRequest,
    ListFilter,
    Task,
    WorkItem,
)
from docpm.progress import WorkItemMetrics, calculate_metrics
from docpm.storage import POSTMORTEM_FILENAME, README_FILENAME, DocumentStore, LocalDocumentStore
from docpm.templates import render_postmortem, render_work_item
from docpm.vcs import GitClient, GitIntegration, NoOpGitClient, item_branch_name, phase_branch_name
from docpm.workflow import PhaseTransition, document_task_index, phase_tasks, plan_advance

logger = logging.getLogger(__name__)

EXECUTION_PHASE = "execution"


def _has_path_parts(name: str) -> bool:
    return "/" in name or "\\" in name or name in {".", ".."}


def _utcnow() -> datetime:
    return datetime.now(UTC)


class WorkItemService:
    def __init__(
        self,
        config: Config,
        store: DocumentStore | None = None,
        git: GitClient | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config
        self.store: DocumentStore = store if store is not None else LocalDocumentStore()
        self.git = GitIntegration(git if git is not None else NoOpGitClient(), enabled=config.enable_git)
        self._clock = clock or _utcnow

    # -- Paths ---------------------------------------------------------------

    def item_dir(self, name: str, *, completed: bool = False) -> Path:
        """Directory of *name* in its store. Names that are not a single path component are never found."""
        if not name or _has_path_parts(name):
            raise NotFoundError(name, store="completed" if completed else "backlog")
        root = self.config.completed_dir if completed else self.config.backlog_dir
        return root / name

    def readme_path(self, name: str, *, completed: bool = False) -> Path:
        return self.item_dir(name, completed=completed) / README_FILENAME

    # -- Load / save ---------------------------------------------------------

    def _parse(self, text: str, name: str, path: Path) -> WorkItem:
        return codec.parse_document(text, name, path=str(path), modified_at=self.store.modified_time(path))

    def _read(self, op: str, name: str, *, completed: bool = False) -> tuple[Path, str]:
        path = self.readme_path(name, completed=completed)
        try:
            return path, self.store.read_document(path)
        except FileNotFoundError:
            raise NotFoundError(name, store="completed" if completed else "backlog") from None
        except (OSError, UnicodeDecodeError) as exc:
            raise WorkItemError(op, name, exc) from exc

    def _write(self, op: str, name: str, path: Path, text: str) -> None:
        try:
            self.store.write_document(path, text)
        except OSError as exc:
            raise WorkItemError(op, name, exc) from exc

    def _mutate(self, op: str, name: str, rewrite: Callable[[str], str]) -> WorkItem:
        """Read the item's document, apply *rewrite*, persist and return the re-parsed item."""
        path, text = self._read(op, name)
        updated = rewrite(text)
        self._write(op, name, path, updated)
        logger.info("%s %s", op, name, extra={"op": op, "item": name})
        return self._parse(updated, name, path)

    # -- Create / read -------------------------------------------------------

    def create_work_item(self, item_type: str, name: str) -> WorkItem:
        """Create ``{type}-{name}`` from the type's template. Starts PROPOSED in discovery."""
        name = name.strip()
        if not name:
            raise ValidationError("name", name, "name cannot be empty")
        if _has_path_parts(name):
            raise ValidationError("name", name, "name cannot contain path separators")
        if not item_type:
            raise ValidationError("type", item_type, "type cannot be empty")
        if item_type not in VALID_ITEM_TYPES:
            raise ValidationError("type", item_type, f"must be one of {', '.join(sorted(VALID_ITEM_TYPES))}")

        dir_name = CreateRequest(type=item_type, name=name).dir_name
        item_dir = self.item_dir(dir_name)
        if self.store.directory_exists(item_dir):
            raise ValidationError("name", dir_name, "work item already exists")

        path = item_dir / README_FILENAME
        text = render_work_item(item_type, name)
        try:
            self.store.create_directory(item_dir)
            self.store.write_document(path, text)
        except OSError as exc:
            raise WorkItemError("create", dir_name, exc) from exc
        logger.info("Created work item %s", dir_name, extra={"op": "create", "item": dir_name})

        self._advise_branch(item_branch_name(item_type, name))
        return self._parse(text, dir_name, path)

    def get_work_item(self, name: str) -> WorkItem:
        path, text = self._read("get", name)
        return self._parse(text, name, path)

    def _scan(self, root: Path, flt: ListFilter | None) -> list[WorkItem]:
        flt = flt or ListFilter()
        try:
            names = self.store.list_directories(root)
        except OSError as exc:
            raise WorkItemError("list", str(root), exc) from exc

        items: list[WorkItem] = []
        for name in names:
            path = root / name / README_FILENAME
            if not self.store.file_exists(path):
                continue
            try:
                text = self.store.read_document(path)
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Skipping unreadable work item %s: %s", name, exc, extra={"op": "list", "item": name})
                continue
            item = self._parse(text, name, path)
            if flt.matches(item):
                items.append(item)
        return sorted(items, key=lambda item: item.name)

    def list_work_items(self, flt: ListFilter | None = None) -> list[WorkItem]:
        """Backlog items matching *flt*, sorted by name. Unreadable documents are skipped."""
        return self._scan(self.config.backlog_dir, flt)

    def list_completed_work_items(self, flt: ListFilter | None = None) -> list[WorkItem]:
        """Archived items matching *flt*, sorted by name."""
        return self._scan(self.config.completed_dir, flt)

    # -- Field updates -------------------------------------------------------

    def update_status(self, name: str, status: str) -> WorkItem:
        """Overwrite the status line. Does not touch the phase or run any gating."""
        if status not in VALID_STATUSES:
            raise ValidationError("status", status, "invalid status")
        return self._mutate("update_status", name, lambda text: codec.set_status(text, status))

    def update_progress(self, name: str, percent: int) -> WorkItem:
        if isinstance(percent, bool) or not 0 <= percent <= 100:
            raise ValidationError("progress", percent, "must be between 0 and 100")
        return self._mutate("update_progress", name, lambda text: codec.set_progress(text, percent))

    def assign_work_item(self, name: str, assignee: str) -> WorkItem:
        assignee = assignee.strip()
        if not assignee:
            raise ValidationError("assignee", assignee, "assignee cannot be empty")
        return self._mutate("assign", name, lambda text: codec.set_assignee(text, assignee))

    def set_phase(self, name: str, phase: str) -> WorkItem:
        """Administrative override of the phase line.

        Skips gating and leaves the status alone, so the two can disagree
        afterwards. The next advance follows the status.
        """
        if phase not in VALID_PHASES:
            raise ValidationError("phase", phase, "invalid phase")
        return self._mutate("set_phase", name, lambda text: codec.set_phase(text, phase))

    # -- Tasks ---------------------------------------------------------------

    def get_phase_tasks(self, name: str) -> list[Task]:
        return phase_tasks(self.get_work_item(name))

    def complete_task(self, name: str, task_index: int) -> WorkItem:
        """Check the *task_index*-th task (0-based) of the current phase.

        Progress is then recomputed from every task in the document.
        """
        path, text = self._read("complete_task", name)
        item = self._parse(text, name, path)
        position = document_task_index(item.tasks, item.phase, task_index)

        text = codec.complete_task(text, position)
        self._write("complete_task", name, path, text)
        logger.info(
            "Completed task %d of %s phase in %s",
            task_index,
            item.phase,
            name,
            extra={"op": "complete_task", "item": name},
        )

        self._advise_progress(name, path, text)
        return self.get_work_item(name)

    # -- Workflow ------------------------------------------------------------

    def advance_phase(self, name: str) -> PhaseTransition:
        """Move the item one step along the workflow.

        Raises PhaseError when a task of the current phase is still open (not
        checked for PROPOSED items) or the status has no successor.
        """
        path, text = self._read("advance_phase", name)
        item = self._parse(text, name, path)
        transition = plan_advance(item)

        text = codec.set_phase_and_status(text, transition.to_phase, transition.to_status)
        self._write("advance_phase", name, path, text)
        logger.info(
            "Advanced %s from %s to %s",
            name,
            transition.from_status,
            transition.to_status,
            extra={"op": "advance_phase", "item": name},
        )

        if transition.to_phase == EXECUTION_PHASE:
            self._advise_auto_assign(name, path, text)
        if item.type:
            self._advise_branch(phase_branch_name(item.type, item.name, transition.to_phase), gated=False)
        return transition

    def archive_work_item(self, name: str) -> Path:
        """Move the item's directory to the completed store and add a postmortem.

        Returns the archived directory.
        """
        src = self.item_dir(name)
        if not self.store.directory_exists(src):
            raise NotFoundError(name)
        dst = self.item_dir(name, completed=True)
        try:
            self.store.create_directory(self.config.completed_dir)
            self.store.move_directory(src, dst)
        except OSError as exc:
            raise WorkItemError("archive", name, exc) from exc
        logger.info("Archived %s to %s", name, dst, extra={"op": "archive", "item": name})

        self._advise_postmortem(name, dst)
        return dst

    def get_progress_metrics(self, name: str) -> WorkItemMetrics:
        return calculate_metrics(self.get_work_item(name), now=self._clock())

    # -- Advisory side effects ----------------------------------------------

    def _advise_branch(self, branch: str, *, gated: bool = True) -> bool:
        """Request *branch*. Gated requests only run when git integration is enabled."""
        return self.git.ensure_branch(branch, gated=gated)

    def _advise_progress(self, name: str, path: Path, text: str) -> bool:
        """Persist progress derived from task completion."""
        updated = codec.set_progress(text, codec.progress_from_tasks(text))
        if updated == text:
            return False
        try:
            self.store.write_document(path, updated)
        except OSError as exc:
            logger.warning(
                "Could not update progress for %s: %s",
                name,
                exc,
                extra={"op": "update_progress", "item": name, "error": str(exc)},
            )
            return False
        return True

    def _advise_auto_assign(self, name: str, path: Path, text: str) -> bool:
        """Hand an unassigned or human-held item to the current git user."""
        if not self.config.auto_assign_agent:
            return False
        current = codec.parse_document(text, name).assigned_to
        if current not in ("", HUMAN_ASSIGNEE):
            return False
        user = self.git.user_name()
        if not user:
            return False
        try:
            self.store.write_document(path, codec.set_assignee(text, user))
        except OSError as exc:
            logger.warning(
                "Could not auto-assign %s to %s: %s",
                name,
                user,
                exc,
                extra={"op": "assign", "item": name, "error": str(exc)},
            )
            return False
        logger.info("Auto-assigned %s to %s", name, user, extra={"op": "assign", "item": name})
        return True

    def _advise_postmortem(self, name: str, item_dir: Path) -> bool:
        try:
            self.store.write_document(item_dir / POSTMORTEM_FILENAME, render_postmortem(name, self._clock()))
        except OSError as exc:
            logger.warning(
                "Could not write postmortem for %s: %s",
                name,
                exc,
                extra={"op": "archive", "item": name, "error": str(exc)},
            )
            return False
        return True

