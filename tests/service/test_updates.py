"""Tests for the single-field update operations."""

from __future__ import annotations

import pytest

from docpm.config import Config
from docpm.errors import NotFoundError, ValidationError, WorkItemError
from docpm.service import WorkItemService
from tests._fakes import FlakyStore


class TestUpdateStatus:
    def test_update_status(self, service: WorkItemService, login: str) -> None:
        item = service.update_status(login, "IN_PROGRESS_EXECUTION")
        assert item.status == "IN_PROGRESS_EXECUTION"
        assert service.get_work_item(login).status == "IN_PROGRESS_EXECUTION"

    def test_leaves_phase_alone(self, service: WorkItemService, login: str) -> None:
        assert service.update_status(login, "IN_PROGRESS_REVIEW").phase == "discovery"

    @pytest.mark.parametrize("status", ["", "DONE", "in_progress_planning", "UNKNOWN"])
    def test_invalid_status_rejected(self, service: WorkItemService, login: str, status: str) -> None:
        with pytest.raises(ValidationError, match="invalid status"):
            service.update_status(login, status)
        assert service.get_work_item(login).status == "PROPOSED"

    def test_missing_item(self, service: WorkItemService) -> None:
        with pytest.raises(NotFoundError):
            service.update_status("feature-ghost", "COMPLETED")

    def test_parent_directory_name_is_missing(self, service: WorkItemService, login: str) -> None:
        with pytest.raises(NotFoundError):
            service.update_status("..", "COMPLETED")


class TestUpdateProgress:
    @pytest.mark.parametrize("percent", [0, 42, 100])
    def test_accepts_bounds(self, service: WorkItemService, login: str, percent: int) -> None:
        assert service.update_progress(login, percent).progress == percent

    @pytest.mark.parametrize("percent", [-1, 101, 1000])
    def test_out_of_range_rejected(self, service: WorkItemService, login: str, percent: int) -> None:
        with pytest.raises(ValidationError) as exc_info:
            service.update_progress(login, percent)
        assert exc_info.value.field == "progress"
        assert "between 0 and 100" in str(exc_info.value)

    def test_bool_rejected(self, service: WorkItemService, login: str) -> None:
        with pytest.raises(ValidationError):
            service.update_progress(login, True)


class TestAssign:
    def test_assign(self, service: WorkItemService, login: str) -> None:
        assert service.assign_work_item(login, "alice").assigned_to == "alice"

    def test_assignee_is_stripped(self, service: WorkItemService, login: str) -> None:
        assert service.assign_work_item(login, "  bob  ").assigned_to == "bob"

    def test_tasks_inherit_new_assignee(self, service: WorkItemService, login: str) -> None:
        item = service.assign_work_item(login, "alice")
        assert {t.assigned_to for t in item.tasks} == {"alice"}

    @pytest.mark.parametrize("assignee", ["", "   "])
    def test_empty_assignee_rejected(self, service: WorkItemService, login: str, assignee: str) -> None:
        with pytest.raises(ValidationError, match="assignee cannot be empty"):
            service.assign_work_item(login, assignee)


class TestSetPhase:
    def test_override_skips_gating(self, service: WorkItemService, login: str) -> None:
        item = service.set_phase(login, "cleanup")
        assert item.phase == "cleanup"
        assert item.status == "PROPOSED"

    @pytest.mark.parametrize("phase", ["", "review", "Planning"])
    def test_invalid_phase_rejected(self, service: WorkItemService, login: str, phase: str) -> None:
        with pytest.raises(ValidationError, match="invalid phase"):
            service.set_phase(login, phase)


class TestDocumentPreservation:
    def test_prose_survives_updates(self, service: WorkItemService, login: str) -> None:
        path = service.readme_path(login)
        path.write_text(path.read_text() + "\nHand-written notes: keep `this` *exactly*.\n")

        service.update_status(login, "IN_PROGRESS_PLANNING")
        service.update_progress(login, 30)
        service.assign_work_item(login, "carol")
        service.set_phase(login, "planning")

        text = path.read_text()
        assert "Hand-written notes: keep `this` *exactly*." in text
        assert "## Status: IN_PROGRESS_PLANNING" in text
        assert "## Progress: 30%" in text
        assert "## Assigned To: carol" in text
        assert "## Phase: planning" in text
        assert "## Discovery Phase" in text

    def test_only_target_line_changes(self, service: WorkItemService, login: str) -> None:
        path = service.readme_path(login)
        before = path.read_text().splitlines()
        service.update_progress(login, 55)
        after = path.read_text().splitlines()
        assert [(a, b) for a, b in zip(before, after, strict=True) if a != b] == [("## Progress: 0%", "## Progress: 55%")]


class TestStorageFailure:
    def test_write_failure_wrapped(self, service: WorkItemService, login: str, config: Config) -> None:
        flaky = WorkItemService(config, store=FlakyStore("README.md"))
        with pytest.raises(WorkItemError) as exc_info:
            flaky.update_status(login, "COMPLETED")
        err = exc_info.value
        assert err.op == "update_status"
        assert err.name == login
        assert isinstance(err.__cause__, OSError)
        assert service.get_work_item(login).status == "PROPOSED"

    def test_create_failure_wrapped(self, config: Config) -> None:
        flaky = WorkItemService(config, store=FlakyStore("README.md"))
        with pytest.raises(WorkItemError) as exc_info:
            flaky.create_work_item("bug", "crash")
        assert exc_info.value.op == "create"
