"""Tests for archiving work items to the completed store."""

from __future__ import annotations

import logging

import pytest

from docpm.config import Config
from docpm.errors import NotFoundError, WorkItemError
from docpm.service import WorkItemService
from tests._fakes import FlakyStore


class TestArchive:
    def test_moves_directory(self, service: WorkItemService, login: str, config: Config) -> None:
        dst = service.archive_work_item(login)
        assert dst == config.completed_dir / login
        assert (dst / "README.md").is_file()
        assert not (config.backlog_dir / login).exists()

    def test_writes_postmortem(self, service: WorkItemService, login: str) -> None:
        dst = service.archive_work_item(login)
        postmortem = (dst / "POSTMORTEM.md").read_text()
        assert postmortem.startswith("# Postmortem: feature-login\n")
        assert "## Completion Date\n2026-03-01\n" in postmortem

    def test_document_unchanged_by_move(self, service: WorkItemService, login: str) -> None:
        service.update_status(login, "COMPLETED")
        before = service.readme_path(login).read_text()
        dst = service.archive_work_item(login)
        assert (dst / "README.md").read_text() == before

    def test_removed_from_backlog_listing(self, service: WorkItemService, login: str) -> None:
        service.archive_work_item(login)
        assert service.list_work_items() == []
        with pytest.raises(NotFoundError):
            service.get_work_item(login)

    def test_archive_does_not_require_completed_status(self, service: WorkItemService, login: str) -> None:
        dst = service.archive_work_item(login)
        assert dst.is_dir()
        [archived] = service.list_completed_work_items()
        assert archived.status == "PROPOSED"

    def test_missing_item(self, service: WorkItemService) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            service.archive_work_item("feature-ghost")
        assert exc_info.value.name == "feature-ghost"

    @pytest.mark.parametrize("name", ["", "..", "../backlog/feature-login"])
    def test_invalid_name_is_missing(self, service: WorkItemService, login: str, name: str) -> None:
        with pytest.raises(NotFoundError):
            service.archive_work_item(name)
        assert service.get_work_item(login).name == login

    def test_destination_collision(self, service: WorkItemService, login: str, config: Config) -> None:
        (config.completed_dir / login).mkdir(parents=True)
        with pytest.raises(WorkItemError) as exc_info:
            service.archive_work_item(login)
        assert exc_info.value.op == "archive"
        assert (config.backlog_dir / login / "README.md").is_file()

    def test_postmortem_failure_still_archives(
        self,
        service: WorkItemService,
        login: str,
        config: Config,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        flaky = WorkItemService(config, store=FlakyStore("POSTMORTEM.md"))
        with caplog.at_level(logging.WARNING, logger="docpm"):
            dst = flaky.archive_work_item(login)
        assert (dst / "README.md").is_file()
        assert not (dst / "POSTMORTEM.md").exists()
        assert f"Could not write postmortem for {login}" in caplog.text
