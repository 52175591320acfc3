"""Shared pytest fixtures for docpm tests."""

from __future__ import annotations

import logging
from collections.abc import Generator
from datetime import UTC, datetime
from pathlib import Path

import pytest
from click.testing import CliRunner

from docpm.config import Config
from docpm.logging import LOGGER_NAME
from docpm.service import WorkItemService
from docpm.storage import LocalDocumentStore
from tests._fakes import RecordingGitClient

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

SAMPLE_DOCUMENT = """\
# Feature: Sample Widget

## Status: IN_PROGRESS_PLANNING
## Phase: planning
## Progress: 25%
## Assigned To: alice

Free-form prose that must survive every rewrite.

## Discovery Phase
- [x] Talk to users
- [x] Read the old code

## Planning Phase
- [x] Sketch the design
- [ ] Write the plan

## Execution Phase
- [ ] Build it

## Notes
Trailing notes.
"""


@pytest.fixture(autouse=True)
def _reset_docpm_logger() -> Generator[None, None, None]:
    """Drop handlers added by setup_logging/setup_console_logging between tests."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Config rooted at tmp_path with git branching enabled."""
    return Config.at(tmp_path, enable_git=True)


@pytest.fixture
def store() -> LocalDocumentStore:
    return LocalDocumentStore()


@pytest.fixture
def git() -> RecordingGitClient:
    return RecordingGitClient()


@pytest.fixture
def service(config: Config, store: LocalDocumentStore, git: RecordingGitClient) -> WorkItemService:
    return WorkItemService(config, store=store, git=git, clock=lambda: FIXED_NOW)


@pytest.fixture
def login(service: WorkItemService) -> str:
    """Name of a freshly created feature work item."""
    return service.create_work_item("feature", "login").name


@pytest.fixture
def sample_document() -> str:
    return SAMPLE_DOCUMENT


@pytest.fixture
def cli_runner() -> CliRunner:
    """Click CLI test runner."""
    return CliRunner()
