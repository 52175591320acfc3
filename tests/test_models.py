"""Tests for the work item model and its vocabulary helpers."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from docpm.models import (
    ACTIVE_STATUSES,
    CreateRequest,
    ListFilter,
    Task,
    WorkItem,
    item_type_from_name,
    normalize_status,
    phase_index,
)


class TestVocabulary:
    def test_active_statuses_exclude_endpoints(self) -> None:
        assert "PROPOSED" not in ACTIVE_STATUSES
        assert "COMPLETED" not in ACTIVE_STATUSES
        assert len(ACTIVE_STATUSES) == 5

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("review", "IN_PROGRESS_REVIEW"),
            ("Planning", "IN_PROGRESS_PLANNING"),
            ("in_progress_cleanup", "IN_PROGRESS_CLEANUP"),
            (" completed ", "COMPLETED"),
            ("bogus", "BOGUS"),
        ],
    )
    def test_normalize_status(self, value: str, expected: str) -> None:
        assert normalize_status(value) == expected

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("feature-login", "feature"), ("bug-a-b", "bug"), ("experiment-x", "experiment"), ("chore-x", ""), ("bug", "")],
    )
    def test_item_type_from_name(self, name: str, expected: str) -> None:
        assert item_type_from_name(name) == expected

    def test_phase_index(self) -> None:
        assert [phase_index(p) for p in ("discovery", "cleanup", "review")] == [0, 3, -1]


class TestWorkItem:
    def test_defaults(self) -> None:
        item = WorkItem(name="feature-x")
        assert (item.status, item.phase, item.progress) == ("UNKNOWN", "discovery", 0)
        assert item.tasks == []

    def test_tasks_for_phase(self) -> None:
        item = WorkItem(name="bug-x", tasks=[Task("a"), Task("b", phase="planning")], phase="planning")
        assert [t.description for t in item.current_phase_tasks] == ["b"]
        assert [t.description for t in item.tasks_for_phase("discovery")] == ["a"]

    def test_to_dict(self) -> None:
        ts = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
        item = WorkItem(name="bug-x", type="bug", created_at=ts, tasks=[Task("a", completed=True)])
        data = item.to_dict()
        assert data["created_at"] == "2026-03-01T12:00:00+00:00"
        assert data["updated_at"] is None
        assert data["tasks"] == [{"description": "a", "completed": True, "phase": "discovery", "assigned_to": ""}]


class TestRequests:
    def test_create_request_dir_name(self) -> None:
        assert CreateRequest(type="experiment", name="cache").dir_name == "experiment-cache"

    def test_empty_filter_matches_everything(self) -> None:
        assert ListFilter().matches(WorkItem(name="bug-x"))

    def test_filter_fields_combine(self) -> None:
        item = WorkItem(name="bug-x", type="bug", status="PROPOSED")
        assert ListFilter(status="PROPOSED", type="bug").matches(item)
        assert not ListFilter(status="PROPOSED", type="feature").matches(item)
        assert not ListFilter(status="COMPLETED").matches(item)
