"""Tests for the surgical markdown rewrites."""

from __future__ import annotations

from docpm.codec import (
    complete_task,
    parse_document,
    set_assignee,
    set_phase,
    set_phase_and_status,
    set_progress,
    set_status,
)


def _changed_lines(before: str, after: str) -> list[tuple[str, str]]:
    old, new = before.splitlines(), after.splitlines()
    assert len(old) == len(new), "rewrite must not add or drop lines"
    return [(a, b) for a, b in zip(old, new, strict=True) if a != b]


class TestReplaceExisting:
    def test_set_status_touches_only_status_line(self, sample_document: str) -> None:
        updated = set_status(sample_document, "IN_PROGRESS_EXECUTION")
        assert _changed_lines(sample_document, updated) == [
            ("## Status: IN_PROGRESS_PLANNING", "## Status: IN_PROGRESS_EXECUTION")
        ]

    def test_set_progress_touches_only_progress_line(self, sample_document: str) -> None:
        updated = set_progress(sample_document, 80)
        assert _changed_lines(sample_document, updated) == [("## Progress: 25%", "## Progress: 80%")]

    def test_set_assignee_replaces_whole_value(self, sample_document: str) -> None:
        updated = set_assignee(sample_document, "the agent")
        assert _changed_lines(sample_document, updated) == [("## Assigned To: alice", "## Assigned To: the agent")]

    def test_set_phase_touches_only_phase_line(self, sample_document: str) -> None:
        updated = set_phase(sample_document, "execution")
        assert _changed_lines(sample_document, updated) == [("## Phase: planning", "## Phase: execution")]
        # section headings are not phase lines
        assert "## Planning Phase" in updated

    def test_set_phase_and_status_together(self, sample_document: str) -> None:
        updated = set_phase_and_status(sample_document, "execution", "IN_PROGRESS_EXECUTION")
        item = parse_document(updated, "feature-sample")
        assert (item.phase, item.status) == ("execution", "IN_PROGRESS_EXECUTION")
        assert len(_changed_lines(sample_document, updated)) == 2

    def test_label_match_is_case_insensitive(self) -> None:
        text = "# Bug: x\n## status: proposed\n"
        assert set_status(text, "COMPLETED") == "# Bug: x\n## status: COMPLETED\n"

    def test_rewrites_are_idempotent(self, sample_document: str) -> None:
        once = set_progress(set_status(sample_document, "IN_PROGRESS_REVIEW"), 90)
        twice = set_progress(set_status(once, "IN_PROGRESS_REVIEW"), 90)
        assert once == twice

    def test_assignee_with_backslash_is_literal(self, sample_document: str) -> None:
        updated = set_assignee(sample_document, r"DOMAIN\user")
        assert parse_document(updated, "feature-sample").assigned_to == r"DOMAIN\user"

    def test_crlf_line_endings_preserved(self) -> None:
        text = "# Bug: x\r\n## Status: PROPOSED\r\nbody\r\n"
        assert set_status(text, "COMPLETED") == "# Bug: x\r\n## Status: COMPLETED\r\nbody\r\n"


class TestInsertMissing:
    def test_status_inserted_after_first_heading(self) -> None:
        text = "# Feature: x\n\nSome prose\n"
        updated = set_status(text, "PROPOSED")
        assert updated == "# Feature: x\n\n## Status: PROPOSED\n\nSome prose\n"
        assert parse_document(updated, "feature-x").status == "PROPOSED"

    def test_progress_inserted_after_status_line(self) -> None:
        text = "# Bug: y\n## Status: PROPOSED\nbody\n"
        assert set_progress(text, 40) == "# Bug: y\n## Status: PROPOSED\n\n## Progress: 40%\nbody\n"

    def test_assignee_inserted_after_phase_line(self) -> None:
        text = "# Bug: y\n## Phase: planning\nbody\n"
        assert set_assignee(text, "bob") == "# Bug: y\n## Phase: planning\n\n## Assigned To: bob\nbody\n"

    def test_phase_inserted_after_first_heading(self) -> None:
        text = "# Experiment: z\nbody"
        assert set_phase(text, "cleanup") == "# Experiment: z\n\n## Phase: cleanup\nbody"

    def test_status_inserted_after_phase_when_both_missing(self) -> None:
        updated = set_phase_and_status("# Bug: y\nbody\n", "planning", "IN_PROGRESS_PLANNING")
        lines = updated.splitlines()
        assert lines.index("## Status: IN_PROGRESS_PLANNING") > lines.index("## Phase: planning")
        item = parse_document(updated, "bug-y")
        assert (item.phase, item.status) == ("planning", "IN_PROGRESS_PLANNING")

    def test_no_anchor_leaves_text_unchanged(self) -> None:
        text = "just prose, no headings\n"
        assert set_status(text, "PROPOSED") == text
        assert set_progress(text, 10) == text
        assert set_assignee(text, "bob") == text

    def test_empty_assignee_line_is_replaced_not_duplicated(self) -> None:
        text = "# Bug: y\n## Phase: discovery\n## Assigned To:\n"
        updated = set_assignee(text, "carol")
        assert updated == "# Bug: y\n## Phase: discovery\n## Assigned To: carol\n"


class TestCompleteTask:
    def test_flips_nth_checkbox_in_document_order(self, sample_document: str) -> None:
        updated = complete_task(sample_document, 3)
        assert _changed_lines(sample_document, updated) == [("- [ ] Write the plan", "- [x] Write the plan")]

    def test_checked_boxes_count_toward_index(self, sample_document: str) -> None:
        updated = complete_task(sample_document, 4)
        assert "- [x] Build it" in updated

    def test_already_checked_is_noop(self, sample_document: str) -> None:
        assert complete_task(sample_document, 0) == sample_document

    def test_out_of_range_is_noop(self, sample_document: str) -> None:
        assert complete_task(sample_document, 99) == sample_document
        assert complete_task(sample_document, -1) == sample_document

    def test_preserves_indentation(self) -> None:
        text = "    - [ ] nested\n"
        assert complete_task(text, 0) == "    - [x] nested\n"
