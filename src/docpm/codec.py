"""Markdown metadata codec.

A work item's README.md is the single source of truth. Metadata lives in a few
tagged lines (``## Status: X``, ``## Phase: x``, ``## Progress: N%``,
``## Assigned To: who``) and tasks are checkbox lines grouped under
``## <Name> Phase`` section headings.

Parsing is forgiving: missing or malformed metadata falls back to defaults and
never raises. Mutations are pure ``str -> str`` functions that rewrite only
the matched lines, so human-written prose elsewhere in the document is left
byte-for-byte intact. All label matching is case-insensitive.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import datetime

from docpm.models import (
    DEFAULT_PHASE,
    VALID_PHASES,
    Task,
    WorkItem,
    item_type_from_name,
)

# ---------------------------------------------------------------------------
# Line patterns
# ---------------------------------------------------------------------------
# [ \t] instead of \s keeps every pattern on a single line.

_TITLE_RE = re.compile(r"^#[ \t]+(?:Feature|Bug|Experiment):[ \t]*(.+?)\s*$", re.IGNORECASE)
_STATUS_RE = re.compile(r"(##[ \t]*Status:[ \t]*)(\w+)", re.IGNORECASE)
_PHASE_RE = re.compile(r"(##[ \t]*Phase:[ \t]*)(\w+)", re.IGNORECASE)
_PROGRESS_RE = re.compile(r"(##[ \t]*Progress:[ \t]*)(\d+)%", re.IGNORECASE)
_ASSIGNEE_RE = re.compile(r"(##[ \t]*Assigned[ \t]+To:[ \t]*)([^\r\n]*)", re.IGNORECASE)
_PHASE_SECTION_RE = re.compile(r"##[ \t]+(\w+)[ \t]+Phase\b", re.IGNORECASE)
_TASK_RE = re.compile(r"^([ \t]*-[ \t]*\[)([ xX])(\])(.*)$")
_HEADING_RE = re.compile(r"^#")


def _eol(line: str) -> str:
    if line.endswith("\r\n"):
        return "\r\n"
    if line.endswith(("\n", "\r")):
        return line[-1]
    return ""


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_document(
    text: str,
    name: str,
    *,
    path: str = "",
    modified_at: datetime | None = None,
) -> WorkItem:
    """Build a WorkItem from README text.

    Later metadata lines win over earlier ones. Each task is attributed to the
    most recent recognized ``## <Name> Phase`` heading (discovery before any
    heading) and inherits the assignee parsed so far.
    """
    item = WorkItem(name=name, path=path, type=item_type_from_name(name))
    item.created_at = modified_at
    item.updated_at = modified_at
    section = DEFAULT_PHASE

    for line in text.splitlines():
        if m := _TITLE_RE.match(line):
            item.title = m.group(1).strip()

        if m := _STATUS_RE.search(line):
            item.status = m.group(2).upper()

        if m := _PHASE_RE.search(line):
            item.phase = m.group(2).lower()

        if m := _PROGRESS_RE.search(line):
            item.progress = int(m.group(2))

        if m := _ASSIGNEE_RE.search(line):
            item.assigned_to = m.group(2).strip()

        if m := _PHASE_SECTION_RE.search(line):
            heading = m.group(1).lower()
            if heading in VALID_PHASES:
                section = heading

        if m := _TASK_RE.match(line):
            item.tasks.append(
                Task(
                    description=m.group(4).strip(),
                    completed=m.group(2) in "xX",
                    phase=section,
                    assigned_to=item.assigned_to,
                )
            )

    return item


def count_tasks(text: str) -> tuple[int, int]:
    """Return ``(total, completed)`` checkbox counts across the whole document."""
    total = completed = 0
    for line in text.splitlines():
        m = _TASK_RE.match(line)
        if m:
            total += 1
            if m.group(2) in "xX":
                completed += 1
    return total, completed


def progress_from_tasks(text: str) -> int:
    """Overall completion percentage, truncated toward zero. 0 when there are no tasks."""
    total, completed = count_tasks(text)
    if total == 0:
        return 0
    return (completed * 100) // total


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


def _replace_value(pattern: re.Pattern[str], text: str, value: str) -> tuple[str, int]:
    """Replace the value group on every line matching *pattern*, keeping the label."""

    def _sub(m: re.Match[str]) -> str:
        label = m.group(1)
        if not label.endswith((" ", "\t")):
            label += " "
        return label + value

    return pattern.subn(_sub, text)


def _insert_after(text: str, anchor: Callable[[str], bool], new_line: str) -> str:
    """Insert a blank line and *new_line* after the first line satisfying *anchor*.

    Returns *text* unchanged when no line qualifies.
    """
    lines = text.splitlines(keepends=True)
    for i, line in enumerate(lines):
        body = line.rstrip("\r\n")
        if not anchor(body):
            continue
        eol = _eol(line)
        if not eol:
            eol = "\n"
            lines[i] = body + eol
        lines[i + 1 : i + 1] = [eol, new_line + eol]
        return "".join(lines)
    return text


def _is_heading(line: str) -> bool:
    return bool(_HEADING_RE.match(line))


def set_status(text: str, status: str) -> str:
    """Rewrite the status token, or add a status line after the first heading."""
    updated, count = _replace_value(_STATUS_RE, text, status)
    if count:
        return updated
    return _insert_after(text, _is_heading, f"## Status: {status}")


def set_progress(text: str, percent: int) -> str:
    """Rewrite the progress percentage, or add a progress line after the status line."""
    updated, count = _PROGRESS_RE.subn(lambda m: f"{m.group(1)}{percent}%", text)
    if count:
        return updated
    return _insert_after(text, lambda line: bool(_STATUS_RE.search(line)), f"## Progress: {percent}%")


def set_assignee(text: str, assignee: str) -> str:
    """Rewrite the assignee, or add an assignee line after the phase line."""
    updated, count = _replace_value(_ASSIGNEE_RE, text, assignee)
    if count:
        return updated
    return _insert_after(text, lambda line: bool(_PHASE_RE.search(line)), f"## Assigned To: {assignee}")


def set_phase(text: str, phase: str) -> str:
    """Rewrite the phase token, or add a phase line after the first heading."""
    updated, count = _replace_value(_PHASE_RE, text, phase)
    if count:
        return updated
    return _insert_after(text, _is_heading, f"## Phase: {phase}")


def set_phase_and_status(text: str, phase: str, status: str) -> str:
    """Apply the phase and status rewrites together so only one write is needed.

    A missing status line is added after the phase line rather than after the
    first heading.
    """
    text = set_phase(text, phase)
    updated, count = _replace_value(_STATUS_RE, text, status)
    if count:
        return updated
    return _insert_after(text, lambda line: bool(_PHASE_RE.search(line)), f"## Status: {status}")


def complete_task(text: str, index: int) -> str:
    """Check the *index*-th checkbox in document order (0-based).

    Checked boxes count toward the index; completing one again is a no-op.
    An out-of-range index returns *text* unchanged.
    """
    if index < 0:
        return text
    lines = text.splitlines(keepends=True)
    seen = 0
    for i, line in enumerate(lines):
        m = _TASK_RE.match(line.rstrip("\r\n"))
        if not m:
            continue
        if seen == index:
            lines[i] = m.group(1) + "x" + line[m.end(2) :]
            return "".join(lines)
        seen += 1
    return text
