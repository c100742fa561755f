"""Activity log helpers - build entries and aggregate bulk status changes."""

import re
from datetime import datetime
from typing import Iterable, Optional

from src.models.activity import (
    ActivityEntry,
    CreationEntry,
    NoteEntry,
    ProjectLinkEntry,
    PropertyChangeEntry,
    ReminderEntry,
    StatusChangeEntry,
)
from src.models.enums import LinkAction, Status
from src.models.task import Task

NO_PROJECT = "None"
TITLE_PROPERTY = "Title"
PROJECT_PROPERTY = "Project"

_TAG_RE = re.compile(r"<[^>]*>")


def is_blank_rich_text(text: Optional[str]) -> bool:
    """True when the note has no visible text once markup is removed."""
    if text is None:
        return True
    return not _TAG_RE.sub("", text).strip()


def append(log: list[ActivityEntry], *entries: ActivityEntry) -> list[ActivityEntry]:
    """Return a new log with ``entries`` appended; the input list is untouched."""
    return [*log, *entries]


def without(log: list[ActivityEntry], activity_id: str) -> list[ActivityEntry]:
    return [entry for entry in log if entry.activity_id != activity_id]


def creation(user: str, at: datetime, note: Optional[str] = None) -> CreationEntry:
    return CreationEntry(user=user, timestamp=at, note=note)


def status_change(
    user: str,
    at: datetime,
    from_status: Status,
    to_status: Status,
    task_title: Optional[str] = None,
) -> StatusChangeEntry:
    return StatusChangeEntry(
        user=user,
        timestamp=at,
        from_status=from_status,
        to_status=to_status,
        task_title=task_title,
    )


def property_change(user: str, at: datetime, prop: str, old_value: str, new_value: str) -> PropertyChangeEntry:
    return PropertyChangeEntry(
        user=user,
        timestamp=at,
        property=prop,
        old_value=old_value,
        new_value=new_value,
    )


def note(user: str, at: datetime, body: str, ai_generated: bool = False) -> NoteEntry:
    return NoteEntry(user=user, timestamp=at, note=body, ai_generated=ai_generated)


def reminder(user: str, at: datetime, notify_at: datetime, message: Optional[str] = None) -> ReminderEntry:
    return ReminderEntry(user=user, timestamp=at, notify_at=notify_at, message=message)


def project_link(user: str, at: datetime, action: LinkAction, task_title: str) -> ProjectLinkEntry:
    return ProjectLinkEntry(user=user, timestamp=at, action=action, task_title=task_title)


def aggregate_bulk_status_changes(
    tasks: Iterable[Task],
    to_status: Status,
    user: str,
    at: datetime,
) -> dict[str, list[StatusChangeEntry]]:
    """
    Build the project-side entries for a bulk status change.

    ``tasks`` are the tasks as they were before the change. Tasks without a
    project, or already in ``to_status``, are ignored. One entry is produced
    per (project, previous status) pair, listing the titles that shared it.
    Projects and statuses keep the order in which they first appear.
    """
    groups: dict[str, dict[Status, list[str]]] = {}
    for task in tasks:
        if task.project_id is None or task.status is to_status:
            continue
        by_status = groups.setdefault(task.project_id, {})
        by_status.setdefault(task.status, []).append(task.title)

    entries: dict[str, list[StatusChangeEntry]] = {}
    for project_id, by_status in groups.items():
        entries[project_id] = [
            StatusChangeEntry(
                user=user,
                timestamp=at,
                from_status=from_status,
                to_status=to_status,
                count=len(titles),
                affected_tasks=titles,
            )
            for from_status, titles in by_status.items()
        ]
    return entries
