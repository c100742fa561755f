"""Custom assertion helpers."""

from typing import Iterable

from src.models.activity import StatusChangeEntry
from src.models.notification import Notification


def assert_sorted_by_notify_at(notifications: Iterable[Notification]) -> None:
    """Assert non-decreasing notify_at order."""
    instants = [n.notify_at for n in notifications]
    assert instants == sorted(instants)


def assert_ids(notifications: Iterable[Notification], expected: Iterable[str]) -> None:
    """Assert the exact set of notification IDs."""
    assert {n.notification_id for n in notifications} == set(expected)


def assert_valid_aggregate(entry: StatusChangeEntry) -> None:
    """Assert an aggregated status entry is internally consistent."""
    assert entry.type == "status_change"
    assert entry.count is not None
    assert entry.affected_tasks is not None
    assert entry.count == len(entry.affected_tasks)


def entry_types(log) -> list[str]:
    return [entry.type for entry in log]
