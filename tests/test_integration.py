"""End-to-end session scenarios across workspace, derivation and toasts."""

import pytest
from datetime import datetime, time, timedelta

from freezegun import freeze_time

from src.models.enums import HabitType, Status
from src.models.notification import NotificationSettings
from src.services.kv_store import InMemoryKeyValueStore
from src.services.notification_engine import NotificationEngine
from src.services.workspace import Workspace
from tests.utils.factories import create_habit


@pytest.mark.integration
@freeze_time("2024-12-09 12:00:00")
def test_day_in_the_life():
    """Test a session from login through snooze, completion and clearing."""
    workspace = Workspace(actor="Dana")
    project = workspace.create_project("Website relaunch")
    late = workspace.create_task(
        "Fix footer", due_date=datetime(2024, 12, 8, 17, 0), project_id=project.project_id
    )
    soon = workspace.create_task("Write copy", due_date=datetime(2024, 12, 10, 9, 0))
    workspace.add_habit(create_habit(habit_id="h1", title="Inbox zero", reminder_time=time(9, 0)))
    workspace.add_habit(create_habit(
        habit_id="h2", habit_type=HabitType.AUTO_DERIVED, reminder_time=time(10, 0)
    ))

    engine = NotificationEngine(workspace, store=InMemoryKeyValueStore())

    assert engine.tick() == []
    ids = [n.notification_id for n in engine.notifications]
    assert ids == [
        f"{late.task_id}-overdue",
        "habit-h1-2024-12-09",
        "habit-h2-2024-12-09",
        f"{soon.task_id}-upcoming-1",
    ]

    # finishing a task satisfies the auto-derived habit
    workspace.change_status(late.task_id, Status.DONE)
    engine.tick()
    ids = [n.notification_id for n in engine.notifications]
    assert ids == ["habit-h1-2024-12-09", f"{soon.task_id}-upcoming-1"]

    engine.complete_habit("habit-h1-2024-12-09")
    engine.snooze(f"{soon.task_id}-upcoming-1")
    assert engine.badge_count == 0

    project_log = workspace.get_project(project.project_id).activity
    assert [e.type for e in project_log] == ["creation", "project_link", "status_change"]
    assert project_log[-1].user == "Dana"

    engine.clear_all()
    assert engine.tick(datetime(2024, 12, 9, 14, 30)) != []
    reminder = engine.notifications[0]
    assert reminder.message == f"Reminder: Snoozed: {soon.title}"


@pytest.mark.integration
def test_bulk_complete_then_new_session():
    """Test bulk completion aggregates on the project and a new session starts clean."""
    store = InMemoryKeyValueStore()
    now = datetime(2024, 12, 9, 12, 0)
    workspace = Workspace(clock=lambda: now)
    project = workspace.create_project("Ops")
    ids = [
        workspace.create_task(f"Task {i}", due_date=now - timedelta(days=i + 1), project_id=project.project_id).task_id
        for i in range(4)
    ]
    workspace.change_status(ids[0], Status.IN_PROGRESS)

    engine = NotificationEngine(workspace, store=store)
    engine.tick()
    assert len(engine.notifications) == 4
    engine.mark_read(f"{ids[3]}-overdue")

    workspace.bulk_change_status(ids, Status.DONE)
    engine.tick()
    assert engine.notifications == []

    history = workspace.status_history(project.project_id)
    assert [e.count for e in history] == [None, 1, 3]
    engine.teardown()

    settings = NotificationSettings(remind_days_before=0)
    fresh = NotificationEngine(workspace, settings=settings, store=store)
    assert fresh.acknowledgments.is_read(f"{ids[3]}-overdue")
    assert fresh.tick() == []
