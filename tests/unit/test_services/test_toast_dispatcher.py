"""Tests for the toast dispatcher."""

import asyncio
import pytest
from datetime import datetime

from src.models.category import Category
from src.models.enums import NotificationKind
from src.models.notification import Notification
from src.services.acknowledgments import AcknowledgmentStore
from src.services.toast_dispatcher import ToastDispatcher
from tests.utils.factories import create_habit, create_task

AT = datetime(2024, 12, 9, 12, 0)
WORK = Category(category_id="cat-work", name="Work")


def make_notification(notification_id: str, source_id: str, kind=NotificationKind.OVERDUE) -> Notification:
    return Notification(
        notification_id=notification_id,
        kind=kind,
        source_id=source_id,
        title="Some task",
        message="Overdue since 2024-12-08.",
        notify_at=AT,
    )


@pytest.fixture
def dispatcher():
    return ToastDispatcher(dismiss_after_seconds=60)


@pytest.mark.unit
def test_first_dispatch_suppresses_toasts(dispatcher, acknowledgments):
    """Test the first derivation of a session produces no toasts."""
    tasks = [create_task(task_id=f"t{i}") for i in range(5)]
    candidates = [make_notification(f"t{i}-overdue", f"t{i}") for i in range(5)]

    toasts = dispatcher.dispatch(candidates, acknowledgments, tasks=tasks, categories=[WORK])

    assert toasts == []
    assert dispatcher.pending == {}
    assert [n.notification_id for n in dispatcher.held] == [n.notification_id for n in candidates]
    assert acknowledgments.first_load is False


@pytest.mark.unit
def test_new_unread_notification_toasted(dispatcher, acknowledgments):
    """Test only notifications absent from the previous list become toasts."""
    task1 = create_task(task_id="t1")
    task2 = create_task(task_id="t2")
    first = make_notification("t1-overdue", "t1")
    second = make_notification("t2-overdue", "t2")

    dispatcher.dispatch([first], acknowledgments, tasks=[task1, task2], categories=[WORK])
    toasts = dispatcher.dispatch([first, second], acknowledgments, tasks=[task1, task2], categories=[WORK])

    assert [t.key for t in toasts] == ["t2-overdue"]
    assert toasts[0].task.task_id == "t2"
    assert toasts[0].category == WORK
    assert set(dispatcher.pending) == {"t2-overdue"}


@pytest.mark.unit
def test_read_notification_not_toasted(dispatcher, acknowledgments):
    task = create_task(task_id="t1")
    acknowledgments.complete_first_load()
    acknowledgments.mark_read("t1-overdue")

    toasts = dispatcher.dispatch([make_notification("t1-overdue", "t1")], acknowledgments, tasks=[task], categories=[WORK])

    assert toasts == []


@pytest.mark.unit
def test_unresolvable_source_dropped(dispatcher, acknowledgments):
    """Test a notification whose task is gone is silently dropped from the toast path."""
    acknowledgments.complete_first_load()
    orphan = create_task(task_id="t2", category_id="cat-missing")

    toasts = dispatcher.dispatch(
        [make_notification("t1-overdue", "t1"), make_notification("t2-overdue", "t2")],
        acknowledgments,
        tasks=[orphan],
        categories=[WORK],
    )

    assert toasts == []
    assert [n.notification_id for n in dispatcher.held] == ["t1-overdue", "t2-overdue"]


@pytest.mark.unit
def test_task_without_category_resolves(dispatcher, acknowledgments):
    acknowledgments.complete_first_load()
    task = create_task(task_id="t1", category_id=None)

    toasts = dispatcher.dispatch([make_notification("t1-overdue", "t1")], acknowledgments, tasks=[task])

    assert len(toasts) == 1
    assert toasts[0].category is None


@pytest.mark.unit
def test_habit_notification_toasted(dispatcher, acknowledgments):
    """Test habit notifications resolve to the habit descriptor."""
    acknowledgments.complete_first_load()
    habit = create_habit(habit_id="h1")

    toasts = dispatcher.dispatch(
        [make_notification("habit-h1-2024-12-09", "habit-h1", NotificationKind.HABIT)],
        acknowledgments,
        habits=[habit],
    )

    assert len(toasts) == 1
    assert toasts[0].task is None
    assert toasts[0].habit == habit


@pytest.mark.unit
def test_pending_toasts_deduplicated(dispatcher, acknowledgments):
    """Test a notification that disappears and reappears is not queued twice."""
    acknowledgments.complete_first_load()
    task = create_task(task_id="t1")
    notification = make_notification("t1-overdue", "t1")

    dispatcher.dispatch([notification], acknowledgments, tasks=[task], categories=[WORK])
    dispatcher.dispatch([], acknowledgments, tasks=[task], categories=[WORK])
    again = dispatcher.dispatch([notification], acknowledgments, tasks=[task], categories=[WORK])

    assert again == []
    assert list(dispatcher.pending) == ["t1-overdue"]


@pytest.mark.unit
def test_dismiss_does_not_acknowledge(dispatcher, acknowledgments):
    acknowledgments.complete_first_load()
    task = create_task(task_id="t1")
    dispatcher.dispatch([make_notification("t1-overdue", "t1")], acknowledgments, tasks=[task], categories=[WORK])

    assert dispatcher.dismiss("t1-overdue") is True
    assert dispatcher.dismiss("t1-overdue") is False
    assert not acknowledgments.is_read("t1-overdue")
    assert not acknowledgments.is_cleared("t1-overdue")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_toast_auto_dismissed(acknowledgments):
    """Test toasts expire on their own once the delay passes."""
    dispatcher = ToastDispatcher(dismiss_after_seconds=0.01)
    acknowledgments.complete_first_load()
    task = create_task(task_id="t1")

    dispatcher.dispatch([make_notification("t1-overdue", "t1")], acknowledgments, tasks=[task], categories=[WORK])
    assert "t1-overdue" in dispatcher.pending

    await asyncio.sleep(0.05)

    assert dispatcher.pending == {}
    assert dispatcher.timers == {}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_reset_cancels_timers(acknowledgments):
    dispatcher = ToastDispatcher(dismiss_after_seconds=30)
    acknowledgments.complete_first_load()
    task = create_task(task_id="t1")
    dispatcher.dispatch([make_notification("t1-overdue", "t1")], acknowledgments, tasks=[task], categories=[WORK])
    timer = dispatcher.timers["t1-overdue"]

    dispatcher.reset()
    await asyncio.sleep(0.01)

    assert timer.cancelled()
    assert dispatcher.pending == {}
    assert dispatcher.held == []
