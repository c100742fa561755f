"""Notification deriver - rebuild the attention feed from task and habit state.

Derivation is pure: the same tasks, habits, settings, clock and cleared set
always give the same list in the same order. Nothing is carried over from a
previous run.
"""

from datetime import datetime
from typing import AbstractSet, Iterable

from src.models.habit import Habit
from src.models.enums import NotificationKind
from src.models.notification import Notification, NotificationSettings
from src.models.task import Task
from src.services.habit_status import any_task_completed_on, is_habit_completed
from src.utils.time import at_time_of_day, to_local_naive

HABIT_REMINDER_MESSAGE = "Daily routine reminder."


def overdue_id(task_id: str) -> str:
    return f"{task_id}-overdue"


def upcoming_id(task_id: str, days_until_due: int) -> str:
    # The day count is part of the identity, so the notification for a task
    # counting down becomes a new, unacknowledged one every day.
    return f"{task_id}-upcoming-{days_until_due}"


def habit_reminder_id(habit_id: str, day_iso: str) -> str:
    return f"habit-{habit_id}-{day_iso}"


def upcoming_message(days_until_due: int) -> str:
    if days_until_due == 0:
        return "Due today."
    if days_until_due == 1:
        return "Due tomorrow."
    return f"Due in {days_until_due} days."


def _format_instant(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M")


def due_date_notifications(tasks: Iterable[Task], settings: NotificationSettings, now: datetime) -> list[Notification]:
    """Overdue and upcoming notifications for open tasks with a due date."""
    today = now.date()
    generated = []
    for task in tasks:
        if task.is_done or task.due_date is None:
            continue
        due = task.due_date
        if due <= now or due.date() < today:
            generated.append(Notification(
                notification_id=overdue_id(task.task_id),
                kind=NotificationKind.OVERDUE,
                source_id=task.task_id,
                title=task.title,
                message=f"Overdue since {due.date().isoformat()}.",
                notify_at=due,
            ))
            continue

        days_until_due = (due.date() - today).days
        if days_until_due <= settings.remind_days_before:
            generated.append(Notification(
                notification_id=upcoming_id(task.task_id, days_until_due),
                kind=NotificationKind.UPCOMING,
                source_id=task.task_id,
                title=task.title,
                message=upcoming_message(days_until_due),
                notify_at=due,
            ))
    return generated


def reminder_notifications(tasks: Iterable[Task], now: datetime) -> list[Notification]:
    """Custom reminders on open tasks whose time has come."""
    generated = []
    for task in tasks:
        if task.is_done:
            continue
        for entry in task.activity:
            if entry.type != "reminder" or entry.notify_at > now:
                continue
            generated.append(Notification(
                notification_id=entry.activity_id,
                kind=NotificationKind.REMINDER,
                source_id=task.task_id,
                title=task.title,
                message=f"Reminder: {entry.message or _format_instant(entry.notify_at)}",
                notify_at=entry.notify_at,
            ))
    return generated


def habit_notifications(habits: Iterable[Habit], tasks: Iterable[Task], now: datetime) -> list[Notification]:
    """One reminder per incomplete habit per day, once its reminder time passes."""
    today = now.date()
    completed_today = any_task_completed_on(tasks, today)
    generated = []
    for habit in habits:
        if habit.reminder_time is None:
            continue
        if is_habit_completed(habit, today, completed_today):
            continue
        remind_at = at_time_of_day(today, habit.reminder_time)
        if now < remind_at:
            continue
        generated.append(Notification(
            notification_id=habit_reminder_id(habit.habit_id, today.isoformat()),
            kind=NotificationKind.HABIT,
            source_id=habit.source_id,
            title=habit.title,
            message=HABIT_REMINDER_MESSAGE,
            notify_at=remind_at,
        ))
    return generated


def derive_notifications(
    tasks: Iterable[Task],
    habits: Iterable[Habit],
    settings: NotificationSettings,
    now: datetime,
    cleared_ids: AbstractSet[str] = frozenset(),
) -> list[Notification]:
    """
    Derive the sorted notification feed.

    Returns an empty list when notifications are disabled. Due-date and habit
    notifications additionally need their own toggle; custom reminders only
    need the master switch. Cleared IDs are dropped after sorting. An aware
    ``now`` is compared in local time.
    """
    if not settings.enabled:
        return []

    now = to_local_naive(now)
    tasks = list(tasks)
    generated: list[Notification] = []
    if settings.task_reminders:
        generated.extend(due_date_notifications(tasks, settings, now))
    generated.extend(reminder_notifications(tasks, now))
    if settings.habit_reminders:
        generated.extend(habit_notifications(habits, tasks, now))

    generated.sort(key=lambda n: n.notify_at)
    return [n for n in generated if n.notification_id not in cleared_ids]
