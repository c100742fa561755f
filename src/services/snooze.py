"""Snooze scheduler and habit completion from notifications."""

from datetime import datetime, timedelta
from typing import Optional

from src.models.activity import ReminderEntry
from src.models.habit import Habit
from src.models.notification import HABIT_SOURCE_PREFIX, Notification
from src.services.acknowledgments import AcknowledgmentStore
from src.services.notification_deriver import habit_reminder_id
from src.services.workspace import Workspace
from src.utils.engine_config import EngineConfig
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)


def snooze_notification(
    workspace: Workspace,
    acknowledgments: AcknowledgmentStore,
    notification: Notification,
    now: Optional[datetime] = None,
    snooze_hours: float = EngineConfig.SNOOZE_HOURS,
) -> Optional[ReminderEntry]:
    """
    Re-schedule a task notification as a new reminder.

    Appends a reminder on the source task ``snooze_hours`` from now and marks
    the original notification read. It stays listed until cleared or until
    its underlying condition goes away. Habit notifications and notifications
    whose task is gone are left alone.
    """
    if notification.is_habit:
        logger.warning(
            "Habit notifications cannot be snoozed",
            notification_id=notification.notification_id
        )
        return None

    now = now or workspace.clock()
    entry = workspace.add_reminder(
        notification.source_id,
        now + timedelta(hours=snooze_hours),
        f"Snoozed: {notification.title}",
        user=EngineConfig.SYSTEM_ACTOR,
    )
    if entry is None:
        return None

    acknowledgments.mark_read(notification.notification_id)
    logger.info(
        "Notification snoozed",
        notification_id=notification.notification_id,
        task_id=notification.source_id,
        reminder_id=entry.activity_id,
        notify_at=entry.notify_at.isoformat()
    )
    return entry


def complete_habit_notification(
    workspace: Workspace,
    acknowledgments: AcknowledgmentStore,
    notification: Notification,
) -> Optional[Habit]:
    """Mark the notification's habit complete today and its reminder read."""
    if not notification.is_habit:
        return None
    habit_id = notification.source_id[len(HABIT_SOURCE_PREFIX):]
    habit = workspace.mark_habit_complete(habit_id)
    if habit is None:
        return None
    acknowledgments.mark_read(habit_reminder_id(habit_id, workspace.today().isoformat()))
    return habit
