"""Notification engine - the per-session context behind the attention feed."""

from datetime import datetime
from typing import Optional

from src.models.activity import ReminderEntry
from src.models.habit import Habit
from src.models.notification import Notification, NotificationSettings, ToastRequest
from src.services.acknowledgments import AcknowledgmentStore
from src.services.clock import RecomputeClock
from src.services.kv_store import KeyValueStore
from src.services.notification_deriver import derive_notifications
from src.services.snooze import complete_habit_notification, snooze_notification
from src.services.toast_dispatcher import ToastDispatcher
from src.services.workspace import Workspace
from src.utils.engine_config import EngineConfig
from src.utils.logging import get_structured_logger, log_timing, trace_context
from src.utils.time import to_local_naive

logger = get_structured_logger(__name__)


class NotificationEngine:
    """
    Session context for notifications.

    Built at login with empty toast state and ``first_load`` armed; read and
    cleared IDs come from the key-value store. ``teardown`` stops the clock
    and drops the session state.
    """

    def __init__(
        self,
        workspace: Workspace,
        settings: Optional[NotificationSettings] = None,
        store: Optional[KeyValueStore] = None,
        tick_seconds: float = EngineConfig.NOTIFICATION_TICK_SECONDS,
        toast_seconds: float = EngineConfig.TOAST_DISMISS_SECONDS,
    ):
        self.workspace = workspace
        self.settings = settings or NotificationSettings()
        self.acknowledgments = AcknowledgmentStore(store)
        self.dispatcher = ToastDispatcher(dismiss_after_seconds=toast_seconds)
        self.clock = RecomputeClock(self.tick, interval_seconds=tick_seconds)
        self.notifications: list[Notification] = []

    # -- lifecycle -----------------------------------------------------------

    def activate(self) -> None:
        """Start ticking; the first tick runs immediately."""
        self.clock.start()

    def teardown(self) -> None:
        """Stop ticking and forget the session's notification state."""
        self.clock.stop()
        self.dispatcher.reset()
        self.acknowledgments.reset()
        self.notifications = []
        logger.info("Notification session torn down")

    # -- derivation ----------------------------------------------------------

    def tick(self, now: Optional[datetime] = None) -> list[ToastRequest]:
        """
        Re-derive the feed and queue toasts for new items.

        A failing tick keeps the previous list and returns no toasts.
        """
        with trace_context():
            try:
                with log_timing("notification_tick", logger=logger):
                    now = to_local_naive(now or self.workspace.clock())
                    tasks = list(self.workspace.tasks.values())
                    habits = list(self.workspace.habits.values())
                    candidates = derive_notifications(
                        tasks,
                        habits,
                        self.settings,
                        now,
                        self.acknowledgments.cleared_ids,
                    )
                    toasts = self.dispatcher.dispatch(
                        candidates,
                        self.acknowledgments,
                        tasks=tasks,
                        categories=self.workspace.categories.values(),
                        habits=habits,
                    )
                    self.notifications = candidates
                    return toasts
            except Exception as e:
                logger.error("Notification tick failed", error=str(e), exc_info=True)
                return []

    # -- read model ----------------------------------------------------------

    @property
    def unread_notifications(self) -> list[Notification]:
        return self.acknowledgments.unread(self.notifications)

    @property
    def badge_count(self) -> int:
        return len(self.unread_notifications)

    @property
    def pending_toasts(self) -> list[ToastRequest]:
        return list(self.dispatcher.pending.values())

    def find(self, notification_id: str) -> Optional[Notification]:
        for notification in self.notifications:
            if notification.notification_id == notification_id:
                return notification
        return None

    # -- user actions --------------------------------------------------------

    def mark_read(self, notification_id: str) -> bool:
        """Mark a listed notification read; unknown IDs are ignored."""
        if self.find(notification_id) is None:
            logger.debug("Mark read ignored, notification not listed", notification_id=notification_id)
            return False
        self.acknowledgments.mark_read(notification_id)
        return True

    def open_notification(self, notification_id: str) -> Optional[Notification]:
        """
        Handle a click: mark read and return the notification to navigate to.

        Task notifications whose task is gone are not marked.
        """
        notification = self.find(notification_id)
        if notification is None:
            return None
        if not notification.is_habit and notification.source_id not in self.workspace.tasks:
            return None
        self.acknowledgments.mark_read(notification_id)
        return notification

    def mark_all_read(self) -> int:
        return self.acknowledgments.mark_all_read(self.notifications)

    def clear_all(self) -> int:
        """Hide every listed notification from all future derivations."""
        count = self.acknowledgments.clear_all(self.notifications)
        self.notifications = []
        return count

    def snooze(self, notification_id: str, now: Optional[datetime] = None) -> Optional[ReminderEntry]:
        notification = self.find(notification_id)
        if notification is None:
            logger.debug("Snooze ignored, notification not listed", notification_id=notification_id)
            return None
        return snooze_notification(self.workspace, self.acknowledgments, notification, now=now)

    def complete_habit(self, notification_id: str) -> Optional[Habit]:
        notification = self.find(notification_id)
        if notification is None:
            return None
        return complete_habit_notification(self.workspace, self.acknowledgments, notification)

    def dismiss_toast(self, key: str) -> bool:
        return self.dispatcher.dismiss(key)

    def update_settings(self, **changes) -> NotificationSettings:
        self.settings = NotificationSettings(**{**self.settings.model_dump(), **changes})
        return self.settings
