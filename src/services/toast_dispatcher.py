"""Toast dispatcher - turn newly appeared notifications into pop-up toasts."""

import asyncio
from typing import Iterable, Optional

from src.models.category import Category
from src.models.habit import Habit
from src.models.notification import HABIT_SOURCE_PREFIX, Notification, ToastRequest
from src.models.task import Task
from src.services.acknowledgments import AcknowledgmentStore
from src.utils.engine_config import EngineConfig
from src.utils.logging import get_structured_logger, sanitize_title

logger = get_structured_logger(__name__)


class ToastDispatcher:
    """Compare each derived list with the previous one and queue toasts for new items."""

    def __init__(self, dismiss_after_seconds: float = EngineConfig.TOAST_DISMISS_SECONDS):
        self.dismiss_after_seconds = dismiss_after_seconds
        self.held: list[Notification] = []
        self.pending: dict[str, ToastRequest] = {}
        self.timers: dict[str, asyncio.Task] = {}

    def dispatch(
        self,
        candidates: list[Notification],
        acknowledgments: AcknowledgmentStore,
        tasks: Iterable[Task] = (),
        categories: Iterable[Category] = (),
        habits: Iterable[Habit] = (),
    ) -> list[ToastRequest]:
        """
        Queue toasts for candidates that were not in the previous list.

        The first call of a session only initialises the held list. Read
        notifications and ones whose source cannot be resolved get no toast.
        Returns the toasts queued by this call.
        """
        if acknowledgments.first_load:
            acknowledgments.complete_first_load()
            self.held = list(candidates)
            logger.info(
                "First derivation of session, toasts suppressed",
                candidates=len(candidates)
            )
            return []

        held_ids = {n.notification_id for n in self.held}
        new = [n for n in candidates if n.notification_id not in held_ids]
        self.held = list(candidates)
        if not new:
            return []

        tasks_by_id = {task.task_id: task for task in tasks}
        categories_by_id = {category.category_id: category for category in categories}
        habits_by_source = {habit.source_id: habit for habit in habits}

        queued = []
        for notification in new:
            if acknowledgments.is_read(notification.notification_id):
                continue
            toast = self._resolve(notification, tasks_by_id, categories_by_id, habits_by_source)
            if toast is None:
                logger.debug(
                    "Toast source not resolvable, dropped",
                    notification_id=notification.notification_id,
                    source_id=notification.source_id
                )
                continue
            if toast.key in self.pending:
                continue
            self.pending[toast.key] = toast
            self._schedule_dismissal(toast.key)
            queued.append(toast)

        if queued:
            logger.info(
                "Toasts queued",
                queued=len(queued),
                new_notifications=len(new),
                pending=len(self.pending)
            )
        return queued

    def _resolve(
        self,
        notification: Notification,
        tasks_by_id: dict[str, Task],
        categories_by_id: dict[str, Category],
        habits_by_source: dict[str, Habit],
    ) -> Optional[ToastRequest]:
        if notification.source_id.startswith(HABIT_SOURCE_PREFIX):
            return ToastRequest(
                key=notification.notification_id,
                notification=notification,
                habit=habits_by_source.get(notification.source_id),
            )

        task = tasks_by_id.get(notification.source_id)
        if task is None:
            return None
        category = None
        if task.category_id is not None:
            category = categories_by_id.get(task.category_id)
            if category is None:
                return None
        return ToastRequest(
            key=notification.notification_id,
            notification=notification,
            task=task,
            category=category,
        )

    def dismiss(self, key: str) -> bool:
        """Remove a pending toast. Does not acknowledge the notification."""
        timer = self.timers.pop(key, None)
        if timer is not None:
            timer.cancel()
        toast = self.pending.pop(key, None)
        if toast is None:
            return False
        logger.debug(
            "Toast dismissed",
            notification_id=key,
            title=sanitize_title(toast.notification.title)
        )
        return True

    def _schedule_dismissal(self, key: str) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # Without a loop the presenter dismisses toasts itself
            return
        self.timers[key] = asyncio.create_task(self._dismiss_after_delay(key))

    async def _dismiss_after_delay(self, key: str) -> None:
        await asyncio.sleep(self.dismiss_after_seconds)
        self.timers.pop(key, None)
        self.dismiss(key)

    def reset(self) -> None:
        """Drop held list, pending toasts and their timers."""
        for timer in self.timers.values():
            timer.cancel()
        self.timers.clear()
        self.pending.clear()
        self.held = []
