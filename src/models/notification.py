"""Notification models - derived every tick, never persisted."""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from src.models.category import Category
from src.models.enums import NotificationKind
from src.models.habit import Habit
from src.models.task import Task

HABIT_SOURCE_PREFIX = "habit-"


class Notification(BaseModel):
    """One item of the attention feed."""
    model_config = ConfigDict(frozen=True)

    notification_id: str = Field(..., description="Deterministic identity used for read/cleared")
    kind: NotificationKind = Field(..., description="overdue, upcoming, reminder or habit")
    source_id: str = Field(..., description="Task ID, or habit-{habit_id} for habits")
    title: str = Field(..., description="Source task or habit title")
    message: str = Field(..., description="Display message")
    notify_at: datetime = Field(..., description="Instant used for sorting and display")

    @property
    def is_habit(self) -> bool:
        return self.source_id.startswith(HABIT_SOURCE_PREFIX)


class NotificationSettings(BaseModel):
    """User notification preferences."""
    enabled: bool = Field(default=True, description="Master switch")
    remind_days_before: int = Field(default=1, ge=0, description="Upcoming window in days")
    task_reminders: bool = Field(default=True, description="Overdue/upcoming notifications")
    habit_reminders: bool = Field(default=True, description="Habit reminder notifications")


class ToastRequest(BaseModel):
    """Display tuple for a transient pop-up."""
    key: str = Field(..., description="Notification ID, used for dedup")
    notification: Notification
    task: Optional[Task] = None
    category: Optional[Category] = None
    habit: Optional[Habit] = None
