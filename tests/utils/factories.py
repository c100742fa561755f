"""Test data factories using Faker."""

from faker import Faker
from typing import Optional
from datetime import datetime, time

from src.models.activity import ReminderEntry, StatusChangeEntry
from src.models.enums import HabitType, Status
from src.models.habit import Habit
from src.models.project import Project
from src.models.task import Task

fake = Faker()


def create_task(
    task_id: Optional[str] = None,
    status: Status = Status.PENDING,
    due_date: Optional[datetime] = None,
    project_id: Optional[str] = None,
    category_id: Optional[str] = "cat-work",
    activity: Optional[list] = None,
    title: Optional[str] = None,
) -> Task:
    """Create a test task."""
    return Task(
        task_id=task_id or f"task-{fake.uuid4()[:8]}",
        title=title or fake.sentence(nb_words=4),
        status=status,
        due_date=due_date,
        project_id=project_id,
        category_id=category_id,
        activity=activity or [],
    )


def create_project(project_id: Optional[str] = None, name: Optional[str] = None) -> Project:
    """Create a test project with an empty log."""
    return Project(
        project_id=project_id or f"proj-{fake.uuid4()[:8]}",
        name=name or fake.catch_phrase(),
        color=fake.color_name(),
    )


def create_habit(
    habit_id: Optional[str] = None,
    habit_type: HabitType = HabitType.MANUAL,
    reminder_time: Optional[time] = time(9, 0),
    **overrides,
) -> Habit:
    """Create a test habit."""
    return Habit(
        habit_id=habit_id or f"hab-{fake.uuid4()[:8]}",
        title=overrides.pop("title", None) or fake.sentence(nb_words=3),
        type=habit_type,
        reminder_time=reminder_time,
        **overrides,
    )


def create_reminder(notify_at: datetime, message: Optional[str] = None, user: str = "Admin") -> ReminderEntry:
    """Create a reminder entry firing at ``notify_at``."""
    return ReminderEntry(
        user=user,
        timestamp=notify_at,
        notify_at=notify_at,
        message=message if message is not None else fake.sentence(nb_words=5),
    )


def create_completion(at: datetime, from_status: Status = Status.IN_PROGRESS) -> StatusChangeEntry:
    """Status entry moving a task to Done at ``at``."""
    return StatusChangeEntry(user="Admin", timestamp=at, from_status=from_status, to_status=Status.DONE)
