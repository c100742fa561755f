"""Tests for Habit and Task models."""

import pytest
from datetime import date, datetime, time
from pydantic import ValidationError

from src.models.enums import HabitType, Status
from src.models.habit import Habit
from src.models.task import Task


@pytest.mark.unit
def test_habit_reminder_time_from_string():
    """Test HH:MM reminder times are parsed."""
    habit = Habit(habit_id="h1", title="Drink water", reminder_time="09:00")

    assert habit.reminder_time == time(9, 0)
    assert habit.type is HabitType.MANUAL
    assert habit.source_id == "habit-h1"


@pytest.mark.unit
def test_habit_type_values():
    """Test habit type accepts the serialized values."""
    habit = Habit(habit_id="h2", title="Finish a task", type="auto-derived")

    assert habit.type is HabitType.AUTO_DERIVED

    with pytest.raises(ValidationError):
        Habit(habit_id="h3", title="Bad", type="weekly")


@pytest.mark.unit
def test_task_defaults():
    """Test task defaults."""
    task = Task(task_id="t1", title="Write report")

    assert task.status is Status.PENDING
    assert task.activity == []
    assert task.due_date is None
    assert not task.is_done


@pytest.mark.unit
def test_task_due_date_localized():
    """Test aware due dates are stored as naive local instants."""
    aware = datetime(2024, 12, 10, 18, 30).astimezone()
    task = Task(task_id="t1", title="Write report", due_date=aware, status="Done")

    assert task.due_date == datetime(2024, 12, 10, 18, 30)
    assert task.is_done


@pytest.mark.unit
def test_habit_rejects_override_on_completed_day():
    """Test a day cannot be both marked complete and overridden."""
    with pytest.raises(ValidationError):
        Habit(
            habit_id="h4",
            title="Stretch",
            last_completed_date=date(2024, 12, 9),
            override_date=date(2024, 12, 9),
        )

    habit = Habit(
        habit_id="h5",
        title="Stretch",
        last_completed_date=date(2024, 12, 8),
        override_date=date(2024, 12, 9),
    )
    assert habit.override_date == date(2024, 12, 9)
