"""Derived habit completion and the habit toggles that feed it."""

from datetime import date
from typing import Iterable, Optional

from src.models.enums import HabitType, Status
from src.models.habit import Habit
from src.models.task import Task


def last_completion_day(task: Task) -> Optional[date]:
    """Day of the task's most recent transition to Done, if any."""
    for entry in reversed(task.activity):
        if entry.type == "status_change" and entry.to_status is Status.DONE:
            return entry.timestamp.date()
    return None


def any_task_completed_on(tasks: Iterable[Task], day: date) -> bool:
    return any(last_completion_day(task) == day for task in tasks)


def is_habit_completed(habit: Habit, day: date, tasks_completed_today: bool = False) -> bool:
    """
    Completion of ``habit`` on ``day``.

    Override beats explicit completion, which beats auto-derivation.
    ``tasks_completed_today`` only matters for auto-derived habits.
    """
    if habit.override_date == day:
        return False
    if habit.last_completed_date == day:
        return True
    if habit.type is HabitType.AUTO_DERIVED:
        return tasks_completed_today
    return False


def habits_with_status(habits: Iterable[Habit], tasks: Iterable[Task], day: date) -> list[tuple[Habit, bool]]:
    """Pair each habit with its derived completion for ``day``."""
    completed_today = any_task_completed_on(tasks, day)
    return [(habit, is_habit_completed(habit, day, completed_today)) for habit in habits]


def mark_complete(habit: Habit, day: date) -> Habit:
    return habit.model_copy(update={"last_completed_date": day, "override_date": None})


def toggle(habit: Habit, day: date, currently_completed: bool) -> Habit:
    """Flip completion for ``day``, keeping override and completion exclusive."""
    if not currently_completed:
        return mark_complete(habit, day)
    if habit.type is HabitType.MANUAL:
        return habit.model_copy(update={"last_completed_date": None})
    # auto-derived habits need an override to stay unchecked
    return habit.model_copy(update={"override_date": day, "last_completed_date": None})
