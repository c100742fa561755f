"""Error handling utilities."""

from typing import Optional


class TaskPulseError(Exception):
    """Base exception for the notification and activity engine."""
    pass


class EntityNotFoundError(TaskPulseError):
    """A referenced task, project or habit does not exist."""

    def __init__(self, entity_type: str, entity_id: str, message: Optional[str] = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message or f"{entity_type} not found: {entity_id}")


class TaskNotFoundError(EntityNotFoundError):
    """Task lookup failed."""

    def __init__(self, task_id: str):
        super().__init__("Task", task_id)


class ProjectNotFoundError(EntityNotFoundError):
    """Project lookup failed."""

    def __init__(self, project_id: str):
        super().__init__("Project", project_id)


class HabitNotFoundError(EntityNotFoundError):
    """Habit lookup failed."""

    def __init__(self, habit_id: str):
        super().__init__("Habit", habit_id)


class ActivityNotFoundError(TaskPulseError):
    """Activity entry not present in the entity's log."""
    pass


class ConfigurationError(TaskPulseError):
    """Invalid engine configuration."""
    pass
