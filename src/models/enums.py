"""Enumerations shared by the models."""

from enum import Enum


class Status(str, Enum):
    """Task workflow status."""
    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    DONE = "Done"


class HabitType(str, Enum):
    """How a habit's daily completion is decided."""
    MANUAL = "manual"
    AUTO_DERIVED = "auto-derived"


class LinkAction(str, Enum):
    """Project membership change direction."""
    ADDED = "added"
    REMOVED = "removed"


class NotificationKind(str, Enum):
    """Source class of a derived notification."""
    OVERDUE = "overdue"
    UPCOMING = "upcoming"
    REMINDER = "reminder"
    HABIT = "habit"
