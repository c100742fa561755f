"""Habit model."""

from typing import Optional
from datetime import date, time
from pydantic import BaseModel, Field, model_validator

from src.models.enums import HabitType


class Habit(BaseModel):
    """Daily habit; completion for a day is derived, never stored."""
    habit_id: str = Field(..., description="Habit ID (text)")
    title: str = Field(..., description="Habit title")
    type: HabitType = Field(default=HabitType.MANUAL, description="manual or auto-derived")
    reminder_time: Optional[time] = Field(None, description="Time of day for the reminder (HH:MM)")
    last_completed_date: Optional[date] = Field(None, description="Day explicitly marked complete")
    override_date: Optional[date] = Field(None, description="Day explicitly marked not done")

    @model_validator(mode="after")
    def _check_exclusive_days(self) -> "Habit":
        if self.override_date is not None and self.override_date == self.last_completed_date:
            raise ValueError("override_date and last_completed_date cannot be the same day")
        return self

    @property
    def source_id(self) -> str:
        """Synthetic source ID used by habit notifications."""
        return f"habit-{self.habit_id}"
