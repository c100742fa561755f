"""Task models."""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from src.models.activity import ActivityLog
from src.models.enums import Status
from src.utils.time import to_local_naive


class Task(BaseModel):
    """Task with its own activity log."""
    task_id: str = Field(..., description="Task ID (text)")
    title: str = Field(..., description="Task title")
    status: Status = Field(default=Status.PENDING, description="Status: Pending, InProgress, Done")
    due_date: Optional[datetime] = Field(None, description="Due instant")
    project_id: Optional[str] = Field(None, description="Project ID (text FK)")
    category_id: Optional[str] = Field(None, description="Category ID (text FK)")
    created_at: Optional[datetime] = None
    activity: ActivityLog = Field(default_factory=list, description="Audit log, insertion order")

    @field_validator("due_date")
    @classmethod
    def _localize_due_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(value) if value is not None else None

    @property
    def is_done(self) -> bool:
        return self.status is Status.DONE
