"""Project model."""

from typing import Optional
from pydantic import BaseModel, Field

from src.models.activity import ActivityLog


class Project(BaseModel):
    """Project grouping tasks; keeps its own audit log."""
    project_id: str = Field(..., description="Project ID (text)")
    name: str = Field(..., description="Project name")
    description: Optional[str] = Field(None, description="Project description")
    color: Optional[str] = Field(None, description="Display color")
    icon: Optional[str] = Field(None, description="Display icon key")
    activity: ActivityLog = Field(default_factory=list, description="Audit log, insertion order")
