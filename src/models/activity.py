"""Activity entry models - the append-only audit log of tasks and projects.

Entries form a closed tagged union discriminated on ``type``. Every entry is
frozen once built; a log only grows by appending or shrinks by dropping a
whole entry.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Iterable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator
from ulid import ULID

from src.models.enums import LinkAction, Status
from src.utils.time import local_now, to_local_naive


def generate_activity_id() -> str:
    """Generate a text-based activity ID (ULID format)."""
    return str(ULID())


class CreationEntry(BaseModel):
    """Entity was created."""
    model_config = ConfigDict(frozen=True)

    type: Literal["creation"] = "creation"
    activity_id: str = Field(default_factory=generate_activity_id, description="Activity ID (ULID)")
    timestamp: datetime = Field(default_factory=local_now)
    user: str = Field(..., description="Actor name")
    note: Optional[str] = Field(None, description="Creation remark")


class StatusChangeEntry(BaseModel):
    """Status transition, single or aggregated over a bulk operation."""
    model_config = ConfigDict(frozen=True)

    type: Literal["status_change"] = "status_change"
    activity_id: str = Field(default_factory=generate_activity_id, description="Activity ID (ULID)")
    timestamp: datetime = Field(default_factory=local_now)
    user: str = Field(..., description="Actor name")
    from_status: Status = Field(..., description="Status before the change")
    to_status: Status = Field(..., description="Status after the change")
    task_title: Optional[str] = Field(None, description="Task title, set on project logs")
    count: Optional[int] = Field(None, ge=1, description="Number of tasks in a bulk change")
    affected_tasks: Optional[list[str]] = Field(None, description="Titles of tasks in a bulk change")

    @model_validator(mode="after")
    def _check_aggregate(self) -> "StatusChangeEntry":
        if self.count is None and self.affected_tasks is None:
            return self
        if self.count is None or self.affected_tasks is None:
            raise ValueError("count and affected_tasks must be set together")
        if self.count != len(self.affected_tasks):
            raise ValueError("count must equal the number of affected_tasks")
        return self

    @property
    def is_aggregate(self) -> bool:
        return self.count is not None


class PropertyChangeEntry(BaseModel):
    """A named task property changed value."""
    model_config = ConfigDict(frozen=True)

    type: Literal["property_change"] = "property_change"
    activity_id: str = Field(default_factory=generate_activity_id, description="Activity ID (ULID)")
    timestamp: datetime = Field(default_factory=local_now)
    user: str = Field(..., description="Actor name")
    property: str = Field(..., description="Property display name, e.g. Title or Project")
    old_value: str = Field(..., description="Value before the change")
    new_value: str = Field(..., description="Value after the change")


class NoteEntry(BaseModel):
    """Free-form rich-text note."""
    model_config = ConfigDict(frozen=True)

    type: Literal["note"] = "note"
    activity_id: str = Field(default_factory=generate_activity_id, description="Activity ID (ULID)")
    timestamp: datetime = Field(default_factory=local_now)
    user: str = Field(..., description="Actor name")
    note: str = Field(..., description="Rich text (HTML) body")
    ai_generated: bool = Field(default=False, description="Body came from the summarization service")


class ReminderEntry(BaseModel):
    """Custom reminder that becomes a notification once notify_at passes."""
    model_config = ConfigDict(frozen=True)

    type: Literal["reminder"] = "reminder"
    activity_id: str = Field(default_factory=generate_activity_id, description="Activity ID (ULID)")
    timestamp: datetime = Field(default_factory=local_now)
    user: str = Field(..., description="Actor name")
    notify_at: datetime = Field(..., description="When the reminder fires")
    message: Optional[str] = Field(None, description="Reminder text")

    @field_validator("notify_at")
    @classmethod
    def _localize(cls, value: datetime) -> datetime:
        return to_local_naive(value)


class ProjectLinkEntry(BaseModel):
    """A task joined or left the project."""
    model_config = ConfigDict(frozen=True)

    type: Literal["project_link"] = "project_link"
    activity_id: str = Field(default_factory=generate_activity_id, description="Activity ID (ULID)")
    timestamp: datetime = Field(default_factory=local_now)
    user: str = Field(..., description="Actor name")
    action: LinkAction = Field(..., description="added or removed")
    task_title: str = Field(..., description="Title of the linked task")


ActivityEntry = Annotated[
    Union[
        CreationEntry,
        StatusChangeEntry,
        PropertyChangeEntry,
        NoteEntry,
        ReminderEntry,
        ProjectLinkEntry,
    ],
    Field(discriminator="type"),
]

ActivityLog = list[ActivityEntry]

activity_log_adapter = TypeAdapter(ActivityLog)


class ActivityFilter(str, Enum):
    """Activity feed filters offered by the detail views."""
    ALL = "all"
    NOTES = "notes"
    CHANGES = "changes"
    REMINDERS = "reminders"


_CHANGE_TYPES = frozenset({"creation", "status_change", "property_change", "project_link"})


def filter_activity(entries: Iterable[ActivityEntry], kind: ActivityFilter = ActivityFilter.ALL) -> list[ActivityEntry]:
    """Select the entries shown under one feed filter."""
    kind = ActivityFilter(kind)
    if kind is ActivityFilter.ALL:
        return list(entries)
    if kind is ActivityFilter.NOTES:
        return [entry for entry in entries if entry.type == "note"]
    if kind is ActivityFilter.REMINDERS:
        return [entry for entry in entries if entry.type == "reminder"]
    return [entry for entry in entries if entry.type in _CHANGE_TYPES]


def newest_first(entries: Iterable[ActivityEntry]) -> list[ActivityEntry]:
    """Display order: latest timestamp first, later insertions first on ties."""
    indexed = list(enumerate(entries))
    indexed.sort(key=lambda pair: (pair[1].timestamp, pair[0]), reverse=True)
    return [entry for _, entry in indexed]
