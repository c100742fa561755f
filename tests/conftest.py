"""Shared pytest fixtures and configuration."""

import os
import pytest
from datetime import datetime

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("NOTIFICATION_TICK_SECONDS", "5")
os.environ.setdefault("SNOOZE_HOURS", "2")
os.environ.setdefault("TOAST_DISMISS_SECONDS", "7")

from src.models.category import Category
from src.models.notification import NotificationSettings
from src.services.acknowledgments import AcknowledgmentStore
from src.services.kv_store import InMemoryKeyValueStore
from src.services.workspace import Workspace

FROZEN_NOW = datetime(2024, 12, 9, 12, 0, 0)


class ManualClock:
    """Callable clock that tests move by hand."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def now():
    """Fixed wall-clock instant used across tests."""
    return FROZEN_NOW


@pytest.fixture
def manual_clock():
    return ManualClock(FROZEN_NOW)


@pytest.fixture
def workspace(manual_clock):
    """Empty workspace driven by the manual clock, with one category."""
    return Workspace(
        categories=[Category(category_id="cat-work", name="Work", color="blue")],
        actor="Admin",
        clock=manual_clock,
    )


@pytest.fixture
def settings():
    """Default notification settings (everything on, one day ahead)."""
    return NotificationSettings()


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def acknowledgments(kv_store):
    return AcknowledgmentStore(kv_store)
