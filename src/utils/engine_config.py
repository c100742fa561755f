"""Engine configuration read from environment variables."""

import os

from src.utils.errors import ConfigurationError


def _positive_float(name: str, default: str) -> float:
    raw = os.environ.get(name, default)
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value


class EngineConfig:
    """Timing constants and actor names for the engine."""
    
    NOTIFICATION_TICK_SECONDS = _positive_float("NOTIFICATION_TICK_SECONDS", "5")
    SNOOZE_HOURS = _positive_float("SNOOZE_HOURS", "2")
    TOAST_DISMISS_SECONDS = _positive_float("TOAST_DISMISS_SECONDS", "7")
    DEFAULT_ACTOR = os.environ.get("DEFAULT_ACTOR", "Admin")
    SYSTEM_ACTOR = os.environ.get("SYSTEM_ACTOR", "System")
