"""Key-value store abstraction used for session-surviving state."""

import copy
from typing import Any, Optional, Protocol


class KeyValueStore(Protocol):
    """Minimal persistence interface: JSON-like values under string keys."""

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        ...

    def set(self, key: str, value: Any) -> None:
        ...


class InMemoryKeyValueStore:
    """Process-local store; values are copied on the way in and out."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)
