"""Acknowledgment store - read and cleared notification IDs."""

from typing import Iterable, Optional

from src.models.notification import Notification
from src.services.kv_store import InMemoryKeyValueStore, KeyValueStore
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

READ_IDS_KEY = "readNotificationIds"
CLEARED_IDS_KEY = "clearedNotificationIds"


class AcknowledgmentStore:
    """
    Read and cleared ID sets plus the session's first-load flag.

    Writes are unions: an ID never leaves either set once added. The sets are
    written through to the key-value store; ``first_load`` lives only as long
    as the session.
    """

    def __init__(self, store: Optional[KeyValueStore] = None):
        self._store = store if store is not None else InMemoryKeyValueStore()
        self._read: set[str] = set(self._store.get(READ_IDS_KEY, []) or [])
        self._cleared: set[str] = set(self._store.get(CLEARED_IDS_KEY, []) or [])
        self.first_load = True

    @property
    def read_ids(self) -> frozenset[str]:
        return frozenset(self._read)

    @property
    def cleared_ids(self) -> frozenset[str]:
        return frozenset(self._cleared)

    def is_read(self, notification_id: str) -> bool:
        return notification_id in self._read

    def is_cleared(self, notification_id: str) -> bool:
        return notification_id in self._cleared

    def mark_read(self, *notification_ids: str) -> int:
        """Add IDs to the read set; returns how many were new."""
        added = set(notification_ids) - self._read
        if added:
            self._read |= added
            self._persist(READ_IDS_KEY, self._read)
        return len(added)

    def clear(self, *notification_ids: str) -> int:
        """Add IDs to the cleared set; returns how many were new."""
        added = set(notification_ids) - self._cleared
        if added:
            self._cleared |= added
            self._persist(CLEARED_IDS_KEY, self._cleared)
        return len(added)

    def mark_all_read(self, notifications: Iterable[Notification]) -> int:
        count = self.mark_read(*(n.notification_id for n in notifications))
        logger.info("Marked all notifications read", newly_read=count)
        return count

    def clear_all(self, notifications: Iterable[Notification]) -> int:
        count = self.clear(*(n.notification_id for n in notifications))
        logger.info("Cleared all notifications", newly_cleared=count)
        return count

    def unread(self, notifications: Iterable[Notification]) -> list[Notification]:
        return [n for n in notifications if n.notification_id not in self._read]

    def complete_first_load(self) -> None:
        self.first_load = False

    def reset(self) -> None:
        """Start a new session: reload the sets and re-arm first load."""
        self._read = set(self._store.get(READ_IDS_KEY, []) or [])
        self._cleared = set(self._store.get(CLEARED_IDS_KEY, []) or [])
        self.first_load = True

    def _persist(self, key: str, ids: set[str]) -> None:
        self._store.set(key, sorted(ids))
