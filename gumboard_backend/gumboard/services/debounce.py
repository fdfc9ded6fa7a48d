"""Per (user, board) notification debounce.

The store is process-local by default. Anything implementing
``DebounceStore`` (for example a Redis-backed store) can be handed to
``NotificationDebouncer`` instead when several workers must share a window.
"""

import logging
import time
from collections import OrderedDict
from typing import Callable, Protocol

from gumboard.config import settings

logger = logging.getLogger("gumboard.notify")


class DebounceStore(Protocol):
    def get(self, key: str) -> float | None: ...

    def set(self, key: str, timestamp: float) -> None: ...

    def prune(self, older_than: float) -> int: ...

    def __len__(self) -> int: ...


class InMemoryDebounceStore:
    def __init__(self, max_entries: int = 1000):
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, float]" = OrderedDict()

    def get(self, key: str) -> float | None:
        return self._entries.get(key)

    def set(self, key: str, timestamp: float) -> None:
        self._entries[key] = timestamp
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def prune(self, older_than: float) -> int:
        stale = [key for key, ts in self._entries.items() if ts < older_than]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def __len__(self) -> int:
        return len(self._entries)


class NotificationDebouncer:
    def __init__(
        self,
        store: DebounceStore | None = None,
        *,
        window_seconds: float = 60,
        prune_interval_seconds: float = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store if store is not None else InMemoryDebounceStore()
        self.window_seconds = window_seconds
        self.prune_interval_seconds = prune_interval_seconds
        self.clock = clock
        self._last_prune = clock()

    @staticmethod
    def key(user_id: str, board_id: str) -> str:
        return f"{user_id}-{board_id}"

    def _maybe_prune(self, now: float) -> None:
        if now - self._last_prune < self.prune_interval_seconds:
            return
        self._last_prune = now
        removed = self.store.prune(now - 2 * self.window_seconds)
        if removed:
            logger.debug("NOTIFY_PRUNE removed=%d remaining=%d", removed, len(self.store))

    def should_send(self, user_id: str, board_id: str, send_slack_updates: bool = True) -> bool:
        if not send_slack_updates:
            logger.debug("NOTIFY_SKIP board=%s reason=slack_updates_disabled", board_id)
            return False
        now = self.clock()
        self._maybe_prune(now)
        key = self.key(user_id, board_id)
        last = self.store.get(key)
        if last is not None and now - last < self.window_seconds:
            logger.debug("NOTIFY_DEBOUNCED key=%s age=%.1fs", key, now - last)
            return False
        self.store.set(key, now)
        return True


debouncer = NotificationDebouncer(
    InMemoryDebounceStore(settings.NOTIFY_DEBOUNCE_MAX_ENTRIES),
    window_seconds=settings.NOTIFY_DEBOUNCE_SECONDS,
    prune_interval_seconds=settings.NOTIFY_PRUNE_INTERVAL_SECONDS,
)


def get_debouncer() -> NotificationDebouncer:
    return debouncer
