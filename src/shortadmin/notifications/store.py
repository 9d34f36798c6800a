"""
In-process notification store.

Every mutation is a pure transform over the previous collection. Transforms
issued inside one ``batch()`` are folded left to right, each seeing the
result of the one before, and the collection is persisted once when the
batch closes.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, Optional, Tuple, Any

from shortadmin.notifications.models import Notification, format_time, now_ms
from shortadmin.notifications.persistence import NotificationPersistence

logger = logging.getLogger(__name__)

MAX_NOTIFICATIONS = 100
MAX_VISIBLE_NOTIFICATIONS = 4

Collection = Tuple[Notification, ...]
Transform = Callable[[Collection], Collection]


def cap(collection: Collection, limit: int) -> Collection:
    """Drop the oldest (tail) entries beyond ``limit``."""
    return collection if len(collection) <= limit else collection[:limit]


def prepend(notification: Notification, limit: int = MAX_NOTIFICATIONS) -> Transform:
    return lambda prev: cap((notification,) + prev, limit)


def mark_read(notification_id: str) -> Transform:
    def _apply(prev: Collection) -> Collection:
        return tuple(n.mark_read() if n.id == notification_id else n for n in prev)

    return _apply


def mark_all_read() -> Transform:
    return lambda prev: tuple(n.mark_read() for n in prev)


def remove(notification_id: str) -> Transform:
    return lambda prev: tuple(n for n in prev if n.id != notification_id)


def clear() -> Transform:
    return lambda prev: ()


def relabel(now: int) -> Transform:
    return lambda prev: tuple(n.with_time(format_time(n.timestamp, now)) for n in prev)


class NotificationStore:
    """Bounded, newest-first notification collection with best-effort persistence."""

    def __init__(
        self,
        persistence: NotificationPersistence,
        max_notifications: int = MAX_NOTIFICATIONS,
        max_visible: int = MAX_VISIBLE_NOTIFICATIONS,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self.persistence = persistence
        self.max_notifications = max_notifications
        self.max_visible = max_visible
        self._clock = clock or now_ms
        self._notifications: Collection = ()
        self._lock = threading.RLock()
        self._is_loading = True
        self._activated = False
        self._batch_depth = 0
        self._dirty = False

    # -- lifecycle ---------------------------------------------------------

    def activate(self) -> None:
        """Hydrate from persistence once; later calls are no-ops."""
        with self._lock:
            if self._activated:
                return
            self._is_loading = True
            try:
                loaded = self.persistence.load()
                self._notifications = cap(tuple(loaded), self.max_notifications)
            finally:
                self._is_loading = False
                self._activated = True
            logger.debug("notifications hydrated (count=%s)", len(self._notifications))

    # -- derived state -----------------------------------------------------

    @property
    def notifications(self) -> Collection:
        return self._notifications

    @property
    def visible_notifications(self) -> Collection:
        return self._notifications[: self.max_visible]

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._notifications if not n.read)

    @property
    def has_more_notifications(self) -> bool:
        return len(self._notifications) > self.max_visible

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    def snapshot(self) -> Dict[str, Any]:
        """JSON-ready view of the collection and its derived values."""
        with self._lock:
            items = self._notifications
            return {
                "notifications": [n.to_dict() for n in items],
                "visible": [n.to_dict() for n in items[: self.max_visible]],
                "unread_count": sum(1 for n in items if not n.read),
                "has_more": len(items) > self.max_visible,
                "is_loading": self._is_loading,
            }

    # -- mutations ---------------------------------------------------------

    def add_notification(self, title: str, message: str) -> str:
        notification = Notification.create(title, message, self._clock())
        self.apply(prepend(notification, self.max_notifications))
        return notification.id

    def mark_as_read(self, notification_id: str) -> None:
        self.apply(mark_read(notification_id))

    def mark_all_as_read(self) -> None:
        self.apply(mark_all_read())

    def remove_notification(self, notification_id: str) -> None:
        self.apply(remove(notification_id))

    def clear_all_notifications(self) -> None:
        self.apply(clear())

    def refresh_time_labels(self) -> None:
        """Re-derive every ``time`` label from its timestamp."""
        self.apply(relabel(self._clock()))

    def apply(self, *transforms: Transform) -> None:
        """Fold ``transforms`` over the current collection, then persist."""
        with self._lock:
            for transform in transforms:
                self._notifications = transform(self._notifications)
            self._commit()

    @contextmanager
    def batch(self) -> Iterator["NotificationStore"]:
        """Group mutations so the collection is persisted once on exit."""
        with self._lock:
            self._batch_depth += 1
            try:
                yield self
            finally:
                self._batch_depth -= 1
                if self._batch_depth == 0 and self._dirty:
                    self._dirty = False
                    self._save()

    def _commit(self) -> None:
        if self._batch_depth:
            self._dirty = True
        else:
            self._save()

    def _save(self) -> None:
        # Nothing is written until hydration has replaced the initial empty collection.
        if self._is_loading:
            return
        result = self.persistence.save(self._notifications)
        if not result.ok:
            logger.debug("notification save discarded; keeping in-memory state (error=%s)", result.error)
