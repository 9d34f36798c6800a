"""
Durable storage of the notification collection.

All storage faults stop here: ``load`` never raises and ``save`` returns a
``SaveResult`` instead of raising.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from shortadmin.notifications.models import Notification

logger = logging.getLogger(__name__)

DEFAULT_KEY = "notifications"

Reporter = Callable[[BaseException, Dict[str, Any]], None]


def storage_key_for(user_id: Optional[str], base: str = DEFAULT_KEY) -> str:
    """Per-user storage key; ``None`` keeps the shared default key."""
    if user_id is None or str(user_id) == "":
        return base
    return f"{base}_{user_id}"


def report(error: BaseException, context: Dict[str, Any]) -> None:
    """Default logging sink for persistence faults."""
    logger.warning(
        "notification storage %s failed (key=%s): %s",
        context.get("operation", "access"),
        context.get("key"),
        error,
        exc_info=(type(error), error, error.__traceback__),
    )


@dataclass
class SaveResult:
    """Outcome of a single write attempt."""

    ok: bool
    error: Optional[BaseException] = None

    @classmethod
    def success(cls) -> "SaveResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: BaseException) -> "SaveResult":
        return cls(ok=False, error=error)


class NotificationPersistence:
    """Reads and writes the serialized collection under one fixed key."""

    def __init__(self, kv: Any, key: str = DEFAULT_KEY, reporter: Reporter = report) -> None:
        self.kv = kv
        self.key = key
        self._reporter = reporter

    def load(self) -> List[Notification]:
        """Return the stored collection, or ``[]`` if absent or unreadable."""
        try:
            raw = self.kv.get_item(self.key)
        except Exception as exc:
            self._report(exc, "load")
            return []
        if raw is None:
            return []
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"expected array, got {type(data).__name__}")
            return [Notification.from_dict(item) for item in data]
        except (ValueError, TypeError, OverflowError, RecursionError) as exc:
            # json.JSONDecodeError is a ValueError; RecursionError on pathologically nested arrays
            self._report(exc, "load")
            return []

    def save(self, collection: Sequence[Notification]) -> SaveResult:
        """Write ``collection`` once; failures are reported and returned, never raised."""
        try:
            payload = json.dumps([n.to_dict() for n in collection], ensure_ascii=False)
            self.kv.set_item(self.key, payload)
        except Exception as exc:
            self._report(exc, "save")
            return SaveResult.failure(exc)
        return SaveResult.success()

    def _report(self, error: BaseException, operation: str) -> None:
        context = {"operation": operation, "key": self.key}
        try:
            self._reporter(error, context)
        except Exception:
            logger.exception("notification error reporter failed (key=%s)", self.key)
