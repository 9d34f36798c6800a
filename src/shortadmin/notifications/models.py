"""Notification value object and relative time labels."""

from __future__ import annotations

import itertools
import math
import time
import uuid
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

JUST_NOW = "Just now"

_MINUTE_MS = 60 * 1000
_HOUR_MS = 60 * _MINUTE_MS
_DAY_MS = 24 * _HOUR_MS

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
# Range a datetime can represent, in epoch ms.
MIN_TIMESTAMP = -62_135_596_800_000  # 0001-01-01T00:00:00Z
MAX_TIMESTAMP = 253_402_300_799_999  # 9999-12-31T23:59:59.999Z
UNKNOWN_DATE = "Unknown date"

_id_counter = itertools.count(1)


def now_ms() -> int:
    return int(time.time() * 1000)


def generate_id(timestamp: int) -> str:
    """Return a process-unique id whose prefix sorts by creation time."""
    return f"notification_{timestamp}_{next(_id_counter)}_{uuid.uuid4().hex[:9]}"


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def format_time(timestamp: int, now: int) -> str:
    """Human relative label for ``timestamp`` as seen at ``now`` (both epoch ms)."""
    diff = now - timestamp
    minutes = diff // _MINUTE_MS
    hours = diff // _HOUR_MS
    days = diff // _DAY_MS

    if minutes < 1:
        return JUST_NOW
    if minutes < 60:
        return _plural(minutes, "minute")
    if hours < 24:
        return _plural(hours, "hour")
    if days < 7:
        return _plural(days, "day")
    try:
        return (_EPOCH + timedelta(milliseconds=timestamp)).date().isoformat()
    except OverflowError:
        return UNKNOWN_DATE


@dataclass(frozen=True)
class Notification:
    id: str
    title: str
    message: str
    time: str
    timestamp: int
    read: bool = False

    @classmethod
    def create(cls, title: str, message: str, timestamp: int) -> "Notification":
        return cls(
            id=generate_id(timestamp),
            title=title,
            message=message,
            time=JUST_NOW,
            timestamp=timestamp,
            read=False,
        )

    def mark_read(self) -> "Notification":
        return self if self.read else replace(self, read=True)

    def with_time(self, label: str) -> "Notification":
        return self if label == self.time else replace(self, time=label)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> "Notification":
        """Build from a decoded JSON object; raise ValueError on any shape mismatch."""
        if not isinstance(data, dict):
            raise ValueError(f"expected object, got {type(data).__name__}")
        for key in ("id", "title", "message", "time"):
            if not isinstance(data.get(key), str):
                raise ValueError(f"field {key!r} must be a string")
        timestamp = data.get("timestamp")
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise ValueError("field 'timestamp' must be a number")
        if isinstance(timestamp, float) and not math.isfinite(timestamp):
            raise ValueError(f"field 'timestamp' must be finite: {timestamp!r}")
        if not MIN_TIMESTAMP <= timestamp <= MAX_TIMESTAMP:
            raise ValueError(f"field 'timestamp' out of range: {timestamp!r}")
        read = data.get("read", False)
        if not isinstance(read, bool):
            raise ValueError("field 'read' must be a boolean")
        return cls(
            id=data["id"],
            title=data["title"],
            message=data["message"],
            time=data["time"],
            timestamp=int(timestamp),
            read=read,
        )
