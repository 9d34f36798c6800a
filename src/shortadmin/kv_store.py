"""
Synchronous local key-value storage.

Plays the part browser local storage plays for the web console: string
keys, string values, one slot per key, optional per-value quota.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Optional

from shortadmin.db import TABLE_NAME, get_conn


class StorageQuotaError(Exception):
    def __init__(self, key: str, size: int, quota: int):
        super().__init__(f"StorageQuotaError(key={key}, size={size}, quota={quota})")
        self.key = key
        self.size = size
        self.quota = quota


def _check_quota(key: str, value: str, quota_bytes: Optional[int]) -> None:
    if quota_bytes is None:
        return
    size = len(value.encode("utf-8"))
    if size > quota_bytes:
        raise StorageQuotaError(key, size, quota_bytes)


class MemoryKeyValueStore:
    """Dict-backed store for tests and throwaway sessions."""

    def __init__(self, quota_bytes: Optional[int] = None) -> None:
        self.quota_bytes = quota_bytes
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        _check_quota(key, value, self.quota_bytes)
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class SQLiteKeyValueStore:
    """Key-value store persisted in a single SQLite table."""

    def __init__(self, db_path: str, quota_bytes: Optional[int] = None) -> None:
        self.db_path = db_path
        self.quota_bytes = quota_bytes

    def get_item(self, key: str) -> Optional[str]:
        with get_conn(self.db_path) as conn:
            row = conn.execute(
                f"SELECT value FROM {TABLE_NAME} WHERE key = ?",
                (key,),
            ).fetchone()
        if not row:
            return None
        return row["value"]

    def set_item(self, key: str, value: str) -> None:
        """Upsert ``value`` under ``key``."""
        _check_quota(key, value, self.quota_bytes)
        ts = datetime.now(timezone.utc).isoformat()
        with get_conn(self.db_path) as conn:
            conn.execute(
                f"""
                INSERT INTO {TABLE_NAME} (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                              updated_at = excluded.updated_at
                """,
                (key, value, ts),
            )
            conn.commit()

    def remove_item(self, key: str) -> None:
        with get_conn(self.db_path) as conn:
            conn.execute(f"DELETE FROM {TABLE_NAME} WHERE key = ?", (key,))
            conn.commit()
