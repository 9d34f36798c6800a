from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class ShortadminConfig:
    env: str
    test_mode: bool
    db_path: str
    notifications_key: str
    user_id: Optional[str]
    max_notifications: int
    max_visible: int
    storage_quota_bytes: Optional[int]
    log_level: str


def _optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


def load_config() -> ShortadminConfig:
    """Load configuration from environment at call time (runtime-safe)."""
    env = os.getenv("SHORTADMIN_ENV", "dev")
    test_mode = os.getenv("SHORTADMIN_TEST_MODE", "0") == "1"
    default_db = Path(__file__).resolve().parent.parent.parent / "data" / "shortadmin.db"
    db_path = os.path.abspath(os.getenv("SHORTADMIN_DB_PATH", str(default_db)))
    notifications_key = os.getenv("SHORTADMIN_NOTIFICATIONS_KEY", "notifications")
    user_id = os.getenv("SHORTADMIN_USER_ID") or None
    max_notifications = int(os.getenv("SHORTADMIN_MAX_NOTIFICATIONS", "100"))
    max_visible = int(os.getenv("SHORTADMIN_MAX_VISIBLE", "4"))
    storage_quota_bytes = _optional_int("SHORTADMIN_STORAGE_QUOTA_BYTES")
    log_level = os.getenv("SHORTADMIN_LOG_LEVEL", "INFO").upper()

    return ShortadminConfig(
        env=env,
        test_mode=test_mode,
        db_path=db_path,
        notifications_key=notifications_key,
        user_id=user_id,
        max_notifications=max_notifications,
        max_visible=max_visible,
        storage_quota_bytes=storage_quota_bytes,
        log_level=log_level,
    )


def is_test_mode() -> bool:
    """Helper for callers that only need the test flag."""
    return load_config().test_mode
