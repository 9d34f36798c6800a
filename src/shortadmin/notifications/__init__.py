"""Notification management core."""

from shortadmin.notifications.models import Notification, format_time  # noqa: F401
from shortadmin.notifications.persistence import (  # noqa: F401
    NotificationPersistence,
    SaveResult,
    storage_key_for,
)
from shortadmin.notifications.provider import (  # noqa: F401
    NotificationsContextError,
    NotificationsProvider,
    use_notifications,
)
from shortadmin.notifications.store import NotificationStore  # noqa: F401

__all__ = [
    "Notification",
    "NotificationPersistence",
    "NotificationStore",
    "NotificationsContextError",
    "NotificationsProvider",
    "SaveResult",
    "format_time",
    "storage_key_for",
    "use_notifications",
]
