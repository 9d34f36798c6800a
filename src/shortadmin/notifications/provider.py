"""Scoped access to a notification store."""

from __future__ import annotations

from contextvars import ContextVar
from typing import Optional, Tuple

from shortadmin.notifications.store import NotificationStore

# Stack of active providers for the current thread or task; innermost is last.
_active: ContextVar[Tuple[NotificationStore, ...]] = ContextVar("notifications_providers", default=())


class NotificationsContextError(RuntimeError):
    """Raised when the store is requested outside a provider."""


class NotificationsProvider:
    """
    Bind one store to the code running inside a ``with`` block.

    Entering activates (hydrates) the store. Providers nest and the innermost
    one wins. Each asyncio task sees only the providers it opened itself.
    """

    def __init__(self, store: NotificationStore) -> None:
        self.store = store

    def __enter__(self) -> NotificationStore:
        self.store.activate()
        _active.set(_active.get() + (self.store,))
        return self.store

    def __exit__(self, *exc_info) -> None:
        stack = _active.get()
        if stack and stack[-1] is self.store:
            _active.set(stack[:-1])
        elif self.store in stack:
            idx = len(stack) - 1 - stack[::-1].index(self.store)
            _active.set(stack[:idx] + stack[idx + 1:])


def reset_for_tests() -> None:
    """Drop any providers left open in this context."""
    _active.set(())


def current_store() -> Optional[NotificationStore]:
    stack = _active.get()
    return stack[-1] if stack else None


def use_notifications() -> NotificationStore:
    store = current_store()
    if store is None:
        raise NotificationsContextError(
            "use_notifications must be used within a NotificationsProvider"
        )
    return store
