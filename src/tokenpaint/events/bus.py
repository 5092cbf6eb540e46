"""Simple synchronous event bus for session lifecycle and notifications."""

from __future__ import annotations

import threading
from typing import Any, Callable

from tokenpaint.events.types import Notification


class EventBus:
    """Synchronous publish-subscribe event bus.

    Listeners can subscribe to specific event types or receive all events.
    Events are dispatched synchronously in registration order.
    """

    def __init__(self) -> None:
        self._listeners: dict[type, list[Callable]] = {}
        self._global_listeners: list[Callable] = []

    def subscribe(self, event_type: type, callback: Callable) -> None:
        """Register a callback for a specific event type."""
        self._listeners.setdefault(event_type, []).append(callback)

    def on_all(self, callback: Callable) -> None:
        """Register a callback that receives every event."""
        self._global_listeners.append(callback)

    def emit(self, event: Any) -> None:
        """Dispatch an event to all matching listeners."""
        for cb in self._global_listeners:
            cb(event)
        for cb in self._listeners.get(type(event), []):
            cb(event)


class NotificationInbox:
    """Collects notifications until the front end drains them."""

    def __init__(self, bus: EventBus | None = None) -> None:
        self._lock = threading.Lock()
        self._pending: list[Notification] = []
        if bus is not None:
            bus.subscribe(Notification, self.add)

    def add(self, notification: Notification) -> None:
        with self._lock:
            self._pending.append(notification)

    def drain(self) -> list[Notification]:
        with self._lock:
            pending, self._pending = self._pending, []
        return pending
