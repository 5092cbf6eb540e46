"""Debounce timers behind an arm/cancel interface."""
from __future__ import annotations

import threading
from typing import Callable, Protocol


class Scheduler(Protocol):
    def arm(self, key: str, delay: float, callback: Callable[[], None]) -> None:
        """(Re)start the timer for ``key``; a pending timer for the same key is replaced."""
        ...

    def cancel(self, key: str) -> None: ...

    def cancel_all(self) -> None: ...


class ThreadingScheduler:
    """Runs callbacks on ``threading.Timer`` threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._timers: dict[str, threading.Timer] = {}

    def arm(self, key: str, delay: float, callback: Callable[[], None]) -> None:
        def fire() -> None:
            with self._lock:
                if self._timers.get(key) is not timer:
                    return
                del self._timers[key]
            callback()

        timer = threading.Timer(delay, fire)
        timer.daemon = True
        with self._lock:
            previous = self._timers.pop(key, None)
            self._timers[key] = timer
        if previous is not None:
            previous.cancel()
        timer.start()

    def cancel(self, key: str) -> None:
        with self._lock:
            timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()

    def cancel_all(self) -> None:
        with self._lock:
            timers, self._timers = list(self._timers.values()), {}
        for timer in timers:
            timer.cancel()


class ManualScheduler:
    """Virtual-time scheduler; nothing fires until time is advanced."""

    def __init__(self) -> None:
        self.now = 0.0
        self._armed: dict[str, tuple[float, Callable[[], None]]] = {}
        self.fired: list[str] = []

    def arm(self, key: str, delay: float, callback: Callable[[], None]) -> None:
        self._armed[key] = (self.now + delay, callback)

    def cancel(self, key: str) -> None:
        self._armed.pop(key, None)

    def cancel_all(self) -> None:
        self._armed.clear()

    def is_armed(self, key: str) -> bool:
        return key in self._armed

    def advance(self, seconds: float) -> int:
        """Move time forward, firing every timer that comes due. Returns the number fired."""
        target = self.now + seconds
        count = 0
        while True:
            due = [(at, key) for key, (at, _) in self._armed.items() if at <= target]
            if not due:
                break
            at, key = min(due)
            _, callback = self._armed.pop(key)
            self.now = max(self.now, at)
            self.fired.append(key)
            callback()
            count += 1
        self.now = target
        return count

    def fire_all(self) -> int:
        """Fire every armed timer, including ones armed while firing."""
        count = 0
        while self._armed:
            key = next(iter(self._armed))
            at, callback = self._armed.pop(key)
            self.now = max(self.now, at)
            self.fired.append(key)
            callback()
            count += 1
        return count
