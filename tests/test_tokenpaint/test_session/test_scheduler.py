from __future__ import annotations

import threading

from tokenpaint.session.scheduler import ManualScheduler, ThreadingScheduler


class TestManualScheduler:
    def test_nothing_fires_before_due(self) -> None:
        scheduler = ManualScheduler()
        calls: list[str] = []
        scheduler.arm("apply", 0.15, lambda: calls.append("apply"))
        assert scheduler.advance(0.1) == 0
        assert calls == []
        assert scheduler.is_armed("apply")

    def test_fires_when_due(self) -> None:
        scheduler = ManualScheduler()
        calls: list[str] = []
        scheduler.arm("apply", 0.15, lambda: calls.append("apply"))
        assert scheduler.advance(0.2) == 1
        assert calls == ["apply"]
        assert not scheduler.is_armed("apply")

    def test_rearm_replaces_pending_timer(self) -> None:
        scheduler = ManualScheduler()
        calls: list[str] = []
        scheduler.arm("apply", 0.15, lambda: calls.append("first"))
        scheduler.advance(0.1)
        scheduler.arm("apply", 0.15, lambda: calls.append("second"))
        scheduler.advance(0.1)
        assert calls == []
        scheduler.advance(0.1)
        assert calls == ["second"]

    def test_cancel(self) -> None:
        scheduler = ManualScheduler()
        calls: list[str] = []
        scheduler.arm("apply", 0.15, lambda: calls.append("apply"))
        scheduler.cancel("apply")
        scheduler.cancel("unknown")
        assert scheduler.advance(1) == 0

    def test_timers_armed_while_firing(self) -> None:
        scheduler = ManualScheduler()
        calls: list[str] = []

        def first() -> None:
            calls.append("first")
            scheduler.arm("again", 0.1, lambda: calls.append("again"))

        scheduler.arm("apply", 0.1, first)
        assert scheduler.advance(0.5) == 2
        assert calls == ["first", "again"]
        assert scheduler.fired == ["apply", "again"]

    def test_fire_all(self) -> None:
        scheduler = ManualScheduler()
        calls: list[str] = []
        scheduler.arm("a", 10, lambda: calls.append("a"))
        scheduler.arm("b", 20, lambda: calls.append("b"))
        assert scheduler.fire_all() == 2
        assert sorted(calls) == ["a", "b"]

    def test_cancel_all(self) -> None:
        scheduler = ManualScheduler()
        scheduler.arm("a", 0.1, lambda: None)
        scheduler.arm("b", 0.2, lambda: None)
        scheduler.cancel_all()
        assert not scheduler.is_armed("a")
        assert scheduler.advance(1) == 0


class TestThreadingScheduler:
    def test_fires_callback(self) -> None:
        scheduler = ThreadingScheduler()
        done = threading.Event()
        scheduler.arm("apply", 0.01, done.set)
        assert done.wait(2)

    def test_rearm_runs_only_latest(self) -> None:
        scheduler = ThreadingScheduler()
        calls: list[str] = []
        done = threading.Event()

        def second() -> None:
            calls.append("second")
            done.set()

        scheduler.arm("apply", 0.5, lambda: calls.append("first"))
        scheduler.arm("apply", 0.01, second)
        assert done.wait(2)
        scheduler.cancel_all()
        assert calls == ["second"]

    def test_cancel(self) -> None:
        scheduler = ThreadingScheduler()
        fired = threading.Event()
        scheduler.arm("apply", 0.05, fired.set)
        scheduler.cancel("apply")
        assert not fired.wait(0.2)

    def test_cancel_all(self) -> None:
        scheduler = ThreadingScheduler()
        fired = threading.Event()
        scheduler.arm("a", 0.05, fired.set)
        scheduler.arm("b", 0.05, fired.set)
        scheduler.cancel_all()
        assert not fired.wait(0.2)
