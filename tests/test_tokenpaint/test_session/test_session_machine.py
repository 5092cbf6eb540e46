from __future__ import annotations

import pytest

from tokenpaint.errors import InvalidTransitionError
from tokenpaint.session.machine import (
    CLEAN,
    CLOSED,
    Effect,
    SessionEvent,
    SessionPhase,
    SessionStatus,
    transition,
)


def _run(events: list[SessionEvent], status: SessionStatus = CLOSED) -> tuple[SessionStatus, list]:
    """Feed events through the machine, collecting every effect."""
    effects: list[Effect] = []
    for event in events:
        status, produced = transition(status, event)
        effects.extend(produced)
    return status, effects


class TestClosedPhase:
    def test_open(self) -> None:
        status, effects = transition(CLOSED, SessionEvent.OPEN)
        assert status == CLEAN
        assert effects == ()

    @pytest.mark.parametrize("event", [
        SessionEvent.DEBOUNCE_FIRED,
        SessionEvent.APPLY_FINISHED,
        SessionEvent.CLOSE,
    ])
    def test_late_events_are_ignored(self, event: SessionEvent) -> None:
        assert transition(CLOSED, event) == (CLOSED, ())

    @pytest.mark.parametrize("event", [
        SessionEvent.EDIT,
        SessionEvent.EDIT_NOW,
        SessionEvent.SAVE,
        SessionEvent.RESTORE,
        SessionEvent.ROLLBACK,
        SessionEvent.RETARGET,
    ])
    def test_edits_rejected(self, event: SessionEvent) -> None:
        with pytest.raises(InvalidTransitionError) as excinfo:
            transition(CLOSED, event)
        assert excinfo.value.phase == "closed"
        assert excinfo.value.event == event.value

    def test_double_open_rejected(self) -> None:
        with pytest.raises(InvalidTransitionError):
            transition(CLEAN, SessionEvent.OPEN)


class TestEditing:
    def test_first_edit_takes_snapshot(self) -> None:
        status, effects = transition(CLEAN, SessionEvent.EDIT)
        assert status.phase is SessionPhase.DIRTY
        assert status.snapshot_taken
        assert effects == (Effect.TAKE_SNAPSHOT, Effect.ARM_DEBOUNCE)

    def test_later_edits_only_rearm(self) -> None:
        status, _ = transition(CLEAN, SessionEvent.EDIT)
        _, effects = transition(status, SessionEvent.EDIT)
        assert effects == (Effect.ARM_DEBOUNCE,)

    def test_edit_now_snapshots_without_debounce(self) -> None:
        status, effects = transition(CLEAN, SessionEvent.EDIT_NOW)
        assert status.dirty
        assert effects == (Effect.TAKE_SNAPSHOT,)

    def test_debounce_runs_apply(self) -> None:
        status, effects = _run([SessionEvent.EDIT, SessionEvent.DEBOUNCE_FIRED], CLEAN)
        assert effects[-1] is Effect.RUN_APPLY
        assert status.apply_in_flight
        assert not status.apply_pending

    def test_debounce_without_pending_is_noop(self) -> None:
        assert transition(CLEAN, SessionEvent.DEBOUNCE_FIRED) == (CLEAN, ())

    def test_edits_during_apply_rearm_after_finish(self) -> None:
        status, _ = _run([SessionEvent.EDIT, SessionEvent.DEBOUNCE_FIRED], CLEAN)
        status, _ = transition(status, SessionEvent.EDIT)
        # a second timer firing while the apply runs does not start another
        status, effects = transition(status, SessionEvent.DEBOUNCE_FIRED)
        assert effects == ()
        status, effects = transition(status, SessionEvent.APPLY_FINISHED)
        assert effects == (Effect.ARM_DEBOUNCE,)
        assert not status.apply_in_flight
        status, effects = transition(status, SessionEvent.DEBOUNCE_FIRED)
        assert effects == (Effect.RUN_APPLY,)

    def test_apply_finished_with_nothing_pending(self) -> None:
        status, _ = _run([SessionEvent.EDIT, SessionEvent.DEBOUNCE_FIRED], CLEAN)
        status, effects = transition(status, SessionEvent.APPLY_FINISHED)
        assert effects == ()
        assert status.dirty


class TestLeavingDirty:
    def test_save(self) -> None:
        status, effects = _run([SessionEvent.EDIT, SessionEvent.SAVE], CLEAN)
        assert status == CLEAN
        assert effects[-4:] == [
            Effect.CANCEL_DEBOUNCE,
            Effect.PERSIST,
            Effect.APPLY_SAVED,
            Effect.CLEAR_ROLLBACK,
        ]

    def test_restore_after_edit(self) -> None:
        status, effects = _run([SessionEvent.EDIT, SessionEvent.RESTORE], CLEAN)
        assert status == CLEAN
        assert effects[-4:] == [
            Effect.CANCEL_DEBOUNCE,
            Effect.RELOAD_DRAFTS,
            Effect.RESTORE_SNAPSHOT,
            Effect.APPLY_SAVED,
        ]

    def test_restore_when_clean_skips_rollback(self) -> None:
        _, effects = transition(CLEAN, SessionEvent.RESTORE)
        assert Effect.RESTORE_SNAPSHOT not in effects
        assert Effect.APPLY_SAVED in effects

    def test_close_dirty_rolls_back(self) -> None:
        status, effects = _run([SessionEvent.EDIT, SessionEvent.CLOSE], CLEAN)
        assert status == CLOSED
        assert effects[-2:] == [Effect.CANCEL_DEBOUNCE, Effect.RESTORE_SNAPSHOT]

    def test_close_clean_does_not_roll_back(self) -> None:
        _, effects = _run([SessionEvent.EDIT, SessionEvent.SAVE, SessionEvent.CLOSE], CLEAN)
        assert effects[-1] is Effect.CANCEL_DEBOUNCE
        assert effects.count(Effect.RESTORE_SNAPSHOT) == 0

    def test_rollback(self) -> None:
        status, effects = _run([SessionEvent.EDIT, SessionEvent.ROLLBACK], CLEAN)
        assert status == CLEAN
        assert effects[-1] is Effect.RESTORE_SNAPSHOT

    def test_retarget_snapshots_and_applies(self) -> None:
        status, effects = _run([SessionEvent.EDIT, SessionEvent.ROLLBACK, SessionEvent.RETARGET], CLEAN)
        assert status.dirty
        assert effects[-3:] == [Effect.CANCEL_DEBOUNCE, Effect.TAKE_SNAPSHOT, Effect.RUN_APPLY]


class TestDirtyInvariant:
    @pytest.mark.parametrize("events", [
        [SessionEvent.EDIT],
        [SessionEvent.EDIT_NOW, SessionEvent.EDIT],
        [SessionEvent.EDIT, SessionEvent.DEBOUNCE_FIRED, SessionEvent.APPLY_FINISHED],
        [SessionEvent.EDIT, SessionEvent.SAVE, SessionEvent.EDIT],
        [SessionEvent.EDIT, SessionEvent.ROLLBACK, SessionEvent.RETARGET],
        [SessionEvent.EDIT, SessionEvent.RESTORE],
        [SessionEvent.SAVE],
    ])
    def test_dirty_implies_snapshot(self, events: list[SessionEvent]) -> None:
        status = CLEAN
        for event in events:
            status, _ = transition(status, event)
            if status.dirty:
                assert status.snapshot_taken

    def test_snapshot_taken_once_per_dirty_period(self) -> None:
        _, effects = _run(
            [SessionEvent.EDIT, SessionEvent.EDIT_NOW, SessionEvent.EDIT, SessionEvent.DEBOUNCE_FIRED],
            CLEAN,
        )
        assert effects.count(Effect.TAKE_SNAPSHOT) == 1
