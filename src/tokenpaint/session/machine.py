"""Session lifecycle as a pure state machine.

``transition(status, event)`` returns the next status together with the
side effects the coordinator must perform, in order. Nothing here does
I/O, so the machine can be exercised on its own.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum

from tokenpaint.errors import InvalidTransitionError


class SessionPhase(StrEnum):
    CLOSED = "closed"
    CLEAN = "clean"
    DIRTY = "dirty"


class SessionEvent(StrEnum):
    OPEN = "open"
    EDIT = "edit"  # debounced write
    EDIT_NOW = "edit_now"  # written immediately by the caller
    DEBOUNCE_FIRED = "debounce_fired"
    APPLY_FINISHED = "apply_finished"
    ROLLBACK = "rollback"
    RETARGET = "retarget"
    SAVE = "save"
    RESTORE = "restore"
    CLOSE = "close"


class Effect(StrEnum):
    TAKE_SNAPSHOT = "take_snapshot"
    ARM_DEBOUNCE = "arm_debounce"
    CANCEL_DEBOUNCE = "cancel_debounce"
    RUN_APPLY = "run_apply"
    RESTORE_SNAPSHOT = "restore_snapshot"
    PERSIST = "persist"
    APPLY_SAVED = "apply_saved"
    CLEAR_ROLLBACK = "clear_rollback"
    RELOAD_DRAFTS = "reload_drafts"


@dataclass(frozen=True)
class SessionStatus:
    phase: SessionPhase = SessionPhase.CLOSED
    snapshot_taken: bool = False
    apply_pending: bool = False
    apply_in_flight: bool = False

    @property
    def dirty(self) -> bool:
        return self.phase is SessionPhase.DIRTY

    @property
    def is_open(self) -> bool:
        return self.phase is not SessionPhase.CLOSED


CLOSED = SessionStatus()
CLEAN = SessionStatus(phase=SessionPhase.CLEAN)

# events that are harmless after close (late timers, repeated close)
_IGNORED_WHEN_CLOSED = {
    SessionEvent.DEBOUNCE_FIRED,
    SessionEvent.APPLY_FINISHED,
    SessionEvent.CLOSE,
}


def _snapshot_effects(status: SessionStatus) -> list[Effect]:
    return [] if status.snapshot_taken else [Effect.TAKE_SNAPSHOT]


def transition(
    status: SessionStatus, event: SessionEvent
) -> tuple[SessionStatus, tuple[Effect, ...]]:
    """Compute the next status and the effects to perform for an event."""
    if status.phase is SessionPhase.CLOSED:
        if event is SessionEvent.OPEN:
            return CLEAN, ()
        if event in _IGNORED_WHEN_CLOSED:
            return status, ()
        raise InvalidTransitionError(
            f"Cannot handle {event.value} on a closed session",
            phase=status.phase.value, event=event.value,
        )

    if event is SessionEvent.OPEN:
        raise InvalidTransitionError(
            "Session is already open", phase=status.phase.value, event=event.value
        )

    if event is SessionEvent.EDIT:
        effects = _snapshot_effects(status) + [Effect.ARM_DEBOUNCE]
        return (
            replace(status, phase=SessionPhase.DIRTY, snapshot_taken=True, apply_pending=True),
            tuple(effects),
        )

    if event is SessionEvent.EDIT_NOW:
        effects = _snapshot_effects(status)
        return replace(status, phase=SessionPhase.DIRTY, snapshot_taken=True), tuple(effects)

    if event is SessionEvent.DEBOUNCE_FIRED:
        # an apply already running picks the pending state up when it finishes
        if status.apply_in_flight or not status.apply_pending:
            return status, ()
        return replace(status, apply_pending=False, apply_in_flight=True), (Effect.RUN_APPLY,)

    if event is SessionEvent.APPLY_FINISHED:
        finished = replace(status, apply_in_flight=False)
        if finished.apply_pending:
            return finished, (Effect.ARM_DEBOUNCE,)
        return finished, ()

    if event is SessionEvent.ROLLBACK:
        if not status.snapshot_taken:
            return CLEAN, (Effect.CANCEL_DEBOUNCE,)
        return CLEAN, (Effect.CANCEL_DEBOUNCE, Effect.RESTORE_SNAPSHOT)

    if event is SessionEvent.RETARGET:
        effects = [Effect.CANCEL_DEBOUNCE] + _snapshot_effects(status) + [Effect.RUN_APPLY]
        return (
            SessionStatus(
                phase=SessionPhase.DIRTY,
                snapshot_taken=True,
                apply_pending=False,
                apply_in_flight=True,
            ),
            tuple(effects),
        )

    if event is SessionEvent.SAVE:
        return CLEAN, (
            Effect.CANCEL_DEBOUNCE,
            Effect.PERSIST,
            Effect.APPLY_SAVED,
            Effect.CLEAR_ROLLBACK,
        )

    if event is SessionEvent.RESTORE:
        effects = [Effect.CANCEL_DEBOUNCE, Effect.RELOAD_DRAFTS]
        if status.snapshot_taken:
            effects.append(Effect.RESTORE_SNAPSHOT)
        effects.append(Effect.APPLY_SAVED)
        return CLEAN, tuple(effects)

    if event is SessionEvent.CLOSE:
        if status.snapshot_taken:
            return CLOSED, (Effect.CANCEL_DEBOUNCE, Effect.RESTORE_SNAPSHOT)
        return CLOSED, (Effect.CANCEL_DEBOUNCE,)

    raise InvalidTransitionError(
        f"Unknown event {event}", phase=status.phase.value, event=str(event)
    )
