from tokenpaint.events.bus import EventBus, NotificationInbox
from tokenpaint.events.types import (
    Notification,
    NotificationLevel,
    PresetSaved,
    PreviewApplied,
    RecoveryCompleted,
    RollbackCompleted,
    SessionClosed,
    SessionOpened,
)

__all__ = [
    "EventBus",
    "NotificationInbox",
    "Notification",
    "NotificationLevel",
    "PresetSaved",
    "PreviewApplied",
    "RecoveryCompleted",
    "RollbackCompleted",
    "SessionClosed",
    "SessionOpened",
]
