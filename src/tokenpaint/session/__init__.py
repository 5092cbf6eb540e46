from tokenpaint.session.coordinator import StylingSession
from tokenpaint.session.machine import (
    Effect,
    SessionEvent,
    SessionPhase,
    SessionStatus,
    transition,
)
from tokenpaint.session.messages import Message, MessageType, parse_message
from tokenpaint.session.scheduler import ManualScheduler, Scheduler, ThreadingScheduler
from tokenpaint.session.selection import Selection, build_selector, split_scope_batch
from tokenpaint.session.union import build_union_rules
from tokenpaint.session.view import ViewState

__all__ = [
    "StylingSession",
    "Effect",
    "SessionEvent",
    "SessionPhase",
    "SessionStatus",
    "transition",
    "Message",
    "MessageType",
    "parse_message",
    "ManualScheduler",
    "Scheduler",
    "ThreadingScheduler",
    "Selection",
    "build_selector",
    "split_scope_batch",
    "build_union_rules",
    "ViewState",
]
