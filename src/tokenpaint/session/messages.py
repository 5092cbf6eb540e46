"""Typed messages sent by the UI front end."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from tokenpaint.errors import MalformedMessageError


class MessageType(StrEnum):
    SET_SCOPE = "setScope"
    SET_LAYER = "setLayer"
    SELECT_LANGUAGE = "selectLanguage"
    SELECT_TOKEN_TYPE = "selectTokenType"
    SET_TOKEN_MODIFIERS = "setTokenModifiers"
    SET_CUSTOM_SELECTOR_ENABLED = "setCustomSelectorEnabled"
    SET_CUSTOM_SELECTOR_TYPE = "setCustomSelectorType"
    SET_CUSTOM_SELECTOR_TEXT = "setCustomSelectorText"
    SET_FONT_FAMILY = "setFontFamily"
    SET_TOKEN_STYLE = "setTokenStyle"
    ENABLE_SEMANTIC_HIGHLIGHTING = "enableSemanticHighlighting"
    SET_LANGUAGE_SEMANTIC_HIGHLIGHTING = "setLanguageSemanticHighlighting"
    SET_EDITOR_SEMANTIC_HIGHLIGHTING = "setEditorSemanticHighlighting"
    SAVE = "actionSaveCurrent"
    RESTORE = "actionRestoreCurrent"


@dataclass(frozen=True)
class Message:
    type: MessageType
    payload: dict[str, Any] = field(default_factory=dict)

    def get_str(self, name: str) -> str | None:
        value = self.payload.get(name)
        return value if isinstance(value, str) else None


def parse_message(data: Any) -> Message:
    """Validate the envelope of an inbound message.

    Payload fields are checked by the handler; a payload with the wrong
    field types is ignored there rather than rejected here.
    """
    if not isinstance(data, dict):
        raise MalformedMessageError("Message must be a JSON object")
    raw_type = data.get("type")
    if not isinstance(raw_type, str):
        raise MalformedMessageError("Message has no type")
    try:
        message_type = MessageType(raw_type)
    except ValueError as exc:
        raise MalformedMessageError(f"Unknown message type: {raw_type}", cause=exc) from exc
    payload = data.get("payload", {})
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise MalformedMessageError("Message payload must be an object")
    return Message(type=message_type, payload=payload)
