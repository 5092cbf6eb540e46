from __future__ import annotations

from enum import StrEnum


class Scope(StrEnum):
    USER = "user"
    WORKSPACE = "workspace"


class EditLayer(StrEnum):
    STANDARD = "standard"
    LANGUAGE = "language"


class SelectorKind(StrEnum):
    SEMANTIC = "semantic"
    TEXTMATE = "textmate"


class TriState(StrEnum):
    """A boolean setting that may also be left unset at a layer."""

    INHERIT = "inherit"
    ON = "on"
    OFF = "off"

    @classmethod
    def from_value(cls, value: object) -> TriState:
        if value is True:
            return cls.ON
        if value is False:
            return cls.OFF
        return cls.INHERIT

    def to_value(self) -> bool | None:
        if self is TriState.ON:
            return True
        if self is TriState.OFF:
            return False
        return None
