from __future__ import annotations

from dataclasses import dataclass
from typing import Any

_FLAGS = ("bold", "italic", "underline")


@dataclass(frozen=True)
class Style:
    """A foreground colour plus bold/italic/underline flags.

    A style with no field set is empty and stands for "no rule".
    """

    foreground: str | None = None
    bold: bool = False
    italic: bool = False
    underline: bool = False

    def __post_init__(self) -> None:
        foreground = self.foreground.strip() if isinstance(self.foreground, str) else None
        object.__setattr__(self, "foreground", foreground or None)
        for flag in _FLAGS:
            object.__setattr__(self, flag, getattr(self, flag) is True)

    @property
    def is_empty(self) -> bool:
        return self.foreground is None and not self.has_flags

    @property
    def has_flags(self) -> bool:
        return self.bold or self.italic or self.underline

    @property
    def flags(self) -> tuple[str, ...]:
        """Set flag names in canonical order."""
        return tuple(flag for flag in _FLAGS if getattr(self, flag))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.foreground is not None:
            data["foreground"] = self.foreground
        for flag in self.flags:
            data[flag] = True
        return data

    @classmethod
    def from_dict(cls, data: Any) -> Style | None:
        """Build a style from stored data, returning None for empty or malformed input."""
        if not isinstance(data, dict):
            return None
        foreground = data.get("foreground")
        style = cls(
            foreground=foreground if isinstance(foreground, str) else None,
            bold=data.get("bold") is True,
            italic=data.get("italic") is True,
            underline=data.get("underline") is True,
        )
        return None if style.is_empty else style
