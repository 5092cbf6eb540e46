from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable

from tokenpaint.model.scope import SelectorKind

_BATCH_SPLIT = re.compile(r"[,\n\r]+")


def build_selector(token_type: str | None, modifiers: Iterable[str]) -> str | None:
    if not token_type:
        return None
    return ".".join([token_type, *modifiers])


def normalize_modifiers(modifiers: Iterable[object]) -> list[str]:
    """Trimmed, de-duplicated and sorted modifier names."""
    return sorted({m.strip() for m in modifiers if isinstance(m, str) and m.strip()})


def split_scope_batch(text: str) -> list[str]:
    """Split a comma/newline separated list of scopes."""
    return [part.strip() for part in _BATCH_SPLIT.split(text) if part.strip()]


@dataclass
class Selection:
    """What the user is currently pointing at in the editor surface."""

    token_type: str | None = None
    modifiers: list[str] = field(default_factory=list)
    use_custom: bool = False
    custom_kind: SelectorKind = SelectorKind.SEMANTIC
    custom_text: str = ""

    @property
    def textmate_mode(self) -> bool:
        return self.use_custom and self.custom_kind is SelectorKind.TEXTMATE

    @property
    def kind(self) -> SelectorKind:
        return SelectorKind.TEXTMATE if self.textmate_mode else SelectorKind.SEMANTIC

    def reset(self) -> None:
        self.token_type = None
        self.modifiers = []

    def resolve(self, token_types: list[str], modifiers: list[str]) -> None:
        """Fall back to valid values after the vocabulary changed."""
        if self.token_type not in token_types:
            self.token_type = token_types[0] if token_types else None
            self.modifiers = []
        self.modifiers = [m for m in self.modifiers if m in modifiers]

    def selector(self) -> str | None:
        """Selector the view displays; a scope batch shows its first scope."""
        custom = self.custom_text.strip()
        if self.use_custom and custom:
            if self.textmate_mode:
                parts = split_scope_batch(custom)
                return parts[0] if parts else custom
            return custom
        return build_selector(self.token_type, self.modifiers)

    def rule_keys(self, selector: str) -> list[str]:
        """Keys a style edit for ``selector`` lands on."""
        custom = self.custom_text.strip()
        key = custom if self.use_custom and custom else selector
        if self.textmate_mode:
            return split_scope_batch(key) or [key]
        return [key]
