from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from tokenpaint.model.scope import Scope, TriState


@dataclass(frozen=True)
class Snapshot:
    """Pre-session value of one managed settings key at one scope.

    ``value`` is None when the key was absent from the layer. ``ledger``
    holds the managed selectors per theme key as they stood when the
    snapshot was taken.
    """

    setting_key: str
    scope: Scope
    taken_at: str  # ISO 8601
    value: Any = None
    ledger: dict[str, tuple[str, ...]] = field(default_factory=dict, hash=False)
    pending_rollback: bool = True


@dataclass(frozen=True)
class AuxiliarySnapshot:
    """Pre-session values of the font family and highlighting toggles."""

    scope: Scope
    language_id: str
    taken_at: str  # ISO 8601
    editor_semantic: TriState = TriState.INHERIT
    font_family: str | None = None
    language_semantic_exists: bool = False
    language_semantic: TriState = TriState.INHERIT
    language_override_semantic: TriState = TriState.INHERIT
    pending_rollback: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "scope": self.scope.value,
            "languageId": self.language_id,
            "takenAt": self.taken_at,
            "editorSemantic": self.editor_semantic.value,
            "fontFamily": self.font_family,
            "languageSemanticExists": self.language_semantic_exists,
            "languageSemantic": self.language_semantic.value,
            "languageOverrideSemantic": self.language_override_semantic.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], pending_rollback: bool = True) -> AuxiliarySnapshot:
        font_family = data.get("fontFamily")
        return cls(
            scope=Scope(data["scope"]),
            language_id=data.get("languageId", ""),
            taken_at=data.get("takenAt", ""),
            editor_semantic=TriState(data.get("editorSemantic", TriState.INHERIT.value)),
            font_family=font_family if isinstance(font_family, str) else None,
            language_semantic_exists=data.get("languageSemanticExists") is True,
            language_semantic=TriState(data.get("languageSemantic", TriState.INHERIT.value)),
            language_override_semantic=TriState(
                data.get("languageOverrideSemantic", TriState.INHERIT.value)
            ),
            pending_rollback=pending_rollback,
        )
