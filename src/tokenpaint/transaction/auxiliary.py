"""Font family and semantic-highlighting toggles.

These settings are snapshotted and restored as one bag per scope,
alongside the two managed rule keys.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from tokenpaint.errors import SettingsWriteError
from tokenpaint.model.scope import Scope, TriState
from tokenpaint.model.snapshot import AuxiliarySnapshot
from tokenpaint.settings import keys
from tokenpaint.settings.document import (
    LayeredSettings,
    effective_value,
    is_declared,
    require_layer,
)
from tokenpaint.settings.keys import as_mapping
from tokenpaint.store.repositories import partition_for
from tokenpaint.store.state import DurableState


class AuxiliarySettings:
    def __init__(
        self,
        settings: LayeredSettings,
        state: DurableState,
        logger: logging.Logger | None = None,
    ) -> None:
        self._settings = settings
        self._state = state
        self._logger = logger or logging.getLogger("tokenpaint.transaction")

    def _partition(self, scope: Scope) -> str:
        return partition_for(scope, self._state.workspace_id)

    def _write(self, scope: Scope, key: str, value: Any) -> None:
        layer = require_layer(self._settings, scope)
        try:
            self._settings.write(layer, key, value)
        except SettingsWriteError:
            self._logger.error("Failed to write %s (scope=%s)", key, scope.value)
            raise

    def _override_block(self, scope: Scope, language_id: str) -> dict[str, Any]:
        layer = require_layer(self._settings, scope)
        return as_mapping(self._settings.read(layer, keys.language_override_key(language_id)))

    def _write_override_block(self, scope: Scope, language_id: str, block: dict[str, Any]) -> None:
        # an empty override block is removed rather than left as {}
        self._write(scope, keys.language_override_key(language_id), block or None)

    # --- font family ---

    def font_family(self, scope: Scope, language_id: str) -> str | None:
        value = self._override_block(scope, language_id).get(keys.FONT_FAMILY)
        return value if isinstance(value, str) else None

    def apply_font_family(self, scope: Scope, language_id: str, font_family: str | None) -> None:
        """Set or clear ``editor.fontFamily`` in one language's override block."""
        block = self._override_block(scope, language_id)
        family = (font_family or "").strip()
        if family:
            block[keys.FONT_FAMILY] = family
        else:
            block.pop(keys.FONT_FAMILY, None)
        self._write_override_block(scope, language_id, block)
        self._logger.debug("Font family for %s set to %r (scope=%s)", language_id, family, scope.value)

    # --- semantic highlighting toggles ---

    def semantic_highlighting_enabled(self) -> bool:
        """Effective editor-wide flag; anything but an explicit false counts as on."""
        return effective_value(self._settings, keys.EDITOR_SEMANTIC_HIGHLIGHTING) is not False

    def editor_semantic(self, scope: Scope) -> TriState:
        layer = require_layer(self._settings, scope)
        return TriState.from_value(self._settings.read(layer, keys.EDITOR_SEMANTIC_HIGHLIGHTING))

    def set_editor_semantic(self, scope: Scope, state: TriState) -> None:
        self._write(scope, keys.EDITOR_SEMANTIC_HIGHLIGHTING, state.to_value())

    def language_semantic(self, scope: Scope, language_id: str) -> tuple[bool, TriState]:
        """Whether the language declares its own flag, and its state at this scope."""
        key = keys.language_semantic_key(language_id)
        if not is_declared(self._settings, key):
            return False, TriState.INHERIT
        layer = require_layer(self._settings, scope)
        return True, TriState.from_value(self._settings.read(layer, key))

    def set_language_semantic(self, scope: Scope, language_id: str, state: TriState) -> None:
        self._write(scope, keys.language_semantic_key(language_id), state.to_value())

    def override_semantic(self, scope: Scope, language_id: str) -> TriState:
        block = self._override_block(scope, language_id)
        return TriState.from_value(block.get(keys.EDITOR_SEMANTIC_HIGHLIGHTING))

    def set_override_semantic(self, scope: Scope, language_id: str, state: TriState) -> None:
        block = self._override_block(scope, language_id)
        value = state.to_value()
        if value is None:
            block.pop(keys.EDITOR_SEMANTIC_HIGHLIGHTING, None)
        else:
            block[keys.EDITOR_SEMANTIC_HIGHLIGHTING] = value
        self._write_override_block(scope, language_id, block)

    # --- snapshot / restore ---

    def take_snapshot(self, scope: Scope, language_id: str) -> AuxiliarySnapshot:
        exists, language_state = self.language_semantic(scope, language_id)
        snapshot = AuxiliarySnapshot(
            scope=scope,
            language_id=language_id,
            taken_at=datetime.now(timezone.utc).isoformat(),
            editor_semantic=self.editor_semantic(scope),
            font_family=self.font_family(scope, language_id),
            language_semantic_exists=exists,
            language_semantic=language_state,
            language_override_semantic=self.override_semantic(scope, language_id),
            pending_rollback=True,
        )
        self._state.auxiliary.put(self._partition(scope), snapshot)
        self._logger.debug("Auxiliary snapshot taken for %s (scope=%s)", language_id, scope.value)
        return snapshot

    def is_rollback_pending(self, scope: Scope) -> bool:
        return self._state.auxiliary.is_pending(self._partition(scope))

    def clear_rollback_pending(self, scope: Scope) -> None:
        self._state.auxiliary.set_pending(self._partition(scope), False)

    def restore_snapshot(self, scope: Scope) -> bool:
        """Put the recorded pre-edit values back. Returns False if none was recorded."""
        snapshot = self._state.auxiliary.get(self._partition(scope))
        if snapshot is None:
            return False
        language_id = snapshot.language_id
        self.set_editor_semantic(scope, snapshot.editor_semantic)
        self.apply_font_family(scope, language_id, snapshot.font_family)
        if snapshot.language_semantic_exists:
            self.set_language_semantic(scope, language_id, snapshot.language_semantic)
        self.set_override_semantic(scope, language_id, snapshot.language_override_semantic)
        self.clear_rollback_pending(scope)
        self._logger.info("Restored auxiliary settings for %s (scope=%s)", language_id, scope.value)
        return True
