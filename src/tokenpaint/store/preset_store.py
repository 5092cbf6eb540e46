"""Keyed storage of presets by (scope, theme, language)."""
from __future__ import annotations

import logging

from tokenpaint.errors import StateStoreError
from tokenpaint.model.preset import Preset, PresetsByTheme
from tokenpaint.model.scope import Scope
from tokenpaint.store.repositories import PresetRepository, partition_for

logger = logging.getLogger("tokenpaint.store")


class PresetStore:
    """Loads and saves the presets-by-theme mapping of a scope."""

    def __init__(self, presets: PresetRepository, workspace_id: str | None = None) -> None:
        self._presets = presets
        self._workspace_id = workspace_id

    def load(self, scope: Scope) -> dict[str, dict[str, Preset]]:
        """Read the mapping for a scope; absent or unreadable state loads as empty."""
        try:
            stored = self._presets.get(partition_for(scope, self._workspace_id))
        except (StateStoreError, ValueError) as exc:
            logger.warning("Failed to load presets for scope %s: %s", scope.value, exc)
            return {}
        return stored or {}

    def save(self, scope: Scope, presets: PresetsByTheme) -> None:
        """Replace the stored mapping for a scope wholesale."""
        mapping = {theme: dict(by_lang) for theme, by_lang in presets.items()}
        self._presets.put(partition_for(scope, self._workspace_id), mapping)


def get_preset(presets: PresetsByTheme, theme: str, language_key: str) -> Preset | None:
    return presets.get(theme, {}).get(language_key)


def upsert_preset(
    presets: PresetsByTheme, theme: str, language_key: str, preset: Preset
) -> dict[str, dict[str, Preset]]:
    """Return a new mapping with the preset set; the input is left untouched."""
    updated: dict[str, dict[str, Preset]] = {t: dict(by_lang) for t, by_lang in presets.items()}
    updated.setdefault(theme, {})[language_key] = preset
    return updated
