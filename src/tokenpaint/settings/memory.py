from __future__ import annotations

import copy
from typing import Any

from tokenpaint.errors import SettingsWriteError
from tokenpaint.settings.document import ConfigLayer


class InMemorySettings:
    """Layered settings held in dictionaries.

    Values are deep-copied in and out so callers never share structure
    with the stored document.
    """

    def __init__(
        self,
        user: dict[str, Any] | None = None,
        workspace: dict[str, Any] | None = None,
        default: dict[str, Any] | None = None,
        has_workspace: bool | None = None,
    ) -> None:
        self._layers: dict[ConfigLayer, dict[str, Any]] = {
            ConfigLayer.DEFAULT: copy.deepcopy(default or {}),
            ConfigLayer.USER: copy.deepcopy(user or {}),
        }
        if has_workspace is None:
            has_workspace = workspace is not None
        if has_workspace:
            self._layers[ConfigLayer.WORKSPACE] = copy.deepcopy(workspace or {})
        self.writes: list[tuple[ConfigLayer, str]] = []
        self.fail_writes = False

    def read(self, layer: ConfigLayer, key: str) -> Any:
        return copy.deepcopy(self._layers.get(layer, {}).get(key))

    def write(self, layer: ConfigLayer, key: str, value: Any) -> None:
        if self.fail_writes:
            raise SettingsWriteError(f"Unable to write {key}", key=key, layer=layer.value)
        if layer not in self._layers or layer is ConfigLayer.DEFAULT:
            raise SettingsWriteError(
                f"Layer {layer.value} is not writable", key=key, layer=layer.value
            )
        self.writes.append((layer, key))
        if value is None:
            self._layers[layer].pop(key, None)
        else:
            self._layers[layer][key] = copy.deepcopy(value)

    def has_layer(self, layer: ConfigLayer) -> bool:
        return layer in self._layers

    def dump(self, layer: ConfigLayer) -> dict[str, Any]:
        """Copy of a whole layer, for inspection."""
        return copy.deepcopy(self._layers.get(layer, {}))
