"""The host's layered settings document.

Values are plain JSON data. A value of None means "absent": reading an
unset key returns None and writing None removes the key from the layer.
"""
from __future__ import annotations

import copy
from enum import StrEnum
from typing import Any, Protocol, runtime_checkable

from tokenpaint.errors import WorkspaceUnavailableError
from tokenpaint.model.scope import Scope


class ConfigLayer(StrEnum):
    DEFAULT = "default"
    USER = "user"
    WORKSPACE = "workspace"


# lowest priority first
LAYER_ORDER = (ConfigLayer.DEFAULT, ConfigLayer.USER, ConfigLayer.WORKSPACE)


def layer_for_scope(scope: Scope) -> ConfigLayer:
    if scope is Scope.WORKSPACE:
        return ConfigLayer.WORKSPACE
    return ConfigLayer.USER


@runtime_checkable
class LayeredSettings(Protocol):
    """Narrow read/write contract over the host settings document."""

    def read(self, layer: ConfigLayer, key: str) -> Any: ...

    def write(self, layer: ConfigLayer, key: str, value: Any) -> None: ...

    def has_layer(self, layer: ConfigLayer) -> bool: ...


def merge_values(lower: Any, upper: Any) -> Any:
    """Overlay ``upper`` on ``lower``: mappings merge per key, anything else replaces."""
    if upper is None:
        return copy.deepcopy(lower)
    if isinstance(lower, dict) and isinstance(upper, dict):
        merged = copy.deepcopy(lower)
        for key, value in upper.items():
            merged[key] = merge_values(merged.get(key), value)
        return merged
    return copy.deepcopy(upper)


def effective_value(settings: LayeredSettings, key: str) -> Any:
    """Value of a key with every available layer applied."""
    result: Any = None
    for layer in LAYER_ORDER:
        if settings.has_layer(layer):
            result = merge_values(result, settings.read(layer, key))
    return result


def is_declared(settings: LayeredSettings, key: str) -> bool:
    """True when any layer defines the key."""
    return any(
        settings.has_layer(layer) and settings.read(layer, key) is not None
        for layer in LAYER_ORDER
    )


def require_layer(settings: LayeredSettings, scope: Scope) -> ConfigLayer:
    layer = layer_for_scope(scope)
    if not settings.has_layer(layer):
        raise WorkspaceUnavailableError("No workspace is open")
    return layer
