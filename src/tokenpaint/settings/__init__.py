from tokenpaint.settings.document import (
    ConfigLayer,
    LayeredSettings,
    effective_value,
    is_declared,
    layer_for_scope,
    merge_values,
    require_layer,
)
from tokenpaint.settings.json_file import JsonFileSettings, strip_jsonc
from tokenpaint.settings.memory import InMemorySettings

__all__ = [
    "ConfigLayer",
    "LayeredSettings",
    "effective_value",
    "is_declared",
    "layer_for_scope",
    "merge_values",
    "require_layer",
    "JsonFileSettings",
    "strip_jsonc",
    "InMemorySettings",
]
