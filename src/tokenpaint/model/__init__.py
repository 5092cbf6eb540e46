from tokenpaint.model.preset import STANDARD_PRESET_KEY, Preset, PresetsByTheme, RuleSet
from tokenpaint.model.scope import EditLayer, Scope, SelectorKind, TriState
from tokenpaint.model.snapshot import AuxiliarySnapshot, Snapshot
from tokenpaint.model.style import Style

__all__ = [
    "STANDARD_PRESET_KEY",
    "Preset",
    "PresetsByTheme",
    "RuleSet",
    "EditLayer",
    "Scope",
    "SelectorKind",
    "TriState",
    "AuxiliarySnapshot",
    "Snapshot",
    "Style",
]
