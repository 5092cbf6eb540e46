from __future__ import annotations

from typing import Mapping

from tokenpaint.model.preset import STANDARD_PRESET_KEY, Preset
from tokenpaint.model.scope import SelectorKind
from tokenpaint.model.style import Style


def rules_of(preset: Preset, kind: SelectorKind) -> dict[str, Style]:
    return preset.scope_rules if kind is SelectorKind.TEXTMATE else preset.token_rules


def build_union_rules(
    theme_presets: Mapping[str, Preset],
    kind: SelectorKind,
    standard_rules: Mapping[str, Style] | None = None,
    active_language: str | None = None,
    draft_rules: Mapping[str, Style] | None = None,
) -> dict[str, Style]:
    """Overlay standard rules, every saved language preset, then the active draft.

    Later sources win on a selector collision. The active language's saved
    preset is skipped because its draft replaces it.
    """
    union: dict[str, Style] = {}
    standard = theme_presets.get(STANDARD_PRESET_KEY)
    if standard_rules is not None:
        union.update(standard_rules)
    elif standard is not None:
        union.update(rules_of(standard, kind))
    for language_key, preset in theme_presets.items():
        if language_key == STANDARD_PRESET_KEY or language_key == active_language:
            continue
        union.update(rules_of(preset, kind))
    if active_language is not None and draft_rules is not None:
        union.update(draft_rules)
    return union
