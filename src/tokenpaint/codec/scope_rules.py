"""TextMate scope rule shape: ``{name, scope, settings: {foreground, fontStyle}}``."""
from __future__ import annotations

from typing import Any, Iterable, Mapping

from tokenpaint.codec.flags import build_font_style, parse_font_style
from tokenpaint.model.style import Style


def encode_scope_settings(style: Style) -> dict[str, str] | None:
    if style.is_empty:
        return None
    settings: dict[str, str] = {}
    if style.foreground is not None:
        settings["foreground"] = style.foreground
    if style.has_flags:
        settings["fontStyle"] = build_font_style(style)
    return settings


def decode_scope_settings(value: Any) -> Style | None:
    if not isinstance(value, dict):
        return None
    foreground = value.get("foreground")
    font_style = value.get("fontStyle")
    flags = parse_font_style(font_style) if isinstance(font_style, str) else {}
    style = Style(foreground=foreground if isinstance(foreground, str) else None, **flags)
    return None if style.is_empty else style


def owned_rule_name(prefix: str, scope: str) -> str:
    return f"{prefix}:{scope}"


def is_owned_rule(entry: Any, prefix: str) -> bool:
    """True when a textMateRules entry was written by us."""
    if not isinstance(entry, dict):
        return False
    name = entry.get("name")
    return isinstance(name, str) and name.startswith(f"{prefix}:")


def encode_scope_rules(rules: Mapping[str, Style], prefix: str) -> list[dict[str, Any]]:
    """Encode a rule set into tagged textMateRules entries."""
    entries: list[dict[str, Any]] = []
    for scope, style in rules.items():
        scope_key = scope.strip()
        if not scope_key:
            continue
        settings = encode_scope_settings(style)
        if settings is None:
            continue
        entries.append({
            "name": owned_rule_name(prefix, scope_key),
            "scope": scope_key,
            "settings": settings,
        })
    return entries


def find_scope_rule_style(entries: Iterable[Any], scope: str) -> Style | None:
    """Style of the last entry matching ``scope`` (string or list form)."""
    found: Style | None = None
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        entry_scope = entry.get("scope")
        if isinstance(entry_scope, str):
            matches = entry_scope.strip() == scope
        elif isinstance(entry_scope, list):
            matches = any(isinstance(s, str) and s.strip() == scope for s in entry_scope)
        else:
            matches = False
        if matches:
            style = decode_scope_settings(entry.get("settings"))
            if style is not None:
                found = style
    return found
