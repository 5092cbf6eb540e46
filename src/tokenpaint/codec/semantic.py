"""Semantic token rule shape: a bare colour string or ``{foreground, fontStyle}``."""
from __future__ import annotations

from typing import Any, Mapping

from tokenpaint.codec.flags import build_font_style, parse_font_style
from tokenpaint.model.style import Style


def encode_semantic_rule(style: Style) -> str | dict[str, str] | None:
    """Encode a style. Returns None when the rule must be omitted."""
    if style.is_empty:
        return None
    if not style.has_flags:
        return style.foreground
    rule: dict[str, str] = {}
    if style.foreground is not None:
        rule["foreground"] = style.foreground
    rule["fontStyle"] = build_font_style(style)
    return rule


def decode_semantic_rule(value: Any) -> Style | None:
    """Decode any external value; malformed input decodes to None."""
    if isinstance(value, str):
        style = Style(foreground=value)
        return None if style.is_empty else style
    if not isinstance(value, dict):
        return None
    foreground = value.get("foreground")
    flags = {"bold": False, "italic": False, "underline": False}
    font_style = value.get("fontStyle")
    if isinstance(font_style, str):
        flags = parse_font_style(font_style)
    # boolean flag fields are also accepted by the editor in this shape
    for name in flags:
        if value.get(name) is True:
            flags[name] = True
    style = Style(foreground=foreground if isinstance(foreground, str) else None, **flags)
    return None if style.is_empty else style


def encode_semantic_rules(rules: Mapping[str, Style]) -> dict[str, Any]:
    """Encode a rule set, leaving out selectors whose style encodes to nothing."""
    encoded: dict[str, Any] = {}
    for selector, style in rules.items():
        value = encode_semantic_rule(style)
        if value is not None:
            encoded[selector] = value
    return encoded
