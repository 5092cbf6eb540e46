from __future__ import annotations

import re

from tokenpaint.model.style import Style

_SPLIT = re.compile(r"\s+")


def parse_font_style(font_style: str) -> dict[str, bool]:
    """Read a space separated flag string; unknown tokens are ignored."""
    flags = {"bold": False, "italic": False, "underline": False}
    for part in _SPLIT.split(font_style.strip().lower()):
        if part in flags:
            flags[part] = True
    return flags


def build_font_style(style: Style) -> str:
    return " ".join(style.flags)
