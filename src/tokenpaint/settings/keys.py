from __future__ import annotations

from typing import Any

SEMANTIC_TOKEN_COLORS = "editor.semanticTokenColorCustomizations"
TOKEN_COLORS = "editor.tokenColorCustomizations"
EDITOR_SEMANTIC_HIGHLIGHTING = "editor.semanticHighlighting.enabled"
FONT_FAMILY = "editor.fontFamily"
COLOR_THEME = "workbench.colorTheme"

MANAGED_KEYS = (SEMANTIC_TOKEN_COLORS, TOKEN_COLORS)


def theme_key(theme_name: str) -> str:
    """Bracket a theme display name; already bracketed names pass through."""
    name = theme_name.strip()
    if name.startswith("[") and name.endswith("]"):
        return name
    return f"[{name}]"


def language_override_key(language_id: str) -> str:
    return f"[{language_id}]"


def language_semantic_key(language_id: str) -> str:
    return f"{language_id}.semanticHighlighting.enabled"


def as_mapping(value: Any) -> dict[str, Any]:
    """Shallow copy of a mapping value, or an empty dict for anything else."""
    if isinstance(value, dict):
        return dict(value)
    return {}
