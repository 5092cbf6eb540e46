from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from tokenpaint.model.style import Style


@dataclass(frozen=True)
class ViewState:
    """Everything the front end needs to render after a message."""

    theme_name: str
    scope: str
    layer: str
    has_workspace: bool
    languages: list[dict[str, Any]]
    selected_language_key: str
    token_types: list[str]
    token_modifiers: list[str]
    selected_token_type: str | None
    selected_modifiers: list[str]
    selector: str | None
    use_custom_selector: bool
    custom_selector_type: str
    custom_selector_text: str
    font_family: str
    layer_style: Style | None
    effective_style: Style | None
    effective_style_source: str
    override_warning: str | None
    token_help: str | None
    semantic_highlighting_enabled: bool
    language_semantic_highlighting: dict[str, Any] = field(default_factory=dict)
    editor_semantic_highlighting_override: dict[str, Any] = field(default_factory=dict)
    read_back_warning: str | None = None
    dirty: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "themeName": self.theme_name,
            "scope": self.scope,
            "layer": self.layer,
            "hasWorkspace": self.has_workspace,
            "languages": self.languages,
            "selectedLanguageKey": self.selected_language_key,
            "tokenTypes": self.token_types,
            "tokenModifiers": self.token_modifiers,
            "selectedTokenType": self.selected_token_type,
            "selectedModifiers": self.selected_modifiers,
            "selector": self.selector,
            "useCustomSelector": self.use_custom_selector,
            "customSelectorType": self.custom_selector_type,
            "customSelectorText": self.custom_selector_text,
            "fontFamily": self.font_family,
            "layerStyle": self.layer_style.to_dict() if self.layer_style else None,
            "effectiveStyle": self.effective_style.to_dict() if self.effective_style else None,
            "effectiveStyleSource": self.effective_style_source,
            "overrideWarning": self.override_warning,
            "tokenHelp": self.token_help,
            "semanticHighlightingEnabled": self.semantic_highlighting_enabled,
            "languageSemanticHighlighting": self.language_semantic_highlighting,
            "editorSemanticHighlightingOverride": self.editor_semantic_highlighting_override,
            "readBackWarning": self.read_back_warning,
            "dirty": self.dirty,
        }
