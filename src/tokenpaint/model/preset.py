from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from tokenpaint.model.style import Style

STANDARD_PRESET_KEY = "__standard__"

RuleSet = Mapping[str, Style]


@dataclass(frozen=True)
class Preset:
    """Saved rules and font family for one (theme, language) pair."""

    token_rules: dict[str, Style] = field(default_factory=dict)
    scope_rules: dict[str, Style] = field(default_factory=dict)
    font_family: str = ""

    def clone(self) -> Preset:
        return Preset(
            token_rules=dict(self.token_rules),
            scope_rules=dict(self.scope_rules),
            font_family=self.font_family,
        )

    def with_token_rules(self, rules: Mapping[str, Style]) -> Preset:
        return Preset(dict(rules), dict(self.scope_rules), self.font_family)

    def with_scope_rules(self, rules: Mapping[str, Style]) -> Preset:
        return Preset(dict(self.token_rules), dict(rules), self.font_family)

    def with_font_family(self, font_family: str) -> Preset:
        return Preset(dict(self.token_rules), dict(self.scope_rules), font_family.strip())

    @property
    def is_empty(self) -> bool:
        return not self.token_rules and not self.scope_rules and not self.font_family

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "tokenRules": {k: v.to_dict() for k, v in self.token_rules.items() if not v.is_empty},
            "scopeRules": {k: v.to_dict() for k, v in self.scope_rules.items() if not v.is_empty},
        }
        if self.font_family:
            data["fontFamily"] = self.font_family
        return data

    @classmethod
    def from_dict(cls, data: Any) -> Preset:
        """Parse stored preset data; malformed parts are dropped."""
        if not isinstance(data, dict):
            return cls()
        font_family = data.get("fontFamily")
        return cls(
            token_rules=_parse_rules(data.get("tokenRules")),
            scope_rules=_parse_rules(data.get("scopeRules")),
            font_family=font_family.strip() if isinstance(font_family, str) else "",
        )


# mapping theme name -> language key -> preset
PresetsByTheme = Mapping[str, Mapping[str, Preset]]


def _parse_rules(raw: Any) -> dict[str, Style]:
    if not isinstance(raw, dict):
        return {}
    rules: dict[str, Style] = {}
    for selector, value in raw.items():
        style = Style.from_dict(value)
        if isinstance(selector, str) and selector and style is not None:
            rules[selector] = style
    return rules
