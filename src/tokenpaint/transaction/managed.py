"""How each managed settings key is rewritten and inspected.

Each strategy works on plain copies of the layer value and never touches
anything outside the theme subtree it was asked to rewrite.
"""
from __future__ import annotations

from typing import Any, Mapping, Protocol

from tokenpaint.codec import (
    decode_semantic_rule,
    encode_scope_rules,
    encode_semantic_rules,
    find_scope_rule_style,
    is_owned_rule,
)
from tokenpaint.model.style import Style
from tokenpaint.settings import keys
from tokenpaint.settings.keys import as_mapping

THEME_RULES = "settings.themeRules"
GLOBAL_RULES = "settings.globalRules"


class ManagedKey(Protocol):
    """A settings key whose theme subtrees we overwrite."""

    setting_key: str

    def compose(
        self,
        current: Any,
        theme_key: str,
        rules: Mapping[str, Style],
        previous: tuple[str, ...],
    ) -> tuple[dict[str, Any], tuple[str, ...]]:
        """Return the rewritten layer value and the selectors now owned."""
        ...

    def lookup(self, value: Any, theme_key: str, selector: str) -> tuple[Style | None, str | None]:
        """Find the style for a selector and where it came from."""
        ...


class SemanticTokenRules:
    """``{"[Theme]": {"enabled": true, "rules": {selector: value}}}``."""

    setting_key = keys.SEMANTIC_TOKEN_COLORS

    def compose(
        self,
        current: Any,
        theme_key: str,
        rules: Mapping[str, Style],
        previous: tuple[str, ...],
    ) -> tuple[dict[str, Any], tuple[str, ...]]:
        document = as_mapping(current)
        theme_block = as_mapping(document.get(theme_key))
        existing = as_mapping(theme_block.get("rules"))
        encoded = encode_semantic_rules(rules)
        stale = set(previous) - set(encoded)

        # keep positions of surviving entries stable so repeats are no-ops
        next_rules: dict[str, Any] = {}
        for selector, value in existing.items():
            if selector in stale:
                continue
            next_rules[selector] = encoded.get(selector, value)
        for selector, value in encoded.items():
            if selector not in next_rules:
                next_rules[selector] = value

        theme_block["enabled"] = True
        theme_block["rules"] = next_rules
        document[theme_key] = theme_block
        return document, tuple(encoded)

    def lookup(self, value: Any, theme_key: str, selector: str) -> tuple[Style | None, str | None]:
        document = as_mapping(value)
        theme_rules = as_mapping(as_mapping(document.get(theme_key)).get("rules"))
        if selector in theme_rules:
            return decode_semantic_rule(theme_rules[selector]), THEME_RULES
        global_rules = as_mapping(document.get("rules"))
        if selector in global_rules:
            return decode_semantic_rule(global_rules[selector]), GLOBAL_RULES
        return None, None


class ScopeRules:
    """``{"[Theme]": {"textMateRules": [{name, scope, settings}]}}``.

    Entries we own carry a ``<prefix>:`` name; every other entry is kept
    verbatim and in place ahead of ours.
    """

    setting_key = keys.TOKEN_COLORS

    def __init__(self, prefix: str = "tokenpaint") -> None:
        self.prefix = prefix

    def compose(
        self,
        current: Any,
        theme_key: str,
        rules: Mapping[str, Style],
        previous: tuple[str, ...],
    ) -> tuple[dict[str, Any], tuple[str, ...]]:
        """Replace every entry carrying our name prefix with freshly generated ones.

        The name tag alone marks ownership here, so ``previous`` is not
        consulted; tagged entries missing from the ledger are removed too.
        """
        document = as_mapping(current)
        theme_block = as_mapping(document.get(theme_key))
        existing = theme_block.get("textMateRules")
        entries = existing if isinstance(existing, list) else []
        kept = [entry for entry in entries if not is_owned_rule(entry, self.prefix)]
        generated = encode_scope_rules(rules, self.prefix)
        theme_block["textMateRules"] = kept + generated
        document[theme_key] = theme_block
        return document, tuple(entry["scope"] for entry in generated)

    def lookup(self, value: Any, theme_key: str, selector: str) -> tuple[Style | None, str | None]:
        document = as_mapping(value)
        theme_entries = as_mapping(document.get(theme_key)).get("textMateRules")
        if isinstance(theme_entries, list):
            style = find_scope_rule_style(theme_entries, selector)
            if style is not None:
                return style, THEME_RULES
        global_entries = document.get("textMateRules")
        if isinstance(global_entries, list):
            style = find_scope_rule_style(global_entries, selector)
            if style is not None:
                return style, GLOBAL_RULES
        return None, None
