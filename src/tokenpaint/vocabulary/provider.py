"""Token vocabulary discovered from installed editor add-on manifests."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Protocol

from tokenpaint.vocabulary.languages import (
    LSP_STANDARD_TOKEN_MODIFIERS,
    LSP_STANDARD_TOKEN_TYPES,
    NO_DESCRIPTION,
    STANDARD_TYPE_DESCRIPTIONS,
    LanguageBinding,
    merge_bindings,
)

logger = logging.getLogger("tokenpaint.vocabulary")


@dataclass(frozen=True)
class VocabularyItem:
    id: str
    description: str = ""


class TokenVocabulary(Protocol):
    """Capability query over installed language add-ons."""

    def languages(self) -> list[LanguageBinding]: ...

    def is_installed(self, extension_id: str) -> bool: ...

    def token_types(self, extension_id: str) -> list[VocabularyItem]: ...

    def token_modifiers(self, extension_id: str) -> list[VocabularyItem]: ...


def _items(value: Any) -> list[VocabularyItem]:
    """Contributed entries may be plain ids or ``{id, description}`` objects."""
    if not isinstance(value, list):
        return []
    seen: dict[str, VocabularyItem] = {}
    for item in value:
        if isinstance(item, str) and item.strip():
            seen.setdefault(item.strip(), VocabularyItem(item.strip()))
        elif isinstance(item, dict) and isinstance(item.get("id"), str) and item["id"].strip():
            description = item.get("description")
            seen.setdefault(
                item["id"].strip(),
                VocabularyItem(item["id"].strip(), description if isinstance(description, str) else ""),
            )
    return sorted(seen.values(), key=lambda i: i.id)


def _manifest_id(manifest: dict[str, Any]) -> str:
    if isinstance(manifest.get("id"), str):
        return manifest["id"].lower()
    return f"{manifest.get('publisher', '')}.{manifest.get('name', '')}".lower()


class ManifestVocabulary:
    """Vocabulary built from add-on ``package.json`` manifests."""

    def __init__(self, manifests: Iterable[dict[str, Any]] = ()) -> None:
        self._manifests = {_manifest_id(m): m for m in manifests if isinstance(m, dict)}

    def _contributes(self, extension_id: str) -> dict[str, Any]:
        manifest = self._manifests.get(extension_id.lower(), {})
        contributes = manifest.get("contributes")
        return contributes if isinstance(contributes, dict) else {}

    def is_installed(self, extension_id: str) -> bool:
        return extension_id.lower() in self._manifests

    def token_types(self, extension_id: str) -> list[VocabularyItem]:
        return _items(self._contributes(extension_id).get("semanticTokenTypes"))

    def token_modifiers(self, extension_id: str) -> list[VocabularyItem]:
        return _items(self._contributes(extension_id).get("semanticTokenModifiers"))

    def languages(self) -> list[LanguageBinding]:
        """Official languages plus any language declared by an add-on with semantic tokens.

        When several add-ons declare one language the one contributing more
        token types wins.
        """
        best: dict[str, LanguageBinding] = {}
        for extension_id in self._manifests:
            count = len(self.token_types(extension_id))
            if count == 0:
                continue
            for entry in self._contributes(extension_id).get("languages") or []:
                if not isinstance(entry, dict) or not isinstance(entry.get("id"), str):
                    continue
                language_id = entry["id"].strip()
                if not language_id:
                    continue
                aliases = [a for a in entry.get("aliases") or [] if isinstance(a, str) and a.strip()]
                label = aliases[0].strip() if aliases else language_id
                candidate = LanguageBinding(language_id, label, language_id, extension_id, count)
                current = best.get(language_id)
                if current is None or current.token_type_count < count:
                    best[language_id] = candidate
        return merge_bindings(list(best.values()))


def load_manifests(extensions_dir: str | Path) -> list[dict[str, Any]]:
    """Read ``*/package.json`` under an extensions directory, skipping unreadable ones."""
    root = Path(extensions_dir)
    manifests: list[dict[str, Any]] = []
    if not root.is_dir():
        return manifests
    for path in sorted(root.glob("*/package.json")):
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Skipping add-on manifest %s: %s", path, exc)
            continue
        if isinstance(data, dict):
            manifests.append(data)
    return manifests


# --- per-language vocabulary ---


def language_token_types(vocabulary: TokenVocabulary, language: LanguageBinding) -> list[str]:
    """Contributed token types, or the LSP standard set when none are available."""
    if vocabulary.is_installed(language.extension_id):
        items = [item.id for item in vocabulary.token_types(language.extension_id)]
        if items:
            return items
    return list(LSP_STANDARD_TOKEN_TYPES)


def language_token_modifiers(vocabulary: TokenVocabulary, language: LanguageBinding) -> list[str]:
    """Sorted union of standard and contributed modifiers."""
    modifiers = set(LSP_STANDARD_TOKEN_MODIFIERS)
    if vocabulary.is_installed(language.extension_id):
        modifiers.update(item.id for item in vocabulary.token_modifiers(language.extension_id))
    return sorted(modifiers)


def token_help_text(
    vocabulary: TokenVocabulary,
    language: LanguageBinding,
    selector: str,
    standard_layer: bool,
) -> str:
    token_type = selector.split(".")[0].strip()
    if not standard_layer and vocabulary.is_installed(language.extension_id):
        for item in vocabulary.token_types(language.extension_id):
            if item.id == token_type and item.description:
                return item.description
    return STANDARD_TYPE_DESCRIPTIONS.get(token_type, NO_DESCRIPTION)
