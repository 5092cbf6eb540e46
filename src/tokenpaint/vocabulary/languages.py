"""Known languages and the LSP standard token vocabulary."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LanguageBinding:
    """A language and the add-on that supplies its semantic tokens."""

    key: str
    label: str
    language_id: str
    extension_id: str
    token_type_count: int = 0

    def to_dict(self) -> dict[str, object]:
        return {"key": self.key, "label": self.label, "languageId": self.language_id}


OFFICIAL_LANGUAGES: tuple[LanguageBinding, ...] = (
    LanguageBinding("csharp", "C#", "csharp", "ms-dotnettools.csharp"),
    LanguageBinding("java", "Java", "java", "redhat.java"),
    LanguageBinding("cpp", "C/C++", "cpp", "ms-vscode.cpptools"),
    LanguageBinding("python", "Python", "python", "ms-python.python"),
    LanguageBinding("go", "Go", "go", "golang.go"),
    LanguageBinding("rust", "Rust", "rust", "rust-lang.rust-analyzer"),
)

LSP_STANDARD_TOKEN_TYPES: tuple[str, ...] = (
    "namespace",
    "type",
    "class",
    "enum",
    "interface",
    "struct",
    "typeParameter",
    "parameter",
    "variable",
    "property",
    "enumMember",
    "event",
    "function",
    "method",
    "macro",
    "keyword",
    "modifier",
    "comment",
    "string",
    "number",
    "regexp",
    "operator",
    "decorator",
)

LSP_STANDARD_TOKEN_MODIFIERS: tuple[str, ...] = (
    "declaration",
    "definition",
    "readonly",
    "static",
    "deprecated",
    "abstract",
    "async",
    "modification",
    "documentation",
    "defaultLibrary",
)

STANDARD_TYPE_DESCRIPTIONS: dict[str, str] = {
    "namespace": "namespace",
    "type": "type (generic)",
    "class": "class",
    "enum": "enum",
    "interface": "interface",
    "struct": "struct",
    "typeParameter": "type parameter",
    "parameter": "parameter",
    "variable": "variable/identifier",
    "property": "property",
    "enumMember": "enum member",
    "event": "event",
    "function": "function",
    "method": "method",
    "macro": "macro",
    "keyword": "keyword",
    "modifier": "modifier",
    "comment": "comment",
    "string": "string",
    "number": "number",
    "regexp": "regexp",
    "operator": "operator",
    "decorator": "decorator/annotation",
}

MODIFIER_DESCRIPTIONS: dict[str, str] = {
    "declaration": "declaration",
    "definition": "definition",
    "readonly": "readonly",
    "static": "static",
    "deprecated": "deprecated",
    "abstract": "abstract",
    "async": "async",
    "modification": "modification",
    "documentation": "documentation",
    "defaultLibrary": "default library",
}

NO_DESCRIPTION = "No description"


def official_language(key: str) -> LanguageBinding | None:
    for language in OFFICIAL_LANGUAGES:
        if language.key == key:
            return language
    return None


def merge_bindings(discovered: list[LanguageBinding]) -> list[LanguageBinding]:
    """Overlay discovered bindings on the official table, sorted by label.

    A discovered language that is also official keeps the official key and
    label but takes the discovering add-on.
    """
    official_by_id = {lang.language_id: lang for lang in OFFICIAL_LANGUAGES}
    by_key: dict[str, LanguageBinding] = {}
    for found in discovered:
        official = official_by_id.get(found.language_id)
        if official is not None:
            found = LanguageBinding(
                official.key, official.label, official.language_id,
                found.extension_id, found.token_type_count,
            )
        by_key[found.key] = found
    for official in OFFICIAL_LANGUAGES:
        by_key.setdefault(official.key, official)
    return sorted(by_key.values(), key=lambda lang: lang.label.lower())


def textmate_help_text(scope: str) -> str:
    scope = scope.strip()
    if not scope:
        return "No TextMate scope"
    return (
        f"TextMate scope: {scope}\n"
        "Note: this writes to editor.tokenColorCustomizations (theme textMateRules)."
    )


def modifier_suffix(modifier: str) -> str:
    description = MODIFIER_DESCRIPTIONS.get(modifier)
    return f": {description}" if description else ""
