from tokenpaint.vocabulary.languages import (
    LSP_STANDARD_TOKEN_MODIFIERS,
    LSP_STANDARD_TOKEN_TYPES,
    OFFICIAL_LANGUAGES,
    LanguageBinding,
    merge_bindings,
    official_language,
)
from tokenpaint.vocabulary.provider import (
    ManifestVocabulary,
    TokenVocabulary,
    VocabularyItem,
    language_token_modifiers,
    language_token_types,
    load_manifests,
    token_help_text,
)
from tokenpaint.vocabulary.snippets import BuiltinSnippets, Snippet, SnippetProvider

__all__ = [
    "LSP_STANDARD_TOKEN_MODIFIERS",
    "LSP_STANDARD_TOKEN_TYPES",
    "OFFICIAL_LANGUAGES",
    "LanguageBinding",
    "merge_bindings",
    "official_language",
    "ManifestVocabulary",
    "TokenVocabulary",
    "VocabularyItem",
    "language_token_modifiers",
    "language_token_types",
    "load_manifests",
    "token_help_text",
    "BuiltinSnippets",
    "Snippet",
    "SnippetProvider",
]
