from __future__ import annotations

from typing import Any

import pytest

from tokenpaint.config import TokenPaintConfig
from tokenpaint.events import EventBus
from tokenpaint.host import Host
from tokenpaint.model.preset import Preset
from tokenpaint.model.style import Style
from tokenpaint.session import ManualScheduler, StylingSession
from tokenpaint.session.messages import Message, MessageType
from tokenpaint.settings import InMemorySettings
from tokenpaint.store.db import Database
from tokenpaint.store.migrations import run_migrations
from tokenpaint.store.state import DurableState
from tokenpaint.vocabulary import ManifestVocabulary
from tokenpaint.web.app import create_app

THEME = "Dark+"
THEME_KEY = "[Dark+]"
SEMANTIC_KEY = "editor.semanticTokenColorCustomizations"
TEXTMATE_KEY = "editor.tokenColorCustomizations"


@pytest.fixture
def db():
    """Create a fresh in-memory database with migrations for each test."""
    database = Database(":memory:")
    database.connect()
    run_migrations(database)
    yield database
    database.close()


@pytest.fixture
def state(db) -> DurableState:
    return DurableState.create(db, "ws1")


@pytest.fixture
def settings() -> InMemorySettings:
    """User and workspace layers, both empty."""
    return InMemorySettings(user={}, workspace={})


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def vocabulary() -> ManifestVocabulary:
    return ManifestVocabulary([make_csharp_manifest()])


@pytest.fixture
def make_session(settings, state, vocabulary, bus, scheduler):
    """Factory for sessions over the shared fixtures; pass overrides as keywords."""

    def _make(**overrides: Any) -> StylingSession:
        kwargs: dict[str, Any] = {
            "settings": settings,
            "state": state,
            "vocabulary": vocabulary,
            "bus": bus,
            "scheduler": scheduler,
            "config": TokenPaintConfig(),
            "theme_name": THEME,
        }
        kwargs.update(overrides)
        return StylingSession(**kwargs)

    return _make


@pytest.fixture
def session(make_session) -> StylingSession:
    """An opened session on Dark+ with csharp selected."""
    opened = make_session()
    opened.open()
    return opened


@pytest.fixture
def host(settings, vocabulary, scheduler) -> Host:
    config = TokenPaintConfig(state_db_path=":memory:", workspace_dir="/tmp/tokenpaint-ws")
    instance = Host(config, settings=settings, vocabulary=vocabulary, scheduler=scheduler)
    instance.initialize()
    yield instance
    instance.deactivate()


@pytest.fixture
def app(host):
    """Create a Flask app for testing."""
    application = create_app(host)
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    """Create a Flask test client."""
    return app.test_client()


# ---------------------------------------------------------------------------
# Shared factory helpers
# ---------------------------------------------------------------------------


def make_csharp_manifest(
    token_types: tuple[str, ...] = ("class", "function", "method", "variable", "property"),
    modifiers: tuple[str, ...] = ("static", "readonly"),
) -> dict[str, Any]:
    return {
        "id": "ms-dotnettools.csharp",
        "contributes": {
            "languages": [{"id": "csharp", "aliases": ["C#", "csharp"]}],
            "semanticTokenTypes": [
                {"id": token_type, "description": f"C# {token_type}"} for token_type in token_types
            ],
            "semanticTokenModifiers": list(modifiers),
        },
    }


def make_manifest(
    extension_id: str,
    language_id: str,
    label: str,
    token_types: tuple[str, ...] = ("function",),
) -> dict[str, Any]:
    return {
        "id": extension_id,
        "contributes": {
            "languages": [{"id": language_id, "aliases": [label]}],
            "semanticTokenTypes": list(token_types),
        },
    }


def make_style(
    foreground: str | None = "#DCDCAA",
    bold: bool = False,
    italic: bool = False,
    underline: bool = False,
) -> Style:
    return Style(foreground=foreground, bold=bold, italic=italic, underline=underline)


def make_preset(
    token_rules: dict[str, Style] | None = None,
    scope_rules: dict[str, Style] | None = None,
    font_family: str = "",
) -> Preset:
    return Preset(
        token_rules=dict(token_rules or {}),
        scope_rules=dict(scope_rules or {}),
        font_family=font_family,
    )


def make_message(type: MessageType, **payload: Any) -> Message:
    return Message(type=type, payload=payload)


def style_message(selector: str, **style: Any) -> Message:
    return Message(MessageType.SET_TOKEN_STYLE, {"selector": selector, "style": style})


def semantic_rules(settings: InMemorySettings, layer, theme_key: str = THEME_KEY) -> dict:
    """The ``rules`` map written under a theme in one layer."""
    value = settings.read(layer, SEMANTIC_KEY) or {}
    return (value.get(theme_key) or {}).get("rules") or {}


def textmate_rules(settings: InMemorySettings, layer, theme_key: str = THEME_KEY) -> list:
    value = settings.read(layer, TEXTMATE_KEY) or {}
    return (value.get(theme_key) or {}).get("textMateRules") or []
