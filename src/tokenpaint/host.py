from __future__ import annotations

import hashlib
import logging
import threading
from pathlib import Path

from tokenpaint.config import TokenPaintConfig
from tokenpaint.errors import NoActiveSessionError, SessionAlreadyOpenError
from tokenpaint.events import EventBus, NotificationInbox, RecoveryCompleted
from tokenpaint.recovery import RecoveryReport, RecoverySweep
from tokenpaint.session import Scheduler, StylingSession, ThreadingScheduler
from tokenpaint.settings import JsonFileSettings, LayeredSettings
from tokenpaint.store import Database, DurableState, run_migrations
from tokenpaint.transaction import (
    AuxiliarySettings,
    ScopeRules,
    SemanticTokenRules,
    SettingsTransaction,
)
from tokenpaint.vocabulary import (
    BuiltinSnippets,
    ManifestVocabulary,
    Snippet,
    SnippetProvider,
    TokenVocabulary,
    load_manifests,
)

logger = logging.getLogger("tokenpaint.host")


def workspace_id_for(workspace_dir: str | None) -> str | None:
    """Stable id for a workspace folder, used to partition durable state."""
    if not workspace_dir:
        return None
    resolved = str(Path(workspace_dir).expanduser().resolve())
    return hashlib.sha1(resolved.encode("utf-8")).hexdigest()[:16]


class Host:
    """Wires settings, durable state and vocabulary, and owns the single active session."""

    def __init__(
        self,
        config: TokenPaintConfig,
        *,
        settings: LayeredSettings | None = None,
        vocabulary: TokenVocabulary | None = None,
        snippets: SnippetProvider | None = None,
        scheduler: Scheduler | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self.config = config
        self.event_bus = event_bus or EventBus()
        self.inbox = NotificationInbox(self.event_bus)
        self._settings = settings
        self._vocabulary = vocabulary
        self._snippets = snippets or BuiltinSnippets()
        self._scheduler = scheduler or ThreadingScheduler()
        self._db: Database | None = None
        self._state: DurableState | None = None
        self._session: StylingSession | None = None
        self._lock = threading.Lock()

    def initialize(self) -> RecoveryReport:
        """Open the state database, create tables and run the recovery sweep.

        The sweep runs before any session can be opened.
        """
        self._db = Database(self.config.state_db_path)
        self._db.connect()
        run_migrations(self._db)
        self._state = DurableState.create(self._db, workspace_id_for(self.config.workspace_dir))
        if self._settings is None:
            self._settings = JsonFileSettings(
                self.config.user_settings_path, self.config.workspace_settings_path
            )
        if self._vocabulary is None:
            manifests = load_manifests(self.config.extensions_dir) if self.config.extensions_dir else []
            self._vocabulary = ManifestVocabulary(manifests)
        return self.recover()

    @property
    def settings(self) -> LayeredSettings:
        assert self._settings is not None, "Host not initialized -- call initialize() first"
        return self._settings

    @property
    def state(self) -> DurableState:
        assert self._state is not None, "Host not initialized -- call initialize() first"
        return self._state

    @property
    def vocabulary(self) -> TokenVocabulary:
        assert self._vocabulary is not None, "Host not initialized -- call initialize() first"
        return self._vocabulary

    def recover(self) -> RecoveryReport:
        transactions = [
            SettingsTransaction(self.settings, self.state, SemanticTokenRules()),
            SettingsTransaction(self.settings, self.state, ScopeRules(self.config.rule_name_prefix)),
        ]
        sweep = RecoverySweep(
            self.settings, self.state, transactions, AuxiliarySettings(self.settings, self.state)
        )
        report = sweep.run()
        self.event_bus.emit(RecoveryCompleted(restored=report.restored, failed=report.failed))
        return report

    # --- sessions ---

    @property
    def session(self) -> StylingSession | None:
        return self._session if self._session is not None and self._session.is_open else None

    def open_session(self, theme_name: str | None = None) -> StylingSession:
        with self._lock:
            if self.session is not None:
                raise SessionAlreadyOpenError("A styling session is already open")
            session = StylingSession(
                self.settings,
                self.state,
                self.vocabulary,
                bus=self.event_bus,
                scheduler=self._scheduler,
                config=self.config,
                theme_name=theme_name,
            )
            session.open()
            self._session = session
            return session

    def require_session(self) -> StylingSession:
        session = self.session
        if session is None:
            raise NoActiveSessionError("No styling session is open")
        return session

    def close_session(self) -> bool:
        """Close the active session; returns True if unsaved writes were rolled back."""
        with self._lock:
            session = self.require_session()
            rolled_back = session.close()
            self._session = None
            return rolled_back

    def preview(self, language_id: str | None = None) -> Snippet:
        """Read-only example document for a language."""
        return self._snippets.snippet(language_id or self.config.default_language)

    def deactivate(self) -> None:
        """Shutdown hook: roll back an open dirty session and drop pending timers."""
        session = self._session
        if session is not None and session.is_open:
            logger.info("Shutting down with an open session; rolling back unsaved edits")
            session.cleanup()
        self._scheduler.cancel_all()
        self._session = None
        self.close()

    def close(self) -> None:
        """Close the database connection."""
        if self._db:
            self._db.close()
            self._db = None
