"""The styling session: sequences UI edits into debounced settings writes."""

from __future__ import annotations

import logging
import threading
from typing import Any

from tokenpaint.config import TokenPaintConfig
from tokenpaint.errors import SettingsWriteError, StateStoreError, TokenPaintError
from tokenpaint.events import (
    EventBus,
    Notification,
    NotificationLevel,
    PresetSaved,
    PreviewApplied,
    RollbackCompleted,
    SessionClosed,
    SessionOpened,
)
from tokenpaint.model.preset import STANDARD_PRESET_KEY, Preset
from tokenpaint.model.scope import EditLayer, Scope, SelectorKind, TriState
from tokenpaint.model.style import Style
from tokenpaint.session.machine import (
    CLOSED,
    Effect,
    SessionEvent,
    SessionStatus,
    transition,
)
from tokenpaint.session.messages import Message
from tokenpaint.session.scheduler import Scheduler, ThreadingScheduler
from tokenpaint.session.selection import Selection, normalize_modifiers
from tokenpaint.session.union import build_union_rules, rules_of
from tokenpaint.session.view import ViewState
from tokenpaint.settings import keys
from tokenpaint.settings.document import ConfigLayer, LayeredSettings, effective_value
from tokenpaint.store.preset_store import get_preset, upsert_preset
from tokenpaint.store.state import DurableState
from tokenpaint.transaction import (
    AuxiliarySettings,
    ScopeRules,
    SemanticTokenRules,
    SettingsTransaction,
)
from tokenpaint.vocabulary import (
    LSP_STANDARD_TOKEN_MODIFIERS,
    LSP_STANDARD_TOKEN_TYPES,
    OFFICIAL_LANGUAGES,
    LanguageBinding,
    TokenVocabulary,
    language_token_modifiers,
    language_token_types,
    token_help_text,
)
from tokenpaint.vocabulary.languages import textmate_help_text

APPLY_TIMER = "apply"
NO_WORKSPACE_WARNING = (
    "No workspace folder is open, so workspace settings cannot be written. "
    "Switch to user scope or open a folder first."
)


class StylingSession:
    """One open editing surface.

    Every public method takes the session lock, so UI messages and debounce
    timer callbacks are processed one at a time and to completion.
    """

    def __init__(
        self,
        settings: LayeredSettings,
        state: DurableState,
        vocabulary: TokenVocabulary,
        bus: EventBus | None = None,
        scheduler: Scheduler | None = None,
        config: TokenPaintConfig | None = None,
        theme_name: str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config or TokenPaintConfig()
        self.bus = bus or EventBus()
        self._settings = settings
        self._state = state
        self._vocabulary = vocabulary
        self._scheduler = scheduler or ThreadingScheduler()
        self._logger = logger or logging.getLogger("tokenpaint.session")
        self._lock = threading.RLock()

        self.semantic = SettingsTransaction(settings, state, SemanticTokenRules())
        self.scope_rules = SettingsTransaction(
            settings, state, ScopeRules(self.config.rule_name_prefix)
        )
        self.auxiliary = AuxiliarySettings(settings, state)

        self.status: SessionStatus = CLOSED
        self.theme_name = theme_name if theme_name is not None else self._current_theme()
        self.scope = Scope.USER
        self.layer = EditLayer.LANGUAGE
        self.language = self._default_language()
        self.selection = Selection()
        self.read_back_warning: str | None = None

        self._presets: dict[str, dict[str, Preset]] = {}
        self.saved_standard = Preset()
        self.draft_standard = Preset()
        self.saved_language = Preset()
        self.draft_language = Preset()

    # --- lifecycle ---

    def open(self) -> dict[str, Any]:
        """Pick the default scope, load saved presets as drafts and return the view state."""
        with self._lock:
            self.status, _ = transition(self.status, SessionEvent.OPEN)
            self.scope = self._default_scope()
            self._reload_drafts()
            self._logger.info(
                "Session opened (theme=%r, scope=%s, language=%s)",
                self.theme_name, self.scope.value, self.language.key,
            )
            self.bus.emit(SessionOpened(self.theme_name, self.scope.value, self.language.key))
            return self.view_state().to_dict()

    def close(self) -> bool:
        """Close the surface, rolling back unsaved writes. Returns True if a rollback ran."""
        with self._lock:
            if not self.status.is_open:
                return False
            rolled_back = self.status.snapshot_taken
            self._dispatch(SessionEvent.CLOSE)
            self._logger.info("Session closed (rolled_back=%s)", rolled_back)
            self.bus.emit(SessionClosed(rolled_back=rolled_back))
            return rolled_back

    def cleanup(self) -> None:
        """Best-effort synchronous rollback at process shutdown."""
        try:
            self.close()
        except TokenPaintError:
            self._logger.exception("Shutdown cleanup failed; recovery will retry on next start")

    @property
    def is_open(self) -> bool:
        return self.status.is_open

    @property
    def dirty(self) -> bool:
        return self.status.dirty

    # --- inbound messages ---

    def handle(self, message: Message) -> dict[str, Any]:
        """Process one UI message and return the new view state."""
        with self._lock:
            handler = getattr(self, f"_on_{message.type.name.lower()}")
            try:
                handler(message)
            except (SettingsWriteError, StateStoreError) as exc:
                self._report_failure(message.type.value, exc)
            return self.view_state().to_dict()

    def _on_set_scope(self, message: Message) -> None:
        raw = message.get_str("scope")
        next_scope = Scope.USER if raw == Scope.USER.value else Scope.WORKSPACE
        if next_scope is Scope.WORKSPACE and not self.has_workspace:
            self._notify(NotificationLevel.WARNING, NO_WORKSPACE_WARNING)
            return
        if next_scope is self.scope:
            return
        if not self.status.dirty:
            self.scope = next_scope
            self._reload_drafts()
            return
        # move the live preview to the new scope and keep the drafts
        self._dispatch(SessionEvent.ROLLBACK)
        self.scope = next_scope
        self._reload_saved()
        self._dispatch(SessionEvent.RETARGET)

    def _on_set_layer(self, message: Message) -> None:
        raw = message.get_str("layer")
        next_layer = EditLayer.STANDARD if raw == EditLayer.STANDARD.value else EditLayer.LANGUAGE
        if next_layer is self.layer:
            return
        if self.status.dirty:
            self._dispatch(SessionEvent.ROLLBACK)
            self._reload_drafts()
        self.layer = next_layer
        self.selection.reset()

    def _on_select_language(self, message: Message) -> None:
        key = message.get_str("languageKey")
        if key is None:
            return
        language = next((b for b in self._vocabulary.languages() if b.key == key), None)
        if language is None:
            return
        if not self._vocabulary.is_installed(language.extension_id):
            self._notify(
                NotificationLevel.INFO,
                f"The {language.label} add-on ({language.extension_id}) is not installed.",
            )
            return
        if self.status.dirty:
            self._dispatch(SessionEvent.ROLLBACK)
        self.language = language
        self._reload_drafts()
        self.selection.reset()

    def _on_select_token_type(self, message: Message) -> None:
        token_type = (message.get_str("tokenType") or "").strip()
        if token_type:
            self.selection.token_type = token_type
            self.selection.modifiers = []

    def _on_set_token_modifiers(self, message: Message) -> None:
        modifiers = message.payload.get("modifiers")
        if isinstance(modifiers, list):
            self.selection.modifiers = normalize_modifiers(modifiers)

    def _on_set_custom_selector_enabled(self, message: Message) -> None:
        self.selection.use_custom = message.payload.get("enabled") is True
        self._dispatch(SessionEvent.EDIT)

    def _on_set_custom_selector_type(self, message: Message) -> None:
        raw = message.get_str("selectorType")
        self.selection.custom_kind = (
            SelectorKind.TEXTMATE if raw == SelectorKind.TEXTMATE.value else SelectorKind.SEMANTIC
        )
        self._dispatch(SessionEvent.EDIT)

    def _on_set_custom_selector_text(self, message: Message) -> None:
        self.selection.custom_text = message.get_str("text") or ""
        self._dispatch(SessionEvent.EDIT)

    def _on_set_font_family(self, message: Message) -> None:
        self.draft_language = self.draft_language.with_font_family(message.get_str("fontFamily") or "")
        self._dispatch(SessionEvent.EDIT)

    def _on_set_token_style(self, message: Message) -> None:
        selector = (message.get_str("selector") or "").strip()
        if not selector:
            return
        self.set_style(selector, Style.from_dict(message.payload.get("style")))

    def _on_enable_semantic_highlighting(self, message: Message) -> None:
        self._dispatch(SessionEvent.EDIT_NOW)
        self.auxiliary.set_editor_semantic(self.scope, TriState.ON)

    def _on_set_language_semantic_highlighting(self, message: Message) -> None:
        state = _tri_state(message.payload.get("state"))
        self._dispatch(SessionEvent.EDIT_NOW)
        self.auxiliary.set_language_semantic(self.scope, self.language.language_id, state)

    def _on_set_editor_semantic_highlighting(self, message: Message) -> None:
        state = _tri_state(message.payload.get("state"))
        self._dispatch(SessionEvent.EDIT_NOW)
        self.auxiliary.set_override_semantic(self.scope, self.language.language_id, state)

    def _on_save(self, message: Message) -> None:
        self._dispatch(SessionEvent.SAVE)
        self.bus.emit(PresetSaved(self.scope.value, self.theme_name, self.language.key))

    def _on_restore(self, message: Message) -> None:
        self._dispatch(SessionEvent.RESTORE)

    # --- edits ---

    def set_style(self, selector: str, style: Style | None) -> None:
        """Set or clear a rule in the active layer's draft and schedule a write."""
        with self._lock:
            draft = self.draft_standard if self.layer is EditLayer.STANDARD else self.draft_language
            kind = self.selection.kind
            rules = dict(rules_of(draft, kind))
            for key in self.selection.rule_keys(selector):
                if style is None or style.is_empty:
                    rules.pop(key, None)
                else:
                    rules[key] = style
            if kind is SelectorKind.TEXTMATE:
                draft = draft.with_scope_rules(rules)
            else:
                draft = draft.with_token_rules(rules)
            if self.layer is EditLayer.STANDARD:
                self.draft_standard = draft
            else:
                self.draft_language = draft
            if not self.selection.use_custom:
                parts = [p.strip() for p in selector.split(".") if p.strip()]
                if parts:
                    self.selection.token_type = parts[0]
                    self.selection.modifiers = parts[1:]
            self._dispatch(SessionEvent.EDIT)

    # --- state machine plumbing ---

    def _dispatch(self, event: SessionEvent) -> None:
        status, effects = transition(self.status, event)
        self._logger.debug("%s: %s -> %s %s", event.value, self.status.phase.value,
                           status.phase.value, [e.value for e in effects])
        for effect in effects:
            if effect is Effect.RUN_APPLY:
                self.status = status
                self._run_apply()
                return
            self._perform(effect)
        self.status = status

    def _perform(self, effect: Effect) -> None:
        if effect is Effect.TAKE_SNAPSHOT:
            self._take_snapshot()
        elif effect is Effect.ARM_DEBOUNCE:
            self._scheduler.arm(APPLY_TIMER, self.config.debounce_seconds, self._on_debounce)
        elif effect is Effect.CANCEL_DEBOUNCE:
            self._scheduler.cancel(APPLY_TIMER)
        elif effect is Effect.RESTORE_SNAPSHOT:
            self._rollback()
        elif effect is Effect.PERSIST:
            self._persist()
        elif effect is Effect.APPLY_SAVED:
            self._apply_saved()
        elif effect is Effect.CLEAR_ROLLBACK:
            self._clear_rollback()
        elif effect is Effect.RELOAD_DRAFTS:
            self._reload_drafts()

    def _on_debounce(self) -> None:
        with self._lock:
            self._dispatch(SessionEvent.DEBOUNCE_FIRED)

    def _run_apply(self) -> None:
        try:
            self._apply_preview()
        except (SettingsWriteError, StateStoreError) as exc:
            self._report_failure("live preview", exc)
        finally:
            self._dispatch(SessionEvent.APPLY_FINISHED)

    # --- effects ---

    def _take_snapshot(self) -> None:
        self.semantic.take_snapshot(self.scope)
        self.scope_rules.take_snapshot(self.scope)
        self.auxiliary.take_snapshot(self.scope, self.language.language_id)

    def _rollback(self) -> None:
        self.semantic.restore_snapshot(self.scope)
        self.scope_rules.restore_snapshot(self.scope)
        self.auxiliary.restore_snapshot(self.scope)
        self.read_back_warning = None
        self._logger.info("Rolled back session writes (scope=%s)", self.scope.value)
        self.bus.emit(RollbackCompleted(self.scope.value))

    def _clear_rollback(self) -> None:
        self.semantic.clear_rollback_pending(self.scope)
        self.scope_rules.clear_rollback_pending(self.scope)
        self.auxiliary.clear_rollback_pending(self.scope)

    def _apply_preview(self) -> None:
        """Write standard + other saved languages + the current draft to the document."""
        self._presets = self._state.presets.load(self.scope)
        theme_presets = self._presets.get(self.theme_name, {})
        token_union = build_union_rules(
            theme_presets, SelectorKind.SEMANTIC,
            standard_rules=self.draft_standard.token_rules,
            active_language=self.language.key,
            draft_rules=self.draft_language.token_rules,
        )
        scope_union = build_union_rules(
            theme_presets, SelectorKind.TEXTMATE,
            standard_rules=self.draft_standard.scope_rules,
            active_language=self.language.key,
            draft_rules=self.draft_language.scope_rules,
        )
        self._logger.debug(
            "Applying preview (scope=%s, theme=%r, semantic=%d, textmate=%d)",
            self.scope.value, self.theme_name, len(token_union), len(scope_union),
        )
        self.semantic.apply_union(self.scope, self.theme_name, token_union)
        self.scope_rules.apply_union(self.scope, self.theme_name, scope_union)
        # only the current language's font is previewed
        self.auxiliary.apply_font_family(
            self.scope, self.language.language_id, self.draft_language.font_family
        )
        self._check_read_back()
        self.bus.emit(PreviewApplied(self.scope.value, self.theme_name, len(token_union)))

    def _check_read_back(self) -> None:
        selector = self.selection.selector()
        self.read_back_warning = None
        if selector is None or self.selection.textmate_mode:
            return
        result = self.semantic.verify(self.scope, self.theme_name, selector)
        if result.overridden:
            self.read_back_warning = (
                f"The rule for {selector} is overridden by a higher-priority settings layer."
            )

    def _apply_saved(self) -> None:
        """Write the union of persisted presets only, plus every saved language's font."""
        self._presets = self._state.presets.load(self.scope)
        theme_presets = self._presets.get(self.theme_name, {})
        self.semantic.apply_union(
            self.scope, self.theme_name, build_union_rules(theme_presets, SelectorKind.SEMANTIC)
        )
        self.scope_rules.apply_union(
            self.scope, self.theme_name, build_union_rules(theme_presets, SelectorKind.TEXTMATE)
        )
        for language_key, preset in theme_presets.items():
            if language_key == STANDARD_PRESET_KEY:
                continue
            self.auxiliary.apply_font_family(
                self.scope, self._language_id(language_key), preset.font_family
            )

    def _persist(self) -> None:
        presets = self._state.presets.load(self.scope)
        presets = upsert_preset(
            presets, self.theme_name, STANDARD_PRESET_KEY,
            Preset(dict(self.draft_standard.token_rules), dict(self.draft_standard.scope_rules)),
        )
        presets = upsert_preset(presets, self.theme_name, self.language.key, self.draft_language.clone())
        self._state.presets.save(self.scope, presets)
        self._presets = presets
        self.saved_standard = self.draft_standard.clone()
        self.saved_language = self.draft_language.clone()
        self._logger.info(
            "Saved presets (scope=%s, theme=%r, language=%s)",
            self.scope.value, self.theme_name, self.language.key,
        )

    def _reload_saved(self) -> None:
        self._presets = self._state.presets.load(self.scope)
        self.saved_standard = get_preset(self._presets, self.theme_name, STANDARD_PRESET_KEY) or Preset()
        self.saved_language = get_preset(self._presets, self.theme_name, self.language.key) or Preset()

    def _reload_drafts(self) -> None:
        self._reload_saved()
        self.draft_standard = self.saved_standard.clone()
        self.draft_language = self.saved_language.clone()

    # --- helpers ---

    @property
    def has_workspace(self) -> bool:
        return self._settings.has_layer(ConfigLayer.WORKSPACE)

    def _notify(self, level: NotificationLevel, message: str) -> None:
        self.bus.emit(Notification(level, message))

    def _report_failure(self, operation: str, exc: TokenPaintError) -> None:
        self._logger.error("%s failed: %s", operation, exc)
        if isinstance(exc, StateStoreError):
            self._notify(NotificationLevel.ERROR, f"Failed to update tokenpaint state: {exc}")
        else:
            self._notify(NotificationLevel.ERROR, f"Failed to write settings: {exc}")

    def _current_theme(self) -> str:
        value = effective_value(self._settings, keys.COLOR_THEME)
        return value if isinstance(value, str) else ""

    def _default_scope(self) -> Scope:
        """Workspace if its layer already carries rules for this theme, else user."""
        if not self.has_workspace:
            return Scope.USER
        theme_key = keys.theme_key(self.theme_name)
        for setting_key in keys.MANAGED_KEYS:
            value = self._settings.read(ConfigLayer.WORKSPACE, setting_key)
            if isinstance(value, dict) and theme_key in value:
                return Scope.WORKSPACE
        return Scope.USER

    def _installed_languages(self) -> list[LanguageBinding]:
        return [
            b for b in self._vocabulary.languages()
            if self._vocabulary.is_installed(b.extension_id)
        ]

    def _default_language(self) -> LanguageBinding:
        installed = self._installed_languages()
        for binding in installed:
            if binding.key == self.config.default_language:
                return binding
        if installed:
            return installed[0]
        return next(
            (b for b in OFFICIAL_LANGUAGES if b.key == self.config.default_language),
            OFFICIAL_LANGUAGES[0],
        )

    def _language_id(self, language_key: str) -> str:
        for binding in self._vocabulary.languages():
            if binding.key == language_key:
                return binding.language_id
        return language_key

    def _language_label(self, language_key: str) -> str:
        for binding in self._vocabulary.languages():
            if binding.key == language_key:
                return binding.label
        return language_key

    def _override_warning(self, selector: str) -> str | None:
        theme_presets = self._presets.get(self.theme_name, {})
        labels = [
            self._language_label(key)
            for key, preset in theme_presets.items()
            if key != STANDARD_PRESET_KEY and selector in preset.token_rules
        ]
        if not labels:
            return None
        return (
            f"Note: this selector is already set in the language layer ({', '.join(labels)}), "
            "which overrides the standard layer; standard changes may not show in the preview."
        )

    # --- view ---

    def view_state(self) -> ViewState:
        with self._lock:
            standard = self.layer is EditLayer.STANDARD
            if standard:
                token_types = list(LSP_STANDARD_TOKEN_TYPES)
                modifiers = list(LSP_STANDARD_TOKEN_MODIFIERS)
            else:
                token_types = language_token_types(self._vocabulary, self.language)
                modifiers = language_token_modifiers(self._vocabulary, self.language)
            self.selection.resolve(token_types, modifiers)
            selector = self.selection.selector()
            textmate = self.selection.textmate_mode

            draft = self.draft_standard if standard else self.draft_language
            layer_style = rules_of(draft, self.selection.kind).get(selector) if selector else None
            effective: Style | None = None
            source: str | None = None
            if selector:
                transaction = self.scope_rules if textmate else self.semantic
                effective, source = transaction.lookup_effective(self.theme_name, selector)

            if selector is None:
                help_text = None
            elif textmate:
                help_text = textmate_help_text(selector)
            else:
                help_text = token_help_text(self._vocabulary, self.language, selector, standard)

            language_exists, language_state = self.auxiliary.language_semantic(
                self.scope, self.language.language_id
            )
            return ViewState(
                theme_name=self.theme_name,
                scope=self.scope.value,
                layer=self.layer.value,
                has_workspace=self.has_workspace,
                languages=[b.to_dict() for b in self._installed_languages()],
                selected_language_key=self.language.key,
                token_types=token_types,
                token_modifiers=modifiers,
                selected_token_type=self.selection.token_type,
                selected_modifiers=list(self.selection.modifiers),
                selector=selector,
                use_custom_selector=self.selection.use_custom,
                custom_selector_type=self.selection.custom_kind.value,
                custom_selector_text=self.selection.custom_text,
                font_family=self.draft_language.font_family,
                layer_style=layer_style,
                effective_style=effective,
                effective_style_source=source or "theme",
                override_warning=(
                    self._override_warning(selector) if standard and selector and not textmate else None
                ),
                token_help=help_text,
                semantic_highlighting_enabled=self.auxiliary.semantic_highlighting_enabled(),
                language_semantic_highlighting={
                    "exists": language_exists, "state": language_state.value,
                },
                editor_semantic_highlighting_override={
                    "state": self.auxiliary.override_semantic(
                        self.scope, self.language.language_id
                    ).value,
                },
                read_back_warning=self.read_back_warning,
                dirty=self.status.dirty,
            )


def _tri_state(value: Any) -> TriState:
    if value == TriState.ON.value:
        return TriState.ON
    if value == TriState.OFF.value:
        return TriState.OFF
    return TriState.INHERIT
