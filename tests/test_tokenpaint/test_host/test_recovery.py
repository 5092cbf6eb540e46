from __future__ import annotations

import pytest

from tokenpaint.errors import SettingsWriteError
from tokenpaint.model.scope import Scope
from tokenpaint.recovery import RecoverySweep
from tokenpaint.settings import ConfigLayer, InMemorySettings
from tokenpaint.store.state import DurableState
from tokenpaint.transaction import (
    AuxiliarySettings,
    ScopeRules,
    SemanticTokenRules,
    SettingsTransaction,
)

from tests.test_tokenpaint.conftest import SEMANTIC_KEY, THEME, make_style, style_message


def _make_sweep(settings, state) -> RecoverySweep:
    return RecoverySweep(
        settings,
        state,
        [
            SettingsTransaction(settings, state, SemanticTokenRules()),
            SettingsTransaction(settings, state, ScopeRules("tokenpaint")),
        ],
        AuxiliarySettings(settings, state),
    )


class _FlakySettings(InMemorySettings):
    """Rejects writes to one key only."""

    def __init__(self, broken_key: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self.broken_key = broken_key

    def write(self, layer, key, value) -> None:
        if key == self.broken_key:
            raise SettingsWriteError(f"Unable to write {key}", key=key, layer=layer.value)
        super().write(layer, key, value)


class TestRecoverySweep:
    def test_nothing_pending(self, settings, state: DurableState) -> None:
        report = _make_sweep(settings, state).run()
        assert report.steps == ()
        assert report.restored == 0

    def test_restores_interrupted_session(self, make_session, settings, state, scheduler) -> None:
        session = make_session()
        session.open()
        session.handle(style_message("function", foreground="#DCDCAA"))
        scheduler.advance(1)
        assert settings.read(ConfigLayer.USER, SEMANTIC_KEY) is not None
        # the process dies here without closing the session

        report = _make_sweep(settings, state).run()
        assert report.restored == 3
        assert report.failed == 0
        assert settings.dump(ConfigLayer.USER) == {}
        assert not SettingsTransaction(settings, state, SemanticTokenRules()).is_rollback_pending(Scope.USER)

    def test_only_pending_scopes_are_touched(self, settings, state: DurableState) -> None:
        semantic = SettingsTransaction(settings, state, SemanticTokenRules())
        semantic.take_snapshot(Scope.USER)
        semantic.apply_union(Scope.USER, THEME, {"function": make_style()})
        semantic.take_snapshot(Scope.WORKSPACE)
        semantic.apply_union(Scope.WORKSPACE, THEME, {"class": make_style("#4EC9B0")})
        semantic.clear_rollback_pending(Scope.WORKSPACE)
        workspace_before = settings.dump(ConfigLayer.WORKSPACE)

        report = _make_sweep(settings, state).run()
        assert [(step.target, step.scope) for step in report.steps] == [(SEMANTIC_KEY, Scope.USER)]
        assert settings.read(ConfigLayer.USER, SEMANTIC_KEY) is None
        assert settings.dump(ConfigLayer.WORKSPACE) == workspace_before

    def test_second_sweep_is_noop(self, settings, state: DurableState) -> None:
        semantic = SettingsTransaction(settings, state, SemanticTokenRules())
        semantic.take_snapshot(Scope.USER)
        _make_sweep(settings, state).run()
        assert _make_sweep(settings, state).run().steps == ()

    def test_workspace_skipped_without_workspace(self, state: DurableState) -> None:
        with_workspace = InMemorySettings(user={}, workspace={})
        SettingsTransaction(with_workspace, state, SemanticTokenRules()).take_snapshot(Scope.WORKSPACE)
        sweep = _make_sweep(InMemorySettings(user={}), state)
        assert sweep.scopes() == [Scope.USER]
        assert sweep.run().steps == ()

    def test_failure_does_not_block_other_keys(self, state: DurableState) -> None:
        settings = _FlakySettings(SEMANTIC_KEY, user={}, workspace={})
        SettingsTransaction(settings, state, SemanticTokenRules()).take_snapshot(Scope.USER)
        scope_rules = SettingsTransaction(settings, state, ScopeRules("tokenpaint"))
        scope_rules.take_snapshot(Scope.USER)
        scope_rules.apply_union(Scope.USER, THEME, {"comment": make_style("#6A9955")})

        report = _make_sweep(settings, state).run()
        assert report.failed == 1
        assert report.restored == 1
        failed = [step for step in report.steps if step.error]
        assert failed[0].target == SEMANTIC_KEY
        assert settings.read(ConfigLayer.USER, "editor.tokenColorCustomizations") is None
        # still pending, so the next start retries it
        assert SettingsTransaction(settings, state, SemanticTokenRules()).is_rollback_pending(Scope.USER)

    @pytest.mark.parametrize("scope", [Scope.USER, Scope.WORKSPACE])
    def test_auxiliary_restored(self, settings, state: DurableState, scope: Scope) -> None:
        auxiliary = AuxiliarySettings(settings, state)
        auxiliary.take_snapshot(scope, "csharp")
        auxiliary.apply_font_family(scope, "csharp", "Fira Code")
        report = _make_sweep(settings, state).run()
        assert [(step.target, step.scope) for step in report.steps] == [("auxiliary", scope)]
        assert auxiliary.font_family(scope, "csharp") is None
