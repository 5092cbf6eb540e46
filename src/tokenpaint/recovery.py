"""Start-up sweep that rolls back sessions which never closed cleanly."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from tokenpaint.model.scope import Scope
from tokenpaint.settings.document import ConfigLayer, LayeredSettings
from tokenpaint.store.state import DurableState
from tokenpaint.transaction import AuxiliarySettings, SettingsTransaction


@dataclass(frozen=True)
class RecoveryStep:
    target: str  # a managed setting key, or "auxiliary"
    scope: Scope
    restored: bool
    error: str = ""


@dataclass(frozen=True)
class RecoveryReport:
    steps: tuple[RecoveryStep, ...] = field(default_factory=tuple)

    @property
    def restored(self) -> int:
        return sum(1 for step in self.steps if step.restored)

    @property
    def failed(self) -> int:
        return sum(1 for step in self.steps if step.error)


class RecoverySweep:
    """Replays rollback for every scope whose pending-rollback flag is still set.

    Each restoration is attempted on its own; a failure is logged and the
    sweep moves on.
    """

    def __init__(
        self,
        settings: LayeredSettings,
        state: DurableState,
        transactions: list[SettingsTransaction],
        auxiliary: AuxiliarySettings,
        logger: logging.Logger | None = None,
    ) -> None:
        self._settings = settings
        self._state = state
        self._transactions = transactions
        self._auxiliary = auxiliary
        self._logger = logger or logging.getLogger("tokenpaint.recovery")

    def scopes(self) -> list[Scope]:
        """User scope always; workspace scope only with an open workspace."""
        scopes = [Scope.USER]
        if self._settings.has_layer(ConfigLayer.WORKSPACE):
            scopes.append(Scope.WORKSPACE)
        return scopes

    def run(self) -> RecoveryReport:
        steps: list[RecoveryStep] = []
        for scope in self.scopes():
            for transaction in self._transactions:
                steps.extend(self._recover_key(transaction, scope))
            steps.extend(self._recover_auxiliary(scope))
        report = RecoveryReport(tuple(steps))
        if steps:
            self._logger.info(
                "Recovery sweep restored %d of %d pending scopes", report.restored, len(steps)
            )
        return report

    def _recover_key(self, transaction: SettingsTransaction, scope: Scope) -> list[RecoveryStep]:
        try:
            if not transaction.is_rollback_pending(scope):
                return []
            restored = transaction.restore_snapshot(scope)
        except Exception as exc:
            self._logger.exception(
                "Recovery of %s failed (scope=%s)", transaction.setting_key, scope.value
            )
            return [RecoveryStep(transaction.setting_key, scope, False, str(exc))]
        return [RecoveryStep(transaction.setting_key, scope, restored)]

    def _recover_auxiliary(self, scope: Scope) -> list[RecoveryStep]:
        try:
            if not self._auxiliary.is_rollback_pending(scope):
                return []
            restored = self._auxiliary.restore_snapshot(scope)
        except Exception as exc:
            self._logger.exception("Recovery of auxiliary settings failed (scope=%s)", scope.value)
            return [RecoveryStep("auxiliary", scope, False, str(exc))]
        return [RecoveryStep("auxiliary", scope, restored)]
