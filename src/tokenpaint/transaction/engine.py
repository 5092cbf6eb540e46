"""Snapshot, overwrite and rollback of one managed settings key."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Mapping

from tokenpaint.errors import SettingsWriteError
from tokenpaint.model.scope import Scope
from tokenpaint.model.snapshot import Snapshot
from tokenpaint.model.style import Style
from tokenpaint.settings.document import LayeredSettings, effective_value, require_layer
from tokenpaint.settings.keys import theme_key
from tokenpaint.store.repositories import partition_for
from tokenpaint.store.state import DurableState
from tokenpaint.transaction.managed import ManagedKey


@dataclass(frozen=True)
class ReadBack:
    """Layer value vs effective value of one selector after a write."""

    selector: str
    target: Style | None
    effective: Style | None
    source: str | None = None

    @property
    def overridden(self) -> bool:
        return self.target is not None and self.target != self.effective


class SettingsTransaction:
    """Idempotent overwrite and exact rollback for one managed key.

    The scope picks the document layer: user scope reads and writes the
    user layer, workspace scope the workspace layer. Nothing else is
    ever written.
    """

    def __init__(
        self,
        settings: LayeredSettings,
        state: DurableState,
        managed: ManagedKey,
        logger: logging.Logger | None = None,
    ) -> None:
        self._settings = settings
        self._state = state
        self._managed = managed
        self._logger = logger or logging.getLogger("tokenpaint.transaction")

    @property
    def setting_key(self) -> str:
        return self._managed.setting_key

    def _partition(self, scope: Scope) -> str:
        return partition_for(scope, self._state.workspace_id)

    # --- snapshot ---

    def take_snapshot(self, scope: Scope) -> Snapshot:
        """Record the layer's current value and mark rollback pending."""
        layer = require_layer(self._settings, scope)
        partition = self._partition(scope)
        snapshot = Snapshot(
            setting_key=self.setting_key,
            scope=scope,
            taken_at=datetime.now(timezone.utc).isoformat(),
            value=self._settings.read(layer, self.setting_key),
            ledger=self._state.ledger.get_all(self.setting_key, partition),
            pending_rollback=True,
        )
        self._state.snapshots.put(partition, snapshot)
        self._logger.debug("Snapshot taken for %s (scope=%s)", self.setting_key, scope.value)
        return snapshot

    def get_snapshot(self, scope: Scope) -> Snapshot | None:
        return self._state.snapshots.get(self.setting_key, self._partition(scope))

    def is_rollback_pending(self, scope: Scope) -> bool:
        return self._state.snapshots.is_pending(self.setting_key, self._partition(scope))

    def clear_rollback_pending(self, scope: Scope) -> None:
        self._state.snapshots.set_pending(self.setting_key, self._partition(scope), False)

    # --- write ---

    def apply_union(self, scope: Scope, theme_name: str, rules: Mapping[str, Style]) -> tuple[str, ...]:
        """Overwrite the selectors we own under a theme with exactly ``rules``.

        Returns the selectors written. The ledger only changes after the
        document accepted the write.
        """
        layer = require_layer(self._settings, scope)
        partition = self._partition(scope)
        key = theme_key(theme_name)
        previous = self._state.ledger.get(self.setting_key, partition, key)
        current = self._settings.read(layer, self.setting_key)
        updated, written = self._managed.compose(current, key, rules, previous)
        self._logger.debug(
            "Applying %d selectors to %s %s (scope=%s, dropping %d)",
            len(written), self.setting_key, key, scope.value, len(set(previous) - set(written)),
        )
        try:
            self._settings.write(layer, self.setting_key, updated)
        except SettingsWriteError:
            self._logger.error(
                "Failed to write %s %s (scope=%s)", self.setting_key, key, scope.value
            )
            raise
        self._state.ledger.set(self.setting_key, partition, key, written)
        return written

    def restore_snapshot(self, scope: Scope) -> bool:
        """Write the stored snapshot back verbatim. Returns False if none exists.

        The ledger is reset to the copy recorded with the snapshot instead of
        being cleared, so selectors written by earlier saves stay owned and
        are still cleaned up by the next apply.
        """
        partition = self._partition(scope)
        snapshot = self._state.snapshots.get(self.setting_key, partition)
        if snapshot is None:
            return False
        layer = require_layer(self._settings, scope)
        try:
            self._settings.write(layer, self.setting_key, snapshot.value)
        except SettingsWriteError:
            self._logger.error(
                "Failed to restore %s snapshot (scope=%s)", self.setting_key, scope.value
            )
            raise
        self._state.ledger.replace_all(self.setting_key, partition, snapshot.ledger)
        self._state.snapshots.set_pending(self.setting_key, partition, False)
        self._logger.info("Restored %s snapshot from %s (scope=%s)",
                          self.setting_key, snapshot.taken_at, scope.value)
        return True

    # --- inspection ---

    def lookup(self, scope: Scope, theme_name: str, selector: str) -> tuple[Style | None, str | None]:
        """Style for a selector at the scope's layer."""
        layer = require_layer(self._settings, scope)
        value = self._settings.read(layer, self.setting_key)
        return self._managed.lookup(value, theme_key(theme_name), selector)

    def lookup_effective(self, theme_name: str, selector: str) -> tuple[Style | None, str | None]:
        """Style for a selector with every layer applied."""
        value = effective_value(self._settings, self.setting_key)
        return self._managed.lookup(value, theme_key(theme_name), selector)

    def verify(self, scope: Scope, theme_name: str, selector: str) -> ReadBack:
        """Compare the written rule with the effective one for a selector."""
        target, _ = self.lookup(scope, theme_name, selector)
        effective, source = self.lookup_effective(theme_name, selector)
        result = ReadBack(selector=selector, target=target, effective=effective, source=source)
        self._logger.debug(
            "Read-back %s %s: target=%s effective=%s",
            self.setting_key, selector, target, effective,
        )
        if result.overridden:
            self._logger.warning(
                "%s for %r is overridden by a higher-priority layer", self.setting_key, selector
            )
        return result
