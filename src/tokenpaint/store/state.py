from __future__ import annotations

from dataclasses import dataclass

from tokenpaint.store.db import Database
from tokenpaint.store.preset_store import PresetStore
from tokenpaint.store.repositories import (
    AuxiliarySnapshotRepository,
    LedgerRepository,
    PresetRepository,
    SnapshotRepository,
)


@dataclass(frozen=True)
class DurableState:
    """All durable local state for one host process."""

    presets: PresetStore
    snapshots: SnapshotRepository
    ledger: LedgerRepository
    auxiliary: AuxiliarySnapshotRepository
    workspace_id: str | None = None

    @classmethod
    def create(cls, db: Database, workspace_id: str | None = None) -> DurableState:
        return cls(
            presets=PresetStore(PresetRepository(db), workspace_id),
            snapshots=SnapshotRepository(db),
            ledger=LedgerRepository(db),
            auxiliary=AuxiliarySnapshotRepository(db),
            workspace_id=workspace_id,
        )
