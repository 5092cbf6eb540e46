from tokenpaint.store.db import Database
from tokenpaint.store.migrations import run_migrations
from tokenpaint.store.preset_store import PresetStore, get_preset, upsert_preset
from tokenpaint.store.repositories import (
    AuxiliarySnapshotRepository,
    LedgerRepository,
    PresetRepository,
    SnapshotRepository,
    partition_for,
)
from tokenpaint.store.state import DurableState

__all__ = [
    "Database",
    "run_migrations",
    "PresetStore",
    "get_preset",
    "upsert_preset",
    "AuxiliarySnapshotRepository",
    "LedgerRepository",
    "PresetRepository",
    "SnapshotRepository",
    "partition_for",
    "DurableState",
]
