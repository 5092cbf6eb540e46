from __future__ import annotations

import pytest

from tokenpaint.errors import StateStoreError
from tokenpaint.model.scope import Scope, TriState
from tokenpaint.model.snapshot import AuxiliarySnapshot, Snapshot
from tokenpaint.store.db import Database
from tokenpaint.store.migrations import run_migrations
from tokenpaint.store.repositories import (
    AuxiliarySnapshotRepository,
    LedgerRepository,
    PresetRepository,
    SnapshotRepository,
    partition_for,
)

from tests.test_tokenpaint.conftest import SEMANTIC_KEY, THEME, make_preset, make_style


def _make_snapshot(
    setting_key: str = SEMANTIC_KEY,
    scope: Scope = Scope.USER,
    value: object = None,
    ledger: dict | None = None,
    pending_rollback: bool = True,
) -> Snapshot:
    return Snapshot(
        setting_key=setting_key,
        scope=scope,
        taken_at="2025-01-15T10:00:00Z",
        value=value,
        ledger=ledger or {},
        pending_rollback=pending_rollback,
    )


class TestDatabase:
    def test_migrations_create_tables(self, db: Database) -> None:
        rows = db.fetch_all("SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name")
        names = {row["name"] for row in rows}
        assert {"presets", "snapshots", "managed_selectors", "auxiliary_snapshots"} <= names

    def test_migrations_are_idempotent(self, db: Database) -> None:
        run_migrations(db)
        run_migrations(db)

    def test_sql_errors_are_wrapped(self, db: Database) -> None:
        with pytest.raises(StateStoreError):
            db.execute("SELECT * FROM no_such_table")


class TestPartitions:
    def test_user_partition(self) -> None:
        assert partition_for(Scope.USER, "ws1") == "user"

    def test_workspace_partition_is_per_workspace(self) -> None:
        assert partition_for(Scope.WORKSPACE, "ws1") == "workspace:ws1"
        assert partition_for(Scope.WORKSPACE, "ws2") != partition_for(Scope.WORKSPACE, "ws1")


class TestPresetRepository:
    def test_get_missing_returns_none(self, db: Database) -> None:
        assert PresetRepository(db).get("user") is None

    def test_put_and_get(self, db: Database) -> None:
        repo = PresetRepository(db)
        preset = make_preset(token_rules={"function": make_style()}, font_family="Consolas")
        repo.put("user", {THEME: {"csharp": preset}})
        assert repo.get("user") == {THEME: {"csharp": preset}}

    def test_put_replaces_mapping(self, db: Database) -> None:
        repo = PresetRepository(db)
        repo.put("user", {THEME: {"csharp": make_preset(font_family="A")}})
        repo.put("user", {"Light+": {"java": make_preset(font_family="B")}})
        assert list(repo.get("user")) == ["Light+"]


class TestSnapshotRepository:
    def test_put_and_get(self, db: Database) -> None:
        repo = SnapshotRepository(db)
        value = {"[Dark+]": {"rules": {"function": "#DCDCAA"}}}
        repo.put("user", _make_snapshot(value=value, ledger={"[Dark+]": ("function",)}))
        snapshot = repo.get(SEMANTIC_KEY, "user")
        assert snapshot is not None
        assert snapshot.value == value
        assert snapshot.ledger == {"[Dark+]": ("function",)}
        assert snapshot.pending_rollback is True

    def test_absent_value_is_kept_as_none(self, db: Database) -> None:
        repo = SnapshotRepository(db)
        repo.put("user", _make_snapshot(value=None))
        assert repo.get(SEMANTIC_KEY, "user").value is None

    def test_put_overwrites_prior_snapshot(self, db: Database) -> None:
        repo = SnapshotRepository(db)
        repo.put("user", _make_snapshot(value={"a": 1}))
        repo.put("user", _make_snapshot(value={"b": 2}))
        assert repo.get(SEMANTIC_KEY, "user").value == {"b": 2}

    def test_pending_flag(self, db: Database) -> None:
        repo = SnapshotRepository(db)
        assert repo.is_pending(SEMANTIC_KEY, "user") is False
        repo.put("user", _make_snapshot())
        assert repo.is_pending(SEMANTIC_KEY, "user") is True
        repo.set_pending(SEMANTIC_KEY, "user", False)
        assert repo.is_pending(SEMANTIC_KEY, "user") is False


class TestLedgerRepository:
    def test_get_missing_is_empty(self, db: Database) -> None:
        assert LedgerRepository(db).get(SEMANTIC_KEY, "user", "[Dark+]") == ()

    def test_set_and_get(self, db: Database) -> None:
        repo = LedgerRepository(db)
        repo.set(SEMANTIC_KEY, "user", "[Dark+]", ("method", "function"))
        assert repo.get(SEMANTIC_KEY, "user", "[Dark+]") == ("function", "method")

    def test_partitions_are_isolated(self, db: Database) -> None:
        repo = LedgerRepository(db)
        repo.set(SEMANTIC_KEY, "user", "[Dark+]", ("function",))
        assert repo.get(SEMANTIC_KEY, "workspace:ws1", "[Dark+]") == ()

    def test_replace_all(self, db: Database) -> None:
        repo = LedgerRepository(db)
        repo.set(SEMANTIC_KEY, "user", "[Dark+]", ("function",))
        repo.set(SEMANTIC_KEY, "user", "[Light+]", ("class",))
        repo.replace_all(SEMANTIC_KEY, "user", {"[Monokai]": ("variable",)})
        assert repo.get_all(SEMANTIC_KEY, "user") == {"[Monokai]": ("variable",)}

    def test_replace_all_with_empty_clears(self, db: Database) -> None:
        repo = LedgerRepository(db)
        repo.set(SEMANTIC_KEY, "user", "[Dark+]", ("function",))
        repo.replace_all(SEMANTIC_KEY, "user", {})
        assert repo.get_all(SEMANTIC_KEY, "user") == {}


class TestAuxiliarySnapshotRepository:
    def test_put_get_and_pending(self, db: Database) -> None:
        repo = AuxiliarySnapshotRepository(db)
        snapshot = AuxiliarySnapshot(
            scope=Scope.USER,
            language_id="csharp",
            taken_at="2025-01-15T10:00:00Z",
            editor_semantic=TriState.ON,
            font_family="Consolas",
        )
        repo.put("user", snapshot)
        assert repo.get("user") == snapshot
        assert repo.is_pending("user") is True
        repo.set_pending("user", False)
        assert repo.is_pending("user") is False
        assert repo.get("user").pending_rollback is False

    def test_get_missing(self, db: Database) -> None:
        assert AuxiliarySnapshotRepository(db).get("user") is None
