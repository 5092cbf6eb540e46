from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from tokenpaint.model.preset import Preset
from tokenpaint.model.scope import Scope
from tokenpaint.model.snapshot import AuxiliarySnapshot, Snapshot
from tokenpaint.store.db import Database


def partition_for(scope: Scope, workspace_id: str | None = None) -> str:
    """Storage partition for a scope; workspace state is kept per workspace."""
    if scope is Scope.WORKSPACE:
        return f"workspace:{workspace_id or ''}"
    return "user"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class PresetRepository:
    """Repository for the presets-by-theme mapping of one partition."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def get(self, partition: str) -> dict[str, dict[str, Preset]] | None:
        """Retrieve the stored mapping, or None if nothing was saved."""
        row = self._db.fetch_one("SELECT payload FROM presets WHERE partition = ?", (partition,))
        if row is None:
            return None
        return _payload_to_presets(json.loads(row["payload"]))

    def put(self, partition: str, presets: dict[str, dict[str, Preset]]) -> None:
        """Replace the whole mapping for a partition."""
        payload = {
            theme: {lang: preset.to_dict() for lang, preset in by_lang.items()}
            for theme, by_lang in presets.items()
        }
        self._db.execute(
            """INSERT OR REPLACE INTO presets (partition, payload, updated_at)
               VALUES (?, ?, ?)""",
            (partition, json.dumps(payload, sort_keys=True), _now()),
        )
        self._db.commit()


class SnapshotRepository:
    """Repository for managed-key snapshots and their pending-rollback flags."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def put(self, partition: str, snapshot: Snapshot) -> None:
        """Store a snapshot, overwriting any prior one for the same key."""
        self._db.execute(
            """INSERT OR REPLACE INTO snapshots
               (setting_key, partition, scope, taken_at, value, ledger, pending_rollback)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (
                snapshot.setting_key,
                partition,
                snapshot.scope.value,
                snapshot.taken_at,
                None if snapshot.value is None else json.dumps(snapshot.value),
                json.dumps({k: list(v) for k, v in snapshot.ledger.items()}),
                int(snapshot.pending_rollback),
            ),
        )
        self._db.commit()

    def get(self, setting_key: str, partition: str) -> Snapshot | None:
        """Retrieve a snapshot, or None if none was taken."""
        row = self._db.fetch_one(
            "SELECT * FROM snapshots WHERE setting_key = ? AND partition = ?",
            (setting_key, partition),
        )
        if row is None:
            return None
        return _row_to_snapshot(row)

    def set_pending(self, setting_key: str, partition: str, pending: bool) -> None:
        self._db.execute(
            "UPDATE snapshots SET pending_rollback = ? WHERE setting_key = ? AND partition = ?",
            (int(pending), setting_key, partition),
        )
        self._db.commit()

    def is_pending(self, setting_key: str, partition: str) -> bool:
        row = self._db.fetch_one(
            "SELECT pending_rollback FROM snapshots WHERE setting_key = ? AND partition = ?",
            (setting_key, partition),
        )
        return row is not None and bool(row["pending_rollback"])


class LedgerRepository:
    """Repository for the managed-selector ledger."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def get(self, setting_key: str, partition: str, theme_key: str) -> tuple[str, ...]:
        """Selectors last written under a theme key, empty if none."""
        row = self._db.fetch_one(
            """SELECT selectors FROM managed_selectors
               WHERE setting_key = ? AND partition = ? AND theme_key = ?""",
            (setting_key, partition, theme_key),
        )
        if row is None:
            return ()
        return tuple(json.loads(row["selectors"]))

    def get_all(self, setting_key: str, partition: str) -> dict[str, tuple[str, ...]]:
        rows = self._db.fetch_all(
            """SELECT theme_key, selectors FROM managed_selectors
               WHERE setting_key = ? AND partition = ? ORDER BY theme_key""",
            (setting_key, partition),
        )
        return {r["theme_key"]: tuple(json.loads(r["selectors"])) for r in rows}

    def set(
        self, setting_key: str, partition: str, theme_key: str, selectors: tuple[str, ...]
    ) -> None:
        """Record exactly the selectors written for a theme key."""
        self._db.execute(
            """INSERT OR REPLACE INTO managed_selectors
               (setting_key, partition, theme_key, selectors) VALUES (?, ?, ?, ?)""",
            (setting_key, partition, theme_key, json.dumps(sorted(selectors))),
        )
        self._db.commit()

    def replace_all(
        self, setting_key: str, partition: str, ledger: dict[str, tuple[str, ...]]
    ) -> None:
        """Replace the ledger for a key wholesale."""
        self._db.execute(
            "DELETE FROM managed_selectors WHERE setting_key = ? AND partition = ?",
            (setting_key, partition),
        )
        for theme_key, selectors in ledger.items():
            self._db.execute(
                """INSERT INTO managed_selectors
                   (setting_key, partition, theme_key, selectors) VALUES (?, ?, ?, ?)""",
                (setting_key, partition, theme_key, json.dumps(sorted(selectors))),
            )
        self._db.commit()


class AuxiliarySnapshotRepository:
    """Repository for the auxiliary settings snapshot of one partition."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def put(self, partition: str, snapshot: AuxiliarySnapshot) -> None:
        self._db.execute(
            """INSERT OR REPLACE INTO auxiliary_snapshots (partition, payload, pending_rollback)
               VALUES (?, ?, ?)""",
            (partition, json.dumps(snapshot.to_dict()), int(snapshot.pending_rollback)),
        )
        self._db.commit()

    def get(self, partition: str) -> AuxiliarySnapshot | None:
        row = self._db.fetch_one(
            "SELECT * FROM auxiliary_snapshots WHERE partition = ?", (partition,)
        )
        if row is None:
            return None
        return AuxiliarySnapshot.from_dict(
            json.loads(row["payload"]), pending_rollback=bool(row["pending_rollback"])
        )

    def set_pending(self, partition: str, pending: bool) -> None:
        self._db.execute(
            "UPDATE auxiliary_snapshots SET pending_rollback = ? WHERE partition = ?",
            (int(pending), partition),
        )
        self._db.commit()

    def is_pending(self, partition: str) -> bool:
        row = self._db.fetch_one(
            "SELECT pending_rollback FROM auxiliary_snapshots WHERE partition = ?", (partition,)
        )
        return row is not None and bool(row["pending_rollback"])


# --- Row converters ---


def _row_to_snapshot(row: Any) -> Snapshot:
    raw_value = row["value"]
    return Snapshot(
        setting_key=row["setting_key"],
        scope=Scope(row["scope"]),
        taken_at=row["taken_at"],
        value=None if raw_value is None else json.loads(raw_value),
        ledger={k: tuple(v) for k, v in json.loads(row["ledger"]).items()},
        pending_rollback=bool(row["pending_rollback"]),
    )


def _payload_to_presets(payload: Any) -> dict[str, dict[str, Preset]]:
    if not isinstance(payload, dict):
        return {}
    presets: dict[str, dict[str, Preset]] = {}
    for theme, by_lang in payload.items():
        if not isinstance(by_lang, dict):
            continue
        presets[theme] = {lang: Preset.from_dict(data) for lang, data in by_lang.items()}
    return presets
