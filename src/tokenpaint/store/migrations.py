from __future__ import annotations

from tokenpaint.store.db import Database

# partition is "user" or "workspace:<workspace id>"
SCHEMA = """
CREATE TABLE IF NOT EXISTS presets (
    partition TEXT PRIMARY KEY,
    payload TEXT NOT NULL DEFAULT '{}',
    updated_at TEXT NOT NULL DEFAULT ''
);

CREATE TABLE IF NOT EXISTS snapshots (
    setting_key TEXT NOT NULL,
    partition TEXT NOT NULL,
    scope TEXT NOT NULL,
    taken_at TEXT NOT NULL,
    value TEXT,
    ledger TEXT NOT NULL DEFAULT '{}',
    pending_rollback INTEGER NOT NULL DEFAULT 1,
    PRIMARY KEY (setting_key, partition)
);

CREATE TABLE IF NOT EXISTS managed_selectors (
    setting_key TEXT NOT NULL,
    partition TEXT NOT NULL,
    theme_key TEXT NOT NULL,
    selectors TEXT NOT NULL DEFAULT '[]',
    PRIMARY KEY (setting_key, partition, theme_key)
);

CREATE TABLE IF NOT EXISTS auxiliary_snapshots (
    partition TEXT PRIMARY KEY,
    payload TEXT NOT NULL,
    pending_rollback INTEGER NOT NULL DEFAULT 1
);

CREATE INDEX IF NOT EXISTS idx_snapshots_pending ON snapshots(pending_rollback);
"""


def run_migrations(db: Database) -> None:
    """Execute the schema DDL to create all tables and indexes."""
    db.connection.executescript(SCHEMA)
