"""Version-tracked SQLite schema migrations."""

from __future__ import annotations

import sqlite3

from site_admin.db.connection import Database

MIGRATIONS: list[tuple[int, str]] = [
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS schema_version (
            version INTEGER NOT NULL
        );
        INSERT INTO schema_version (version) VALUES (0);

        CREATE TABLE IF NOT EXISTS sites (
            site_id        TEXT PRIMARY KEY,
            name           TEXT NOT NULL,
            description    TEXT NOT NULL DEFAULT '',
            package_tier   TEXT NOT NULL,
            features_json  TEXT NOT NULL DEFAULT '["dashboard"]',
            order_json     TEXT NOT NULL DEFAULT '["dashboard"]',
            is_active      INTEGER NOT NULL DEFAULT 1,
            created_at     TEXT NOT NULL,
            updated_at     TEXT NOT NULL
        );
        """,
    ),
    (
        2,
        """
        ALTER TABLE sites ADD COLUMN color_palette_json TEXT NOT NULL
            DEFAULT '["#3B82F6", "#10B981", "#F59E0B"]';

        CREATE INDEX IF NOT EXISTS idx_sites_active ON sites(is_active);
        """,
    ),
]


def get_schema_version(db: Database) -> int:
    """Return the current schema version, or 0 if uninitialized."""
    try:
        row = db.fetchone("SELECT version FROM schema_version")
    except sqlite3.OperationalError:
        return 0
    return int(row["version"]) if row else 0


def run_migrations(db: Database) -> int:
    """Apply pending migrations. Returns the final schema version."""
    current = get_schema_version(db)

    for version, sql in MIGRATIONS:
        if version <= current:
            continue
        db.write_script(sql)
        db.write("UPDATE schema_version SET version = ?", (version,))

    return get_schema_version(db)
