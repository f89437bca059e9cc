"""Site settings store.

SQLite-backed persistence for tenant site records. A feature update writes
tier, feature set, order and ``updated_at`` in a single UPDATE, so readers
never see a partial selection. The UPDATE is guarded by the tier the caller
validated against, so a package change in between rejects the write instead
of being reverted. Otherwise concurrent writers are last-write-wins.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import UTC, datetime
from typing import Protocol, runtime_checkable

from site_admin.db.connection import Database
from site_admin.db.migrations import run_migrations
from site_admin.errors import (
    PackageChangedError,
    PersistenceError,
    SiteExistsError,
    SiteNotFoundError,
)
from site_admin.models import PackageTier, SiteFeatureSelection, SiteRecord

logger = logging.getLogger(__name__)


@runtime_checkable
class SiteSettingsStore(Protocol):
    """Protocol for site settings storage backends."""

    def get(self, site_id: str) -> SiteRecord | None: ...

    def list_sites(self, include_inactive: bool = False) -> list[SiteRecord]: ...

    def create(self, record: SiteRecord) -> SiteRecord: ...

    def save_selection(
        self,
        site_id: str,
        selection: SiteFeatureSelection,
        expected_tier: PackageTier | None = None,
    ) -> SiteRecord: ...

    def save_profile(
        self,
        site_id: str,
        name: str,
        description: str,
        color_palette: list[str],
    ) -> SiteRecord: ...

    def delete(self, site_id: str) -> bool: ...


class SqliteSiteSettingsStore:
    """Site records in the ``sites`` table. Migrates the schema on creation."""

    def __init__(self, db: Database) -> None:
        self._db = db
        try:
            run_migrations(db)
        except sqlite3.Error as e:
            logger.exception("Failed to migrate site settings database: %s", db.path)
            raise PersistenceError("Site settings database is unavailable") from e

    def get(self, site_id: str) -> SiteRecord | None:
        try:
            row = self._db.fetchone("SELECT * FROM sites WHERE site_id = ?", (site_id,))
        except sqlite3.Error as e:
            logger.exception("Failed to read site %s", site_id)
            raise PersistenceError("Failed to load site settings") from e
        if row is None:
            return None
        return self._row_to_record(row)

    def list_sites(self, include_inactive: bool = False) -> list[SiteRecord]:
        sql = "SELECT * FROM sites"
        if not include_inactive:
            sql += " WHERE is_active = 1"
        sql += " ORDER BY name ASC"
        try:
            rows = self._db.fetchall(sql)
        except sqlite3.Error as e:
            logger.exception("Failed to list sites")
            raise PersistenceError("Failed to list sites") from e
        return [self._row_to_record(r) for r in rows]

    def create(self, record: SiteRecord) -> SiteRecord:
        selection = record.selection
        try:
            self._db.write(
                """INSERT INTO sites
                   (site_id, name, description, package_tier, features_json,
                    order_json, color_palette_json, is_active, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    record.site_id, record.name, record.description,
                    selection.tier.value,
                    _dump_features(selection.selected_features),
                    _dump_features(selection.order),
                    json.dumps(record.color_palette),
                    1 if record.is_active else 0,
                    record.created_at.isoformat(), record.updated_at.isoformat(),
                ),
            )
        except sqlite3.IntegrityError as e:
            raise SiteExistsError(record.site_id) from e
        except sqlite3.Error as e:
            logger.exception("Failed to create site %s", record.site_id)
            raise PersistenceError() from e
        return record

    def save_selection(
        self,
        site_id: str,
        selection: SiteFeatureSelection,
        expected_tier: PackageTier | None = None,
    ) -> SiteRecord:
        """Replace tier, features and order in one statement.

        With *expected_tier* the row is only written while the stored tier
        still matches it; otherwise ``PackageChangedError`` is raised and
        nothing is written.
        """
        now = datetime.now(tz=UTC).isoformat()
        sql = """UPDATE sites
                 SET package_tier = ?, features_json = ?, order_json = ?, updated_at = ?
                 WHERE site_id = ?"""
        params: tuple = (
            selection.tier.value,
            _dump_features(selection.selected_features),
            _dump_features(selection.order),
            now,
            site_id,
        )
        if expected_tier is not None:
            sql += " AND package_tier = ?"
            params += (PackageTier(expected_tier).value,)
        try:
            cursor = self._db.write(sql, params)
        except sqlite3.Error as e:
            logger.exception("Failed to save feature selection for site %s", site_id)
            raise PersistenceError() from e
        if cursor.rowcount == 0:
            if expected_tier is not None and self.get(site_id) is not None:
                raise PackageChangedError(site_id, expected_tier)
            raise SiteNotFoundError(site_id)
        return self._require(site_id)

    def save_profile(
        self,
        site_id: str,
        name: str,
        description: str,
        color_palette: list[str],
    ) -> SiteRecord:
        now = datetime.now(tz=UTC).isoformat()
        try:
            cursor = self._db.write(
                """UPDATE sites
                   SET name = ?, description = ?, color_palette_json = ?, updated_at = ?
                   WHERE site_id = ?""",
                (name, description, json.dumps(color_palette), now, site_id),
            )
        except sqlite3.Error as e:
            logger.exception("Failed to save profile for site %s", site_id)
            raise PersistenceError() from e
        if cursor.rowcount == 0:
            raise SiteNotFoundError(site_id)
        return self._require(site_id)

    def delete(self, site_id: str) -> bool:
        """Remove a site record together with its selection."""
        try:
            cursor = self._db.write("DELETE FROM sites WHERE site_id = ?", (site_id,))
        except sqlite3.Error as e:
            logger.exception("Failed to delete site %s", site_id)
            raise PersistenceError() from e
        return cursor.rowcount > 0

    def _require(self, site_id: str) -> SiteRecord:
        record = self.get(site_id)
        if record is None:
            raise SiteNotFoundError(site_id)
        return record

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> SiteRecord:
        return SiteRecord(
            site_id=row["site_id"],
            name=row["name"],
            description=row["description"],
            color_palette=json.loads(row["color_palette_json"]),
            is_active=bool(row["is_active"]),
            selection=SiteFeatureSelection(
                tier=row["package_tier"],
                selected_features=tuple(json.loads(row["features_json"])),
                order=tuple(json.loads(row["order_json"])),
            ),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


def _dump_features(features: tuple[str, ...]) -> str:
    return json.dumps([str(f) for f in features])
