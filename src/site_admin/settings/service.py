"""Site settings orchestrator — the update boundary around the validator.

Each operation loads the current record, validates the request and writes the
full new state in one store call. Validation and storage failures are
returned as typed results and are never retried here.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from site_admin.config import SiteAdminConfig
from site_admin.db.connection import Database
from site_admin.errors import (
    AccessDeniedError,
    FeatureAccessError,
    InvalidProfileError,
    SiteNotFoundError,
)
from site_admin.features.validator import default_selection, normalize_selection
from site_admin.models import (
    DEFAULT_COLOR_PALETTE,
    FeatureIdentifier,
    NavItem,
    PackageTier,
    SiteRecord,
    UserRole,
    role_satisfies,
)
from site_admin.navigation.resolver import DEFAULT_NAV_ITEMS, resolve_order
from site_admin.packages.tiers import DEFAULT_TIER_TABLE, TierTable, load_tier_table
from site_admin.settings.store import SiteSettingsStore, SqliteSiteSettingsStore

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"#[0-9A-Fa-f]{6}")

FeatureInput = Iterable[FeatureIdentifier | str]


@dataclass(frozen=True)
class UpdateResult:
    """Outcome of a site settings operation: the saved record or an error."""

    record: SiteRecord | None = None
    error: FeatureAccessError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SiteSettingsService:
    """Provisioning and validated updates for tenant site settings."""

    def __init__(
        self,
        store: SiteSettingsStore,
        table: TierTable | None = None,
        nav_items: tuple[NavItem, ...] = DEFAULT_NAV_ITEMS,
    ) -> None:
        self._store = store
        self._table = table or DEFAULT_TIER_TABLE
        self._nav_items = nav_items

    @classmethod
    def from_config(cls, config: SiteAdminConfig) -> SiteSettingsService:
        """Build a service backed by the SQLite store and tier table in *config*."""
        table = load_tier_table(config.tiers_file) if config.tiers_file else None
        store = SqliteSiteSettingsStore(Database(config.db_path))
        return cls(store, table)

    @property
    def table(self) -> TierTable:
        return self._table

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_site(self, site_id: str) -> SiteRecord:
        record = self._store.get(site_id)
        if record is None:
            raise SiteNotFoundError(site_id)
        return record

    def list_sites(self, include_inactive: bool = False) -> list[SiteRecord]:
        return self._store.list_sites(include_inactive=include_inactive)

    def navigation_for(
        self, site_id: str, caller_role: UserRole | None,
    ) -> list[NavItem]:
        record = self.get_site(site_id)
        return resolve_order(record.selection, self._nav_items, caller_role)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def provision_site(
        self,
        site_id: str,
        name: str,
        tier: PackageTier | str = PackageTier.BASIC,
        description: str = "",
    ) -> UpdateResult:
        """Create a site with the default selection for its tier."""
        try:
            _check_name(name)
            selection = default_selection(tier, self._table)
            now = datetime.now(tz=UTC)
            record = self._store.create(SiteRecord(
                site_id=site_id,
                name=name.strip(),
                description=description,
                color_palette=list(DEFAULT_COLOR_PALETTE),
                selection=selection,
                created_at=now,
                updated_at=now,
            ))
        except FeatureAccessError as e:
            logger.warning("Rejected provisioning of site %s: %s", site_id, e.message)
            return UpdateResult(error=e)
        logger.info("Provisioned site %s on %s package", site_id, selection.tier)
        return UpdateResult(record=record)

    def update_site_features(
        self,
        site_id: str,
        requested_features: FeatureInput,
        requested_order: FeatureInput = (),
        tier: PackageTier | str | None = None,
    ) -> UpdateResult:
        """Validate and persist a new feature selection for a site.

        *tier* defaults to the site's stored tier. On any error the stored
        record is left untouched and the error is returned.
        """
        try:
            current = self.get_site(site_id)
            effective_tier = tier if tier is not None else current.tier
            selection = normalize_selection(
                effective_tier, requested_features, requested_order, self._table,
            )
            record = self._store.save_selection(
                site_id, selection, expected_tier=current.tier,
            )
        except FeatureAccessError as e:
            logger.warning("Rejected feature update for site %s: %s", site_id, e.message)
            return UpdateResult(error=e)

        logger.info(
            "Updated features for site %s (%s): %s",
            site_id, selection.tier, ", ".join(selection.order),
        )
        return UpdateResult(record=record)

    def assign_package(
        self,
        site_id: str,
        tier: PackageTier | str,
        caller_role: UserRole | None,
        requested_features: FeatureInput | None = None,
        requested_order: FeatureInput | None = None,
    ) -> UpdateResult:
        """Move a site to another package tier (super admin only).

        Without explicit features the current selection is carried over,
        minus anything the new tier does not allow.
        """
        if not role_satisfies(caller_role, UserRole.SUPER_ADMIN):
            return UpdateResult(error=AccessDeniedError(UserRole.SUPER_ADMIN))

        if requested_features is not None:
            return self.update_site_features(
                site_id, requested_features, requested_order or (), tier=tier,
            )

        try:
            current = self.get_site(site_id)
            allowed = self._table.allowed_features(tier)
        except FeatureAccessError as e:
            return UpdateResult(error=e)

        kept = [f for f in current.selection.selected_features if f in allowed]
        order = requested_order if requested_order is not None else current.selection.order
        return self.update_site_features(site_id, kept, order, tier=tier)

    def deprovision_site(self, site_id: str, caller_role: UserRole | None) -> UpdateResult:
        """Remove a site and its feature selection (super admin only).

        The returned result carries the record as it was before removal.
        """
        if not role_satisfies(caller_role, UserRole.SUPER_ADMIN):
            return UpdateResult(error=AccessDeniedError(UserRole.SUPER_ADMIN))
        try:
            record = self.get_site(site_id)
            if not self._store.delete(site_id):
                raise SiteNotFoundError(site_id)
        except FeatureAccessError as e:
            logger.warning("Rejected deprovisioning of site %s: %s", site_id, e.message)
            return UpdateResult(error=e)
        logger.info("Deprovisioned site %s", site_id)
        return UpdateResult(record=record)

    def update_site_profile(
        self,
        site_id: str,
        name: str,
        description: str = "",
        color_palette: list[str] | None = None,
    ) -> UpdateResult:
        """Update the site's name, description and brand colours."""
        palette = list(color_palette) if color_palette is not None else None
        try:
            _check_name(name)
            current = self.get_site(site_id)
            if palette is None:
                palette = current.color_palette
            _check_palette(palette)
            record = self._store.save_profile(site_id, name.strip(), description, palette)
        except FeatureAccessError as e:
            logger.warning("Rejected profile update for site %s: %s", site_id, e.message)
            return UpdateResult(error=e)
        logger.info("Updated profile for site %s", site_id)
        return UpdateResult(record=record)


def _check_name(name: str) -> None:
    if not name or not name.strip():
        raise InvalidProfileError("name", "Site name cannot be empty")


def _check_palette(palette: list[str]) -> None:
    if not palette:
        raise InvalidProfileError("color_palette", "Choose at least one brand colour")
    for color in palette:
        if not _HEX_COLOR.fullmatch(color):
            raise InvalidProfileError(
                "color_palette", f"'{color}' is not a hex colour like #3B82F6",
            )
