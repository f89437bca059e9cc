"""Tests for the site settings orchestrator."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from site_admin.config import SiteAdminConfig
from site_admin.db.connection import Database
from site_admin.errors import (
    AccessDeniedError,
    InvalidProfileError,
    PackageChangedError,
    PersistenceError,
    SiteExistsError,
    SiteNotFoundError,
    TooFewFeaturesError,
    TooManyFeaturesError,
    UnknownTierError,
    UnsupportedFeatureError,
)
from site_admin.models import FeatureIdentifier, PackageTier, SiteFeatureSelection, UserRole
from site_admin.settings.service import SiteSettingsService
from site_admin.settings.store import SqliteSiteSettingsStore

F = FeatureIdentifier


@pytest.fixture()
def store(tmp_path: Path) -> SqliteSiteSettingsStore:
    return SqliteSiteSettingsStore(Database(tmp_path / "sites.db"))


@pytest.fixture()
def service(store: SqliteSiteSettingsStore) -> SiteSettingsService:
    svc = SiteSettingsService(store)
    svc.provision_site("acme", "Acme Events", tier=PackageTier.STANDARD)
    svc.provision_site("bloom", "Bloom Florals", tier=PackageTier.BASIC)
    return svc


class FailingStore(SqliteSiteSettingsStore):
    """Store whose writes always fail, as if the database went away."""

    def save_selection(self, site_id: str, selection: SiteFeatureSelection, expected_tier=None):
        raise PersistenceError()


class InterleavingStore(SqliteSiteSettingsStore):
    """Store that runs a callback once, right before the next selection write."""

    before_write: Callable[[], object] | None = None

    def save_selection(self, site_id: str, selection: SiteFeatureSelection, expected_tier=None):
        hook, self.before_write = self.before_write, None
        if hook is not None:
            hook()
        return super().save_selection(site_id, selection, expected_tier)


class TestProvision:
    def test_provision_uses_tier_default(self, service: SiteSettingsService):
        record = service.get_site("acme")
        assert record.tier == PackageTier.STANDARD
        assert record.selection.feature_count == 4
        assert record.selection.order[0] == F.DASHBOARD

    def test_provision_duplicate(self, service: SiteSettingsService):
        result = service.provision_site("acme", "Again")
        assert isinstance(result.error, SiteExistsError)
        assert result.error.to_dict()["code"] == "site_exists"
        assert service.get_site("acme").name == "Acme Events"

    def test_provision_unknown_tier(self, service: SiteSettingsService):
        result = service.provision_site("new", "New", tier="gold")
        assert isinstance(result.error, UnknownTierError)
        with pytest.raises(SiteNotFoundError):
            service.get_site("new")

    def test_provision_blank_name(self, service: SiteSettingsService):
        result = service.provision_site("new", "   ")
        assert isinstance(result.error, InvalidProfileError)


class TestUpdateSiteFeatures:
    def test_success_persists_normalized_selection(self, service: SiteSettingsService):
        result = service.update_site_features(
            "acme",
            [F.PRODUCTS, F.CATEGORIES, F.EVENTS, F.CONTACT],
            [F.CONTACT, F.PRODUCTS],
        )
        assert result.ok
        assert result.record.selection.order == (
            F.DASHBOARD, F.CONTACT, F.PRODUCTS, F.CATEGORIES, F.EVENTS,
        )
        assert service.get_site("acme").selection == result.record.selection

    def test_missing_site(self, service: SiteSettingsService):
        result = service.update_site_features("ghost", [F.PRODUCTS], [])
        assert isinstance(result.error, SiteNotFoundError)
        assert result.record is None

    def test_validation_failure_leaves_state_untouched(self, service: SiteSettingsService):
        before = service.get_site("bloom")
        result = service.update_site_features("bloom", [F.PRODUCTS, F.EVENTS], [])
        assert isinstance(result.error, UnsupportedFeatureError)
        after = service.get_site("bloom")
        assert after.selection == before.selection
        assert after.updated_at == before.updated_at

    def test_uses_stored_tier(self, service: SiteSettingsService):
        result = service.update_site_features(
            "bloom", [F.HERO, F.PRODUCTS, F.ABOUT, F.CONTACT], [],
        )
        assert isinstance(result.error, TooManyFeaturesError)
        assert result.error.max == 3

    def test_explicit_tier_changes_package(self, service: SiteSettingsService):
        result = service.update_site_features(
            "bloom", [F.HERO, F.PRODUCTS, F.EVENTS, F.ABOUT], [], tier=PackageTier.PREMIUM,
        )
        assert result.ok
        assert service.get_site("bloom").tier == PackageTier.PREMIUM

    def test_persistence_failure_surfaced(self, tmp_path: Path):
        svc = SiteSettingsService(FailingStore(Database(tmp_path / "f.db")))
        svc.provision_site("acme", "Acme")
        result = svc.update_site_features("acme", [F.PRODUCTS], [])
        assert isinstance(result.error, PersistenceError)
        assert svc.get_site("acme").selection.selected_features == (F.DASHBOARD, F.HERO)

    def test_package_change_during_update_is_kept(self, tmp_path: Path):
        store = InterleavingStore(Database(tmp_path / "race.db"))
        svc = SiteSettingsService(store)
        svc.provision_site("bloom", "Bloom", tier=PackageTier.BASIC)
        store.before_write = lambda: svc.assign_package(
            "bloom", PackageTier.ENTERPRISE, UserRole.SUPER_ADMIN,
            requested_features=[F.HERO, F.EVENTS],
        )

        result = svc.update_site_features("bloom", [F.PRODUCTS], [])

        assert isinstance(result.error, PackageChangedError)
        record = svc.get_site("bloom")
        assert record.tier == PackageTier.ENTERPRISE
        assert record.selection.selected_features == (F.DASHBOARD, F.HERO, F.EVENTS)


class TestAssignPackage:
    def test_requires_super_admin(self, service: SiteSettingsService):
        result = service.assign_package("bloom", PackageTier.PREMIUM, UserRole.ADMIN)
        assert isinstance(result.error, AccessDeniedError)
        assert service.get_site("bloom").tier == PackageTier.BASIC

    def test_downgrade_keeps_allowed_features(self, service: SiteSettingsService):
        service.update_site_features(
            "acme", [F.PRODUCTS, F.CATEGORIES, F.EVENTS], [F.EVENTS], tier=PackageTier.ENTERPRISE,
        )
        result = service.assign_package("acme", PackageTier.BASIC, UserRole.SUPER_ADMIN)
        assert result.ok
        assert result.record.tier == PackageTier.BASIC
        assert result.record.selection.order == (F.DASHBOARD, F.PRODUCTS, F.CATEGORIES)

    def test_downgrade_over_limit_fails(self, service: SiteSettingsService):
        service.update_site_features("acme", [F.HERO, F.PRODUCTS, F.ABOUT, F.CONTACT], [])
        result = service.assign_package("acme", PackageTier.BASIC, UserRole.SUPER_ADMIN)
        assert isinstance(result.error, TooManyFeaturesError)
        assert service.get_site("acme").tier == PackageTier.STANDARD

    def test_upgrade_below_minimum_fails(self, service: SiteSettingsService):
        result = service.assign_package("bloom", PackageTier.PREMIUM, UserRole.SUPER_ADMIN)
        assert isinstance(result.error, TooFewFeaturesError)

    def test_explicit_features(self, service: SiteSettingsService):
        result = service.assign_package(
            "bloom", PackageTier.PREMIUM, UserRole.SUPER_ADMIN,
            requested_features=[F.EVENTS, F.EVENT_SERVICES, F.ABOUT, F.HERO],
            requested_order=[F.EVENT_SERVICES],
        )
        assert result.ok
        assert result.record.selection.order[:2] == (F.DASHBOARD, F.EVENT_SERVICES)

    def test_unknown_tier(self, service: SiteSettingsService):
        result = service.assign_package("bloom", "gold", UserRole.SUPER_ADMIN)
        assert isinstance(result.error, UnknownTierError)


class TestUpdateProfile:
    def test_update(self, service: SiteSettingsService):
        result = service.update_site_profile("acme", "Acme Co", "Events", ["#112233"])
        assert result.ok
        assert result.record.name == "Acme Co"
        assert result.record.color_palette == ["#112233"]

    def test_keeps_palette_when_omitted(self, service: SiteSettingsService):
        result = service.update_site_profile("acme", "Acme Co")
        assert result.record.color_palette == ["#3B82F6", "#10B981", "#F59E0B"]

    def test_bad_colour(self, service: SiteSettingsService):
        result = service.update_site_profile("acme", "Acme", "", ["red"])
        assert isinstance(result.error, InvalidProfileError)
        assert result.error.field == "color_palette"

    def test_colour_with_trailing_newline(self, service: SiteSettingsService):
        result = service.update_site_profile("acme", "Acme", "", ["#3B82F6\n"])
        assert isinstance(result.error, InvalidProfileError)
        assert service.get_site("acme").color_palette == ["#3B82F6", "#10B981", "#F59E0B"]

    def test_blank_name(self, service: SiteSettingsService):
        result = service.update_site_profile("acme", "")
        assert result.error.field == "name"


class TestDeprovision:
    def test_removes_site(self, service: SiteSettingsService):
        result = service.deprovision_site("bloom", UserRole.SUPER_ADMIN)
        assert result.ok
        assert result.record.site_id == "bloom"
        with pytest.raises(SiteNotFoundError):
            service.get_site("bloom")
        assert [r.site_id for r in service.list_sites()] == ["acme"]

    def test_requires_super_admin(self, service: SiteSettingsService):
        result = service.deprovision_site("bloom", UserRole.ADMIN)
        assert isinstance(result.error, AccessDeniedError)
        assert service.get_site("bloom") is not None

    def test_missing_site(self, service: SiteSettingsService):
        result = service.deprovision_site("ghost", UserRole.SUPER_ADMIN)
        assert isinstance(result.error, SiteNotFoundError)

    def test_site_id_reusable(self, service: SiteSettingsService):
        service.deprovision_site("bloom", UserRole.SUPER_ADMIN)
        assert service.provision_site("bloom", "Bloom Again").ok


class TestNavigationFor:
    def test_navigation(self, service: SiteSettingsService):
        service.update_site_features("bloom", [F.CONTACT, F.PRODUCTS], [F.CONTACT])
        items = service.navigation_for("bloom", UserRole.ADMIN)
        assert [i.key for i in items] == ["dashboard", "contact", "products", "site-settings"]

    def test_missing_site(self, service: SiteSettingsService):
        with pytest.raises(SiteNotFoundError):
            service.navigation_for("ghost", UserRole.ADMIN)


class TestFromConfig:
    def test_builds_with_tier_file(self, tmp_path: Path):
        tiers = tmp_path / "tiers.yaml"
        tiers.write_text(
            "tiers:\n  basic:\n    features: [events]\n    min_features: 1\n    max_features: 1\n",
            encoding="utf-8",
        )
        svc = SiteSettingsService.from_config(
            SiteAdminConfig(db_path=str(tmp_path / "s.db"), tiers_file=str(tiers)),
        )
        result = svc.provision_site("acme", "Acme")
        assert result.record.selection.selected_features == (F.DASHBOARD, F.EVENTS)
