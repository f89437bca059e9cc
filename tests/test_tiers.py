"""Tests for the package tier table."""

from pathlib import Path

import pytest

from site_admin.errors import TierConfigError, UnknownTierError
from site_admin.models import FeatureIdentifier, PackageTier
from site_admin.packages.tiers import DEFAULT_TIER_TABLE, load_tier_table

F = FeatureIdentifier


class TestDefaultTable:
    def test_all_tiers_present(self):
        assert DEFAULT_TIER_TABLE.tiers() == list(PackageTier)

    @pytest.mark.parametrize("tier", list(PackageTier))
    def test_range_ordered(self, tier):
        minimum, maximum = DEFAULT_TIER_TABLE.count_range(tier)
        assert 0 <= minimum <= maximum

    @pytest.mark.parametrize("tier", list(PackageTier))
    def test_allowed_features_from_catalog_and_include_dashboard(self, tier):
        allowed = DEFAULT_TIER_TABLE.allowed_features(tier)
        assert F.DASHBOARD in allowed
        assert allowed <= set(FeatureIdentifier)

    def test_basic_range(self):
        assert DEFAULT_TIER_TABLE.count_range(PackageTier.BASIC) == (1, 3)

    def test_standard_range(self):
        assert DEFAULT_TIER_TABLE.count_range("standard") == (4, 6)

    def test_basic_excludes_bookings(self):
        allowed = DEFAULT_TIER_TABLE.allowed_features(PackageTier.BASIC)
        assert F.EVENTS not in allowed
        assert F.EVENT_SERVICES not in allowed

    def test_enterprise_capped_by_catalog(self):
        assert DEFAULT_TIER_TABLE.count_range(PackageTier.ENTERPRISE) == (1, 7)

    def test_unknown_tier(self):
        with pytest.raises(UnknownTierError) as exc:
            DEFAULT_TIER_TABLE.allowed_features("platinum")
        assert exc.value.tier == "platinum"

    def test_contains(self):
        assert PackageTier.PREMIUM in DEFAULT_TIER_TABLE
        assert "premium" in DEFAULT_TIER_TABLE


class TestLoadTierTable:
    def _write(self, tmp_path: Path, text: str) -> Path:
        path = tmp_path / "tiers.yaml"
        path.write_text(text, encoding="utf-8")
        return path

    def test_loads_tiers(self, tmp_path: Path):
        path = self._write(tmp_path, """\
tiers:
  basic:
    features: [products, categories]
    min_features: 1
    max_features: 2
  premium:
    features: [products, categories, events]
    min_features: 2
    max_features: 3
""")
        table = load_tier_table(path)
        assert table.tiers() == [PackageTier.BASIC, PackageTier.PREMIUM]
        assert table.allowed_features("basic") == frozenset(
            {F.DASHBOARD, F.PRODUCTS, F.CATEGORIES}
        )
        assert table.count_range("premium") == (2, 3)

    def test_unlisted_tier_is_unknown(self, tmp_path: Path):
        path = self._write(tmp_path, """\
tiers:
  basic:
    features: [products]
    min_features: 1
    max_features: 1
""")
        table = load_tier_table(path)
        with pytest.raises(UnknownTierError):
            table.policy("enterprise")

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(TierConfigError, match="not found"):
            load_tier_table(tmp_path / "nope.yaml")

    def test_missing_tiers_key(self, tmp_path: Path):
        path = self._write(tmp_path, "packages: {}\n")
        with pytest.raises(TierConfigError, match="'tiers' key"):
            load_tier_table(path)

    def test_invalid_yaml(self, tmp_path: Path):
        path = self._write(tmp_path, "tiers: [unclosed\n")
        with pytest.raises(TierConfigError, match="Invalid YAML"):
            load_tier_table(path)

    def test_unknown_feature(self, tmp_path: Path):
        path = self._write(tmp_path, """\
tiers:
  basic:
    features: [products, blog]
    min_features: 1
    max_features: 1
""")
        with pytest.raises(TierConfigError, match="basic"):
            load_tier_table(path)

    def test_unknown_tier_name(self, tmp_path: Path):
        path = self._write(tmp_path, """\
tiers:
  gold:
    features: [products]
    min_features: 1
    max_features: 1
""")
        with pytest.raises(TierConfigError, match="gold"):
            load_tier_table(path)

    def test_min_above_max(self, tmp_path: Path):
        path = self._write(tmp_path, """\
tiers:
  basic:
    features: [products]
    min_features: 2
    max_features: 1
""")
        with pytest.raises(TierConfigError):
            load_tier_table(path)
