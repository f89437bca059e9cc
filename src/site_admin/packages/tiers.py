"""Package tier table: which features each tier allows, and how many.

The table is static for the lifetime of a process. A YAML file can replace
the built-in defaults at startup::

    tiers:
      basic:
        features: [hero, products, categories, about, contact]
        min_features: 1
        max_features: 3
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml
from pydantic import ValidationError

from site_admin.errors import TierConfigError, UnknownTierError
from site_admin.models import FeatureIdentifier, PackageTier, TierPolicy

F = FeatureIdentifier

_CONTENT_FEATURES = frozenset({F.HERO, F.PRODUCTS, F.CATEGORIES, F.ABOUT, F.CONTACT})
_ALL_FEATURES = frozenset(FeatureIdentifier)


class TierTable:
    """Immutable mapping of package tier to tier policy."""

    def __init__(self, policies: Mapping[PackageTier, TierPolicy]) -> None:
        self._policies: Mapping[PackageTier, TierPolicy] = MappingProxyType(dict(policies))

    def policy(self, tier: PackageTier | str) -> TierPolicy:
        try:
            key = PackageTier(tier)
        except ValueError as e:
            raise UnknownTierError(str(tier)) from e
        policy = self._policies.get(key)
        if policy is None:
            raise UnknownTierError(str(tier))
        return policy

    def allowed_features(self, tier: PackageTier | str) -> frozenset[FeatureIdentifier]:
        return self.policy(tier).allowed_features

    def count_range(self, tier: PackageTier | str) -> tuple[int, int]:
        return self.policy(tier).count_range

    def tiers(self) -> list[PackageTier]:
        return [t for t in PackageTier if t in self._policies]

    def __contains__(self, tier: object) -> bool:
        return tier in self._policies


DEFAULT_TIER_TABLE = TierTable({
    PackageTier.BASIC: TierPolicy(
        tier=PackageTier.BASIC,
        allowed_features=_CONTENT_FEATURES,
        min_features=1,
        max_features=3,
    ),
    PackageTier.STANDARD: TierPolicy(
        tier=PackageTier.STANDARD,
        allowed_features=_CONTENT_FEATURES | {F.EVENTS},
        min_features=4,
        max_features=6,
    ),
    PackageTier.PREMIUM: TierPolicy(
        tier=PackageTier.PREMIUM,
        allowed_features=_ALL_FEATURES,
        min_features=4,
        max_features=6,
    ),
    # Enterprise is capped only by the size of the catalog.
    PackageTier.ENTERPRISE: TierPolicy(
        tier=PackageTier.ENTERPRISE,
        allowed_features=_ALL_FEATURES,
        min_features=1,
        max_features=len(_ALL_FEATURES) - 1,
    ),
})


def load_tier_table(path: str | Path) -> TierTable:
    """Load a tier table from a YAML file.

    The file must have a top-level ``tiers`` mapping. Every tier listed is
    validated; tiers not listed are not available.
    """
    path = Path(path)
    if not path.is_file():
        raise TierConfigError(f"Tier table file not found: {path}")

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise TierConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(raw, dict) or "tiers" not in raw:
        raise TierConfigError(f"Tier table file must have a 'tiers' key: {path}")

    raw_tiers: Any = raw["tiers"]
    if not isinstance(raw_tiers, dict) or not raw_tiers:
        raise TierConfigError(f"'tiers' must be a non-empty mapping: {path}")

    policies: dict[PackageTier, TierPolicy] = {}
    for name, entry in raw_tiers.items():
        if not isinstance(entry, dict):
            raise TierConfigError(f"Tier '{name}' must be a mapping in {path}")
        try:
            policy = TierPolicy(
                tier=name,
                allowed_features=entry.get("features", []),
                min_features=entry.get("min_features", 0),
                max_features=entry.get("max_features", 0),
            )
        except (ValidationError, TypeError) as e:
            raise TierConfigError(f"Invalid tier '{name}' in {path}: {e}") from e
        policies[policy.tier] = policy

    return TierTable(policies)
