"""Site Admin: package tiers and feature access for multi-tenant admin sites."""

__version__ = "0.1.0"

from site_admin.config import SiteAdminConfig, find_config, load_config
from site_admin.errors import (
    AccessDeniedError,
    FeatureAccessError,
    InvalidProfileError,
    PackageChangedError,
    PersistenceError,
    SiteExistsError,
    SiteNotFoundError,
    TierConfigError,
    TooFewFeaturesError,
    TooManyFeaturesError,
    UnknownFeatureError,
    UnknownTierError,
    UnsupportedFeatureError,
)
from site_admin.features.validator import (
    SelectionResult,
    default_selection,
    feature_usage,
    normalize_selection,
    validate_and_normalize,
)
from site_admin.models import (
    FeatureIdentifier,
    FeatureUsage,
    NavItem,
    PackageTier,
    SiteFeatureSelection,
    SiteRecord,
    TierPolicy,
    UserRole,
)
from site_admin.navigation.resolver import DEFAULT_NAV_ITEMS, resolve_order
from site_admin.packages.tiers import DEFAULT_TIER_TABLE, TierTable, load_tier_table
from site_admin.settings.service import SiteSettingsService, UpdateResult
from site_admin.settings.store import SiteSettingsStore, SqliteSiteSettingsStore

__all__ = [
    "AccessDeniedError",
    "DEFAULT_NAV_ITEMS",
    "DEFAULT_TIER_TABLE",
    "default_selection",
    "FeatureAccessError",
    "FeatureIdentifier",
    "FeatureUsage",
    "feature_usage",
    "find_config",
    "InvalidProfileError",
    "load_config",
    "load_tier_table",
    "NavItem",
    "normalize_selection",
    "PackageTier",
    "PackageChangedError",
    "PersistenceError",
    "SiteExistsError",
    "resolve_order",
    "SelectionResult",
    "SiteAdminConfig",
    "SiteFeatureSelection",
    "SiteNotFoundError",
    "SiteRecord",
    "SiteSettingsService",
    "SiteSettingsStore",
    "SqliteSiteSettingsStore",
    "TierConfigError",
    "TierPolicy",
    "TierTable",
    "TooFewFeaturesError",
    "TooManyFeaturesError",
    "UnknownFeatureError",
    "UnknownTierError",
    "UnsupportedFeatureError",
    "UpdateResult",
    "validate_and_normalize",
    "__version__",
]
