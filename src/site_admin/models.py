"""Core data models for Site Admin.

Defines the schemas for:
- The feature catalog (what a site can enable)
- Package tiers and their feature policies
- Per-site feature selections (what a site has enabled, and in which order)
- Navigation items (what the admin menu can show)
- Site records (what the store persists per tenant)
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# --- Enums ---


class FeatureIdentifier(enum.StrEnum):
    """Closed set of features. Declaration order is the catalog order."""

    DASHBOARD = "dashboard"
    HERO = "hero"
    PRODUCTS = "products"
    CATEGORIES = "categories"
    EVENTS = "events"
    EVENT_SERVICES = "event_services"
    ABOUT = "about"
    CONTACT = "contact"


class PackageTier(enum.StrEnum):
    BASIC = "basic"
    STANDARD = "standard"
    PREMIUM = "premium"
    ENTERPRISE = "enterprise"


class UserRole(enum.StrEnum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    EDITOR = "editor"


_CATALOG_INDEX: dict[FeatureIdentifier, int] = {
    f: i for i, f in enumerate(FeatureIdentifier)
}

_ROLE_RANK: dict[UserRole, int] = {
    UserRole.EDITOR: 0,
    UserRole.ADMIN: 1,
    UserRole.SUPER_ADMIN: 2,
}

DEFAULT_COLOR_PALETTE = ["#3B82F6", "#10B981", "#F59E0B"]


def catalog_index(feature: FeatureIdentifier) -> int:
    """Position of a feature in the catalog declaration order."""
    return _CATALOG_INDEX[feature]


def catalog_sorted(features: Iterable[FeatureIdentifier]) -> list[FeatureIdentifier]:
    return sorted(features, key=catalog_index)


def role_satisfies(role: UserRole | None, required: UserRole | None) -> bool:
    """True if *role* ranks at or above *required*. No requirement = always."""
    if required is None:
        return True
    if role is None:
        return False
    return _ROLE_RANK[role] >= _ROLE_RANK[required]


# --- Tier Policy ---


class TierPolicy(BaseModel):
    """What a package tier allows.

    ``min_features`` and ``max_features`` bound the number of selected
    features excluding DASHBOARD, which is always allowed and never counted.
    """

    model_config = ConfigDict(frozen=True)

    tier: PackageTier
    allowed_features: frozenset[FeatureIdentifier]
    min_features: int = Field(ge=0)
    max_features: int = Field(ge=0)

    @field_validator("allowed_features", mode="after")
    @classmethod
    def _include_dashboard(
        cls, value: frozenset[FeatureIdentifier],
    ) -> frozenset[FeatureIdentifier]:
        return value | {FeatureIdentifier.DASHBOARD}

    @model_validator(mode="after")
    def _check_range(self) -> TierPolicy:
        if self.min_features > self.max_features:
            msg = (
                f"min_features ({self.min_features}) exceeds "
                f"max_features ({self.max_features}) for tier '{self.tier}'"
            )
            raise ValueError(msg)
        return self

    @property
    def count_range(self) -> tuple[int, int]:
        return (self.min_features, self.max_features)


# --- Feature Selection ---


class SiteFeatureSelection(BaseModel):
    """A tenant's validated feature set and navigation order.

    Structural invariants are checked on construction. Tier limits are
    checked by the validator, since the tier table is configurable.
    """

    model_config = ConfigDict(frozen=True)

    tier: PackageTier
    selected_features: tuple[FeatureIdentifier, ...]
    order: tuple[FeatureIdentifier, ...]

    @model_validator(mode="after")
    def _check_invariants(self) -> SiteFeatureSelection:
        if len(set(self.selected_features)) != len(self.selected_features):
            raise ValueError("selected_features contains duplicates")
        if FeatureIdentifier.DASHBOARD not in self.selected_features:
            raise ValueError("selected_features must include dashboard")
        if not self.order or self.order[0] != FeatureIdentifier.DASHBOARD:
            raise ValueError("order must start with dashboard")
        if len(set(self.order)) != len(self.order):
            raise ValueError("order contains duplicates")
        stray = [f for f in self.order if f not in self.selected_features]
        if stray:
            raise ValueError(f"order references unselected features: {stray}")
        return self

    @property
    def feature_set(self) -> frozenset[FeatureIdentifier]:
        return frozenset(self.selected_features)

    @property
    def feature_count(self) -> int:
        """Number of selected features, not counting DASHBOARD."""
        return len(self.selected_features) - 1


class FeatureUsage(BaseModel):
    """Slot guidance for a selection against its tier limits."""

    tier: PackageTier
    count: int
    min_features: int
    max_features: int
    remaining_slots: int
    can_add_more: bool
    has_minimum: bool


# --- Navigation ---


class NavItem(BaseModel):
    """An entry in the admin navigation catalog.

    Items with a ``feature`` are shown only when the site selected it.
    Items without one are always available, subject to ``required_role``.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    href: str
    feature: FeatureIdentifier | None = None
    required_role: UserRole | None = None


# --- Site Record ---


class SiteRecord(BaseModel):
    """A tenant site as persisted by the settings store."""

    site_id: str
    name: str
    description: str = ""
    color_palette: list[str] = Field(
        default_factory=lambda: list(DEFAULT_COLOR_PALETTE),
    )
    is_active: bool = True
    selection: SiteFeatureSelection
    created_at: datetime
    updated_at: datetime

    @property
    def tier(self) -> PackageTier:
        return self.selection.tier
