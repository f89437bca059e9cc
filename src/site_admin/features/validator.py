"""Feature selection validator — keeps a site's selection within its tier.

Evaluation:
1. Force DASHBOARD into the candidate features
2. Reject features the tier does not allow
3. Check the non-DASHBOARD count against the tier's range
4. Normalize the navigation order (prune, dedupe, DASHBOARD first, append missing)

All functions here are pure. The caller persists the result.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from site_admin.errors import (
    FeatureAccessError,
    TooFewFeaturesError,
    TooManyFeaturesError,
    UnknownFeatureError,
    UnsupportedFeatureError,
)
from site_admin.models import (
    FeatureIdentifier,
    FeatureUsage,
    PackageTier,
    SiteFeatureSelection,
    catalog_sorted,
)
from site_admin.packages.tiers import DEFAULT_TIER_TABLE, TierTable

DASHBOARD = FeatureIdentifier.DASHBOARD


@dataclass(frozen=True)
class SelectionResult:
    """Outcome of validating a candidate selection: a selection or an error."""

    selection: SiteFeatureSelection | None = None
    error: FeatureAccessError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _coerce(value: FeatureIdentifier | str) -> FeatureIdentifier:
    try:
        return FeatureIdentifier(value)
    except ValueError as e:
        raise UnknownFeatureError(str(value)) from e


def _ordered_unique(
    features: Iterable[FeatureIdentifier | str],
) -> list[FeatureIdentifier]:
    """Dedupe keeping first occurrence. Unordered inputs use catalog order."""
    coerced = [_coerce(f) for f in features]
    if isinstance(features, (set, frozenset)):
        return catalog_sorted(set(coerced))
    seen: set[FeatureIdentifier] = set()
    result: list[FeatureIdentifier] = []
    for f in coerced:
        if f not in seen:
            seen.add(f)
            result.append(f)
    return result


def normalize_order(
    selected: list[FeatureIdentifier],
    candidate_order: Iterable[FeatureIdentifier | str],
) -> list[FeatureIdentifier]:
    """Build a display order over *selected* that honors *candidate_order*.

    Identifiers not in *selected* are dropped, duplicates keep their first
    position, DASHBOARD goes first and any selected feature missing from the
    order is appended in the order it appears in *selected*.
    """
    selected_set = set(selected)
    order: list[FeatureIdentifier] = [DASHBOARD]
    for f in candidate_order:
        if f in selected_set and f not in order:
            order.append(FeatureIdentifier(f))
    for f in selected:
        if f not in order:
            order.append(f)
    return order


def normalize_selection(
    tier: PackageTier | str,
    candidate_features: Iterable[FeatureIdentifier | str],
    candidate_order: Iterable[FeatureIdentifier | str] = (),
    table: TierTable | None = None,
) -> SiteFeatureSelection:
    """Validate a candidate selection and return it normalized.

    Raises a ``FeatureAccessError`` subclass on the first violated rule.
    """
    table = table or DEFAULT_TIER_TABLE
    policy = table.policy(tier)

    selected = _ordered_unique(candidate_features)
    if DASHBOARD in selected:
        selected.remove(DASHBOARD)
    selected.insert(0, DASHBOARD)

    for f in selected:
        if f not in policy.allowed_features:
            raise UnsupportedFeatureError(f, policy.tier)

    count = len(selected) - 1
    if count < policy.min_features:
        raise TooFewFeaturesError(policy.tier, count, policy.min_features, policy.max_features)
    if count > policy.max_features:
        raise TooManyFeaturesError(policy.tier, count, policy.min_features, policy.max_features)

    return SiteFeatureSelection(
        tier=policy.tier,
        selected_features=tuple(selected),
        order=tuple(normalize_order(selected, candidate_order)),
    )


def validate_and_normalize(
    tier: PackageTier | str,
    candidate_features: Iterable[FeatureIdentifier | str],
    candidate_order: Iterable[FeatureIdentifier | str] = (),
    table: TierTable | None = None,
) -> SelectionResult:
    """Result-returning form of ``normalize_selection``."""
    try:
        selection = normalize_selection(tier, candidate_features, candidate_order, table)
    except FeatureAccessError as e:
        return SelectionResult(error=e)
    return SelectionResult(selection=selection)


def default_selection(
    tier: PackageTier | str,
    table: TierTable | None = None,
) -> SiteFeatureSelection:
    """Selection for a newly provisioned site.

    DASHBOARD plus the first ``min_features`` allowed features in catalog
    order, so a fresh site already satisfies its tier.
    """
    table = table or DEFAULT_TIER_TABLE
    policy = table.policy(tier)
    extras = [f for f in catalog_sorted(policy.allowed_features) if f != DASHBOARD]
    return normalize_selection(policy.tier, extras[: policy.min_features], (), table)


def feature_usage(
    selection: SiteFeatureSelection,
    table: TierTable | None = None,
) -> FeatureUsage:
    """How many feature slots the selection uses against its tier limits."""
    table = table or DEFAULT_TIER_TABLE
    minimum, maximum = table.count_range(selection.tier)
    count = selection.feature_count
    return FeatureUsage(
        tier=selection.tier,
        count=count,
        min_features=minimum,
        max_features=maximum,
        remaining_slots=max(maximum - count, 0),
        can_add_more=count < maximum,
        has_minimum=count >= minimum,
    )
