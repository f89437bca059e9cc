"""Error taxonomy for feature access and package tier checks.

Every error carries a stable ``code`` and an actionable message, and can be
rendered with ``to_dict()`` so callers can present per-field feedback.
"""

from __future__ import annotations

from typing import Any


class FeatureAccessError(Exception):
    """Base class for all feature access errors."""

    code = "feature_access_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def details(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, **self.details()}


def _label(value: str) -> str:
    return value.replace("_", " ").title()


class UnknownTierError(FeatureAccessError):
    code = "unknown_tier"

    def __init__(self, tier: str) -> None:
        self.tier = str(tier)
        super().__init__(f"Unknown package tier: {self.tier}")

    def details(self) -> dict[str, Any]:
        return {"tier": self.tier}


class UnknownFeatureError(FeatureAccessError):
    code = "unknown_feature"

    def __init__(self, feature: str) -> None:
        self.feature = str(feature)
        super().__init__(f"Unknown feature: {self.feature}")

    def details(self) -> dict[str, Any]:
        return {"feature": self.feature}


class UnsupportedFeatureError(FeatureAccessError):
    code = "unsupported_feature"

    def __init__(self, feature: str, tier: str) -> None:
        self.feature = str(feature)
        self.tier = str(tier)
        super().__init__(
            f"{_label(self.feature)} is not available on the "
            f"{_label(self.tier)} package"
        )

    def details(self) -> dict[str, Any]:
        return {"feature": self.feature, "tier": self.tier}


class FeatureCountError(FeatureAccessError):
    """Selected feature count outside the tier's range."""

    def __init__(self, message: str, tier: str, count: int, minimum: int, maximum: int) -> None:
        self.tier = str(tier)
        self.count = count
        self.min = minimum
        self.max = maximum
        super().__init__(message)

    def details(self) -> dict[str, Any]:
        return {"tier": self.tier, "count": self.count, "min": self.min, "max": self.max}


class TooFewFeaturesError(FeatureCountError):
    code = "too_few_features"

    def __init__(self, tier: str, count: int, minimum: int, maximum: int) -> None:
        super().__init__(
            f"Select at least {minimum} features for your {_label(str(tier))} "
            f"package (currently {count})",
            tier, count, minimum, maximum,
        )


class TooManyFeaturesError(FeatureCountError):
    code = "too_many_features"

    def __init__(self, tier: str, count: int, minimum: int, maximum: int) -> None:
        super().__init__(
            f"Your {_label(str(tier))} package allows at most {maximum} "
            f"features (currently {count}); remove {count - maximum}",
            tier, count, minimum, maximum,
        )


class SiteNotFoundError(FeatureAccessError):
    code = "site_not_found"

    def __init__(self, site_id: str) -> None:
        self.site_id = site_id
        super().__init__(f"Site not found: {site_id}")

    def details(self) -> dict[str, Any]:
        return {"site_id": self.site_id}


class SiteExistsError(FeatureAccessError):
    code = "site_exists"

    def __init__(self, site_id: str) -> None:
        self.site_id = site_id
        super().__init__(f"Site '{site_id}' already exists; choose another site id")

    def details(self) -> dict[str, Any]:
        return {"site_id": self.site_id}


class PackageChangedError(FeatureAccessError):
    """The site's package changed after the selection was validated."""

    code = "package_changed"

    def __init__(self, site_id: str, expected_tier: str) -> None:
        self.site_id = site_id
        self.expected_tier = str(expected_tier)
        super().__init__(
            f"The package for site {site_id} is no longer {_label(self.expected_tier)}; "
            "reload the site settings and try again"
        )

    def details(self) -> dict[str, Any]:
        return {"site_id": self.site_id, "expected_tier": self.expected_tier}


class PersistenceError(FeatureAccessError):
    code = "persistence_error"

    def __init__(self, message: str = "Failed to save site settings") -> None:
        super().__init__(message)


class AccessDeniedError(FeatureAccessError):
    code = "access_denied"

    def __init__(self, required_role: str) -> None:
        self.required_role = str(required_role)
        super().__init__(f"This operation requires the {_label(self.required_role)} role")

    def details(self) -> dict[str, Any]:
        return {"required_role": self.required_role}


class InvalidProfileError(FeatureAccessError):
    code = "invalid_profile"

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(message)

    def details(self) -> dict[str, Any]:
        return {"field": self.field}


class TierConfigError(Exception):
    """Raised when a tier table file cannot be loaded."""
