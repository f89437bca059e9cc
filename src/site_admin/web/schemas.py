"""Request and response bodies for the site settings API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from site_admin.models import FeatureUsage, NavItem, PackageTier


class TierInfo(BaseModel):
    tier: PackageTier
    features: list[str]
    min_features: int
    max_features: int


class SiteCreateRequest(BaseModel):
    site_id: str = Field(..., pattern=r"^[a-z0-9][a-z0-9-]*$")
    name: str
    tier: str = PackageTier.BASIC.value
    description: str = ""


class FeatureUpdateRequest(BaseModel):
    features: list[str]
    order: list[str] = Field(default_factory=list)


class PackageAssignRequest(BaseModel):
    tier: str
    features: list[str] | None = None
    order: list[str] | None = None


class ProfileUpdateRequest(BaseModel):
    name: str
    description: str = ""
    color_palette: list[str] | None = None


class SiteResponse(BaseModel):
    site_id: str
    name: str
    description: str
    color_palette: list[str]
    is_active: bool
    tier: PackageTier
    features: list[str]
    order: list[str]
    usage: FeatureUsage
    created_at: datetime
    updated_at: datetime


class NavigationResponse(BaseModel):
    site_id: str
    items: list[NavItem]
