"""Site settings API endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from site_admin.errors import (
    AccessDeniedError,
    FeatureAccessError,
    PackageChangedError,
    PersistenceError,
    SiteExistsError,
    SiteNotFoundError,
)
from site_admin.features.validator import feature_usage
from site_admin.models import SiteRecord, UserRole
from site_admin.settings.service import SiteSettingsService, UpdateResult
from site_admin.web.dependencies import caller_role, require_admin, require_super_admin
from site_admin.web.schemas import (
    FeatureUpdateRequest,
    NavigationResponse,
    PackageAssignRequest,
    ProfileUpdateRequest,
    SiteCreateRequest,
    SiteResponse,
)

router = APIRouter(prefix="/api/sites", tags=["sites"])

_service: SiteSettingsService | None = None


def init_router(service: SiteSettingsService) -> None:
    global _service  # noqa: PLW0603
    _service = service


def _svc() -> SiteSettingsService:
    assert _service is not None, "SiteSettingsService not initialized"
    return _service


def _status_for(error: FeatureAccessError) -> int:
    if isinstance(error, SiteNotFoundError):
        return 404
    if isinstance(error, AccessDeniedError):
        return 403
    if isinstance(error, (SiteExistsError, PackageChangedError)):
        return 409
    if isinstance(error, PersistenceError):
        return 503
    return 422


def _http_error(error: FeatureAccessError) -> HTTPException:
    return HTTPException(status_code=_status_for(error), detail=error.to_dict())


def _to_response(record: SiteRecord) -> SiteResponse:
    selection = record.selection
    return SiteResponse(
        site_id=record.site_id,
        name=record.name,
        description=record.description,
        color_palette=record.color_palette,
        is_active=record.is_active,
        tier=selection.tier,
        features=[f.value for f in selection.selected_features],
        order=[f.value for f in selection.order],
        usage=feature_usage(selection, _svc().table),
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def _unwrap(result: UpdateResult) -> SiteResponse:
    if result.error is not None:
        raise _http_error(result.error)
    assert result.record is not None
    return _to_response(result.record)


def _load(site_id: str) -> SiteRecord:
    try:
        return _svc().get_site(site_id)
    except FeatureAccessError as e:
        raise _http_error(e) from e


# ------------------------------------------------------------------
# Tenant management (super admin)
# ------------------------------------------------------------------


@router.get("/", response_model=list[SiteResponse])
def list_sites(
    _role: Annotated[UserRole, Depends(require_super_admin)],
    include_inactive: bool = False,
) -> list[SiteResponse]:
    try:
        records = _svc().list_sites(include_inactive=include_inactive)
    except FeatureAccessError as e:
        raise _http_error(e) from e
    return [_to_response(r) for r in records]


@router.post("/", response_model=SiteResponse, status_code=201)
def provision_site(
    body: SiteCreateRequest,
    _role: Annotated[UserRole, Depends(require_super_admin)],
) -> SiteResponse:
    return _unwrap(_svc().provision_site(
        body.site_id, body.name, tier=body.tier, description=body.description,
    ))


@router.put("/{site_id}/package", response_model=SiteResponse)
def assign_package(
    site_id: str,
    body: PackageAssignRequest,
    role: Annotated[UserRole, Depends(require_super_admin)],
) -> SiteResponse:
    return _unwrap(_svc().assign_package(
        site_id, body.tier, role,
        requested_features=body.features,
        requested_order=body.order,
    ))


@router.delete("/{site_id}")
def deprovision_site(
    site_id: str,
    role: Annotated[UserRole, Depends(require_super_admin)],
) -> dict:
    result = _svc().deprovision_site(site_id, role)
    if result.error is not None:
        raise _http_error(result.error)
    return {"ok": True}


# ------------------------------------------------------------------
# Per-site settings (admin)
# ------------------------------------------------------------------


@router.get("/{site_id}", response_model=SiteResponse)
def get_site(
    site_id: str,
    _role: Annotated[UserRole, Depends(require_admin)],
) -> SiteResponse:
    return _to_response(_load(site_id))


@router.put("/{site_id}/features", response_model=SiteResponse)
def update_features(
    site_id: str,
    body: FeatureUpdateRequest,
    _role: Annotated[UserRole, Depends(require_admin)],
) -> SiteResponse:
    return _unwrap(_svc().update_site_features(site_id, body.features, body.order))


@router.put("/{site_id}/profile", response_model=SiteResponse)
def update_profile(
    site_id: str,
    body: ProfileUpdateRequest,
    _role: Annotated[UserRole, Depends(require_admin)],
) -> SiteResponse:
    return _unwrap(_svc().update_site_profile(
        site_id, body.name, body.description, body.color_palette,
    ))


@router.get("/{site_id}/navigation", response_model=NavigationResponse)
def get_navigation(
    site_id: str,
    role: Annotated[UserRole | None, Depends(caller_role)],
) -> NavigationResponse:
    _load(site_id)
    return NavigationResponse(site_id=site_id, items=_svc().navigation_for(site_id, role))
