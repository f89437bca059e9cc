"""Package tier table endpoints (read-only)."""

from __future__ import annotations

from fastapi import APIRouter

from site_admin.models import catalog_sorted
from site_admin.packages.tiers import TierTable
from site_admin.web.schemas import TierInfo

router = APIRouter(prefix="/api/packages", tags=["packages"])

_table: TierTable | None = None


def init_router(table: TierTable) -> None:
    global _table  # noqa: PLW0603
    _table = table


def _tiers() -> TierTable:
    assert _table is not None, "TierTable not initialized"
    return _table


@router.get("/", response_model=list[TierInfo])
def list_packages() -> list[TierInfo]:
    table = _tiers()
    return [
        TierInfo(
            tier=tier,
            features=[f.value for f in catalog_sorted(table.allowed_features(tier))],
            min_features=table.policy(tier).min_features,
            max_features=table.policy(tier).max_features,
        )
        for tier in table.tiers()
    ]
