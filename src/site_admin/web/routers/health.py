"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from site_admin import __version__

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "version": __version__}
