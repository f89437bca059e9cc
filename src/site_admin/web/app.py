"""FastAPI application factory for the site settings API."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from site_admin import __version__
from site_admin.config import SiteAdminConfig
from site_admin.settings.service import SiteSettingsService
from site_admin.web.routers import health, packages, sites

logger = logging.getLogger(__name__)


def create_app(
    config: SiteAdminConfig | None = None,
    service: SiteSettingsService | None = None,
) -> FastAPI:
    """Build and return the FastAPI application.

    The settings service is built from *config* (or env defaults) unless
    one is passed in, and injected into each router via ``init_router()``.
    """
    if config is None:
        config = SiteAdminConfig().with_env()
    if service is None:
        service = SiteSettingsService.from_config(config)

    app = FastAPI(
        title="Site Admin",
        version=__version__,
        docs_url="/api/docs",
        openapi_url="/api/openapi.json",
    )

    # --- CORS (dev mode only) ---
    if config.dev_mode:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["http://localhost:3000"],
            allow_methods=["*"],
            allow_headers=["*"],
        )

    packages.init_router(service.table)
    sites.init_router(service)

    app.include_router(health.router)
    app.include_router(packages.router)
    app.include_router(sites.router)

    logger.info("Site settings API ready (database: %s)", config.db_path)
    return app
