"""Master API router — mounts all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from siteplan.api import health, layouts

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router)
api_router.include_router(layouts.router)
