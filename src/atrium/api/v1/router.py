"""V1 API router -- aggregates all v1 endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from src.atrium.api.v1 import health, meetings, resources, spaces

router = APIRouter()

router.include_router(health.router)
router.include_router(resources.router, prefix="/api/v1")
router.include_router(spaces.router, prefix="/api/v1")
router.include_router(meetings.router, prefix="/api/v1")
