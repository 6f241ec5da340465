"""Web routes package — assembles all sub-routers."""

from __future__ import annotations

from fastapi import APIRouter

from .health import router as health_router
from .pm import router as pm_router

router = APIRouter()

router.include_router(health_router)
router.include_router(pm_router)
