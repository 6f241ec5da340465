"""Liveness endpoint."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

router = APIRouter()


@router.get("/api/health")
async def health_check():
    """Liveness probe."""
    return JSONResponse({"status": "ok"})
