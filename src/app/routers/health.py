from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from src.app.config import get_settings

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health() -> dict:
    """Readiness/liveness probe."""
    return {
        "status": "ok",
        "time": datetime.now(timezone.utc).isoformat(),
        "env": get_settings().APP_ENV,
    }
