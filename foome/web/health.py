"""Health check endpoint logic."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlmodel.ext.asyncio.session import AsyncSession

from foome.storage.database import get_session

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])

VERSION = "0.1.0"


async def check_health(db: AsyncSession) -> dict[str, object]:
    """Return application health status with a DB round trip."""
    result: dict[str, object] = {
        "status": "healthy",
        "version": VERSION,
        "database": "connected",
    }

    try:
        await db.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("health_check_db_failed", error=str(exc))
        result["database"] = "unavailable"
        result["status"] = "degraded"

    return result


@router.get("/api/health")
async def health_check(db: AsyncSession = Depends(get_session)) -> dict[str, object]:
    return await check_health(db)
