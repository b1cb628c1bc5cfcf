"""
Admin / observability endpoints
===============================

GET /api/v1/admin/health -- database and Redis reachability
"""

import logging

from fastapi import APIRouter, Depends
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from parkride.api.dependencies import get_db, get_redis
from parkride.api.schemas import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis),
):
    checks = {"database": "ok", "redis": "ok"}
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("health: database unreachable")
        checks["database"] = "unavailable"
    try:
        await redis.ping()
    except (RedisError, OSError):
        logger.exception("health: redis unreachable")
        checks["redis"] = "unavailable"

    status = "ok" if all(v == "ok" for v in checks.values()) else "degraded"
    return HealthResponse(status=status, checks=checks)
