"""FastAPI dependency injection helpers."""

from typing import AsyncIterator

import redis.asyncio as aioredis
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from parkride.config import settings
from parkride.infrastructure.database import async_session_factory
from parkride.infrastructure.redis_client import get_redis
from parkride.infrastructure.repositories import (
    ParkingLocationRepository,
    RideRepository,
    UserRepository,
)
from parkride.services.booking import BookingService
from parkride.utils.auth import decode_access_token

_bearer = HTTPBearer(auto_error=False)


async def get_db() -> AsyncIterator[AsyncSession]:
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> int:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return decode_access_token(
            credentials.credentials,
            secret=settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


# ── Repositories / services ───────────────────────────────────────────


async def get_parking_repo(
    db: AsyncSession = Depends(get_db),
) -> ParkingLocationRepository:
    return ParkingLocationRepository(db)


async def get_ride_repo(db: AsyncSession = Depends(get_db)) -> RideRepository:
    return RideRepository(db)


async def get_user_repo(db: AsyncSession = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


async def get_booking_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    repo: ParkingLocationRepository = Depends(get_parking_repo),
) -> BookingService:
    return BookingService(db, redis, repo=repo)
