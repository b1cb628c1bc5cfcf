"""
Booking Service
===============

Runs one ledger command against one parking location as a single
read-modify-write cycle:

1. Acquire the Redis lock ``parking-location:<id>`` (bounded retries).
2. Load the aggregate, apply the command (``parkride.domain.ledger``).
3. Write it back and commit *while the lock is still held*.

Two independent guards make a lost update impossible:

* the distributed lock serialises writers that go through this service;
* the row's version column rejects any stale write that slips past it
  (lock TTL expiry, direct DB access).

Either guard failing surfaces as ``ConcurrentUpdate``; nothing is persisted
and the client may retry.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

import redis.asyncio as aioredis
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from parkride.config import Settings, settings as default_settings
from parkride.domain import ledger
from parkride.domain.entities import Booking, ParkingLocation
from parkride.domain.errors import ConcurrentUpdate, LocationNotFound
from parkride.infrastructure.locks import DistributedLock, LockNotAcquired, location_lock_key
from parkride.infrastructure.repositories import ParkingLocationRepository
from parkride.utils.audit_log import emit_audit_log

logger = logging.getLogger(__name__)


class BookingService:
    def __init__(
        self,
        session: AsyncSession,
        redis: aioredis.Redis,
        *,
        repo: Optional[ParkingLocationRepository] = None,
        config: Optional[Settings] = None,
    ):
        self.session = session
        self.redis = redis
        self.repo = repo or ParkingLocationRepository(session)
        self.config = config or default_settings

    async def reserve(
        self,
        location_id: int,
        slot_id: str,
        user_id: int,
        start_time: datetime,
        end_time: datetime,
        vehicle_type: str,
    ) -> tuple[ParkingLocation, Booking]:
        command = ledger.ReserveSlot(
            slot_id=slot_id,
            user_id=user_id,
            start_time=start_time,
            end_time=end_time,
            vehicle_type=vehicle_type,
        )
        location, booking = await self.execute(location_id, command)
        emit_audit_log(
            action="booking.reserved",
            user_id=user_id,
            location_id=location_id,
            slot_id=slot_id,
            booking_id=booking.id,
            status_to=booking.status,
            version=location.version,
        )
        return location, booking

    async def cancel(
        self, location_id: int, slot_id: str, booking_id: str, user_id: int
    ) -> tuple[ParkingLocation, Booking]:
        command = ledger.CancelBooking(
            slot_id=slot_id, booking_id=booking_id, requesting_user_id=user_id
        )
        location, booking = await self.execute(location_id, command)
        emit_audit_log(
            action="booking.cancelled",
            user_id=user_id,
            location_id=location_id,
            slot_id=slot_id,
            booking_id=booking.id,
            status_from="upcoming",
            status_to=booking.status,
            version=location.version,
        )
        return location, booking

    async def execute(
        self, location_id: int, command: ledger.Command
    ) -> tuple[ParkingLocation, Booking]:
        """Apply *command* under the per-location lock and commit."""
        lock = DistributedLock(
            self.redis,
            location_lock_key(location_id),
            ttl_seconds=self.config.booking_lock_ttl_seconds,
            retries=self.config.booking_lock_retries,
            retry_delay=self.config.booking_lock_retry_delay,
        )
        try:
            async with lock:
                location = await self.repo.get(location_id)
                if location is None:
                    raise LocationNotFound()

                booking = ledger.apply(
                    location,
                    command,
                    count_cancelled=self.config.ledger_counts_cancelled_bookings,
                )

                try:
                    await self.repo.save(location)
                    await self.session.commit()
                except StaleDataError as exc:
                    await self.session.rollback()
                    logger.warning(
                        "Stale write on parking location %s (version %s)",
                        location_id,
                        location.version,
                    )
                    raise ConcurrentUpdate() from exc
        except LockNotAcquired as exc:
            raise ConcurrentUpdate() from exc

        logger.info(
            "%s on location %s slot %s -> booking %s (%s)",
            type(command).__name__,
            location_id,
            command.slot_id,
            booking.id,
            booking.status.value,
        )
        return location, booking
