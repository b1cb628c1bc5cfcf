"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and speaks in
domain entities: rows are mapped to ``ParkingLocation`` / ``Ride`` on the way
out and written back on ``save``.  The ORM class is a class attribute so the
test-suite can point a repository at SQLite-friendly mirror models.
"""

from __future__ import annotations

from typing import Any, Optional

from geoalchemy2 import Geography
from geoalchemy2.functions import ST_Distance, ST_DWithin, ST_MakePoint, ST_SetSRID
from sqlalchemy import cast, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .documents import slots_from_document, slots_to_document
from .models import ParkingLocationModel, RideModel, UserModel
from parkride.domain.entities import GeoPoint, ParkingLocation, Place, Ride
from parkride.domain.enums import OPEN_RIDE_STATUSES, RideStatus, RideVehicleType
from parkride.utils.time import ensure_utc

PROFILE_FIELDS = ("name", "phone_number", "avatar", "notifications", "home_lat", "home_lng")


def _features(values) -> list[str]:
    seen: list[str] = []
    for value in values or []:
        value = value.strip()
        if value and value not in seen:
            seen.append(value)
    return seen


# ── Row <-> entity mapping ────────────────────────────────────────────


def location_from_row(row: Any) -> ParkingLocation:
    return ParkingLocation(
        id=row.id,
        name=row.name,
        address=row.address,
        point=GeoPoint(longitude=row.longitude, latitude=row.latitude),
        total_slots=row.total_slots,
        available_slots=row.available_slots,
        price_per_hour=row.price_per_hour,
        features=list(row.features or []),
        rating=row.rating,
        reviews=row.reviews,
        slots=slots_from_document(row.slots),
        version=row.version,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def ride_from_row(row: Any) -> Ride:
    return Ride(
        id=row.id,
        user_id=row.user_id,
        driver_id=row.driver_id,
        origin=Place(
            point=GeoPoint(longitude=row.origin_lng, latitude=row.origin_lat),
            address=row.origin_address,
        ),
        destination=Place(
            point=GeoPoint(longitude=row.destination_lng, latitude=row.destination_lat),
            address=row.destination_address,
        ),
        vehicle_type=RideVehicleType(row.vehicle_type).value,
        status=RideStatus(row.status),
        booking_time=ensure_utc(row.booking_time),
        completed_at=ensure_utc(row.completed_at) if row.completed_at else None,
        price=row.price,
        distance_km=row.distance_km,
        idempotency_key=row.idempotency_key,
        created_at=row.created_at,
    )


# ── Parking ───────────────────────────────────────────────────────────


class ParkingLocationRepository:
    model = ParkingLocationModel

    def __init__(self, session: AsyncSession):
        self.session = session

    def _point(self, point: GeoPoint):
        return ST_SetSRID(ST_MakePoint(point.longitude, point.latitude), 4326)

    async def add(self, location: ParkingLocation) -> ParkingLocation:
        row = self.model(
            name=location.name,
            address=location.address,
            point=self._point(location.point),
            longitude=location.point.longitude,
            latitude=location.point.latitude,
            total_slots=location.total_slots,
            available_slots=location.available_slots,
            price_per_hour=location.price_per_hour,
            rating=location.rating,
            reviews=location.reviews,
            features=_features(location.features),
            slots=slots_to_document(location.slots),
        )
        self.session.add(row)
        await self.session.flush()
        location.id = row.id
        location.version = row.version
        return location

    async def get(self, location_id: int) -> Optional[ParkingLocation]:
        row = await self.session.get(self.model, location_id)
        return location_from_row(row) if row else None

    async def list_all(self) -> list[ParkingLocation]:
        result = await self.session.execute(select(self.model).order_by(self.model.id))
        return [location_from_row(row) for row in result.scalars().all()]

    async def search_near(self, center: GeoPoint, radius_m: float) -> list[ParkingLocation]:
        """Locations within *radius_m* metres of *center*, nearest first."""
        origin = cast(self._point(center), Geography)
        here = cast(self.model.point, Geography)
        result = await self.session.execute(
            select(self.model)
            .where(ST_DWithin(here, origin, radius_m))
            .order_by(ST_Distance(here, origin))
        )
        return [location_from_row(row) for row in result.scalars().all()]

    async def save(self, location: ParkingLocation) -> ParkingLocation:
        """Write the aggregate back.

        The UPDATE is guarded by the row's version column; a concurrent
        writer makes the flush raise ``sqlalchemy.orm.exc.StaleDataError``.
        """
        row = await self.session.get(self.model, location.id)
        if row is None:
            raise LookupError(f"parking location {location.id} vanished")
        row.available_slots = location.available_slots
        row.slots = slots_to_document(location.slots)
        await self.session.flush()
        location.version = row.version
        location.updated_at = row.updated_at
        return location


# ── Rides ─────────────────────────────────────────────────────────────


class RideRepository:
    model = RideModel

    def __init__(self, session: AsyncSession):
        self.session = session

    def _point(self, point: GeoPoint):
        return ST_SetSRID(ST_MakePoint(point.longitude, point.latitude), 4326)

    async def add(self, ride: Ride) -> Ride:
        row = self.model(
            user_id=ride.user_id,
            driver_id=ride.driver_id,
            origin_address=ride.origin.address,
            origin_point=self._point(ride.origin.point),
            origin_lat=ride.origin.point.latitude,
            origin_lng=ride.origin.point.longitude,
            destination_address=ride.destination.address,
            destination_point=self._point(ride.destination.point),
            destination_lat=ride.destination.point.latitude,
            destination_lng=ride.destination.point.longitude,
            vehicle_type=RideVehicleType(ride.vehicle_type),
            status=ride.status,
            booking_time=ride.booking_time,
            price=ride.price,
            distance_km=ride.distance_km,
            idempotency_key=ride.idempotency_key,
        )
        self.session.add(row)
        await self.session.flush()
        return ride_from_row(row)

    async def get(self, ride_id: int) -> Optional[Ride]:
        row = await self.session.get(self.model, ride_id)
        return ride_from_row(row) if row else None

    async def get_by_idempotency_key(self, user_id: int, key: str) -> Optional[Ride]:
        result = await self.session.execute(
            select(self.model).where(
                self.model.user_id == user_id,
                self.model.idempotency_key == key,
            )
        )
        row = result.scalar_one_or_none()
        return ride_from_row(row) if row else None

    async def search_pending(self, vehicle_type: RideVehicleType) -> list[Ride]:
        result = await self.session.execute(
            select(self.model)
            .where(
                self.model.vehicle_type == vehicle_type,
                self.model.status == RideStatus.PENDING,
            )
            .order_by(self.model.booking_time, self.model.id)
        )
        return [ride_from_row(row) for row in result.scalars().all()]

    async def list_for_user(
        self,
        user_id: int,
        *,
        status: Optional[RideStatus] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[Ride], int]:
        """One page of a user's rides (newest first) plus the total count."""
        conditions = [self.model.user_id == user_id]
        if status is not None:
            conditions.append(self.model.status == status)

        total = await self.session.scalar(
            select(func.count()).select_from(self.model).where(*conditions)
        )
        result = await self.session.execute(
            select(self.model)
            .where(*conditions)
            .order_by(self.model.created_at.desc(), self.model.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return [ride_from_row(row) for row in result.scalars().all()], int(total or 0)

    async def list_open_for_user(self, user_id: int) -> list[Ride]:
        result = await self.session.execute(
            select(self.model)
            .where(
                self.model.user_id == user_id,
                self.model.status.in_(OPEN_RIDE_STATUSES),
            )
            .order_by(self.model.booking_time, self.model.id)
        )
        return [ride_from_row(row) for row in result.scalars().all()]

    async def save(self, ride: Ride) -> Ride:
        row = await self.session.get(self.model, ride.id)
        if row is None:
            raise LookupError(f"ride {ride.id} vanished")
        row.status = ride.status
        row.completed_at = ride.completed_at
        await self.session.flush()
        return ride_from_row(row)


# ── Users ─────────────────────────────────────────────────────────────


class UserRepository:
    model = UserModel

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: int):
        return await self.session.get(self.model, user_id)

    async def update_profile(self, user, updates: dict[str, Any]):
        """Apply whitelisted profile fields; anything else is ignored."""
        for key in PROFILE_FIELDS:
            if key in updates:
                setattr(user, key, updates[key])
        await self.session.flush()
        return user
