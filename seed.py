"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 1 test user (prints a bearer token for it)
  - 3 parking locations in Delhi (50 / 30 / 40 slots)
  - 5 pending rides around San Francisco
"""

import asyncio
import itertools
from datetime import timedelta
from typing import Any

from sqlalchemy import text

from parkride.api.schemas import ParkingLocationCreate
from parkride.config import settings
from parkride.domain.entities import GeoPoint, ParkingLocation, Place, Ride, Slot
from parkride.domain.enums import ParkingVehicleType
from parkride.infrastructure.database import async_session_factory, engine
from parkride.infrastructure.models import UserModel
from parkride.infrastructure.repositories import (
    ParkingLocationRepository,
    RideRepository,
)
from parkride.utils.auth import create_access_token
from parkride.utils.time import utcnow

# Slot types cycle through the bookable vehicle classes so every class can
# be found by the availability search.
SLOT_TYPES = [
    ParkingVehicleType.SEDAN,
    ParkingVehicleType.SEDAN,
    ParkingVehicleType.SUV,
    ParkingVehicleType.VAN,
    ParkingVehicleType.MOTORCYCLE,
    ParkingVehicleType.TRUCK,
]


def _slots(prefix: str, count: int) -> list[dict[str, Any]]:
    types = itertools.cycle(SLOT_TYPES)
    return [
        {"id": f"{prefix}-{i}", "number": str(i), "type": next(types).value}
        for i in range(1, count + 1)
    ]


PARKING_LOCATIONS = [
    {
        "name": "Central Metro Station Parking",
        "address": "123 Metro Street, Downtown",
        "longitude": 77.2090, "latitude": 28.6139,
        "total_slots": 50, "available_slots": 50, "price_per_hour": 30,
        "features": ["24/7", "Security", "CCTV", "Well-lit"],
        "rating": 4.5, "reviews": 120,
        "slots": _slots("CMS", 50),
    },
    {
        "name": "North Terminal Parking",
        "address": "456 Terminal Road, North District",
        "longitude": 77.2295, "latitude": 28.7041,
        "total_slots": 30, "available_slots": 30, "price_per_hour": 25,
        "features": ["Covered", "Security", "CCTV"],
        "rating": 4.2, "reviews": 85,
        "slots": _slots("NTP", 30),
    },
    {
        "name": "South Plaza Parking",
        "address": "789 Plaza Avenue, South District",
        "longitude": 77.1885, "latitude": 28.5275,
        "total_slots": 40, "available_slots": 40, "price_per_hour": 35,
        "features": ["24/7", "Security", "CCTV", "Valet Service"],
        "rating": 4.7, "reviews": 150,
        "slots": _slots("SPP", 40),
    },
]

# (vehicle, price, km, hours ahead, from, to)
RIDES = [
    ("Sedan", 25.00, 10.5, 1, ("Downtown Station", -122.4194, 37.7749), ("Airport Terminal 1", -122.3890, 37.6213)),
    ("SUV", 35.00, 15.2, 2, ("Financial District", -122.4014, 37.7924), ("Golden Gate Park", -122.4833, 37.7694)),
    ("Sedan", 20.00, 8.3, 3, ("Union Square", -122.4074, 37.7879), ("Fisherman's Wharf", -122.4194, 37.8080)),
    ("Luxury", 45.00, 12.7, 4, ("Marina District", -122.4374, 37.8024), ("AT&T Park", -122.3890, 37.7786)),
    ("SUV", 30.00, 11.8, 5, ("Civic Center", -122.4174, 37.7793), ("Presidio", -122.4664, 37.7989)),
]


def _location(raw: dict[str, Any]) -> ParkingLocation:
    data = ParkingLocationCreate(**raw)
    return ParkingLocation(
        name=data.name,
        address=data.address,
        point=GeoPoint(longitude=data.longitude, latitude=data.latitude),
        total_slots=data.total_slots,
        available_slots=data.available_slots,
        price_per_hour=data.price_per_hour,
        features=data.features,
        rating=data.rating,
        reviews=data.reviews,
        slots=[Slot(id=s.id, number=s.number, type=s.type, available=s.available) for s in data.slots],
    )


def _place(raw) -> Place:
    address, lng, lat = raw
    return Place(point=GeoPoint(longitude=lng, latitude=lat), address=address)


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM users"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        # ── Users ─────────────────────────────────────────────────────
        user = UserModel(
            name="Test User", email="test@example.com", phone_number="+1234567890"
        )
        session.add(user)
        await session.flush()
        print(f"  Created test user (id={user.id})")

        # ── Parking ───────────────────────────────────────────────────
        parking_repo = ParkingLocationRepository(session)
        for raw in PARKING_LOCATIONS:
            await parking_repo.add(_location(raw))
        print(f"  Created {len(PARKING_LOCATIONS)} parking locations")

        # ── Rides ─────────────────────────────────────────────────────
        ride_repo = RideRepository(session)
        now = utcnow()
        for vehicle, price, km, hours, origin, destination in RIDES:
            await ride_repo.add(
                Ride(
                    user_id=user.id,
                    origin=_place(origin),
                    destination=_place(destination),
                    vehicle_type=vehicle,
                    booking_time=now + timedelta(hours=hours),
                    price=price,
                    distance_km=km,
                )
            )
        print(f"  Created {len(RIDES)} rides")

        await session.commit()

        token = create_access_token(
            user_id=user.id,
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expires_delta=timedelta(minutes=settings.jwt_expires_minutes),
        )
        print(f"\nSeed complete!\nBearer token for test@example.com:\n{token}")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
