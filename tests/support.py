"""
SQLite mirror models, test repositories and entity builders.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  PostGIS-specific features (Geometry columns,
``ST_DWithin``) are replaced by plain String columns in the test models and
a Python haversine filter in the test repositories.
"""

from datetime import datetime, timedelta, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import DeclarativeBase

from parkride.config import settings
from parkride.domain.distance import haversine_km
from parkride.domain.entities import Booking, GeoPoint, ParkingLocation, Slot
from parkride.domain.enums import BookingStatus, RideStatus, RideVehicleType
from parkride.infrastructure.repositories import (
    ParkingLocationRepository,
    RideRepository,
    UserRepository,
)
from parkride.utils.auth import create_access_token


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


class TestBase(DeclarativeBase):
    __test__ = False  # not a pytest class


def _enum_values(enum_cls):
    return [e.value for e in enum_cls]


# Mirror the production models but without PostGIS Geometry columns
# (SQLite doesn't support them).


class TestUserModel(TestBase):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    phone_number = Column(String(32), nullable=False)
    avatar = Column(String(512), nullable=True)
    notifications = Column(Boolean, default=True, nullable=False)
    home_lat = Column(Float, nullable=True)
    home_lng = Column(Float, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __mapper_args__ = {"eager_defaults": True}


class TestParkingLocationModel(TestBase):
    __tablename__ = "parking_locations"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    address = Column(String(300), nullable=False)
    point = Column(String, nullable=False)  # stub for Geometry
    longitude = Column(Float, nullable=False)
    latitude = Column(Float, nullable=False)
    total_slots = Column(Integer, nullable=False)
    available_slots = Column(Integer, nullable=False)
    price_per_hour = Column(Float, nullable=False)
    rating = Column(Float, default=0.0, nullable=False)
    reviews = Column(Integer, default=0, nullable=False)
    features = Column(JSON, nullable=False, default=list)
    slots = Column(JSON, nullable=False, default=list)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __mapper_args__ = {"version_id_col": version, "eager_defaults": True}


class TestRideModel(TestBase):
    __tablename__ = "rides"
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    driver_id = Column(String(64), nullable=True)
    origin_address = Column(String(300), nullable=False)
    origin_point = Column(String, nullable=True)  # stub for Geometry
    origin_lat = Column(Float, nullable=False)
    origin_lng = Column(Float, nullable=False)
    destination_address = Column(String(300), nullable=False)
    destination_point = Column(String, nullable=True)  # stub for Geometry
    destination_lat = Column(Float, nullable=False)
    destination_lng = Column(Float, nullable=False)
    vehicle_type = Column(
        Enum(RideVehicleType, values_callable=_enum_values, native_enum=False),
        nullable=False,
    )
    status = Column(
        Enum(RideStatus, values_callable=_enum_values, native_enum=False),
        default=RideStatus.PENDING,
        nullable=False,
    )
    booking_time = Column(DateTime, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    price = Column(Float, nullable=False)
    distance_km = Column(Float, nullable=False)
    idempotency_key = Column(String(64), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __mapper_args__ = {"eager_defaults": True}


# ── Test repositories ─────────────────────────────────────────────────


def _wkt(point: GeoPoint) -> str:
    return f"POINT({point.longitude} {point.latitude})"


def within_radius(center: GeoPoint, point: GeoPoint, radius_m: float) -> bool:
    """Great-circle stand-in for ST_DWithin on geography."""
    return haversine_km(center, point) * 1000 <= radius_m


class TestParkingLocationRepository(ParkingLocationRepository):
    """``ParkingLocationRepository`` over the SQLite mirror model."""

    __test__ = False
    model = TestParkingLocationModel

    def _point(self, point: GeoPoint):
        return _wkt(point)

    async def search_near(self, center: GeoPoint, radius_m: float):
        hits = [
            loc for loc in await self.list_all()
            if within_radius(center, loc.point, radius_m)
        ]
        return sorted(hits, key=lambda loc: haversine_km(center, loc.point))


class TestRideRepository(RideRepository):
    __test__ = False
    model = TestRideModel

    def _point(self, point: GeoPoint):
        return _wkt(point)


class TestUserRepository(UserRepository):
    __test__ = False
    model = TestUserModel


# ── Builders ──────────────────────────────────────────────────────────

BASE_DAY = datetime(2030, 1, 1, tzinfo=timezone.utc)


def at(hour: int, minute: int = 0, day: int = 0) -> datetime:
    """A fixed UTC instant on the test day (far in the future)."""
    return BASE_DAY + timedelta(days=day, hours=hour, minutes=minute)


def make_booking(
    user_id: int,
    start: datetime,
    end: datetime,
    status: BookingStatus = BookingStatus.UPCOMING,
    vehicle_type: str = "Sedan",
) -> Booking:
    return Booking(
        user_id=user_id,
        start_time=start,
        end_time=end,
        vehicle_type=vehicle_type,
        status=status,
    )


def make_location(*slots: Slot, **overrides) -> ParkingLocation:
    slots = list(slots) or [
        Slot(id="CMS-1", number="1", type="Sedan"),
        Slot(id="CMS-2", number="2", type="Sedan"),
        Slot(id="CMS-3", number="3", type="SUV"),
    ]
    data = dict(
        name="Central Metro Station Parking",
        address="123 Metro Street, Downtown",
        point=GeoPoint(longitude=77.2090, latitude=28.6139),
        total_slots=len(slots),
        available_slots=len(slots),
        price_per_hour=30.0,
        features=["24/7", "Security"],
        rating=4.5,
        reviews=120,
        slots=slots,
    )
    data.update(overrides)
    return ParkingLocation(**data)


def auth_headers(user_id: int) -> dict[str, str]:
    token = create_access_token(
        user_id=user_id,
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )
    return {"Authorization": f"Bearer {token}"}


