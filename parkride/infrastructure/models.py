"""
SQLAlchemy ORM models  (maps to PostgreSQL + PostGIS).

Tables
------
* ``users``              -- registered riders / parkers
* ``parking_locations``  -- one row per parking facility; its slots and their
  bookings live in the ``slots`` JSONB document (aggregate root)
* ``rides``              -- individual ride bookings

Indexes
-------
* **GIST** on geometry columns (location point, ride origin / destination)
  for radius search.
* **B-Tree** on ``status``, ``user_id``, ``vehicle_type``,
  ``idempotency_key`` for the ride look-ups used by the API.

Concurrency
-----------
``parking_locations.version`` is SQLAlchemy's ``version_id_col``: every
UPDATE carries ``WHERE version = <loaded>`` and bumps it, so a writer that
loaded a stale aggregate fails with ``StaleDataError`` instead of silently
overwriting another writer's booking.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from geoalchemy2 import Geometry

from .database import Base
from parkride.domain.enums import RideStatus, RideVehicleType

JSONDocument = JSON().with_variant(JSONB(), "postgresql")


def _enum_values(enum_cls):
    return [e.value for e in enum_cls]


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    phone_number = Column(String(32), nullable=False)
    avatar = Column(String(512), nullable=True)
    notifications = Column(Boolean, default=True, nullable=False)
    home_lat = Column(Float, nullable=True)
    home_lng = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __mapper_args__ = {"eager_defaults": True}


class ParkingLocationModel(Base):
    __tablename__ = "parking_locations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    address = Column(String(300), nullable=False)

    # PostGIS point for radius search, plain floats for fast reads
    point = Column(Geometry("POINT", srid=4326, spatial_index=False), nullable=False)
    longitude = Column(Float, nullable=False)
    latitude = Column(Float, nullable=False)

    total_slots = Column(Integer, nullable=False)
    available_slots = Column(Integer, nullable=False)
    price_per_hour = Column(Float, nullable=False)
    rating = Column(Float, default=0.0, nullable=False)
    reviews = Column(Integer, default=0, nullable=False)
    features = Column(JSONDocument, nullable=False, default=list)
    slots = Column(JSONDocument, nullable=False, default=list)

    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __mapper_args__ = {"version_id_col": version, "eager_defaults": True}

    # No upper bound on available_slots: cancellations increment it unclamped.
    __table_args__ = (
        CheckConstraint("total_slots >= 1", name="chk_parking_total_slots"),
        CheckConstraint("available_slots >= 0", name="chk_parking_available_slots"),
        CheckConstraint("price_per_hour >= 0", name="chk_parking_price"),
        CheckConstraint("rating >= 0 AND rating <= 5", name="chk_parking_rating"),
        CheckConstraint("reviews >= 0", name="chk_parking_reviews"),
        Index("idx_parking_point", "point", postgresql_using="gist"),
    )


class RideModel(Base):
    __tablename__ = "rides"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    driver_id = Column(String(64), nullable=True)

    origin_address = Column(String(300), nullable=False)
    origin_point = Column(Geometry("POINT", srid=4326, spatial_index=False), nullable=False)
    origin_lat = Column(Float, nullable=False)
    origin_lng = Column(Float, nullable=False)

    destination_address = Column(String(300), nullable=False)
    destination_point = Column(Geometry("POINT", srid=4326, spatial_index=False), nullable=False)
    destination_lat = Column(Float, nullable=False)
    destination_lng = Column(Float, nullable=False)

    vehicle_type = Column(
        Enum(RideVehicleType, values_callable=_enum_values, name="ridevehicletype"),
        nullable=False,
    )
    status = Column(
        Enum(RideStatus, values_callable=_enum_values, name="ridestatus"),
        default=RideStatus.PENDING,
        nullable=False,
    )
    booking_time = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    price = Column(Float, nullable=False)
    distance_km = Column(Float, nullable=False)
    idempotency_key = Column(String(64), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __mapper_args__ = {"eager_defaults": True}

    __table_args__ = (
        CheckConstraint("price >= 0", name="chk_rides_price"),
        CheckConstraint("distance_km >= 0", name="chk_rides_distance"),
        Index("idx_rides_origin", "origin_point", postgresql_using="gist"),
        Index("idx_rides_destination", "destination_point", postgresql_using="gist"),
        Index("idx_rides_status", "status"),
        Index("idx_rides_user", "user_id"),
        Index("idx_rides_vehicle_type", "vehicle_type"),
        UniqueConstraint("user_id", "idempotency_key", name="uq_rides_user_idempotency"),
    )
