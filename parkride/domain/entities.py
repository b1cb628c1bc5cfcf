"""
Domain entities with business logic.

Patterns used
-------------
- **Aggregate root** ``ParkingLocation``: owns its ``Slot`` list, and each
  slot owns its ``Booking`` list.  Nothing outside a location references a
  slot or booking except by id, so the whole tree is loaded and saved as one
  unit.
- **State Pattern** on ``Ride``: enforces valid lifecycle transitions
  (pending -> confirmed -> in-progress -> completed | cancelled).
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator, Optional

from parkride.utils.time import utcnow

from .enums import (
    ACTIVE_BOOKING_STATUSES,
    RIDE_TRANSITIONS,
    BookingStatus,
    RideStatus,
)
from .errors import InvalidTransition


def new_booking_id() -> str:
    return uuid.uuid4().hex


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class GeoPoint:
    longitude: float
    latitude: float


@dataclass(frozen=True)
class Place:
    point: GeoPoint
    address: str


# ── Parking aggregate ─────────────────────────────────────────────────


@dataclass
class Booking:
    user_id: int
    start_time: datetime
    end_time: datetime
    vehicle_type: str
    status: BookingStatus = BookingStatus.UPCOMING
    id: str = field(default_factory=new_booking_id)
    created_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_BOOKING_STATUSES

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """Inclusive-boundary overlap: touching endpoints count."""
        return self.start_time <= end and self.end_time >= start

    def collides_with(self, start: datetime, end: datetime) -> bool:
        """Reserve-time conflict test.

        The request conflicts when its start falls in ``[start_time,
        end_time)``, its end falls in ``(start_time, end_time]``, or it
        fully contains this booking.
        """
        return (
            self.start_time <= start < self.end_time
            or self.start_time < end <= self.end_time
            or (start <= self.start_time and end >= self.end_time)
        )


@dataclass
class Slot:
    id: str
    number: str
    type: str
    available: bool = True
    bookings: list[Booking] = field(default_factory=list)

    def find_booking(self, booking_id: str) -> Optional[Booking]:
        return next((b for b in self.bookings if b.id == booking_id), None)


@dataclass
class ParkingLocation:
    name: str
    address: str
    point: GeoPoint
    total_slots: int
    available_slots: int
    price_per_hour: float
    features: list[str] = field(default_factory=list)
    rating: float = 0.0
    reviews: int = 0
    slots: list[Slot] = field(default_factory=list)
    id: Optional[int] = None
    version: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def find_slot(self, slot_id: str) -> Optional[Slot]:
        return next((s for s in self.slots if s.id == slot_id), None)

    def iter_bookings(self) -> Iterator[tuple[Slot, Booking]]:
        for slot in self.slots:
            for booking in slot.bookings:
                yield slot, booking

    def has_active_booking(self, user_id: int) -> bool:
        """True if *user_id* holds an upcoming/active booking on any slot."""
        return any(
            b.user_id == user_id and b.is_active for _, b in self.iter_bookings()
        )


# ── Rides ─────────────────────────────────────────────────────────────


@dataclass
class Ride:
    user_id: int
    origin: Place
    destination: Place
    vehicle_type: str
    booking_time: datetime
    price: float = 0.0
    distance_km: float = 0.0
    status: RideStatus = RideStatus.PENDING
    id: Optional[int] = None
    driver_id: Optional[str] = None
    completed_at: Optional[datetime] = None
    idempotency_key: Optional[str] = None
    created_at: Optional[datetime] = None

    def transition_to(
        self, new_status: RideStatus, *, at: Optional[datetime] = None
    ) -> None:
        """Move to *new_status* if the transition is legal, else raise."""
        allowed = RIDE_TRANSITIONS.get(self.status, set())
        if new_status not in allowed:
            raise InvalidTransition(
                f"Cannot transition from {self.status.value} to {new_status.value}"
            )
        self.status = new_status
        if new_status == RideStatus.COMPLETED:
            self.completed_at = at or utcnow()
