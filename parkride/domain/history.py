"""Read-only projections of a user's bookings across parking locations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from .entities import Booking, ParkingLocation, Slot
from .pricing import parking_fee


@dataclass(frozen=True)
class BookingRecord:
    booking: Booking
    location: ParkingLocation
    slot: Slot

    @property
    def estimated_fee(self) -> float:
        return parking_fee(
            self.location.price_per_hour,
            self.booking.start_time,
            self.booking.end_time,
        )


def _records_for(
    locations: Iterable[ParkingLocation], user_id: int
) -> list[BookingRecord]:
    return [
        BookingRecord(booking=booking, location=location, slot=slot)
        for location in locations
        for slot, booking in location.iter_bookings()
        if booking.user_id == user_id
    ]


def booking_history(
    locations: Iterable[ParkingLocation], user_id: int
) -> list[BookingRecord]:
    """Every booking of *user_id*, most recent start first."""
    records = _records_for(locations, user_id)
    records.sort(key=lambda r: r.booking.start_time, reverse=True)
    return records


def active_bookings(
    locations: Iterable[ParkingLocation], user_id: int, now: datetime
) -> list[BookingRecord]:
    """Upcoming/active bookings not yet ended at *now*, soonest first."""
    records = [
        r
        for r in _records_for(locations, user_id)
        if r.booking.is_active and r.booking.end_time >= now
    ]
    records.sort(key=lambda r: r.booking.start_time)
    return records
