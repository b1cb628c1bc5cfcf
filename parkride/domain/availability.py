"""
Availability Resolver
=====================

Given a location's slots, a requested interval and a vehicle type, return
the slots that may legally be booked.

A slot qualifies iff

1. its ``available`` flag is set (operator switch, independent of bookings),
2. its ``type`` equals the requested vehicle type, and
3. no *non-cancelled* booking on it overlaps the request.

Overlap uses inclusive boundaries (``bs <= re and be >= rs``), so a booking
ending at 11:00 blocks a request starting at 11:00.  The ledger's reserve
check is stricter about endpoints; see ``parkride.domain.ledger``.

Pure read: nothing passed in is mutated, and output order follows input
order.  Complexity: O(S + B) for S slots and B bookings.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Iterable

from .entities import ParkingLocation, Slot
from .enums import BookingStatus


def slot_is_free(slot: Slot, start_time: datetime, end_time: datetime) -> bool:
    return not any(
        booking.status != BookingStatus.CANCELLED
        and booking.overlaps(start_time, end_time)
        for booking in slot.bookings
    )


def find_available_slots(
    slots: Iterable[Slot],
    start_time: datetime,
    end_time: datetime,
    vehicle_type: str,
) -> list[Slot]:
    return [
        slot
        for slot in slots
        if slot.available
        and slot.type == vehicle_type
        and slot_is_free(slot, start_time, end_time)
    ]


def availability_view(
    location: ParkingLocation,
    start_time: datetime,
    end_time: datetime,
    vehicle_type: str,
) -> ParkingLocation:
    """Copy of *location* narrowed to bookable slots.

    ``available_slots`` on the copy is the number of eligible slots; the
    stored counter on *location* is left as is.
    """
    eligible = find_available_slots(location.slots, start_time, end_time, vehicle_type)
    return replace(location, slots=eligible, available_slots=len(eligible))
