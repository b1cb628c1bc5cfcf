"""
Booking Ledger
==============

State transitions on one ``ParkingLocation`` aggregate.  Each operation
validates first and mutates last, so a raised ``DomainError`` leaves the
aggregate exactly as it was.  Persisting the result (and guarding it against
concurrent writers) is the caller's job; see ``parkride.services.booking``.

Reserve
-------
1. Slot must exist                                   -> ``SlotNotFound``
2. User holds no upcoming/active booking on *any*
   slot of this location                             -> ``DuplicateActiveBooking``
3. No booking on the target slot collides with the
   request                                           -> ``SlotTimeConflict``
4. Append an ``upcoming`` booking.

``available_slots`` is *not* decremented by reserve; only cancel touches it.
Neither ``slot.available`` nor ``slot.type`` is checked here: that filtering
belongs to the availability resolver.

Cancel
------
1. Slot must exist                                   -> ``SlotNotFound``
2. Booking must exist on that slot                   -> ``BookingNotFound``
3. Requester must own the booking                    -> ``NotAuthorized``
4. Booking must be ``upcoming``                      -> ``InvalidTransition``
5. Mark ``cancelled`` and increment ``available_slots`` (not clamped to
   ``total_slots``).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Union

from parkride.utils.time import utcnow

from .entities import Booking, ParkingLocation, Slot
from .enums import BookingStatus
from .errors import (
    BookingNotFound,
    DuplicateActiveBooking,
    InvalidTransition,
    NotAuthorized,
    SlotNotFound,
    SlotTimeConflict,
)


# ── Commands ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ReserveSlot:
    slot_id: str
    user_id: int
    start_time: datetime
    end_time: datetime
    vehicle_type: str


@dataclass(frozen=True)
class CancelBooking:
    slot_id: str
    booking_id: str
    requesting_user_id: int


Command = Union[ReserveSlot, CancelBooking]


# ── Operations ────────────────────────────────────────────────────────


def _require_slot(location: ParkingLocation, slot_id: str) -> Slot:
    slot = location.find_slot(slot_id)
    if slot is None:
        raise SlotNotFound()
    return slot


def reserve(
    location: ParkingLocation,
    slot_id: str,
    user_id: int,
    start_time: datetime,
    end_time: datetime,
    vehicle_type: str,
    *,
    count_cancelled: bool = False,
) -> Booking:
    """Book *slot_id* for *user_id*.

    With ``count_cancelled=True`` cancelled bookings still take part in the
    conflict test, reproducing the legacy behaviour where a freed interval
    could not be re-booked on the same slot.
    """
    slot = _require_slot(location, slot_id)

    if location.has_active_booking(user_id):
        raise DuplicateActiveBooking()

    for existing in slot.bookings:
        if existing.status == BookingStatus.CANCELLED and not count_cancelled:
            continue
        if existing.collides_with(start_time, end_time):
            raise SlotTimeConflict()

    booking = Booking(
        user_id=user_id,
        start_time=start_time,
        end_time=end_time,
        vehicle_type=vehicle_type,
        status=BookingStatus.UPCOMING,
        created_at=utcnow(),
    )
    slot.bookings.append(booking)
    return booking


def cancel(
    location: ParkingLocation,
    slot_id: str,
    booking_id: str,
    requesting_user_id: int,
) -> Booking:
    slot = _require_slot(location, slot_id)

    booking = slot.find_booking(booking_id)
    if booking is None:
        raise BookingNotFound()

    if booking.user_id != requesting_user_id:
        raise NotAuthorized("Not authorized to cancel this booking")

    if booking.status != BookingStatus.UPCOMING:
        raise InvalidTransition("Only upcoming bookings can be cancelled")

    booking.status = BookingStatus.CANCELLED
    location.available_slots += 1
    return booking


def apply(
    location: ParkingLocation, command: Command, *, count_cancelled: bool = False
) -> Booking:
    """Run *command* against *location* and return the affected booking."""
    if isinstance(command, ReserveSlot):
        return reserve(
            location,
            command.slot_id,
            command.user_id,
            command.start_time,
            command.end_time,
            command.vehicle_type,
            count_cancelled=count_cancelled,
        )
    if isinstance(command, CancelBooking):
        return cancel(
            location,
            command.slot_id,
            command.booking_id,
            command.requesting_user_id,
        )
    raise TypeError(f"Unsupported ledger command: {type(command).__name__}")
