"""
Codec between the embedded ``slots`` JSON document and domain entities.

Stored shape (one element per slot)::

    {"id": "CMS-1", "number": "1", "type": "Sedan", "available": true,
     "bookings": [{"id": "...", "userId": 7,
                   "startTime": "2026-01-01T10:00:00+00:00",
                   "endTime": "2026-01-01T11:00:00+00:00",
                   "status": "upcoming", "vehicleType": "Sedan",
                   "createdAt": "..."}]}

Datetimes are ISO-8601 strings in UTC.
"""

from __future__ import annotations

from typing import Any, Iterable

from parkride.domain.entities import Booking, Slot
from parkride.domain.enums import BookingStatus
from parkride.utils.time import ensure_utc, parse_iso


def booking_to_document(booking: Booking) -> dict[str, Any]:
    doc: dict[str, Any] = {
        "id": booking.id,
        "userId": booking.user_id,
        "startTime": ensure_utc(booking.start_time).isoformat(),
        "endTime": ensure_utc(booking.end_time).isoformat(),
        "status": booking.status.value,
        "vehicleType": str(getattr(booking.vehicle_type, "value", booking.vehicle_type)),
    }
    if booking.created_at is not None:
        doc["createdAt"] = ensure_utc(booking.created_at).isoformat()
    return doc


def booking_from_document(doc: dict[str, Any]) -> Booking:
    created = doc.get("createdAt")
    return Booking(
        id=doc["id"],
        user_id=doc["userId"],
        start_time=parse_iso(doc["startTime"]),
        end_time=parse_iso(doc["endTime"]),
        status=BookingStatus(doc.get("status", BookingStatus.UPCOMING.value)),
        vehicle_type=doc["vehicleType"],
        created_at=parse_iso(created) if created else None,
    )


def slots_to_document(slots: Iterable[Slot]) -> list[dict[str, Any]]:
    return [
        {
            "id": slot.id,
            "number": slot.number,
            "type": slot.type,
            "available": slot.available,
            "bookings": [booking_to_document(b) for b in slot.bookings],
        }
        for slot in slots
    ]


def slots_from_document(docs: Iterable[dict[str, Any]] | None) -> list[Slot]:
    return [
        Slot(
            id=doc["id"],
            number=str(doc["number"]),
            type=doc["type"],
            available=doc.get("available", True),
            bookings=[booking_from_document(b) for b in doc.get("bookings", [])],
        )
        for doc in docs or []
    ]
