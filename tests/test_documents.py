"""Tests for the slot / booking JSON document codec."""

from datetime import datetime, timezone

from parkride.domain.entities import Slot
from parkride.domain.enums import BookingStatus
from parkride.infrastructure.documents import (
    booking_to_document,
    slots_from_document,
    slots_to_document,
)
from tests.support import at, make_booking


class TestBookingDocument:
    def test_camel_case_keys_and_utc_iso_times(self):
        booking = make_booking(7, at(10), at(11))
        doc = booking_to_document(booking)
        assert doc["userId"] == 7
        assert doc["startTime"] == "2030-01-01T10:00:00+00:00"
        assert doc["status"] == "upcoming"
        assert "createdAt" not in doc

    def test_naive_times_are_treated_as_utc(self):
        booking = make_booking(7, datetime(2030, 1, 1, 10), datetime(2030, 1, 1, 11))
        assert booking_to_document(booking)["endTime"] == "2030-01-01T11:00:00+00:00"


class TestSlotsDocument:
    def test_slots_survive_storage(self):
        booking = make_booking(7, at(10), at(11), BookingStatus.CANCELLED)
        slots = [
            Slot(id="CMS-1", number="1", type="Sedan", bookings=[booking]),
            Slot(id="CMS-2", number="2", type="SUV", available=False),
        ]

        restored = slots_from_document(slots_to_document(slots))

        assert restored == slots
        assert restored[0].bookings[0].start_time.tzinfo == timezone.utc

    def test_missing_optional_fields_default(self):
        restored = slots_from_document([{"id": "A", "number": 1, "type": "standard"}])
        assert restored[0].available is True
        assert restored[0].bookings == []
        assert restored[0].number == "1"

    def test_empty_document(self):
        assert slots_from_document(None) == []
