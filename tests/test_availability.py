"""Unit tests for the availability resolver."""

from parkride.domain.availability import (
    availability_view,
    find_available_slots,
    slot_is_free,
)
from parkride.domain.entities import Slot
from parkride.domain.enums import BookingStatus
from tests.support import at, make_booking, make_location


def _ids(slots):
    return [s.id for s in slots]


class TestFindAvailableSlots:
    def test_unavailable_slot_never_returned(self):
        slots = [
            Slot(id="A", number="1", type="Sedan", available=False),
            Slot(id="B", number="2", type="Sedan"),
        ]
        assert _ids(find_available_slots(slots, at(10), at(11), "Sedan")) == ["B"]

    def test_type_mismatch_excluded(self):
        slots = [
            Slot(id="A", number="1", type="SUV"),
            Slot(id="B", number="2", type="standard"),
        ]
        assert find_available_slots(slots, at(10), at(11), "Sedan") == []

    def test_cancelled_booking_does_not_block(self):
        slot = Slot(
            id="A",
            number="1",
            type="Sedan",
            bookings=[make_booking(1, at(10), at(11), BookingStatus.CANCELLED)],
        )
        assert _ids(find_available_slots([slot], at(10), at(11), "Sedan")) == ["A"]

    def test_contained_request_excluded(self):
        slot = Slot(id="A", number="1", type="Sedan", bookings=[make_booking(1, at(10), at(11))])
        assert find_available_slots([slot], at(10, 30), at(10, 45), "Sedan") == []

    def test_touching_boundary_counts_as_overlap(self):
        slot = Slot(id="A", number="1", type="Sedan", bookings=[make_booking(1, at(10), at(11))])
        assert find_available_slots([slot], at(11), at(12), "Sedan") == []

    def test_disjoint_request_is_free(self):
        slot = Slot(id="A", number="1", type="Sedan", bookings=[make_booking(1, at(10), at(11))])
        assert _ids(find_available_slots([slot], at(11, 1), at(12), "Sedan")) == ["A"]

    def test_completed_booking_still_blocks(self):
        slot_a = Slot(
            id="A",
            number="1",
            type="Sedan",
            bookings=[make_booking(1, at(9), at(10), BookingStatus.COMPLETED)],
        )
        slot_b = Slot(id="B", number="2", type="Sedan")
        result = find_available_slots([slot_a, slot_b], at(9, 30), at(9, 45), "Sedan")
        assert result == [slot_b]

    def test_order_preserved(self):
        slots = [Slot(id=s, number=s, type="Sedan") for s in ("C", "A", "B")]
        assert _ids(find_available_slots(slots, at(10), at(11), "Sedan")) == ["C", "A", "B"]

    def test_idempotent_and_pure(self):
        slot = Slot(id="A", number="1", type="Sedan", bookings=[make_booking(1, at(8), at(9))])
        before = list(slot.bookings)
        first = find_available_slots([slot], at(10), at(11), "Sedan")
        second = find_available_slots([slot], at(10), at(11), "Sedan")
        assert first == second
        assert slot.bookings == before

    def test_empty_input(self):
        assert find_available_slots([], at(10), at(11), "Sedan") == []


class TestSlotIsFree:
    def test_no_bookings(self):
        assert slot_is_free(Slot(id="A", number="1", type="Sedan"), at(10), at(11))

    def test_active_booking_blocks(self):
        slot = Slot(
            id="A",
            number="1",
            type="Sedan",
            bookings=[make_booking(1, at(10), at(11), BookingStatus.ACTIVE)],
        )
        assert not slot_is_free(slot, at(9), at(10))


class TestAvailabilityView:
    def test_view_narrows_slots_and_counts(self):
        location = make_location(available_slots=3)
        location.slots[0].bookings.append(make_booking(9, at(10), at(11)))

        view = availability_view(location, at(10), at(11), "Sedan")

        assert _ids(view.slots) == ["CMS-2"]
        assert view.available_slots == 1

    def test_view_leaves_stored_aggregate_untouched(self):
        location = make_location(available_slots=3)
        availability_view(location, at(10), at(11), "SUV")
        assert len(location.slots) == 3
        assert location.available_slots == 3
