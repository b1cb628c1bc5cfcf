"""
Domain error taxonomy.

Every failure of the booking core is synchronous and terminal for the call:
validation always runs before the single mutation step, so a raised error
means the aggregate was left untouched.  The API layer maps each kind to an
HTTP status (see ``parkride.api.errors``).
"""


class DomainError(Exception):
    """Base class for all semantic (non-transient) failures."""

    code = "domain_error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message())

    @classmethod
    def default_message(cls) -> str:
        return cls.__doc__.strip().splitlines()[0] if cls.__doc__ else cls.code

    @property
    def message(self) -> str:
        return str(self)


class LocationNotFound(DomainError):
    """Parking location not found."""

    code = "location_not_found"


class SlotNotFound(DomainError):
    """Parking slot not found."""

    code = "slot_not_found"


class BookingNotFound(DomainError):
    """Booking not found."""

    code = "booking_not_found"


class RideNotFound(DomainError):
    """Ride not found."""

    code = "ride_not_found"


class DuplicateActiveBooking(DomainError):
    """You already have an active booking at this location. Please complete or cancel it first."""

    code = "duplicate_active_booking"


class SlotTimeConflict(DomainError):
    """Slot is already booked for this time period."""

    code = "slot_time_conflict"


class NotAuthorized(DomainError):
    """Not authorized to modify this resource."""

    code = "not_authorized"


class InvalidTransition(DomainError):
    """Status change not permitted from the current state."""

    code = "invalid_transition"


class ConcurrentUpdate(DomainError):
    """The parking location was modified concurrently; retry the request."""

    code = "concurrent_update"
