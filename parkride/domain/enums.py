"""Domain enumerations and state-transition rules."""

import enum


class BookingStatus(str, enum.Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# A user may hold at most one of these per parking location
ACTIVE_BOOKING_STATUSES: frozenset[BookingStatus] = frozenset(
    {BookingStatus.UPCOMING, BookingStatus.ACTIVE}
)


class ParkingVehicleType(str, enum.Enum):
    SEDAN = "Sedan"
    SUV = "SUV"
    TRUCK = "Truck"
    VAN = "Van"
    MOTORCYCLE = "Motorcycle"


class RideStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# State machine: maps current status -> set of valid next statuses
RIDE_TRANSITIONS: dict[RideStatus, set[RideStatus]] = {
    RideStatus.PENDING: {RideStatus.CONFIRMED, RideStatus.CANCELLED},
    RideStatus.CONFIRMED: {RideStatus.IN_PROGRESS, RideStatus.CANCELLED},
    RideStatus.IN_PROGRESS: {RideStatus.COMPLETED, RideStatus.CANCELLED},
    RideStatus.COMPLETED: set(),
    RideStatus.CANCELLED: set(),
}

OPEN_RIDE_STATUSES: tuple[RideStatus, ...] = (
    RideStatus.PENDING,
    RideStatus.CONFIRMED,
    RideStatus.IN_PROGRESS,
)


class RideVehicleType(str, enum.Enum):
    SEDAN = "Sedan"
    SUV = "SUV"
    LUXURY = "Luxury"
    VAN = "Van"
