"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from parkride.domain.entities import ParkingLocation, Place, Ride
from parkride.domain.enums import BookingStatus, ParkingVehicleType, RideStatus, RideVehicleType
from parkride.domain.history import BookingRecord
from parkride.utils.time import ensure_utc


# ── Parking: requests ─────────────────────────────────────────────────


class BookingCreateRequest(BaseModel):
    start_time: datetime
    end_time: datetime
    vehicle_type: ParkingVehicleType

    @field_validator("start_time", "end_time", mode="after")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="after")
    def _end_after_start(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class SlotCreate(BaseModel):
    id: str = Field(..., min_length=1, max_length=64)
    number: str = Field(..., min_length=1, max_length=16)
    type: str = Field(..., min_length=1, max_length=32)
    available: bool = True


class ParkingLocationCreate(BaseModel):
    """Creation-time invariants of a parking location."""

    name: str = Field(..., min_length=1, max_length=200)
    address: str = Field(..., min_length=1, max_length=300)
    longitude: float = Field(..., ge=-180, le=180)
    latitude: float = Field(..., ge=-90, le=90)
    total_slots: int = Field(..., ge=1)
    available_slots: int = Field(..., ge=0)
    price_per_hour: float = Field(..., ge=0)
    features: list[str] = []
    rating: float = Field(0.0, ge=0, le=5)
    reviews: int = Field(0, ge=0)
    slots: list[SlotCreate] = []

    @model_validator(mode="after")
    def _counts_consistent(self):
        if self.available_slots > self.total_slots:
            raise ValueError("available_slots cannot exceed total_slots")
        ids = [s.id for s in self.slots]
        if len(ids) != len(set(ids)):
            raise ValueError("slot ids must be unique within a location")
        return self


# ── Parking: responses ────────────────────────────────────────────────


class BookingResponse(BaseModel):
    id: str
    user_id: int
    start_time: datetime
    end_time: datetime
    status: BookingStatus
    vehicle_type: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SlotResponse(BaseModel):
    id: str
    number: str
    type: str
    available: bool
    bookings: list[BookingResponse] = []

    model_config = {"from_attributes": True}


class ParkingLocationResponse(BaseModel):
    id: int
    name: str
    address: str
    longitude: float
    latitude: float
    total_slots: int
    available_slots: int
    price_per_hour: float
    features: list[str]
    rating: float
    reviews: int
    slots: list[SlotResponse]
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, location: ParkingLocation) -> "ParkingLocationResponse":
        return cls(
            id=location.id,
            name=location.name,
            address=location.address,
            longitude=location.point.longitude,
            latitude=location.point.latitude,
            total_slots=location.total_slots,
            available_slots=location.available_slots,
            price_per_hour=location.price_per_hour,
            features=location.features,
            rating=location.rating,
            reviews=location.reviews,
            slots=[SlotResponse.model_validate(s) for s in location.slots],
            updated_at=location.updated_at,
        )


class BookingActionResponse(BaseModel):
    message: str
    location_id: int
    slot_id: str
    available_slots: int
    booking: BookingResponse


class BookingRecordResponse(BaseModel):
    location_id: int
    location_name: str
    location_address: str
    slot_id: str
    slot_number: str
    price_per_hour: float
    estimated_fee: float
    booking: BookingResponse

    @classmethod
    def from_record(cls, record: BookingRecord) -> "BookingRecordResponse":
        return cls(
            location_id=record.location.id,
            location_name=record.location.name,
            location_address=record.location.address,
            slot_id=record.slot.id,
            slot_number=record.slot.number,
            price_per_hour=record.location.price_per_hour,
            estimated_fee=record.estimated_fee,
            booking=BookingResponse.model_validate(record.booking),
        )


# ── Rides ─────────────────────────────────────────────────────────────


class PlaceSchema(BaseModel):
    address: str = Field(..., min_length=1, max_length=300)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    @classmethod
    def from_place(cls, place: Place) -> "PlaceSchema":
        return cls(
            address=place.address,
            latitude=place.point.latitude,
            longitude=place.point.longitude,
        )


class RideCreateRequest(BaseModel):
    origin: PlaceSchema
    destination: PlaceSchema
    vehicle_type: RideVehicleType
    booking_time: Optional[datetime] = None
    driver_id: Optional[str] = Field(None, max_length=64)
    idempotency_key: Optional[str] = Field(
        None,
        max_length=64,
        description="Client-generated UUID to prevent double-booking on retries.",
    )


class RideStatusUpdate(BaseModel):
    status: RideStatus


class RideResponse(BaseModel):
    id: int
    user_id: int
    driver_id: Optional[str] = None
    origin: PlaceSchema
    destination: PlaceSchema
    vehicle_type: str
    status: str
    booking_time: datetime
    completed_at: Optional[datetime] = None
    price: float
    distance_km: float
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, ride: Ride) -> "RideResponse":
        return cls(
            id=ride.id,
            user_id=ride.user_id,
            driver_id=ride.driver_id,
            origin=PlaceSchema.from_place(ride.origin),
            destination=PlaceSchema.from_place(ride.destination),
            vehicle_type=ride.vehicle_type,
            status=ride.status.value,
            booking_time=ride.booking_time,
            completed_at=ride.completed_at,
            price=ride.price,
            distance_km=ride.distance_km,
            created_at=ride.created_at,
        )


class RideOffer(BaseModel):
    """A pending ride presented to the searcher as a bookable offer."""

    id: int
    driver_id: Optional[str] = None
    vehicle_type: str
    price: float
    distance_km: float
    duration_minutes: int
    booking_time: datetime


class RideSearchResponse(BaseModel):
    available_drivers: list[RideOffer]
    searched_at: datetime


class Pagination(BaseModel):
    total: int
    page: int
    pages: int


class RideHistoryResponse(BaseModel):
    rides: list[RideResponse]
    pagination: Pagination


# ── Users ─────────────────────────────────────────────────────────────


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    phone_number: str
    avatar: Optional[str] = None
    notifications: bool
    home_lat: Optional[float] = None
    home_lng: Optional[float] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UserUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    phone_number: Optional[str] = Field(None, min_length=3, max_length=32)
    avatar: Optional[str] = Field(None, max_length=512)
    notifications: Optional[bool] = None
    home_lat: Optional[float] = Field(None, ge=-90, le=90)
    home_lng: Optional[float] = Field(None, ge=-180, le=180)


# ── Misc ──────────────────────────────────────────────────────────────


class HealthResponse(BaseModel):
    status: str = "ok"
    checks: dict[str, str] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    detail: str
    code: Optional[str] = None

