"""
Parking endpoints
=================

GET  /api/v1/parking/search                 -- locations near a point (or all)
GET  /api/v1/parking/bookings/history       -- caller's bookings, newest first
GET  /api/v1/parking/bookings/active        -- caller's live bookings
GET  /api/v1/parking/{location_id}          -- location, optionally as an
                                               availability view
POST /api/v1/parking/{location_id}/slots/{slot_id}/book
POST /api/v1/parking/{location_id}/slots/{slot_id}/bookings/{booking_id}/cancel
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from parkride.api.dependencies import (
    get_booking_service,
    get_current_user_id,
    get_parking_repo,
)
from parkride.api.middleware import limiter
from parkride.api.schemas import (
    BookingActionResponse,
    BookingCreateRequest,
    BookingRecordResponse,
    BookingResponse,
    ErrorResponse,
    ParkingLocationResponse,
)
from parkride.config import settings
from parkride.domain.availability import availability_view
from parkride.domain.entities import GeoPoint
from parkride.domain.enums import ParkingVehicleType
from parkride.domain.errors import LocationNotFound
from parkride.domain.history import active_bookings, booking_history
from parkride.infrastructure.repositories import ParkingLocationRepository
from parkride.services.booking import BookingService
from parkride.utils.time import ensure_utc, utcnow

router = APIRouter(prefix="/parking", tags=["parking"])

_ERRORS = {
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


@router.get(
    "/search",
    response_model=list[ParkingLocationResponse],
    summary="Search parking locations near a point",
)
@limiter.limit(settings.rate_limit)
async def search_parking(
    request: Request,
    lng: Optional[float] = Query(None, ge=-180, le=180),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    radius: float = Query(settings.default_search_radius_m, gt=0),
    repo: ParkingLocationRepository = Depends(get_parking_repo),
):
    if (lng is None) != (lat is None):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="lng and lat must be given together",
        )
    if lng is None:
        locations = await repo.list_all()
    else:
        locations = await repo.search_near(GeoPoint(longitude=lng, latitude=lat), radius)
    return [ParkingLocationResponse.from_entity(loc) for loc in locations]


# ── Booking projections (declared before /{location_id}) ──────────────


@router.get(
    "/bookings/history",
    response_model=list[BookingRecordResponse],
    responses=_ERRORS,
    summary="All of the caller's parking bookings, newest first",
)
@limiter.limit(settings.rate_limit)
async def get_booking_history(
    request: Request,
    user_id: int = Depends(get_current_user_id),
    repo: ParkingLocationRepository = Depends(get_parking_repo),
):
    records = booking_history(await repo.list_all(), user_id)
    return [BookingRecordResponse.from_record(r) for r in records]


@router.get(
    "/bookings/active",
    response_model=list[BookingRecordResponse],
    responses=_ERRORS,
    summary="The caller's upcoming / active bookings that have not ended",
)
@limiter.limit(settings.rate_limit)
async def get_active_bookings(
    request: Request,
    user_id: int = Depends(get_current_user_id),
    repo: ParkingLocationRepository = Depends(get_parking_repo),
):
    records = active_bookings(await repo.list_all(), user_id, utcnow())
    return [BookingRecordResponse.from_record(r) for r in records]


# ── Single location ───────────────────────────────────────────────────


@router.get(
    "/{location_id}",
    response_model=ParkingLocationResponse,
    responses=_ERRORS,
    summary="Get a parking location, optionally filtered to free slots",
    description=(
        "With ``start_time``, ``end_time`` and ``vehicle_type`` all given, "
        "``slots`` holds only the slots free for that window and "
        "``available_slots`` is their count."
    ),
)
@limiter.limit(settings.rate_limit)
async def get_parking(
    request: Request,
    location_id: int,
    start_time: Optional[datetime] = None,
    end_time: Optional[datetime] = None,
    vehicle_type: Optional[ParkingVehicleType] = None,
    repo: ParkingLocationRepository = Depends(get_parking_repo),
):
    location = await repo.get(location_id)
    if location is None:
        raise LocationNotFound()

    if start_time and end_time and vehicle_type:
        location = availability_view(
            location,
            ensure_utc(start_time),
            ensure_utc(end_time),
            vehicle_type.value,
        )
    return ParkingLocationResponse.from_entity(location)


@router.post(
    "/{location_id}/slots/{slot_id}/book",
    status_code=201,
    response_model=BookingActionResponse,
    responses=_ERRORS,
    summary="Reserve a slot for a time window",
)
@limiter.limit(settings.rate_limit)
async def book_slot(
    request: Request,
    location_id: int,
    slot_id: str,
    body: BookingCreateRequest,
    user_id: int = Depends(get_current_user_id),
    service: BookingService = Depends(get_booking_service),
):
    location, booking = await service.reserve(
        location_id,
        slot_id,
        user_id,
        ensure_utc(body.start_time),
        ensure_utc(body.end_time),
        body.vehicle_type.value,
    )
    return BookingActionResponse(
        message="Parking slot booked successfully",
        location_id=location_id,
        slot_id=slot_id,
        available_slots=location.available_slots,
        booking=BookingResponse.model_validate(booking),
    )


@router.post(
    "/{location_id}/slots/{slot_id}/bookings/{booking_id}/cancel",
    response_model=BookingActionResponse,
    responses=_ERRORS,
    summary="Cancel one of the caller's upcoming bookings",
)
@limiter.limit(settings.rate_limit)
async def cancel_booking(
    request: Request,
    location_id: int,
    slot_id: str,
    booking_id: str,
    user_id: int = Depends(get_current_user_id),
    service: BookingService = Depends(get_booking_service),
):
    location, booking = await service.cancel(location_id, slot_id, booking_id, user_id)
    return BookingActionResponse(
        message="Booking cancelled successfully",
        location_id=location_id,
        slot_id=slot_id,
        available_slots=location.available_slots,
        booking=BookingResponse.model_validate(booking),
    )
