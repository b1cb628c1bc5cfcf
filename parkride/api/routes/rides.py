"""
Ride endpoints
==============

GET   /api/v1/rides/search            -- pending rides of a vehicle type as offers
POST  /api/v1/rides                   -- request a ride (distance + price computed)
GET   /api/v1/rides/history           -- caller's rides, paginated, newest first
GET   /api/v1/rides/active            -- caller's pending / confirmed / in-progress
GET   /api/v1/rides/{ride_id}         -- one of the caller's rides
PATCH /api/v1/rides/{ride_id}/status  -- move a ride through its lifecycle
"""

import logging
import math
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from parkride.api.dependencies import get_current_user_id, get_ride_repo
from parkride.api.middleware import limiter
from parkride.api.schemas import (
    ErrorResponse,
    Pagination,
    RideCreateRequest,
    RideHistoryResponse,
    RideOffer,
    RideResponse,
    RideSearchResponse,
    RideStatusUpdate,
)
from parkride.config import settings
from parkride.domain.entities import GeoPoint, Place, Ride
from parkride.domain.enums import RideStatus, RideVehicleType
from parkride.domain.errors import NotAuthorized, RideNotFound
from parkride.domain.pricing import PerKilometrePricing, PricingEngine
from parkride.infrastructure.repositories import RideRepository
from parkride.utils.audit_log import emit_audit_log
from parkride.utils.time import ensure_utc, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rides", tags=["rides"])

_ERRORS = {
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}

MINUTES_PER_KM = 2


def _pricing() -> PricingEngine:
    return PricingEngine(PerKilometrePricing(settings.ride_rates_per_km))


def _place(schema) -> Place:
    return Place(
        point=GeoPoint(longitude=schema.longitude, latitude=schema.latitude),
        address=schema.address,
    )


async def _owned_ride(repo: RideRepository, ride_id: int, user_id: int, action: str) -> Ride:
    ride = await repo.get(ride_id)
    if ride is None:
        raise RideNotFound()
    if ride.user_id != user_id:
        raise NotAuthorized(f"Not authorized to {action} this ride")
    return ride


@router.get(
    "/search",
    response_model=RideSearchResponse,
    summary="List pending rides of a vehicle type as driver offers",
)
@limiter.limit(settings.rate_limit)
async def search_rides(
    request: Request,
    vehicle_type: RideVehicleType,
    repo: RideRepository = Depends(get_ride_repo),
):
    rides = await repo.search_pending(vehicle_type)
    offers = [
        RideOffer(
            id=r.id,
            driver_id=r.driver_id,
            vehicle_type=r.vehicle_type,
            price=r.price,
            distance_km=r.distance_km,
            duration_minutes=round(r.distance_km * MINUTES_PER_KM),
            booking_time=r.booking_time,
        )
        for r in rides
    ]
    return RideSearchResponse(available_drivers=offers, searched_at=utcnow())


@router.post(
    "",
    status_code=201,
    response_model=RideResponse,
    responses=_ERRORS,
    summary="Request a ride",
)
@limiter.limit(settings.rate_limit)
async def create_ride(
    request: Request,
    body: RideCreateRequest,
    user_id: int = Depends(get_current_user_id),
    repo: RideRepository = Depends(get_ride_repo),
):
    # ── Idempotency guard ─────────────────────────────────────────
    if body.idempotency_key:
        existing = await repo.get_by_idempotency_key(user_id, body.idempotency_key)
        if existing:
            return RideResponse.from_entity(existing)

    origin, destination = _place(body.origin), _place(body.destination)
    quote = _pricing().quote(origin.point, destination.point, body.vehicle_type.value)

    ride = await repo.add(
        Ride(
            user_id=user_id,
            driver_id=body.driver_id,
            origin=origin,
            destination=destination,
            vehicle_type=body.vehicle_type.value,
            booking_time=ensure_utc(body.booking_time) if body.booking_time else utcnow(),
            price=quote.price,
            distance_km=quote.distance_km,
            idempotency_key=body.idempotency_key,
        )
    )
    logger.info("Ride %s created for user %s (%.2f km)", ride.id, user_id, ride.distance_km)
    emit_audit_log(
        action="ride.created",
        user_id=user_id,
        ride_id=ride.id,
        status_to=ride.status,
    )
    return RideResponse.from_entity(ride)


@router.get(
    "/history",
    response_model=RideHistoryResponse,
    responses=_ERRORS,
    summary="The caller's rides, newest first",
)
@limiter.limit(settings.rate_limit)
async def ride_history(
    request: Request,
    status: Optional[RideStatus] = None,
    limit: int = Query(10, ge=1, le=100),
    page: int = Query(1, ge=1),
    user_id: int = Depends(get_current_user_id),
    repo: RideRepository = Depends(get_ride_repo),
):
    rides, total = await repo.list_for_user(
        user_id, status=status, limit=limit, offset=(page - 1) * limit
    )
    return RideHistoryResponse(
        rides=[RideResponse.from_entity(r) for r in rides],
        pagination=Pagination(total=total, page=page, pages=math.ceil(total / limit)),
    )


@router.get(
    "/active",
    response_model=list[RideResponse],
    responses=_ERRORS,
    summary="The caller's rides that have not finished",
)
@limiter.limit(settings.rate_limit)
async def active_rides(
    request: Request,
    user_id: int = Depends(get_current_user_id),
    repo: RideRepository = Depends(get_ride_repo),
):
    return [RideResponse.from_entity(r) for r in await repo.list_open_for_user(user_id)]


@router.get(
    "/{ride_id}",
    response_model=RideResponse,
    responses=_ERRORS,
    summary="Get one of the caller's rides",
)
@limiter.limit(settings.rate_limit)
async def get_ride(
    request: Request,
    ride_id: int,
    user_id: int = Depends(get_current_user_id),
    repo: RideRepository = Depends(get_ride_repo),
):
    ride = await _owned_ride(repo, ride_id, user_id, "view")
    return RideResponse.from_entity(ride)


@router.patch(
    "/{ride_id}/status",
    response_model=RideResponse,
    responses=_ERRORS,
    summary="Change a ride's status",
    description=(
        "pending -> confirmed | cancelled; confirmed -> in-progress | cancelled; "
        "in-progress -> completed | cancelled.  Completed and cancelled are final."
    ),
)
@limiter.limit(settings.rate_limit)
async def update_ride_status(
    request: Request,
    ride_id: int,
    body: RideStatusUpdate,
    user_id: int = Depends(get_current_user_id),
    repo: RideRepository = Depends(get_ride_repo),
):
    ride = await _owned_ride(repo, ride_id, user_id, "update")
    previous = ride.status
    ride.transition_to(body.status)
    ride = await repo.save(ride)
    emit_audit_log(
        action="ride.status_changed",
        user_id=user_id,
        ride_id=ride.id,
        status_from=previous,
        status_to=ride.status,
    )
    return RideResponse.from_entity(ride)
