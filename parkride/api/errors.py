"""Translate domain errors into HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from parkride.domain.errors import (
    BookingNotFound,
    ConcurrentUpdate,
    DomainError,
    DuplicateActiveBooking,
    InvalidTransition,
    LocationNotFound,
    NotAuthorized,
    RideNotFound,
    SlotNotFound,
    SlotTimeConflict,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: dict[type[DomainError], int] = {
    LocationNotFound: status.HTTP_404_NOT_FOUND,
    SlotNotFound: status.HTTP_404_NOT_FOUND,
    BookingNotFound: status.HTTP_404_NOT_FOUND,
    RideNotFound: status.HTTP_404_NOT_FOUND,
    NotAuthorized: status.HTTP_403_FORBIDDEN,
    DuplicateActiveBooking: status.HTTP_409_CONFLICT,
    SlotTimeConflict: status.HTTP_409_CONFLICT,
    InvalidTransition: status.HTTP_409_CONFLICT,
    ConcurrentUpdate: status.HTTP_409_CONFLICT,
}


def status_for(exc: DomainError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return status.HTTP_400_BAD_REQUEST


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    code = status_for(exc)
    logger.info("%s %s rejected: %s (%s)", request.method, request.url.path, exc.code, code)
    return JSONResponse(
        status_code=code,
        content={"detail": exc.message, "code": exc.code},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
