"""
FastAPI application factory.

* Registers routes for parking, rides, users and admin under ``/api/v1``.
* Maps domain errors to HTTP responses.
* Applies rate limiting and request-id / access-log middleware.
* Disposes the DB engine and Redis pool on shutdown.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from parkride.api.errors import register_error_handlers
from parkride.api.middleware import limiter, request_context_middleware
from parkride.api.routes import admin, parking, rides, users
from parkride.config import settings
from parkride.infrastructure.database import engine
from parkride.infrastructure.redis_client import close_redis

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("ParkRide API starting")
    yield
    await close_redis()
    await engine.dispose()
    logger.info("ParkRide API stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title="ParkRide API",
        description=(
            "Parking reservations and ride requests.  Finds free slots for a "
            "time window, books and cancels them without double-booking, and "
            "prices and tracks rides."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    register_error_handlers(app)
    app.middleware("http")(request_context_middleware)

    # Routers
    app.include_router(parking.router, prefix="/api/v1")
    app.include_router(rides.router, prefix="/api/v1")
    app.include_router(users.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
