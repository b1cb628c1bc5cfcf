"""
HTTP middleware and the shared rate limiter.

* ``limiter`` -- slowapi limiter keyed on client address; routes opt in
  with ``@limiter.limit(settings.rate_limit)``.
* ``request_context_middleware`` -- assigns / propagates ``X-Request-ID``
  (picked up by the audit log) and logs one line per request.
"""

import logging
import time

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from parkride.config import settings
from parkride.utils.request_id import generate_request_id, set_request_id

logger = logging.getLogger("parkride.access")

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])


async def request_context_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or generate_request_id()
    set_request_id(request_id)
    started = time.perf_counter()
    try:
        response = await call_next(request)
    finally:
        set_request_id(None)
    elapsed_ms = (time.perf_counter() - started) * 1000
    response.headers["X-Request-ID"] = request_id
    logger.info(
        "%s %s -> %d (%.1f ms) [%s]",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
        request_id,
    )
    return response
