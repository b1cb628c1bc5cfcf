"""
Structured audit trail.

One JSON line per booking / ride state change on the ``audit`` logger, e.g.::

    {"timestamp": "...", "action": "booking.reserved", "request_id": "...",
     "user_id": 7, "location_id": 1, "slot_id": "CMS-3",
     "booking_id": "...", "status_to": "upcoming", "version": 4}
"""

from __future__ import annotations

import json
import logging
from typing import Any, Literal, Optional

from .request_id import get_request_id
from .time import utcnow

AuditAction = Literal[
    "booking.reserved",
    "booking.cancelled",
    "ride.created",
    "ride.status_changed",
]

_audit_logger = logging.getLogger("audit")
_audit_logger.setLevel(logging.INFO)
if not _audit_logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    _audit_logger.addHandler(handler)
_audit_logger.propagate = False


def _enum_to_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(getattr(value, "value", value))


def emit_audit_log(
    *,
    action: AuditAction,
    user_id: Optional[int],
    location_id: Optional[int] = None,
    slot_id: Optional[str] = None,
    booking_id: Optional[str] = None,
    ride_id: Optional[int] = None,
    status_from: Any = None,
    status_to: Any = None,
    version: Optional[int] = None,
    extra: Optional[dict[str, Any]] = None,
) -> None:
    payload: dict[str, Any] = {
        "timestamp": utcnow().isoformat(),
        "action": action,
        "request_id": get_request_id(),
        "user_id": user_id,
        "location_id": location_id,
        "slot_id": slot_id,
        "booking_id": booking_id,
        "ride_id": ride_id,
        "status_from": _enum_to_str(status_from),
        "status_to": _enum_to_str(status_to),
        "version": version,
    }
    if extra:
        payload.update(extra)

    # Drop None values to keep the line compact.
    compact = {k: v for k, v in payload.items() if v is not None}
    _audit_logger.info(json.dumps(compact, ensure_ascii=True, default=str))
