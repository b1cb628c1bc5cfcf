"""Tests for auth tokens, request ids and the audit log."""

import json
import logging
from datetime import timedelta

import pytest

from parkride.utils.audit_log import emit_audit_log
from parkride.utils.auth import create_access_token, decode_access_token
from parkride.utils.request_id import generate_request_id, get_request_id, set_request_id

SECRET = "test-secret"


class TestAccessToken:
    def test_round_trip_user_id(self):
        token = create_access_token(user_id=7, secret=SECRET)
        assert decode_access_token(token, secret=SECRET, algorithms=["HS256"]) == 7

    def test_wrong_secret_rejected(self):
        token = create_access_token(user_id=7, secret=SECRET)
        with pytest.raises(ValueError, match="invalid token"):
            decode_access_token(token, secret="other", algorithms=["HS256"])

    def test_expired_token_rejected(self):
        token = create_access_token(user_id=7, secret=SECRET, expires_delta=timedelta(seconds=-1))
        with pytest.raises(ValueError):
            decode_access_token(token, secret=SECRET, algorithms=["HS256"])


class TestRequestId:
    def test_set_and_get(self):
        set_request_id("req-abc")
        assert get_request_id() == "req-abc"
        set_request_id(None)
        assert get_request_id() is None

    def test_generated_ids_differ(self):
        assert generate_request_id() != generate_request_id()


class TestAuditLog:
    def test_emits_compact_json_with_request_id(self, caplog):
        audit = logging.getLogger("audit")
        audit.addHandler(caplog.handler)
        try:
            set_request_id("req-1")
            emit_audit_log(
                action="booking.cancelled",
                user_id=7,
                location_id=1,
                slot_id="CMS-1",
                booking_id="abc",
                status_from="upcoming",
                status_to="cancelled",
            )
        finally:
            set_request_id(None)
            audit.removeHandler(caplog.handler)

        payload = json.loads(caplog.records[-1].getMessage())
        assert payload["action"] == "booking.cancelled"
        assert payload["request_id"] == "req-1"
        assert payload["status_to"] == "cancelled"
        assert "ride_id" not in payload
