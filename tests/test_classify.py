"""Tests for the authorization classifier."""

from __future__ import annotations

import json

import pytest

from gqlms.classify import ClassificationResult, Verdict, classify
from gqlms.errors import TransportError


def _body(payload: object) -> bytes:
    return json.dumps(payload).encode()


class TestStatusCodes:
    @pytest.mark.parametrize("status", [401, 403])
    @pytest.mark.parametrize("body", [b"", b"{}", _body({"data": {"x": 1}}), b"<html>ok</html>"])
    def test_denied_regardless_of_body(self, status, body):
        result = classify(status, body)
        assert result.verdict is Verdict.DENIED
        assert result.evidence == f"HTTP {status}"
        assert result.status_code == status


class TestStructuredErrors:
    def test_data_without_errors_is_allowed(self):
        result = classify(200, _body({"data": {"x": 1}, "errors": None}))
        assert result.verdict is Verdict.ALLOWED

    def test_unauthenticated_code(self):
        body = _body({"errors": [{"message": "Not authorized", "extensions": {"code": "UNAUTHENTICATED"}}], "data": None})
        result = classify(200, body)
        assert result.verdict is Verdict.DENIED
        assert "UNAUTHENTICATED" in result.evidence

    @pytest.mark.parametrize("code", ["forbidden", "Access_Denied", "UNAUTHENTICATED"])
    def test_codes_are_case_insensitive(self, code):
        body = _body({"data": {"x": None}, "errors": [{"message": "nope", "extensions": {"code": code}}]})
        assert classify(200, body).verdict is Verdict.DENIED

    def test_code_wins_over_message(self):
        body = _body({"errors": [{"message": "Forbidden", "extensions": {"code": "FORBIDDEN"}}]})
        assert classify(200, body).evidence == "error code FORBIDDEN"

    @pytest.mark.parametrize(
        "message",
        [
            "Unauthorized Access",
            "Forbidden resource",
            "Access denied for this resource",
            "This field is RESTRICTED",
        ],
    )
    def test_denial_vocabulary_in_message(self, message):
        body = _body({"data": {"x": None}, "errors": [{"message": message}]})
        result = classify(200, body)
        assert result.verdict is Verdict.DENIED
        assert result.evidence.startswith("error message matches")

    def test_not_authorized_phrase_is_not_vocabulary(self):
        # "not authorized" does not contain "unauthorized"
        body = _body({"data": {"x": None}, "errors": [{"message": "User is not authorized"}]})
        result = classify(200, body)
        assert result.verdict is Verdict.ALLOWED
        assert result.evidence == "HTTP 200"

    def test_errors_with_null_data(self):
        body = _body({"data": None, "errors": [{"message": "Something went wrong"}]})
        result = classify(200, body)
        assert result.verdict is Verdict.DENIED
        assert result.evidence == "errors with null data"

    def test_errors_with_absent_data(self):
        body = _body({"errors": [{"message": "Something went wrong"}]})
        assert classify(200, body).verdict is Verdict.DENIED

    def test_errors_with_partial_data_are_allowed(self):
        body = _body({"data": {"createUser": None}, "errors": [{"message": "Email already taken"}]})
        assert classify(200, body).verdict is Verdict.ALLOWED

    def test_empty_errors_list_is_ignored(self):
        assert classify(200, _body({"data": None, "errors": []})).verdict is Verdict.ALLOWED

    def test_non_string_code(self):
        body = _body({"data": {"x": 1}, "errors": [{"message": "rate", "extensions": {"code": 429}}]})
        assert classify(200, body).verdict is Verdict.ALLOWED


class TestValidationAndServerErrors:
    def test_validation_error_without_data_is_denied(self):
        body = _body({"errors": [{"message": "Unknown argument 'input'"}]})
        result = classify(400, body)
        assert result.verdict is Verdict.DENIED
        assert result.evidence == "errors with null data"
        assert result.status_code == 400

    def test_validation_error_with_data_is_allowed(self):
        body = _body({"data": {"createUser": None}, "errors": [{"message": "Unknown argument 'input'"}]})
        result = classify(400, body)
        assert result.verdict is Verdict.ALLOWED
        assert result.evidence == "HTTP 400"

    def test_validation_error_with_denial_code_is_denied(self):
        body = _body({"errors": [{"message": "x", "extensions": {"code": "UNAUTHENTICATED"}}]})
        assert classify(400, body).verdict is Verdict.DENIED

    @pytest.mark.parametrize("status", [500, 502, 503])
    def test_server_error_with_null_data_is_denied(self, status):
        body = _body({"errors": [{"message": "Internal server error"}], "data": None})
        result = classify(status, body)
        assert result.verdict is Verdict.DENIED
        assert result.evidence == "errors with null data"

    @pytest.mark.parametrize("status", [500, 502, 503])
    def test_server_error_with_data_is_allowed(self, status):
        body = _body({"errors": [{"message": "Internal server error"}], "data": {"createUser": None}})
        assert classify(status, body).verdict is Verdict.ALLOWED

    def test_server_error_without_envelope_is_allowed(self):
        assert classify(502, b"<html>Bad Gateway</html>").verdict is Verdict.ALLOWED

    def test_server_error_with_vocabulary_is_denied(self):
        assert classify(500, b"upstream said: Forbidden").verdict is Verdict.DENIED


class TestRawBodyFallback:
    def test_non_json_body_with_keyword(self):
        result = classify(200, b"<html><h1>Access Denied</h1></html>")
        assert result.verdict is Verdict.DENIED
        assert result.evidence == "body contains 'access denied'"

    def test_non_standard_envelope(self):
        body = _body({"success": False, "reason": "unauthorized"})
        assert classify(200, body).verdict is Verdict.DENIED

    def test_batched_response_is_scanned_as_text(self):
        body = _body([{"errors": [{"message": "forbidden"}]}])
        assert classify(200, body).verdict is Verdict.DENIED

    def test_plain_ok(self):
        assert classify(200, b"OK").verdict is Verdict.ALLOWED

    def test_empty_body(self):
        assert classify(204, b"").verdict is Verdict.ALLOWED


class TestUnreachable:
    def test_transport_error_is_denied_but_distinguishable(self):
        result = ClassificationResult.unreachable(TransportError("connection refused"))
        assert result.verdict is Verdict.DENIED
        assert result.transport_error
        assert result.status_code is None
        assert "connection refused" in result.evidence
