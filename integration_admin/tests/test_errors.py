"""Error normalization into a single user-facing message."""

from __future__ import annotations

from types import SimpleNamespace

from integration_admin.errors import GatewayError, extract_error


def test_none_is_unknown_error():
    assert extract_error(None) == "Unknown error"


def test_body_message_wins():
    error = SimpleNamespace(body={"message": "Upsert failed: FIELD_INTEGRITY"})
    assert extract_error(error) == "Upsert failed: FIELD_INTEGRITY"


def test_sequence_of_message_entries():
    error = {"body": [{"message": "First problem"}, {"message": "Second problem"}]}
    assert extract_error(error) == "First problem"


def test_fastapi_detail_string_and_list():
    assert extract_error(GatewayError("API error: 400", 400, {"detail": "Duplicate"})) == "Duplicate"
    body = {"detail": [{"loc": ["body", 0], "msg": "Field required", "type": "missing"}]}
    assert extract_error(GatewayError("API error: 422", 422, body)) == "Field required"


def test_exception_message_used_when_body_has_nothing():
    assert extract_error(GatewayError("API error: 502", 502, None)) == "API error: 502"
    assert extract_error(ValueError("bad input")) == "bad input"


def test_unrecognized_shape_is_serialized():
    assert extract_error({"code": 17}) == '{"code": 17}'
