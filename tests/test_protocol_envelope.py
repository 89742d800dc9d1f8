from __future__ import annotations

import pytest

from shopagent.core.errors import ValidationError
from shopagent.core.protocol import (
    ActionType,
    build_error,
    build_request,
    validate_request,
    validate_response,
)
from shopagent.core.protocol.actions import AddToCartRequest


def _raw(action: str, payload, request_id: str = "req-1") -> dict:
    return {"type": "request", "action": action, "payload": payload, "requestId": request_id, "timestamp": 1700000000000}


def test_validate_request_parses_camel_case_payload() -> None:
    request = validate_request(_raw("addToCart", {"productId": 3, "quantity": 2}))

    assert request.action is ActionType.ADD_TO_CART
    assert isinstance(request.payload, AddToCartRequest)
    assert request.payload.product_id == 3
    assert request.payload.quantity == 2
    assert request.request_id == "req-1"


def test_validate_request_rejects_unknown_payload_fields() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate_request(_raw("addToCart", {"productId": 3, "quantity": 2, "color": "red"}))

    assert excinfo.value.code == "VALIDATION_ERROR"
    assert excinfo.value.status == 400


def test_validate_request_rejects_loosely_typed_values() -> None:
    with pytest.raises(ValidationError):
        validate_request(_raw("addToCart", {"productId": 3, "quantity": "2"}))


def test_validate_request_rejects_missing_fields() -> None:
    with pytest.raises(ValidationError):
        validate_request(_raw("getProduct", {}))


def test_void_action_payload_is_normalized_to_empty_object() -> None:
    request = validate_request(_raw("getProducts", {"anything": "goes"}))

    assert request.payload == {}


def test_validate_request_rejects_unknown_action_and_blank_request_id() -> None:
    with pytest.raises(ValidationError):
        validate_request(_raw("launchRocket", {}))
    with pytest.raises(ValidationError):
        validate_request(_raw("getCart", {}, request_id=""))
    with pytest.raises(ValidationError):
        validate_request({"type": "response", "action": "getCart", "payload": {}, "requestId": "x", "timestamp": 1})


def test_build_request_generates_fresh_request_ids() -> None:
    first = build_request(ActionType.GET_CART)
    second = build_request(ActionType.GET_CART)

    assert first.request_id != second.request_id
    assert first.payload == {}
    assert first.to_wire()["type"] == "request"
    assert first.timestamp > 0


def test_request_id_survives_wire_round_trip() -> None:
    request = build_request(ActionType.GET_PRODUCT, {"id": 7}, request_id="abc-123")

    parsed = validate_request(request.to_wire())

    assert parsed.request_id == "abc-123"
    assert parsed.payload.id == 7


def test_error_envelope_omits_action_when_unknown() -> None:
    wire = build_error("nope", "req-9", code="UNSUPPORTED_ACTION").to_wire()

    assert wire["type"] == "error"
    assert wire["requestId"] == "req-9"
    assert wire["error"] == {"message": "nope", "code": "UNSUPPORTED_ACTION"}
    assert "action" not in wire
    assert "payload" not in wire


def test_validate_response_checks_payload_against_response_schema() -> None:
    good = {
        "type": "response",
        "action": "getCart",
        "payload": {"id": 5, "userId": 1, "date": "2024-01-01T00:00:00Z", "products": [{"productId": 1, "quantity": 2}]},
        "requestId": "r",
        "timestamp": 1,
    }
    assert validate_response(good).payload.products[0].quantity == 2

    bad = dict(good, payload={"id": 5, "products": []})
    with pytest.raises(ValidationError):
        validate_response(bad)


def test_envelopes_without_type_are_rejected() -> None:
    with pytest.raises(ValidationError):
        validate_request({"action": "getProducts", "requestId": "r1", "timestamp": 1})

    response = {"action": "getCart", "payload": {"id": 5, "userId": 1, "date": "d", "products": []}, "requestId": "r", "timestamp": 1}
    with pytest.raises(ValidationError):
        validate_response(response)
