from .actions import CART_RESULT_ACTIONS, DISPATCH_TABLE, VOID_PAYLOAD_ACTIONS, ActionSpec, ActionType, is_void
from .envelope import (
    Envelope,
    ErrorBody,
    ErrorEnvelope,
    MessageType,
    RequestEnvelope,
    ResponseEnvelope,
    build_error,
    build_request,
    build_response,
    payload_to_wire,
    validate_request,
    validate_response,
)

__all__ = [
    "ActionSpec",
    "ActionType",
    "CART_RESULT_ACTIONS",
    "DISPATCH_TABLE",
    "VOID_PAYLOAD_ACTIONS",
    "Envelope",
    "ErrorBody",
    "ErrorEnvelope",
    "MessageType",
    "RequestEnvelope",
    "ResponseEnvelope",
    "build_error",
    "build_request",
    "build_response",
    "is_void",
    "payload_to_wire",
    "validate_request",
    "validate_response",
]
