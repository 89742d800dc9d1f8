"""Request/response/error envelopes exchanged at the action gateway boundary.

Every envelope carries a ``requestId`` that is generated once per logical call
and echoed unchanged on the matching response or error, plus a millisecond
``timestamp`` stamped at construction time. Payloads are validated against the
schemas registered for the envelope's action in the dispatch table.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from shopagent.core.catalog.schemas import now_ms
from shopagent.core.errors import ValidationError

from .actions import DISPATCH_TABLE, ActionType, is_void


class MessageType(str, Enum):
    REQUEST = "request"
    RESPONSE = "response"
    ERROR = "error"


class _Envelope(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    request_id: str = Field(min_length=1)
    timestamp: int

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=False)


class ErrorBody(BaseModel):
    model_config = ConfigDict(extra="forbid")

    message: str
    code: str | None = None


class RequestEnvelope(_Envelope):
    type: Literal["request"]
    action: ActionType
    payload: Any = None


class ResponseEnvelope(_Envelope):
    type: Literal["response"]
    action: ActionType
    payload: Any = None


class ErrorEnvelope(_Envelope):
    type: Literal["error"]
    action: ActionType | None = None
    error: ErrorBody

    def to_wire(self) -> dict[str, Any]:
        wire = super().to_wire()
        if wire.get("action") is None:
            wire.pop("action", None)
        return wire


Envelope = Union[RequestEnvelope, ResponseEnvelope, ErrorEnvelope]


def _describe(exc: PydanticValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "<root>"
        parts.append(f"{location}: {error.get('msg', 'invalid')}")
    return "; ".join(parts) or "invalid message"


def payload_to_wire(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, list):
        return [payload_to_wire(item) for item in value]
    return value


def validate_request(raw: Any) -> RequestEnvelope:
    try:
        request = RequestEnvelope.model_validate(raw)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid request envelope: {_describe(exc)}") from exc

    spec = DISPATCH_TABLE[request.action]
    if spec.request is None:
        request.payload = {}
        return request
    try:
        request.payload = spec.request.validate_python(request.payload)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid payload for {request.action.value}: {_describe(exc)}") from exc
    return request


def validate_response(raw: Any) -> ResponseEnvelope:
    try:
        response = ResponseEnvelope.model_validate(raw)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid response envelope: {_describe(exc)}") from exc

    spec = DISPATCH_TABLE[response.action]
    try:
        response.payload = spec.response.validate_python(response.payload)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid response payload for {response.action.value}: {_describe(exc)}") from exc
    return response


def build_request(action: ActionType, payload: Any = None, request_id: str | None = None) -> RequestEnvelope:
    if payload is None and is_void(action):
        payload = {}
    return RequestEnvelope(
        type=MessageType.REQUEST.value,
        action=action,
        payload=payload_to_wire(payload),
        request_id=request_id or str(uuid4()),
        timestamp=now_ms(),
    )


def build_response(action: ActionType, payload: Any, request_id: str) -> ResponseEnvelope:
    return ResponseEnvelope(
        type=MessageType.RESPONSE.value,
        action=action,
        payload=payload_to_wire(payload),
        request_id=request_id,
        timestamp=now_ms(),
    )


def build_error(message: str, request_id: str, code: str | None = None, action: ActionType | None = None) -> ErrorEnvelope:
    return ErrorEnvelope(
        type=MessageType.ERROR.value,
        action=action,
        error=ErrorBody(message=message, code=code),
        request_id=request_id,
        timestamp=now_ms(),
    )
