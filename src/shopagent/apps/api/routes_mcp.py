from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from shopagent.core.errors import ValidationError
from shopagent.core.gateway.gateway import ActionGateway
from shopagent.core.protocol import validate_request

from .deps import get_gateway

router = APIRouter(prefix="/api")


@router.post("/mcp")
async def handle_action(raw: Any = Body(default=None), gateway: ActionGateway = Depends(get_gateway)):
    try:
        request = validate_request(raw)
    except ValidationError as exc:
        return JSONResponse(status_code=400, content={"error": {"message": exc.message, "code": exc.code}})
    reply = await gateway.handle(request)
    return reply.to_wire()
