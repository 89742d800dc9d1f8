from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from shopagent.core.errors import ShopAgentError
from shopagent.core.logging.context import log_context
from shopagent.core.orchestration.orchestrator import DEFAULT_SESSION_ID, Orchestrator

from .deps import get_orchestrator

router = APIRouter(prefix="/api/agent")
logger = logging.getLogger("shopagent.api.agent")

_QUERY_REQUIRED = "Query is required and must be a string"


class AgentQueryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # validated by hand so a bad query gets the plain {"error": ...} body
    query: Any = None
    session_id: str | None = Field(default=None, alias="sessionId")


def _bad_query(body: AgentQueryRequest) -> JSONResponse | None:
    if not isinstance(body.query, str) or not body.query.strip():
        return JSONResponse(status_code=400, content={"error": _QUERY_REQUIRED})
    return None


@router.post("/query")
async def query(body: AgentQueryRequest, orchestrator: Orchestrator = Depends(get_orchestrator)):
    rejected = _bad_query(body)
    if rejected is not None:
        return rejected
    session_id = body.session_id or DEFAULT_SESSION_ID
    with log_context(session_id=session_id):
        try:
            result = await orchestrator.run(body.query, session_id)
        except ShopAgentError as exc:
            logger.warning("agent_query_failed", extra={"extra_fields": {"code": exc.code, "reason": exc.message}})
            return JSONResponse(status_code=exc.status, content={"error": exc.message})
        except Exception as exc:
            logger.exception("agent_query_failed")
            return JSONResponse(
                status_code=500,
                content={"error": str(exc) or "An error occurred while processing your request"},
            )
    return result.to_wire()


@router.post("/query/stream")
async def query_stream(body: AgentQueryRequest, orchestrator: Orchestrator = Depends(get_orchestrator)):
    rejected = _bad_query(body)
    if rejected is not None:
        return rejected
    session_id = body.session_id or DEFAULT_SESSION_ID

    async def event_generator():
        async for event in orchestrator.stream(body.query, session_id):
            yield event.to_sse()

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )
