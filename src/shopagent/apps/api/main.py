from __future__ import annotations

from uuid import uuid4

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse

from shopagent.core.catalog.schemas import utc_now_iso
from shopagent.core.logging import configure_logging
from shopagent.core.logging.context import log_context
from shopagent.core.orchestration.orchestrator import Orchestrator

from .deps import get_catalog_client, get_llm, get_orchestrator, get_settings
from .routes_agent import router as agent_router
from .routes_mcp import router as mcp_router

app = FastAPI(title="ShopAgent API")
configure_logging(get_settings())
app.include_router(mcp_router)
app.include_router(agent_router)


@app.middleware("http")
async def request_context_middleware(request, call_next):
    correlation_id = request.headers.get("X-Correlation-ID") or str(uuid4())
    with log_context(correlation_id=correlation_id):
        response = await call_next(request)
    response.headers["X-Correlation-ID"] = correlation_id
    return response


@app.on_event("startup")
async def startup() -> None:
    await get_orchestrator().initialize()


@app.on_event("shutdown")
async def shutdown() -> None:
    await get_catalog_client().aclose()
    await get_llm().aclose()


@app.get("/api/health")
def api_health() -> dict[str, str]:
    return {"status": "ok", "timestamp": utc_now_iso()}


@app.get("/healthz")
def healthz() -> dict[str, bool]:
    return {"ok": True}


@app.get("/healthz/ready")
def healthz_ready(orchestrator: Orchestrator = Depends(get_orchestrator)):
    body = {
        "ready": orchestrator.ready,
        "capabilitiesLoaded": orchestrator.capabilities_loaded,
        "llmEnabled": orchestrator.llm.enabled,
    }
    return JSONResponse(status_code=200 if orchestrator.ready else 503, content=body)


def run() -> None:
    settings = get_settings()
    uvicorn.run("shopagent.apps.api.main:app", host=settings.host, port=settings.port)
