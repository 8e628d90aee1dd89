from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import Body, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from mantle_context.config import get_settings
from mantle_context.errors import (
    DerivationError,
    InvocationTimeoutError,
    UnknownToolError,
    UpstreamHTTPError,
    UpstreamShapeError,
)
from mantle_context.http import HttpClient
from mantle_context.models import TextContent, ToolInfo, ToolResult
from mantle_context.services.aggregator import Aggregator
from mantle_context.tools import build_registry, invoke_tool
from mantle_context.utils.logging import setup_logging

app = FastAPI(title="Mantle On-chain Context", version="1.0.0")

logger = logging.getLogger(__name__)


def _get_aggregator() -> Aggregator:
    return app.state.aggregator


@app.on_event("startup")
async def startup_event() -> None:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)
    app.state.http = HttpClient()
    app.state.aggregator = Aggregator(app.state.http)
    app.state.registry = build_registry(settings)
    logger.info(f"✅ On-chain context ready – network: {settings.NETWORK}, tools: {len(app.state.registry)}")


@app.on_event("shutdown")
async def shutdown_event() -> None:
    if getattr(app.state, "http", None):
        await app.state.http.aclose()


def _error(status: int, kind: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": kind, "detail": message})


@app.exception_handler(UnknownToolError)
async def _unknown_tool(request: Request, exc: UnknownToolError):
    return _error(404, "unknown_tool", str(exc))


@app.exception_handler(ValidationError)
async def _bad_arguments(request: Request, exc: ValidationError):
    return _error(422, "invalid_arguments", str(exc))


@app.exception_handler(UpstreamHTTPError)
async def _upstream_http(request: Request, exc: UpstreamHTTPError):
    return _error(502, "upstream_http_error", str(exc))


@app.exception_handler(UpstreamShapeError)
async def _upstream_shape(request: Request, exc: UpstreamShapeError):
    return _error(502, "upstream_shape_error", str(exc))


@app.exception_handler(DerivationError)
async def _derivation(request: Request, exc: DerivationError):
    return _error(502, "derivation_error", str(exc))


@app.exception_handler(InvocationTimeoutError)
async def _deadline(request: Request, exc: InvocationTimeoutError):
    return _error(504, "deadline_exceeded", str(exc))


@app.get("/health")
async def health():
    return {"status": "ok", "network": get_settings().NETWORK}


@app.get("/api/tools", response_model=List[ToolInfo])
async def list_tools():
    return [
        ToolInfo(name=t.name, description=t.description, input_schema=t.input_schema())
        for t in app.state.registry.values()
    ]


@app.post("/api/tools/{name}", response_model=ToolResult)
async def call_tool(name: str, arguments: Optional[Dict[str, Any]] = Body(default=None)):
    text = await invoke_tool(name, arguments, _get_aggregator(), app.state.registry)
    return ToolResult(tool=name, content=[TextContent(text=text)])
