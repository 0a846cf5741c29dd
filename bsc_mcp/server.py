"""FastAPI application exposing the BSC MCP tools over HTTP and SSE."""

from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response, StreamingResponse

from bsc_mcp import mcp
from bsc_mcp.bsc_api import default_client
from bsc_mcp.config import default_config
from bsc_mcp.logging_config import configure_logging
from bsc_mcp.metrics import default_metrics
from bsc_mcp.rate_limiter import PerKeyRateLimiter

logger = logging.getLogger(__name__)

rate_limiter = PerKeyRateLimiter(
    rate_per_sec=default_config.rate_limit_qps,
    per_tool=default_config.per_tool_rate_limits,
)
HEALTH_STATUS = {"status": "ok"}
ROOT_MESSAGE = "BSC MCP HTTP/SSE Server is running"
SSE_KEEPALIVE_SECONDS = 15.0
SSE_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive"}


@asynccontextmanager
async def lifespan(_app: FastAPI):
    yield
    await default_client.aclose()


app = FastAPI(
    title="BSC MCP Server",
    description=mcp.SERVER_DESCRIPTION,
    version=mcp.SERVER_VERSION,
    lifespan=lifespan,
)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])


@app.middleware("http")
async def add_request_context(request: Request, call_next):
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    start = time.time()
    default_metrics.incr_request()
    response = await call_next(request)
    duration_ms = (time.time() - start) * 1000
    default_metrics.record_duration(request_id, duration_ms)
    response.headers["X-Request-ID"] = request_id
    return response


async def _enforce_rate_limit(tool_name: str) -> bool:
    allowed = await rate_limiter.allow(tool_name)
    if not allowed:
        logger.warning("tool=%s outcome=rate_limited", tool_name, extra={"tool": tool_name})
        default_metrics.incr_rate_limited()
    return allowed


async def _run_tool(tool_name: str, arguments: Dict[str, Any], request_id: Optional[str]) -> Dict[str, Any]:
    start = time.time()
    result = await mcp.call_tool(tool_name, arguments)
    success = mcp.log_tool_result(tool_name, result, request_id)
    default_metrics.record_tool(tool_name, success=success, duration_ms=(time.time() - start) * 1000)
    return mcp.wrap_tool_result(tool_name, result)


@app.get("/")
async def root() -> PlainTextResponse:
    return PlainTextResponse(ROOT_MESSAGE)


@app.get("/health")
async def health() -> JSONResponse:
    """Lightweight health endpoint for monitoring."""
    return JSONResponse(content=HEALTH_STATUS)


@app.get("/metrics")
async def metrics() -> JSONResponse:
    """Return in-process metrics snapshot."""
    return JSONResponse(content=default_metrics.snapshot())


@app.post("/mcp/hello")
async def mcp_hello() -> JSONResponse:
    """Return server info and the available tools."""
    try:
        return JSONResponse(
            content={
                "version": mcp.SERVER_VERSION,
                "name": mcp.SERVER_NAME,
                "description": mcp.SERVER_DESCRIPTION,
                "tools": mcp.describe_tools(),
            }
        )
    except Exception as exc:
        logger.exception("Error processing hello")
        return JSONResponse(status_code=500, content={"error": f"Server error: {exc}"})


@app.post("/mcp/tools/{tool_name}")
async def mcp_tool_call(tool_name: str, request: Request) -> JSONResponse:
    """Call a tool with the JSON request body as its arguments."""
    request_id = getattr(request.state, "request_id", None)
    if tool_name not in mcp.TOOL_REGISTRY:
        return JSONResponse(status_code=404, content={"error": f"Tool '{tool_name}' not found"})

    raw = await request.body()
    if raw.strip():
        try:
            arguments = json.loads(raw)
        except ValueError:
            return JSONResponse(status_code=400, content={"error": "Invalid JSON body"})
    else:
        arguments = {}
    if not isinstance(arguments, dict):
        return JSONResponse(status_code=400, content={"error": "Tool arguments must be a JSON object"})

    if not await _enforce_rate_limit(tool_name):
        return JSONResponse(status_code=429, content={"error": "Rate limit exceeded"})

    try:
        result = await _run_tool(tool_name, arguments, request_id)
    except Exception as exc:
        logger.exception("Error calling tool %s", tool_name, extra={"tool": tool_name, "request_id": request_id})
        return JSONResponse(status_code=500, content={"error": f"Server error: {exc}"})
    return JSONResponse(content=result)


def _sse_frame(data: Dict[str, Any]) -> str:
    return f"data: {json.dumps(data)}\n\n"


async def sse_events(request: Request, keepalive: float = SSE_KEEPALIVE_SECONDS) -> AsyncIterator[str]:
    """Announce the connection, then keep it open until the client leaves."""
    yield _sse_frame({"type": "connected"})
    try:
        while not await request.is_disconnected():
            await asyncio.sleep(keepalive)
            yield ": keepalive\n\n"
    finally:
        logger.info("Client disconnected from SSE")


@app.get("/mcp/sse")
async def mcp_sse(request: Request) -> StreamingResponse:
    return StreamingResponse(sse_events(request), media_type="text/event-stream", headers=SSE_HEADERS)


@app.post("/mcp")
async def mcp_gateway(request: Request) -> Response:
    """Minimal JSON-RPC gateway for MCP clients speaking plain HTTP."""
    request_id = getattr(request.state, "request_id", None)
    try:
        body = await request.json()
    except Exception:
        payload = mcp.jsonrpc_error(None, mcp.JSONRPC_PARSE_ERROR, "Parse error")
        return JSONResponse(status_code=400, content=payload)

    tool_name = mcp.tool_name_from_call(body)
    if tool_name not in mcp.TOOL_REGISTRY:
        # Only registered tools are throttled and counted.
        tool_name = None
    if tool_name and not await _enforce_rate_limit(tool_name):
        rpc_id = body.get("id") if isinstance(body, dict) else None
        return JSONResponse(
            status_code=429,
            content=mcp.jsonrpc_error(rpc_id, 429, "Rate limit exceeded"),
        )

    start = time.time()
    payload = await mcp.handle_jsonrpc(body, request_id=request_id)
    if tool_name and payload is not None:
        result = payload.get("result")
        success = isinstance(result, dict) and not result.get("isError")
        default_metrics.record_tool(tool_name, success=success, duration_ms=(time.time() - start) * 1000)
    if payload is None:
        # Notifications carry no JSON-RPC response body.
        return Response(status_code=204)
    return JSONResponse(content=payload)


def main() -> None:
    """Run the HTTP/SSE server with uvicorn."""
    configure_logging(default_config)
    host, port = default_config.host, default_config.port
    logger.info("BSC MCP HTTP/SSE server is running on port %s", port)
    logger.info("- Root endpoint: http://localhost:%s/", port)
    logger.info("- SSE endpoint: http://localhost:%s/mcp/sse", port)
    logger.info("- Hello endpoint: http://localhost:%s/mcp/hello", port)
    logger.info("- Tool calls: http://localhost:%s/mcp/tools/:toolName", port)
    uvicorn.run(app, host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
