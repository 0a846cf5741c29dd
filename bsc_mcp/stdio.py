"""Newline-delimited JSON-RPC transport over stdin/stdout."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any, Dict, Optional, Set, TextIO

from bsc_mcp import mcp
from bsc_mcp.bsc_api import default_client
from bsc_mcp.config import default_config
from bsc_mcp.logging_config import configure_logging

logger = logging.getLogger(__name__)


def _write(stream: TextIO, payload: Dict[str, Any]) -> None:
    stream.write(json.dumps(payload, ensure_ascii=True) + "\n")
    stream.flush()


async def _handle_line(line: str, stdout: TextIO) -> None:
    try:
        request = json.loads(line)
    except json.JSONDecodeError as exc:
        _write(stdout, mcp.jsonrpc_error(None, mcp.JSONRPC_PARSE_ERROR, f"Parse error: {exc}"))
        return

    try:
        response: Optional[Dict[str, Any]] = await mcp.handle_jsonrpc(request)
    except Exception as exc:
        logger.exception("Error handling stdio request")
        rpc_id = request.get("id") if isinstance(request, dict) else None
        response = mcp.jsonrpc_error(rpc_id, -32603, f"Internal error: {exc}")
    if response is not None:
        _write(stdout, response)


async def serve(stdin: TextIO = sys.stdin, stdout: TextIO = sys.stdout) -> None:
    """
    Read requests until EOF and answer each on its own line.

    Requests run concurrently so a slow deployment does not block reads; the
    loop waits for outstanding requests before returning.
    """
    loop = asyncio.get_running_loop()
    pending: Set[asyncio.Task] = set()
    while True:
        line = await loop.run_in_executor(None, stdin.readline)
        if not line:
            break
        line = line.strip()
        if not line:
            continue
        task = asyncio.create_task(_handle_line(line, stdout))
        pending.add(task)
        task.add_done_callback(pending.discard)
    if pending:
        await asyncio.gather(*pending)


async def run() -> None:
    logger.info("Starting BSC MCP server...")
    if not default_config.has_signer:
        logger.info("BSC_PRIVATE_KEY not set; create-four-meme-token will be unavailable")
    try:
        logger.info("BSC MCP server is running")
        await serve()
    finally:
        await default_client.aclose()


def main() -> int:
    configure_logging(default_config)
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass
    except Exception:
        logger.exception("Error starting BSC MCP server")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
