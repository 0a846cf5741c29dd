import io
import json

import pytest

from bsc_mcp import mcp
from bsc_mcp.stdio import serve


async def run_lines(*lines):
    stdin = io.StringIO("".join(line + "\n" for line in lines))
    stdout = io.StringIO()
    await serve(stdin=stdin, stdout=stdout)
    return [json.loads(line) for line in stdout.getvalue().splitlines()]


@pytest.mark.asyncio
async def test_stdio_session():
    responses = await run_lines(
        json.dumps({"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {"protocolVersion": "2024-11-05"}}),
        json.dumps({"jsonrpc": "2.0", "method": "notifications/initialized"}),
        "",
        json.dumps({"jsonrpc": "2.0", "id": 2, "method": "tools/list"}),
        json.dumps(
            {
                "jsonrpc": "2.0",
                "id": 3,
                "method": "tools/call",
                "params": {"name": "get-balance", "arguments": {"address": "0x123"}},
            }
        ),
    )
    by_id = {resp["id"]: resp for resp in responses}
    # the notification produces no output
    assert len(responses) == 3
    assert by_id[1]["result"]["serverInfo"]["name"] == "BSC Explorer"
    assert len(by_id[2]["result"]["tools"]) == 7
    assert by_id[3]["result"]["isError"] is True
    assert by_id[3]["result"]["content"][0]["text"] == "Error getting balance: Invalid BSC address."


@pytest.mark.asyncio
async def test_stdio_parse_error():
    responses = await run_lines("{not json")
    assert len(responses) == 1
    assert responses[0]["id"] is None
    assert responses[0]["error"]["code"] == mcp.JSONRPC_PARSE_ERROR


@pytest.mark.asyncio
async def test_stdio_internal_error(monkeypatch):
    async def broken(body, *, request_id=None):
        raise RuntimeError("boom")

    monkeypatch.setattr(mcp, "handle_jsonrpc", broken)
    responses = await run_lines(json.dumps({"jsonrpc": "2.0", "id": 9, "method": "ping"}))
    assert responses == [
        {"jsonrpc": "2.0", "id": 9, "error": {"code": -32603, "message": "Internal error: boom"}}
    ]


@pytest.mark.asyncio
async def test_stdio_tool_success(monkeypatch):
    async def fake_block_number():
        return {"blockNumber": 7}

    monkeypatch.setattr(mcp.TOOL_REGISTRY["get-block-number"], "callable", fake_block_number)
    responses = await run_lines(
        json.dumps({"jsonrpc": "2.0", "id": 1, "method": "tools/call", "params": {"name": "get-block-number"}})
    )
    assert responses[0]["result"]["content"][0]["text"] == "Current BSC block number: 7"
