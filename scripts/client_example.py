"""Example client that spawns the stdio server and calls a few tools."""

from __future__ import annotations

import asyncio
import itertools
import json
import os
import sys
from typing import Any, Dict, List, Optional

SAMPLE_BLOCK = int(os.getenv("BSC_SAMPLE_BLOCK", "1000000"))
# Binance hot wallet and BUSD; override via env.
SAMPLE_ADDRESS = os.getenv("BSC_SAMPLE_ADDRESS", "0x8894E0a0c962CB723c1976a4421c95949bE2D4E3")
SAMPLE_TOKEN = os.getenv("BSC_SAMPLE_TOKEN", "0xe9e7CEA3DedcA5984780Bafc599bD69ADd087D56")
PROTOCOL_VERSION = "2025-06-18"


class StdioClient:
    """Line-oriented JSON-RPC client for a server running as a subprocess."""

    def __init__(self, command: List[str]) -> None:
        self.command = command
        self._proc: Optional[asyncio.subprocess.Process] = None
        self._ids = itertools.count(1)

    async def start(self) -> None:
        self._proc = await asyncio.create_subprocess_exec(
            *self.command,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
        )

    async def close(self) -> None:
        if self._proc is None:
            return
        if self._proc.stdin is not None:
            self._proc.stdin.close()
        await self._proc.wait()
        self._proc = None

    async def _send(self, message: Dict[str, Any]) -> None:
        assert self._proc is not None and self._proc.stdin is not None
        self._proc.stdin.write((json.dumps(message) + "\n").encode("utf-8"))
        await self._proc.stdin.drain()

    async def request(self, method: str, params: Optional[Dict[str, Any]] = None) -> Any:
        assert self._proc is not None and self._proc.stdout is not None
        rpc_id = next(self._ids)
        await self._send({"jsonrpc": "2.0", "id": rpc_id, "method": method, "params": params or {}})
        while True:
            line = await self._proc.stdout.readline()
            if not line:
                raise RuntimeError("Server closed the connection")
            response = json.loads(line)
            if response.get("id") != rpc_id:
                continue
            if "error" in response:
                raise RuntimeError(response["error"].get("message"))
            return response.get("result")

    async def initialize(self) -> Dict[str, Any]:
        result = await self.request(
            "initialize",
            {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {"tools": {}},
                "clientInfo": {"name": "bsc-mcp-example-client", "version": "1.0.0"},
            },
        )
        await self._send({"jsonrpc": "2.0", "method": "notifications/initialized"})
        return result

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> str:
        result = await self.request("tools/call", {"name": name, "arguments": arguments or {}})
        return result["content"][0]["text"]


async def main() -> None:
    print("Starting BSC MCP client example...")
    client = StdioClient([sys.executable, "-m", "bsc_mcp"])
    await client.start()
    try:
        await client.initialize()
        print("Connected to BSC MCP server")

        print("\nGetting current block number:")
        print(await client.call_tool("get-block-number"))

        print("\nGetting block details:")
        print(await client.call_tool("get-block", {"blockHashOrNumber": SAMPLE_BLOCK}))

        print(f"\nGetting balance for address {SAMPLE_ADDRESS}:")
        print(await client.call_tool("get-balance", {"address": SAMPLE_ADDRESS}))

        print(f"\nGetting token balance for address {SAMPLE_ADDRESS}:")
        print(
            await client.call_tool(
                "get-token-balance", {"tokenAddress": SAMPLE_TOKEN, "walletAddress": SAMPLE_ADDRESS}
            )
        )
        print("\nBSC MCP client example completed successfully.")
    finally:
        await client.close()


if __name__ == "__main__":
    asyncio.run(main())
