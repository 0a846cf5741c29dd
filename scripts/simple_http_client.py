"""Simple HTTP client for the BSC MCP HTTP server (no MCP SDK required)."""

from __future__ import annotations

import asyncio
import os
from typing import Any, Dict, Optional

import httpx

BASE_URL = os.getenv("BSC_MCP_URL", "http://localhost:3000")
# Binance hot wallet; override via env.
SAMPLE_ADDRESS = os.getenv("BSC_SAMPLE_ADDRESS", "0x8894e0a0c962cb723c1976a4421c95949be2d4e3")
# Opt-in to token deployment (spends gas from the server's key).
RUN_DEPLOY = os.getenv("RUN_DEPLOY_DEMO", "false").lower() in {"1", "true", "yes"}
DEPLOY_OWNER = os.getenv("BSC_DEPLOY_OWNER", "")


class SimpleHttpClient:
    """Thin wrapper over the /mcp/hello and /mcp/tools/:toolName routes."""

    def __init__(self, base_url: str = BASE_URL, *, async_client: Optional[httpx.AsyncClient] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = async_client or httpx.AsyncClient(base_url=self.base_url, timeout=30.0)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def send_hello(self) -> Dict[str, Any]:
        """Fetch server info and the tool list."""
        response = await self._client.post("/mcp/hello", json={})
        return response.json()

    async def call_tool(self, tool_name: str, args: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        response = await self._client.post(f"/mcp/tools/{tool_name}", json=args or {})
        return response.json()

    async def get_block_number(self) -> Dict[str, Any]:
        return await self.call_tool("get-block-number")

    async def get_block(self, block_hash_or_number: str | int) -> Dict[str, Any]:
        return await self.call_tool("get-block", {"blockHashOrNumber": block_hash_or_number})

    async def get_transaction(self, tx_hash: str) -> Dict[str, Any]:
        return await self.call_tool("get-transaction", {"txHash": tx_hash})

    async def get_transaction_receipt(self, tx_hash: str) -> Dict[str, Any]:
        return await self.call_tool("get-transaction-receipt", {"txHash": tx_hash})

    async def get_balance(self, address: str) -> Dict[str, Any]:
        return await self.call_tool("get-balance", {"address": address})

    async def get_token_balance(self, token_address: str, wallet_address: str) -> Dict[str, Any]:
        return await self.call_tool(
            "get-token-balance", {"tokenAddress": token_address, "walletAddress": wallet_address}
        )

    async def create_four_meme_token(
        self,
        name: str,
        symbol: str,
        initial_supply: float,
        decimals: int,
        owner_address: str,
    ) -> Dict[str, Any]:
        return await self.call_tool(
            "create-four-meme-token",
            {
                "name": name,
                "symbol": symbol,
                "initialSupply": initial_supply,
                "decimals": decimals,
                "ownerAddress": owner_address,
            },
        )


async def main() -> None:
    client = SimpleHttpClient(BASE_URL)
    try:
        print("Server info:", await client.send_hello())
        print("Block number:", await client.get_block_number())
        print(f"Balance for {SAMPLE_ADDRESS}:", await client.get_balance(SAMPLE_ADDRESS))
        if RUN_DEPLOY and DEPLOY_OWNER:
            print(
                "Token creation:",
                await client.create_four_meme_token("Four Pepe", "4PEPE", 420690000000, 18, DEPLOY_OWNER),
            )
    finally:
        await client.aclose()


if __name__ == "__main__":
    asyncio.run(main())
