"""
Thin JSON-RPC client for a BSC node.

Read methods forward a single RPC call each. The only write path is the
Four.meme token deployment, which signs locally with the configured key.
Node errors are mapped to internal exceptions that the tool layer turns into
safe, user-facing messages.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_account import Account
from eth_utils import to_bytes, to_checksum_address

from bsc_mcp.bsc_api.contracts import (
    BALANCE_OF_SELECTOR,
    DECIMALS_SELECTOR,
    FOUR_MEME_CONSTRUCTOR_TYPES,
    FOUR_MEME_TOKEN_BYTECODE,
    SYMBOL_SELECTOR,
)
from bsc_mcp.config import BscConfig, default_config

logger = logging.getLogger(__name__)


class BscApiError(Exception):
    """Base exception for BSC RPC errors."""

    def __init__(
        self,
        message: str,
        *,
        code: Optional[int] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code


class InvalidParamsError(BscApiError):
    """Raised when the node rejects call parameters (bad address, hash, tag)."""


class NotFoundError(BscApiError):
    """Raised when a block, transaction or receipt does not exist."""


class ExecutionRevertedError(BscApiError):
    """Raised when a contract call or deployment reverts."""


class InsufficientFundsError(BscApiError):
    """Raised when the signer cannot pay for gas."""


class RateLimitedError(BscApiError):
    """Raised when the RPC endpoint throttles the caller."""


class UnauthorizedError(BscApiError):
    """Raised when the RPC endpoint rejects the request due to missing auth."""


class NodeUnreachableError(BscApiError):
    """Raised when the RPC endpoint cannot be reached."""


class SignerUnavailableError(BscApiError):
    """Raised when a write is attempted without a usable private key."""


class DeploymentTimeoutError(BscApiError):
    """Raised when a deployment receipt does not appear in time."""


@dataclass(slots=True)
class TokenBalance:
    raw: int
    decimals: int
    symbol: str


@dataclass(slots=True)
class DeploymentResult:
    token_address: str
    tx_hash: str
    block_number: Optional[int] = None
    gas_used: Optional[int] = None


def _hex_to_int(value: Any) -> int:
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value, 16)
    raise BscApiError("Unexpected response from RPC endpoint.")


def _encode_call(selector: bytes, types: List[str], args: List[Any]) -> str:
    payload = selector + (encode(types, args) if types else b"")
    return "0x" + payload.hex()


class BscRpcClient:
    """Async client for the small BSC JSON-RPC surface the tools need."""

    def __init__(
        self,
        config: BscConfig | None = None,
        *,
        async_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.config = config or default_config
        self._client: Optional[httpx.AsyncClient] = async_client
        self._owns_client = async_client is None
        self._ids = itertools.count(1)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout)
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _map_error(self, code: Optional[int], status_code: int, message: Optional[str] = None) -> BscApiError:
        text = (message or "").strip()
        lowered = text.lower()

        if code == -32601:
            return BscApiError("RPC method not supported by endpoint.", code=code, status_code=status_code)
        if code == 3 or "revert" in lowered:
            return ExecutionRevertedError(text or "Execution reverted.", code=code, status_code=status_code)
        if "insufficient funds" in lowered:
            return InsufficientFundsError(
                "Insufficient funds for gas.", code=code, status_code=status_code
            )
        if code == -32005 or "limit exceeded" in lowered or "rate limit" in lowered:
            return RateLimitedError("RPC rate limit exceeded.", code=code, status_code=status_code)
        if "header not found" in lowered or "unknown block" in lowered or "not found" in lowered:
            return NotFoundError(text or "Resource not found.", code=code, status_code=status_code)
        if code in {-32600, -32602} or "invalid argument" in lowered or "cannot unmarshal" in lowered:
            return InvalidParamsError(text or "Invalid parameters.", code=code, status_code=status_code)
        if status_code in {401, 403}:
            return UnauthorizedError(
                "Unauthorized by RPC endpoint.", code=code, status_code=status_code
            )
        if status_code == 429:
            return RateLimitedError("RPC rate limit exceeded.", code=code, status_code=status_code)
        return BscApiError(text or "RPC error.", code=code, status_code=status_code)

    def _process_response(self, response: httpx.Response) -> Any:
        if response.status_code in {401, 403}:
            raise UnauthorizedError("Unauthorized by RPC endpoint.", status_code=response.status_code)
        if response.status_code == 429:
            raise RateLimitedError("RPC rate limit exceeded.", status_code=429)

        try:
            data = response.json()
        except ValueError:
            data = None

        if isinstance(data, dict) and isinstance(data.get("error"), dict):
            error = data["error"]
            raw_code = error.get("code")
            code = raw_code if isinstance(raw_code, int) else None
            message = error.get("message") if isinstance(error.get("message"), str) else None
            raise self._map_error(code, response.status_code, message)

        if response.status_code >= 400:
            raise self._map_error(None, response.status_code, f"HTTP {response.status_code}")

        if not isinstance(data, dict) or "result" not in data:
            raise BscApiError("Unexpected response from RPC endpoint.", status_code=response.status_code)

        return data["result"]

    async def _request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        client = await self._get_client()
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }
        try:
            response = await client.post(self.config.rpc_url, json=payload)
        except httpx.RequestError as exc:
            logger.warning("BSC RPC endpoint unreachable for method %s", method)
            raise NodeUnreachableError("RPC endpoint unreachable") from exc
        return self._process_response(response)

    async def fetch_block_number(self) -> int:
        """Return the current block height."""
        return _hex_to_int(await self._request("eth_blockNumber"))

    async def fetch_chain_id(self) -> int:
        return _hex_to_int(await self._request("eth_chainId"))

    async def fetch_block_by_number(self, block_tag: str, *, full_transactions: bool = False) -> Optional[Dict[str, Any]]:
        """Fetch a block by hex quantity or tag (``latest``, ``earliest``...)."""
        return await self._request("eth_getBlockByNumber", [block_tag, full_transactions])

    async def fetch_block_by_hash(self, block_hash: str, *, full_transactions: bool = False) -> Optional[Dict[str, Any]]:
        """Fetch a block by its 32-byte hash."""
        return await self._request("eth_getBlockByHash", [block_hash, full_transactions])

    async def fetch_transaction(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        return await self._request("eth_getTransactionByHash", [tx_hash])

    async def fetch_transaction_receipt(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        return await self._request("eth_getTransactionReceipt", [tx_hash])

    async def fetch_balance(self, address: str, block_tag: str = "latest") -> int:
        """Return the native balance of ``address`` in wei."""
        return _hex_to_int(await self._request("eth_getBalance", [address, block_tag]))

    async def call(self, to: str, data: str, block_tag: str = "latest") -> bytes:
        """Run a read-only contract call and return the raw return data."""
        result = await self._request("eth_call", [{"to": to, "data": data}, block_tag])
        if not isinstance(result, str):
            raise BscApiError("Unexpected response from RPC endpoint.")
        return to_bytes(hexstr=result)

    async def fetch_token_balance(self, token_address: str, wallet_address: str) -> TokenBalance:
        """Read ``balanceOf``, ``decimals`` and ``symbol`` from a BEP-20 contract."""
        token = to_checksum_address(token_address)
        wallet = to_checksum_address(wallet_address)

        raw_balance = await self.call(token, _encode_call(BALANCE_OF_SELECTOR, ["address"], [wallet]))
        raw_decimals = await self.call(token, _encode_call(DECIMALS_SELECTOR, [], []))
        raw_symbol = await self.call(token, _encode_call(SYMBOL_SELECTOR, [], []))

        try:
            (balance,) = decode(["uint256"], raw_balance)
            (decimals,) = decode(["uint256"], raw_decimals)
        except DecodingError as exc:
            raise BscApiError("Address is not a BEP-20 token contract.") from exc
        if decimals > 255:
            raise BscApiError("Token reported invalid decimals.")

        return TokenBalance(raw=balance, decimals=decimals, symbol=self._decode_symbol(raw_symbol))

    @staticmethod
    def _decode_symbol(raw: bytes) -> str:
        # Some older tokens return bytes32 instead of string.
        if len(raw) != 32:
            try:
                (symbol,) = decode(["string"], raw)
                return symbol
            except (DecodingError, ValueError, OverflowError):
                pass
        return raw[:32].rstrip(b"\x00").decode("utf-8", errors="replace")

    async def fetch_transaction_count(self, address: str, block_tag: str = "pending") -> int:
        return _hex_to_int(await self._request("eth_getTransactionCount", [address, block_tag]))

    async def fetch_gas_price(self) -> int:
        return _hex_to_int(await self._request("eth_gasPrice"))

    async def estimate_gas(self, tx: Dict[str, Any]) -> int:
        return _hex_to_int(await self._request("eth_estimateGas", [tx]))

    async def send_raw_transaction(self, raw_tx: bytes) -> str:
        return await self._request("eth_sendRawTransaction", ["0x" + bytes(raw_tx).hex()])

    async def wait_for_receipt(
        self,
        tx_hash: str,
        *,
        timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Poll until the transaction is mined or ``timeout`` elapses."""
        timeout = self.config.receipt_timeout if timeout is None else timeout
        poll_interval = self.config.receipt_poll_interval if poll_interval is None else poll_interval
        deadline = time.monotonic() + timeout
        while True:
            receipt = await self.fetch_transaction_receipt(tx_hash)
            if receipt:
                return receipt
            if time.monotonic() >= deadline:
                raise DeploymentTimeoutError(f"Timed out waiting for receipt of {tx_hash}")
            await asyncio.sleep(poll_interval)

    def _account(self):
        if not self.config.private_key:
            raise SignerUnavailableError(
                "BSC_PRIVATE_KEY environment variable is not set. "
                "Please provide a private key to deploy contracts."
            )
        try:
            return Account.from_key(self.config.private_key)
        except (ValueError, TypeError) as exc:
            raise SignerUnavailableError("Configured private key is invalid.") from exc

    @property
    def signer_address(self) -> Optional[str]:
        try:
            return self._account().address
        except SignerUnavailableError:
            return None

    async def deploy_four_meme_token(
        self,
        *,
        name: str,
        symbol: str,
        decimals: int,
        total_supply: int,
        owner_address: str,
    ) -> DeploymentResult:
        """
        Deploy the Four.meme token contract and wait for it to be mined.

        Args:
            name: Token name.
            symbol: Token symbol.
            decimals: Decimal places (0-18).
            total_supply: Supply in base units (already scaled by decimals).
            owner_address: Recipient of the initial supply.

        Returns:
            DeploymentResult with the contract address and transaction hash.
        """
        account = self._account()
        owner = to_checksum_address(owner_address)
        init_code = to_bytes(hexstr=FOUR_MEME_TOKEN_BYTECODE)
        ctor_args = encode(FOUR_MEME_CONSTRUCTOR_TYPES, [name, symbol, decimals, total_supply, owner])
        data = "0x" + (init_code + ctor_args).hex()

        chain_id = await self.fetch_chain_id()
        nonce = await self.fetch_transaction_count(account.address, "pending")
        gas_price = await self.fetch_gas_price()
        gas = await self.estimate_gas({"from": account.address, "data": data})

        tx = {
            "nonce": nonce,
            "gasPrice": gas_price,
            "gas": gas,
            "value": 0,
            "data": data,
            "chainId": chain_id,
        }
        signed = Account.sign_transaction(tx, account.key)
        tx_hash = await self.send_raw_transaction(signed.raw_transaction)
        logger.info("Submitted token deployment tx=%s symbol=%s", tx_hash, symbol)

        receipt = await self.wait_for_receipt(tx_hash)
        status = receipt.get("status")
        if status is not None and _hex_to_int(status) == 0:
            raise ExecutionRevertedError("Deployment transaction reverted.")
        contract_address = receipt.get("contractAddress")
        if not contract_address:
            raise BscApiError("Failed to get deployment receipt.")

        return DeploymentResult(
            token_address=to_checksum_address(contract_address),
            tx_hash=receipt.get("transactionHash") or tx_hash,
            block_number=_hex_to_int(receipt["blockNumber"]) if receipt.get("blockNumber") else None,
            gas_used=_hex_to_int(receipt["gasUsed"]) if receipt.get("gasUsed") else None,
        )


default_client = BscRpcClient()
