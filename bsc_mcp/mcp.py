"""
Tool registry and JSON-RPC surface shared by the stdio and HTTP transports.

Each tool maps its wire argument names (camelCase, as MCP clients send them)
onto the keyword arguments of an implementation in ``bsc_mcp.tools`` and
knows how to render its result as text. Caller must handle authentication to
whatever process hosts this adapter.
"""

from __future__ import annotations

import inspect
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

from bsc_mcp.tools import (
    create_four_meme_token,
    get_balance,
    get_block,
    get_block_number,
    get_token_balance,
    get_transaction,
    get_transaction_receipt,
)
from bsc_mcp.tools.validators import ADDRESS_REGEX, HASH_REGEX, MAX_TOKEN_DECIMALS

logger = logging.getLogger(__name__)

SERVER_NAME = "BSC Explorer"
SERVER_VERSION = "1.0.0"
SERVER_DESCRIPTION = "MCP server for interacting with Binance Smart Chain"

ADDRESS_PATTERN = ADDRESS_REGEX.pattern
HASH_PATTERN = HASH_REGEX.pattern

JSONRPC_PARSE_ERROR = -32700
JSONRPC_INVALID_REQUEST = -32600
JSONRPC_METHOD_NOT_FOUND = -32601
JSONRPC_INVALID_PARAMS = -32602

NOTIFICATION_METHODS = frozenset({"notifications/initialized", "initialized", "notifications/cancelled"})

ToolCallable = Callable[..., Awaitable[Any]] | Callable[..., Any]


def _address_schema(description: str) -> Dict[str, Any]:
    return {"type": "string", "description": description, "pattern": ADDRESS_PATTERN}


def _tx_hash_schema() -> Dict[str, Any]:
    return {"type": "string", "description": "Transaction hash (0x-prefixed, 32 bytes)", "pattern": HASH_PATTERN}


def _as_json(result: Dict[str, Any]) -> str:
    return json.dumps(result, indent=2)


def _render_token_created(result: Dict[str, Any]) -> str:
    return (
        "Successfully created Four.meme token!\n\n"
        f"Token Name: {result['name']}\n"
        f"Token Symbol: {result['symbol']}\n"
        f"Token Address: {result['tokenAddress']}\n"
        f"Transaction Hash: {result['txHash']}\n\n"
        f"You can view the token on BscScan: {result['explorerUrl']}"
    )


@dataclass(slots=True)
class ToolDefinition:
    name: str
    description: str
    params: Dict[str, str]
    input_schema: Dict[str, Any]
    callable: ToolCallable
    render: Callable[[Dict[str, Any]], str]
    error_prefix: str


TOOL_REGISTRY: Dict[str, ToolDefinition] = {
    "get-block-number": ToolDefinition(
        name="get-block-number",
        description="Return the current BSC block number.",
        params={},
        input_schema={
            "type": "object",
            "properties": {},
            "required": [],
            "additionalProperties": False,
        },
        callable=get_block_number,
        render=lambda result: f"Current BSC block number: {result['blockNumber']}",
        error_prefix="Error getting block number",
    ),
    "get-block": ToolDefinition(
        name="get-block",
        description="Return block details by block hash, number, or tag (latest, earliest, pending, safe, finalized).",
        params={"blockHashOrNumber": "block_hash_or_number", "fullTransactions": "full_transactions"},
        input_schema={
            "type": "object",
            "properties": {
                "blockHashOrNumber": {
                    "oneOf": [
                        {"type": "integer", "minimum": 0, "description": "Block number"},
                        {"type": "string", "description": "Block hash, decimal/hex number, or tag"},
                    ]
                },
                "fullTransactions": {
                    "type": "boolean",
                    "description": "Include full transaction objects (default false)",
                },
            },
            "required": ["blockHashOrNumber"],
            "additionalProperties": False,
        },
        callable=get_block,
        render=_as_json,
        error_prefix="Error getting block",
    ),
    "get-transaction": ToolDefinition(
        name="get-transaction",
        description="Return transaction details by transaction hash.",
        params={"txHash": "tx_hash"},
        input_schema={
            "type": "object",
            "properties": {"txHash": _tx_hash_schema()},
            "required": ["txHash"],
            "additionalProperties": False,
        },
        callable=get_transaction,
        render=_as_json,
        error_prefix="Error getting transaction",
    ),
    "get-transaction-receipt": ToolDefinition(
        name="get-transaction-receipt",
        description="Return the receipt of a mined transaction.",
        params={"txHash": "tx_hash"},
        input_schema={
            "type": "object",
            "properties": {"txHash": _tx_hash_schema()},
            "required": ["txHash"],
            "additionalProperties": False,
        },
        callable=get_transaction_receipt,
        render=_as_json,
        error_prefix="Error getting transaction receipt",
    ),
    "get-balance": ToolDefinition(
        name="get-balance",
        description="Return the native BNB balance of an address.",
        params={"address": "address"},
        input_schema={
            "type": "object",
            "properties": {"address": _address_schema("Wallet address (0x-prefixed)")},
            "required": ["address"],
            "additionalProperties": False,
        },
        callable=get_balance,
        render=lambda result: f"Balance: {result['balance']} {result['symbol']}",
        error_prefix="Error getting balance",
    ),
    "get-token-balance": ToolDefinition(
        name="get-token-balance",
        description="Return a wallet's BEP-20 token balance formatted with the token's decimals and symbol.",
        params={"tokenAddress": "token_address", "walletAddress": "wallet_address"},
        input_schema={
            "type": "object",
            "properties": {
                "tokenAddress": _address_schema("BEP-20 token contract address"),
                "walletAddress": _address_schema("Wallet address"),
            },
            "required": ["tokenAddress", "walletAddress"],
            "additionalProperties": False,
        },
        callable=get_token_balance,
        render=lambda result: f"Token Balance: {result['balance']} {result['symbol']}",
        error_prefix="Error getting token balance",
    ),
    "create-four-meme-token": ToolDefinition(
        name="create-four-meme-token",
        description="Deploy a new Four.meme BEP-20 token and mint the initial supply to the owner (requires BSC_PRIVATE_KEY).",
        params={
            "name": "name",
            "symbol": "symbol",
            "initialSupply": "initial_supply",
            "decimals": "decimals",
            "ownerAddress": "owner_address",
        },
        input_schema={
            "type": "object",
            "properties": {
                "name": {"type": "string", "minLength": 1, "description": "Token name"},
                "symbol": {"type": "string", "minLength": 1, "description": "Token symbol"},
                "initialSupply": {
                    "type": "number",
                    "exclusiveMinimum": 0,
                    "description": "Initial supply in whole tokens",
                },
                "decimals": {
                    "type": "integer",
                    "minimum": 0,
                    "maximum": MAX_TOKEN_DECIMALS,
                    "default": MAX_TOKEN_DECIMALS,
                },
                "ownerAddress": _address_schema("Address receiving the initial supply"),
            },
            "required": ["name", "symbol", "initialSupply", "ownerAddress"],
            "additionalProperties": False,
        },
        callable=create_four_meme_token,
        render=_render_token_created,
        error_prefix="Error creating Four.meme token",
    ),
}


def list_tools() -> List[Dict[str, Any]]:
    """Return tool descriptors in MCP ``tools/list`` shape."""
    return [
        {
            "name": tool.name,
            "description": tool.description,
            "inputSchema": tool.input_schema,
        }
        for tool in TOOL_REGISTRY.values()
    ]


def describe_tools() -> List[Dict[str, Any]]:
    """Return tool descriptors for the HTTP hello handshake."""
    return [
        {
            "name": tool.name,
            "description": tool.description,
            "parameters": tool.input_schema,
        }
        for tool in TOOL_REGISTRY.values()
    ]


async def call_tool(tool_name: str, arguments: Optional[Dict[str, Any]] = None) -> Any:
    """Dispatch to a tool by name, translating wire argument names."""
    arguments = arguments or {}
    tool = TOOL_REGISTRY.get(tool_name)
    if tool is None:
        return {"error": f"Unknown tool: {tool_name}"}

    kwargs: Dict[str, Any] = {}
    for key, value in arguments.items():
        target = tool.params.get(key)
        if target is None:
            return {"error": f"Invalid parameters: unexpected argument '{key}'."}
        kwargs[target] = value
    for required in tool.input_schema.get("required", []):
        if required not in arguments:
            return {"error": f"Invalid parameters: missing argument '{required}'."}

    try:
        result = tool.callable(**kwargs)
        if inspect.isawaitable(result):
            return await result
        return result
    except TypeError:
        return {"error": "Invalid parameters."}
    except Exception:
        logger.exception("Unexpected error calling tool %s", tool_name)
        return {"error": "Unexpected error while calling tool."}


def wrap_tool_result(tool_name: str, result: Any) -> Dict[str, Any]:
    """
    Shape tool outputs into the MCP content array.

    Tool-level errors are returned in-band with the isError flag; the
    structured payload rides along for capable clients.
    """
    tool = TOOL_REGISTRY.get(tool_name)
    if isinstance(result, dict) and "error" in result:
        message = str(result.get("error") or "Error")
        text = f"{tool.error_prefix}: {message}" if tool is not None else message
        return {"content": [{"type": "text", "text": text}], "isError": True}

    if isinstance(result, str):
        return {"content": [{"type": "text", "text": result}]}

    if tool is not None and isinstance(result, dict):
        text = tool.render(result)
    else:
        text = json.dumps(result, indent=2, default=str)
    wrapped: Dict[str, Any] = {"content": [{"type": "text", "text": text}]}
    if isinstance(result, dict):
        wrapped["structuredContent"] = result
    return wrapped


def log_tool_result(tool_name: str, result: Any, request_id: Optional[str] = None) -> bool:
    """Log the outcome of a tool call; returns True on success."""
    if isinstance(result, dict) and result.get("error"):
        logger.warning(
            "tool=%s outcome=error error=%s request_id=%s",
            tool_name,
            result.get("error"),
            request_id,
            extra={"tool": tool_name, "request_id": request_id, "error": result.get("error")},
        )
        return False
    logger.info(
        "tool=%s outcome=success request_id=%s",
        tool_name,
        request_id,
        extra={"tool": tool_name, "request_id": request_id},
    )
    return True


async def invoke_tool(tool_name: str, arguments: Optional[Dict[str, Any]] = None, *, request_id: Optional[str] = None) -> Dict[str, Any]:
    """Call a tool, log the outcome and return the wrapped MCP result."""
    result = await call_tool(tool_name, arguments)
    log_tool_result(tool_name, result, request_id)
    return wrap_tool_result(tool_name, result)


def jsonrpc_success(rpc_id: Any, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": rpc_id, "result": result}


def jsonrpc_error(rpc_id: Any, code: int, message: str) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": rpc_id, "error": {"code": code, "message": message}}


def initialize_result(protocol_version: str) -> Dict[str, Any]:
    return {
        "protocolVersion": protocol_version,
        "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
        "capabilities": {"tools": {"listChanged": False}},
        "instructions": SERVER_DESCRIPTION,
    }


async def handle_jsonrpc(body: Any, *, request_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """
    Handle one decoded JSON-RPC message.

    Supported methods:
      - initialize
      - ping
      - list_tools / tools/list
      - call_tool / tools/call
      - notifications (no response; returns None)
    """
    if not isinstance(body, dict):
        return jsonrpc_error(None, JSONRPC_INVALID_REQUEST, "Invalid request")

    method = body.get("method")
    rpc_id = body.get("id")
    raw_params = body.get("params")
    if raw_params is None:
        params: Dict[str, Any] = {}
    elif isinstance(raw_params, dict):
        params = raw_params
    else:
        return jsonrpc_error(rpc_id, JSONRPC_INVALID_PARAMS, "Invalid params")

    if not method or not isinstance(method, str):
        return jsonrpc_error(rpc_id, JSONRPC_INVALID_REQUEST, "Invalid request")

    if method in NOTIFICATION_METHODS:
        logger.debug("mcp notification method=%s", method, extra={"request_id": request_id})
        return None

    if "id" not in body:
        # A request without an id is a notification and never gets a reply.
        logger.debug("mcp notification method=%s ignored", method, extra={"request_id": request_id})
        return None

    if method == "initialize":
        protocol_version = params.get("protocolVersion")
        if not isinstance(protocol_version, str) or not protocol_version:
            return jsonrpc_error(rpc_id, JSONRPC_INVALID_PARAMS, "Invalid params")
        logger.debug("mcp initialize requested protocol=%s", protocol_version, extra={"request_id": request_id})
        return jsonrpc_success(rpc_id, initialize_result(protocol_version))

    if method == "ping":
        return jsonrpc_success(rpc_id, {})

    if method in ("list_tools", "tools/list"):
        return jsonrpc_success(rpc_id, {"tools": list_tools()})

    if method in ("call_tool", "tools/call"):
        tool_name = params.get("name") or params.get("tool")
        arguments = params.get("arguments")
        if arguments is None:
            arguments = params.get("params") or {}
        if not isinstance(tool_name, str) or not tool_name.strip():
            return jsonrpc_error(rpc_id, JSONRPC_INVALID_PARAMS, "Invalid params")
        if not isinstance(arguments, dict):
            return jsonrpc_error(rpc_id, JSONRPC_INVALID_PARAMS, "Invalid params")
        wrapped = await invoke_tool(tool_name, arguments, request_id=request_id)
        return jsonrpc_success(rpc_id, wrapped)

    return jsonrpc_error(rpc_id, JSONRPC_METHOD_NOT_FOUND, "Method not found")


def tool_name_from_call(body: Any) -> Optional[str]:
    """Extract the tool name from a tools/call request, if any."""
    if not isinstance(body, dict) or body.get("method") not in ("call_tool", "tools/call"):
        return None
    params = body.get("params")
    if not isinstance(params, dict):
        return None
    name = params.get("name") or params.get("tool")
    return name if isinstance(name, str) else None
