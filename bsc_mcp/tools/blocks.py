"""Block-related tools."""

from __future__ import annotations

import logging
from typing import Any, Dict

from bsc_mcp.bsc_api import (
    BscApiError,
    InvalidParamsError,
    NodeUnreachableError,
    NotFoundError,
    RateLimitedError,
    UnauthorizedError,
    default_client,
)
from bsc_mcp.tools.units import normalize_rpc_object
from bsc_mcp.tools.validators import parse_block_identifier

logger = logging.getLogger(__name__)


async def get_block_number(*, client=default_client) -> Dict[str, Any]:
    """Return the current BSC block height."""
    try:
        height = await client.fetch_block_number()
    except UnauthorizedError:
        return {"error": "Unauthorized by RPC endpoint."}
    except RateLimitedError:
        return {"error": "RPC rate limit exceeded."}
    except NodeUnreachableError:
        return {"error": "RPC endpoint unreachable"}
    except BscApiError as exc:
        return {"error": f"RPC error: {exc}"}
    except Exception:
        logger.exception("Unexpected error fetching block number")
        return {"error": "Unexpected error while retrieving block number."}
    return {"blockNumber": height}


async def get_block(
    block_hash_or_number: Any,
    *,
    full_transactions: bool = False,
    client=default_client,
) -> Dict[str, Any]:
    """
    Fetch a block by hash, number or tag.

    Args:
        block_hash_or_number: 32-byte hash, non-negative integer, decimal or hex
            string, or one of latest/earliest/pending/safe/finalized.
        full_transactions: Include full transaction objects instead of hashes.
        client: BSC RPC client (override for testing).

    Returns:
        The block with hex quantities decoded, or an error dict.
    """
    identifier = parse_block_identifier(block_hash_or_number)
    if identifier is None:
        return {"error": "Invalid block hash or number."}
    kind, value = identifier
    if not isinstance(full_transactions, bool):
        return {"error": "fullTransactions must be a boolean."}

    try:
        if kind == "hash":
            block = await client.fetch_block_by_hash(value, full_transactions=full_transactions)
        else:
            block = await client.fetch_block_by_number(value, full_transactions=full_transactions)
    except InvalidParamsError as exc:
        return {"error": f"Invalid parameters: {exc}"}
    except NotFoundError:
        return {"error": "Block not found."}
    except UnauthorizedError:
        return {"error": "Unauthorized by RPC endpoint."}
    except RateLimitedError:
        return {"error": "RPC rate limit exceeded."}
    except NodeUnreachableError:
        return {"error": "RPC endpoint unreachable"}
    except BscApiError as exc:
        return {"error": f"RPC error: {exc}"}
    except Exception:
        logger.exception("Unexpected error fetching block %s", block_hash_or_number)
        return {"error": "Unexpected error while retrieving block."}

    if block is None:
        return {"error": "Block not found."}
    if not isinstance(block, dict):
        return {"error": "Unexpected response from RPC endpoint."}
    return normalize_rpc_object(block)
