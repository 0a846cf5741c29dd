"""Account balance tools (native BNB and BEP-20 tokens)."""

from __future__ import annotations

import logging
from typing import Any, Dict

from eth_utils import to_checksum_address

from bsc_mcp.bsc_api import (
    BscApiError,
    ExecutionRevertedError,
    InvalidParamsError,
    NodeUnreachableError,
    RateLimitedError,
    UnauthorizedError,
    default_client,
)
from bsc_mcp.config import BscConfig, default_config
from bsc_mcp.tools.units import format_ether, format_units
from bsc_mcp.tools.validators import is_valid_bsc_address

logger = logging.getLogger(__name__)


async def get_balance(
    address: str,
    *,
    client=default_client,
    config: BscConfig = default_config,
) -> Dict[str, Any]:
    """
    Native balance lookup.

    Returns:
        Dict with the wei amount, the formatted BNB amount and the symbol, or
        an error dict.
    """
    if not is_valid_bsc_address(address):
        return {"error": "Invalid BSC address."}

    try:
        wei = await client.fetch_balance(address.strip())
    except InvalidParamsError:
        return {"error": "Invalid BSC address."}
    except UnauthorizedError:
        return {"error": "Unauthorized by RPC endpoint."}
    except RateLimitedError:
        return {"error": "RPC rate limit exceeded."}
    except NodeUnreachableError:
        return {"error": "RPC endpoint unreachable"}
    except BscApiError as exc:
        return {"error": f"RPC error: {exc}"}
    except Exception:
        logger.exception("Unexpected error fetching balance for %s", address)
        return {"error": "Unexpected error while retrieving balance."}

    return {
        "address": to_checksum_address(address.strip()),
        "balanceWei": str(wei),
        "balance": format_ether(wei),
        "symbol": config.native_symbol,
    }


async def get_token_balance(
    token_address: str,
    wallet_address: str,
    *,
    client=default_client,
) -> Dict[str, Any]:
    """Return a wallet's BEP-20 balance formatted with the token's decimals and symbol."""
    if not is_valid_bsc_address(token_address):
        return {"error": "Invalid token address."}
    if not is_valid_bsc_address(wallet_address):
        return {"error": "Invalid wallet address."}

    try:
        token_balance = await client.fetch_token_balance(token_address.strip(), wallet_address.strip())
    except InvalidParamsError as exc:
        return {"error": f"Invalid parameters: {exc}"}
    except ExecutionRevertedError:
        return {"error": "Token contract call reverted; address may not be a BEP-20 token."}
    except UnauthorizedError:
        return {"error": "Unauthorized by RPC endpoint."}
    except RateLimitedError:
        return {"error": "RPC rate limit exceeded."}
    except NodeUnreachableError:
        return {"error": "RPC endpoint unreachable"}
    except BscApiError as exc:
        return {"error": str(exc)}
    except Exception:
        logger.exception("Unexpected error fetching token balance for %s on %s", wallet_address, token_address)
        return {"error": "Unexpected error while retrieving token balance."}

    return {
        "tokenAddress": to_checksum_address(token_address.strip()),
        "walletAddress": to_checksum_address(wallet_address.strip()),
        "rawBalance": str(token_balance.raw),
        "decimals": token_balance.decimals,
        "symbol": token_balance.symbol,
        "balance": format_units(token_balance.raw, token_balance.decimals),
    }
