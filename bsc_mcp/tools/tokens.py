"""Token deployment tool."""

from __future__ import annotations

import logging
from typing import Any, Dict

from bsc_mcp.bsc_api import (
    BscApiError,
    DeploymentTimeoutError,
    ExecutionRevertedError,
    InsufficientFundsError,
    NodeUnreachableError,
    RateLimitedError,
    SignerUnavailableError,
    UnauthorizedError,
    default_client,
)
from bsc_mcp.config import BscConfig, default_config
from bsc_mcp.tools.units import parse_units
from bsc_mcp.tools.validators import (
    ADDRESS_REGEX,
    MAX_TOKEN_DECIMALS,
    parse_positive_number,
    parse_token_decimals,
)

logger = logging.getLogger(__name__)


async def create_four_meme_token(
    name: str,
    symbol: str,
    initial_supply: Any,
    owner_address: str,
    *,
    decimals: Any = MAX_TOKEN_DECIMALS,
    client=default_client,
    config: BscConfig = default_config,
) -> Dict[str, Any]:
    """
    Deploy a Four.meme BEP-20 token and mint the initial supply to the owner.

    Args:
        name: Token name (non-empty).
        symbol: Token symbol (non-empty).
        initial_supply: Positive human-readable supply, scaled by ``decimals``.
        owner_address: 0x-prefixed address that receives the supply.
        decimals: Integer decimal places, 0-18 (default 18).
        client: BSC RPC client (override for testing).
        config: Configuration providing the signing key and explorer URL.

    Returns:
        Dict with the token address, transaction hash and explorer link, or an
        error dict.
    """
    if not isinstance(name, str) or not name.strip():
        return {"error": "Token name is required."}
    if not isinstance(symbol, str) or not symbol.strip():
        return {"error": "Token symbol is required."}
    supply = parse_positive_number(initial_supply)
    if supply is None:
        return {"error": "Initial supply must be positive."}
    parsed_decimals = parse_token_decimals(decimals)
    if parsed_decimals is None:
        return {"error": f"Decimals must be an integer between 0 and {MAX_TOKEN_DECIMALS}."}
    if not isinstance(owner_address, str) or not ADDRESS_REGEX.fullmatch(owner_address.strip()):
        return {"error": "Invalid BSC address format."}
    try:
        total_supply = parse_units(supply, parsed_decimals)
    except (ValueError, ArithmeticError) as exc:
        return {"error": f"Invalid initial supply: {exc}"}

    if not config.has_signer:
        return {
            "error": "BSC_PRIVATE_KEY environment variable is not set. "
            "Please provide a private key to deploy contracts."
        }

    try:
        result = await client.deploy_four_meme_token(
            name=name,
            symbol=symbol,
            decimals=parsed_decimals,
            total_supply=total_supply,
            owner_address=owner_address.strip(),
        )
    except SignerUnavailableError as exc:
        return {"error": str(exc)}
    except InsufficientFundsError:
        return {"error": "Failed to deploy Four.meme token: insufficient funds for gas."}
    except ExecutionRevertedError as exc:
        return {"error": f"Failed to deploy Four.meme token: {exc}"}
    except DeploymentTimeoutError as exc:
        return {"error": f"Failed to deploy Four.meme token: {exc}"}
    except UnauthorizedError:
        return {"error": "Unauthorized by RPC endpoint."}
    except RateLimitedError:
        return {"error": "RPC rate limit exceeded."}
    except NodeUnreachableError:
        return {"error": "RPC endpoint unreachable"}
    except BscApiError as exc:
        return {"error": f"Failed to deploy Four.meme token: {exc}"}
    except Exception:
        logger.exception("Unexpected error deploying token %s", symbol)
        return {"error": "Unexpected error while deploying token."}

    explorer = config.explorer_url.rstrip("/")
    return {
        "name": name,
        "symbol": symbol,
        "decimals": parsed_decimals,
        "totalSupply": str(total_supply),
        "ownerAddress": owner_address.strip(),
        "tokenAddress": result.token_address,
        "txHash": result.tx_hash,
        "explorerUrl": f"{explorer}/token/{result.token_address}",
    }
