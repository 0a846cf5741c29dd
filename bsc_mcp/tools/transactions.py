"""Transaction-related tools."""

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
from bsc_mcp.tools.validators import is_valid_tx_hash

logger = logging.getLogger(__name__)


async def get_transaction(tx_hash: str, *, client=default_client) -> Dict[str, Any]:
    """Fetch a transaction by hash."""
    if not is_valid_tx_hash(tx_hash):
        return {"error": "Invalid transaction hash."}

    try:
        tx = await client.fetch_transaction(tx_hash.strip())
    except InvalidParamsError as exc:
        return {"error": f"Invalid parameters: {exc}"}
    except NotFoundError:
        return {"error": "Transaction not found."}
    except UnauthorizedError:
        return {"error": "Unauthorized by RPC endpoint."}
    except RateLimitedError:
        return {"error": "RPC rate limit exceeded."}
    except NodeUnreachableError:
        return {"error": "RPC endpoint unreachable"}
    except BscApiError as exc:
        return {"error": f"RPC error: {exc}"}
    except Exception:
        logger.exception("Unexpected error fetching transaction %s", tx_hash)
        return {"error": "Unexpected error while retrieving transaction."}

    if tx is None:
        return {"error": "Transaction not found."}
    if not isinstance(tx, dict):
        return {"error": "Unexpected response from RPC endpoint."}
    return normalize_rpc_object(tx)


async def get_transaction_receipt(tx_hash: str, *, client=default_client) -> Dict[str, Any]:
    """Fetch a transaction receipt by hash; pending transactions have none yet."""
    if not is_valid_tx_hash(tx_hash):
        return {"error": "Invalid transaction hash."}

    try:
        receipt = await client.fetch_transaction_receipt(tx_hash.strip())
    except InvalidParamsError as exc:
        return {"error": f"Invalid parameters: {exc}"}
    except NotFoundError:
        return {"error": "Transaction receipt not found."}
    except UnauthorizedError:
        return {"error": "Unauthorized by RPC endpoint."}
    except RateLimitedError:
        return {"error": "RPC rate limit exceeded."}
    except NodeUnreachableError:
        return {"error": "RPC endpoint unreachable"}
    except BscApiError as exc:
        return {"error": f"RPC error: {exc}"}
    except Exception:
        logger.exception("Unexpected error fetching receipt %s", tx_hash)
        return {"error": "Unexpected error while retrieving transaction receipt."}

    if receipt is None:
        return {"error": "Transaction receipt not found (transaction may be pending or unknown)."}
    if not isinstance(receipt, dict):
        return {"error": "Unexpected response from RPC endpoint."}
    return normalize_rpc_object(receipt)
