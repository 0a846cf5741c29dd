"""Shared validation helpers for BSC MCP tools."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Tuple

from eth_utils import is_address

# BSC addresses are 20-byte hex strings with a 0x prefix (EIP-55 checksum optional).
ADDRESS_REGEX = re.compile(r"^0x[a-fA-F0-9]{40}$")
HASH_REGEX = re.compile(r"^0x[a-fA-F0-9]{64}$")
HEX_QUANTITY_REGEX = re.compile(r"^0x[a-fA-F0-9]{1,63}$")
# At most uint256 width.
DECIMAL_REGEX = re.compile(r"^\d{1,78}$")

BLOCK_TAGS = frozenset({"latest", "earliest", "pending", "safe", "finalized"})
MAX_TOKEN_DECIMALS = 18


def is_valid_bsc_address(address: Optional[str]) -> bool:
    """Format check plus EIP-55 checksum when the address is mixed-case."""
    if not address or not isinstance(address, str):
        return False
    candidate = address.strip()
    if not ADDRESS_REGEX.fullmatch(candidate):
        return False
    return is_address(candidate)


def is_valid_tx_hash(tx_hash: Optional[str]) -> bool:
    if not tx_hash or not isinstance(tx_hash, str):
        return False
    return bool(HASH_REGEX.fullmatch(tx_hash.strip()))


def parse_block_identifier(value: Any) -> Optional[Tuple[str, str]]:
    """
    Classify a block hash, number or tag.

    Returns:
        ("hash", "0x..") for a 32-byte hash, ("number", tag) where tag is a hex
        quantity or a named tag, or None when the value is not usable.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return ("number", hex(value)) if value >= 0 else None
    if isinstance(value, float):
        if value.is_integer() and value >= 0:
            return ("number", hex(int(value)))
        return None
    if not isinstance(value, str):
        return None

    candidate = value.strip()
    if candidate.lower() in BLOCK_TAGS:
        return ("number", candidate.lower())
    if HASH_REGEX.fullmatch(candidate):
        return ("hash", candidate.lower())
    if DECIMAL_REGEX.fullmatch(candidate):
        return ("number", hex(int(candidate)))
    if HEX_QUANTITY_REGEX.fullmatch(candidate):
        return ("number", hex(int(candidate, 16)))
    return None


def parse_positive_number(value: Any) -> Optional[Decimal]:
    """Parse a strictly positive, finite number from an int, float or numeric string."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        parsed = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not parsed.is_finite() or parsed <= 0:
        return None
    return parsed


def parse_token_decimals(value: Any, *, default: int = MAX_TOKEN_DECIMALS) -> Optional[int]:
    """Accept integers (or integral floats) in 0..18; None means the default."""
    if value is None:
        return default
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if not isinstance(value, int):
        return None
    if 0 <= value <= MAX_TOKEN_DECIMALS:
        return value
    return None
