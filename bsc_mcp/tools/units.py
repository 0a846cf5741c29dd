"""Unit conversion and RPC object normalization."""

from __future__ import annotations

from decimal import Decimal, localcontext
from typing import Any, Dict

WEI_DECIMALS = 18
MAX_UINT256 = 2**256 - 1
MAX_UINT256_DIGITS = len(str(MAX_UINT256))

# Hex quantities rendered as JSON integers.
INT_FIELDS = frozenset(
    {
        "number",
        "timestamp",
        "gasLimit",
        "gasUsed",
        "size",
        "blockNumber",
        "transactionIndex",
        "logIndex",
        "nonce",
        "type",
        "status",
        "chainId",
        "v",
        "yParity",
        "cumulativeGasUsed",
        "blobGasUsed",
        "excessBlobGas",
    }
)

# Quantities that can exceed 2**53, rendered as decimal strings.
BIG_FIELDS = frozenset(
    {
        "value",
        "gasPrice",
        "maxFeePerGas",
        "maxPriorityFeePerGas",
        "maxFeePerBlobGas",
        "baseFeePerGas",
        "effectiveGasPrice",
        "blobGasPrice",
        "difficulty",
        "totalDifficulty",
    }
)

NESTED_LIST_FIELDS = ("transactions", "logs")


def format_units(value: int, decimals: int) -> str:
    """
    Render an integer amount of base units as a decimal string.

    Always keeps at least one fractional digit and drops trailing zeros,
    so 0 -> "0.0" and 1500000000000000000 (18 decimals) -> "1.5".
    """
    negative = value < 0
    digits = str(abs(value))
    if decimals > 0:
        digits = digits.rjust(decimals + 1, "0")
        whole, fraction = digits[:-decimals], digits[-decimals:]
    else:
        whole, fraction = digits, ""
    fraction = fraction.rstrip("0") or "0"
    return f"{'-' if negative else ''}{whole}.{fraction}"


def format_ether(value: int) -> str:
    return format_units(value, WEI_DECIMALS)


def parse_units(value: Any, decimals: int) -> int:
    """
    Scale a human amount to base units.

    Raises:
        ValueError: if the value is not numeric, has more fractional digits
            than ``decimals`` allows, or does not fit in a uint256.
    """
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except ArithmeticError as exc:
        raise ValueError("Amount must be a number.") from exc
    if not amount.is_finite():
        raise ValueError("Amount must be a finite number.")
    if amount.is_zero():
        return 0
    # Bound the exponent before scaling so huge or tiny inputs stay cheap.
    if amount.adjusted() + decimals >= MAX_UINT256_DIGITS:
        raise ValueError("Amount exceeds the maximum uint256 value.")
    if amount.adjusted() < -decimals:
        raise ValueError(f"Amount has more than {decimals} decimal places.")
    with localcontext() as ctx:
        # scaleb only moves the exponent; keep every digit of the input.
        ctx.prec = max(100, len(amount.as_tuple().digits))
        scaled = amount.scaleb(decimals)
        if scaled != scaled.to_integral_value():
            raise ValueError(f"Amount has more than {decimals} decimal places.")
        total = int(scaled)
    if total > MAX_UINT256:
        raise ValueError("Amount exceeds the maximum uint256 value.")
    return total


def _decode_quantity(value: Any) -> Any:
    if isinstance(value, str) and value.startswith("0x"):
        try:
            return int(value, 16)
        except ValueError:
            return value
    return value


def normalize_rpc_object(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Decode hex quantity fields of a block, transaction, receipt or log."""
    normalized: Dict[str, Any] = {}
    for key, value in raw.items():
        if key in INT_FIELDS:
            normalized[key] = _decode_quantity(value)
        elif key in BIG_FIELDS:
            decoded = _decode_quantity(value)
            normalized[key] = str(decoded) if isinstance(decoded, int) else decoded
        elif key in NESTED_LIST_FIELDS and isinstance(value, list):
            normalized[key] = [normalize_rpc_object(item) if isinstance(item, dict) else item for item in value]
        else:
            normalized[key] = value
    return normalized
