"""LLM-facing tool implementations."""

from .blocks import get_block, get_block_number
from .transactions import get_transaction, get_transaction_receipt
from .account import get_balance, get_token_balance
from .tokens import create_four_meme_token
from . import units, validators

__all__ = [
    "get_block_number",
    "get_block",
    "get_transaction",
    "get_transaction_receipt",
    "get_balance",
    "get_token_balance",
    "create_four_meme_token",
    "units",
    "validators",
]
