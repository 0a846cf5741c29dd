import pytest

from bsc_mcp.bsc_api.client import (
    BscApiError,
    InvalidParamsError,
    NodeUnreachableError,
    NotFoundError,
    RateLimitedError,
    UnauthorizedError,
)
from bsc_mcp.tools import get_block, get_block_number, get_transaction, get_transaction_receipt

TX_HASH = "0x" + "12" * 32
BLOCK_HASH = "0x" + "34" * 32


class StubClient:
    def __init__(self, *, block=None, tx=None, receipt=None, height=1234):
        self.block = block
        self.tx = tx
        self.receipt = receipt
        self.height = height
        self.calls = []

    async def fetch_block_number(self):
        return self.height

    async def fetch_block_by_number(self, block_tag, *, full_transactions=False):
        self.calls.append(("number", block_tag, full_transactions))
        return self.block

    async def fetch_block_by_hash(self, block_hash, *, full_transactions=False):
        self.calls.append(("hash", block_hash, full_transactions))
        return self.block

    async def fetch_transaction(self, tx_hash):
        self.calls.append(("tx", tx_hash))
        return self.tx

    async def fetch_transaction_receipt(self, tx_hash):
        self.calls.append(("receipt", tx_hash))
        return self.receipt


class RaisingClient:
    def __init__(self, exc):
        self.exc = exc

    async def fetch_block_number(self):
        raise self.exc

    async def fetch_block_by_number(self, block_tag, *, full_transactions=False):
        raise self.exc

    async def fetch_block_by_hash(self, block_hash, *, full_transactions=False):
        raise self.exc

    async def fetch_transaction(self, tx_hash):
        raise self.exc

    async def fetch_transaction_receipt(self, tx_hash):
        raise self.exc


@pytest.mark.asyncio
async def test_get_block_number():
    assert await get_block_number(client=StubClient(height=41_000_000)) == {"blockNumber": 41_000_000}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exc,message",
    [
        (UnauthorizedError("no"), "Unauthorized by RPC endpoint."),
        (RateLimitedError("slow down"), "RPC rate limit exceeded."),
        (NodeUnreachableError("down"), "RPC endpoint unreachable"),
        (BscApiError("boom"), "RPC error: boom"),
    ],
)
async def test_get_block_number_errors(exc, message):
    assert await get_block_number(client=RaisingClient(exc)) == {"error": message}


@pytest.mark.asyncio
async def test_get_block_number_unexpected_error():
    result = await get_block_number(client=RaisingClient(RuntimeError("kaput")))
    assert result == {"error": "Unexpected error while retrieving block number."}


@pytest.mark.asyncio
async def test_get_block_by_number_normalizes():
    client = StubClient(block={"number": "0x10", "hash": BLOCK_HASH, "gasUsed": "0x0", "transactions": []})
    result = await get_block(16, client=client)
    assert result["number"] == 16
    assert result["gasUsed"] == 0
    assert result["hash"] == BLOCK_HASH
    assert client.calls == [("number", "0x10", False)]


@pytest.mark.asyncio
async def test_get_block_by_hash_and_full_transactions():
    client = StubClient(block={"number": "0x1", "transactions": [{"value": "0x1"}]})
    result = await get_block(BLOCK_HASH, full_transactions=True, client=client)
    assert client.calls == [("hash", BLOCK_HASH, True)]
    assert result["transactions"] == [{"value": "1"}]


@pytest.mark.asyncio
async def test_get_block_by_tag():
    client = StubClient(block={"number": "0x2"})
    await get_block("latest", client=client)
    assert client.calls == [("number", "latest", False)]


@pytest.mark.asyncio
async def test_get_block_invalid_identifier():
    client = StubClient()
    assert await get_block("not-a-block", client=client) == {"error": "Invalid block hash or number."}
    assert await get_block(-1, client=client) == {"error": "Invalid block hash or number."}
    assert client.calls == []


@pytest.mark.asyncio
async def test_get_block_not_found():
    assert await get_block(999_999_999, client=StubClient(block=None)) == {"error": "Block not found."}
    result = await get_block("0x1", client=RaisingClient(NotFoundError("header not found")))
    assert result == {"error": "Block not found."}


@pytest.mark.asyncio
async def test_get_block_invalid_params_from_node():
    result = await get_block("0x1", client=RaisingClient(InvalidParamsError("bad tag")))
    assert result == {"error": "Invalid parameters: bad tag"}


@pytest.mark.asyncio
async def test_get_transaction_success():
    client = StubClient(tx={"hash": TX_HASH, "value": "0xde0b6b3a7640000", "blockNumber": "0x10"})
    result = await get_transaction(TX_HASH, client=client)
    assert result["value"] == str(10**18)
    assert result["blockNumber"] == 16
    assert client.calls == [("tx", TX_HASH)]


@pytest.mark.asyncio
async def test_get_transaction_invalid_and_missing():
    client = StubClient(tx=None)
    assert await get_transaction("0x1234", client=client) == {"error": "Invalid transaction hash."}
    assert await get_transaction(TX_HASH, client=client) == {"error": "Transaction not found."}


@pytest.mark.asyncio
async def test_get_transaction_unexpected_error():
    result = await get_transaction(TX_HASH, client=RaisingClient(RuntimeError("kaput")))
    assert result == {"error": "Unexpected error while retrieving transaction."}


@pytest.mark.asyncio
async def test_get_transaction_receipt_success():
    client = StubClient(receipt={"status": "0x1", "gasUsed": "0x5208", "logs": [], "contractAddress": None})
    result = await get_transaction_receipt(TX_HASH, client=client)
    assert result == {"status": 1, "gasUsed": 21000, "logs": [], "contractAddress": None}


@pytest.mark.asyncio
async def test_get_transaction_receipt_pending():
    result = await get_transaction_receipt(TX_HASH, client=StubClient(receipt=None))
    assert result == {"error": "Transaction receipt not found (transaction may be pending or unknown)."}


@pytest.mark.asyncio
async def test_get_transaction_receipt_rate_limited():
    result = await get_transaction_receipt(TX_HASH, client=RaisingClient(RateLimitedError("x")))
    assert result == {"error": "RPC rate limit exceeded."}


@pytest.mark.asyncio
async def test_get_block_oversized_decimal_is_invalid():
    client = StubClient()
    assert await get_block("1" * 5000, client=client) == {"error": "Invalid block hash or number."}
    assert client.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("flag", ["false", "true", 0, 1, None])
async def test_get_block_full_transactions_must_be_bool(flag):
    client = StubClient(block={"number": "0x1"})
    result = await get_block("latest", full_transactions=flag, client=client)
    assert result == {"error": "fullTransactions must be a boolean."}
    assert client.calls == []
