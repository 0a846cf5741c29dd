import json

import httpx
import pytest
from eth_abi import encode
from eth_account import Account
from eth_utils import to_checksum_address

from bsc_mcp.bsc_api.client import (
    BscApiError,
    BscRpcClient,
    DeploymentTimeoutError,
    ExecutionRevertedError,
    SignerUnavailableError,
)
from bsc_mcp.bsc_api.contracts import (
    BALANCE_OF_SELECTOR,
    DECIMALS_SELECTOR,
    FOUR_MEME_CONSTRUCTOR_TYPES,
    SYMBOL_SELECTOR,
)
from bsc_mcp.config import BscConfig

TEST_PRIVATE_KEY = "0x" + "11" * 32
TOKEN = "0x" + "cd" * 20
WALLET = "0x" + "ab" * 20
DEPLOYED = "0x" + "ef" * 20
SENT_TX_HASH = "0x" + "77" * 32


def _hex(data: bytes) -> str:
    return "0x" + data.hex()


def make_client(handler, **config_overrides):
    config = BscConfig(rpc_url="http://node.test", private_key=config_overrides.pop("private_key", None))
    for key, value in config_overrides.items():
        setattr(config, key, value)
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return BscRpcClient(config, async_client=http_client)


def token_handler(balance_word: bytes, decimals_word: bytes, symbol_word: bytes, calls: list):
    selectors = {
        _hex(BALANCE_OF_SELECTOR): balance_word,
        _hex(DECIMALS_SELECTOR): decimals_word,
        _hex(SYMBOL_SELECTOR): symbol_word,
    }

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        assert body["method"] == "eth_call"
        call, block_tag = body["params"]
        calls.append(call)
        assert block_tag == "latest"
        result = selectors[call["data"][:10]]
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": _hex(result)})

    return handler


@pytest.mark.asyncio
async def test_token_balance_reads_three_calls():
    calls: list = []
    handler = token_handler(
        encode(["uint256"], [1_500_000_000_000_000_000]),
        encode(["uint8"], [18]),
        encode(["string"], ["CAKE"]),
        calls,
    )
    client = make_client(handler)
    balance = await client.fetch_token_balance(TOKEN, WALLET)
    assert balance.raw == 1_500_000_000_000_000_000
    assert balance.decimals == 18
    assert balance.symbol == "CAKE"
    assert len(calls) == 3
    assert all(call["to"] == to_checksum_address(TOKEN) for call in calls)
    # balanceOf carries the wallet as its single argument
    assert calls[0]["data"] == _hex(BALANCE_OF_SELECTOR + encode(["address"], [to_checksum_address(WALLET)]))


@pytest.mark.asyncio
async def test_token_balance_bytes32_symbol():
    handler = token_handler(
        encode(["uint256"], [5]),
        encode(["uint256"], [0]),
        b"MKR".ljust(32, b"\x00"),
        [],
    )
    client = make_client(handler)
    balance = await client.fetch_token_balance(TOKEN, WALLET)
    assert balance.symbol == "MKR"
    assert balance.decimals == 0


@pytest.mark.asyncio
async def test_token_balance_non_contract():
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": "0x"})

    client = make_client(handler)
    with pytest.raises(BscApiError) as excinfo:
        await client.fetch_token_balance(TOKEN, WALLET)
    assert str(excinfo.value) == "Address is not a BEP-20 token contract."


def deploy_handler(receipts: list, sent: dict):
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        method = body["method"]
        params = body["params"]
        if method == "eth_chainId":
            result = "0x38"
        elif method == "eth_getTransactionCount":
            sent["nonce_params"] = params
            result = "0x5"
        elif method == "eth_gasPrice":
            result = hex(3_000_000_000)
        elif method == "eth_estimateGas":
            sent["estimate"] = params[0]
            result = hex(1_500_000)
        elif method == "eth_sendRawTransaction":
            sent["raw"] = params[0]
            result = SENT_TX_HASH
        elif method == "eth_getTransactionReceipt":
            result = receipts.pop(0) if receipts else None
        else:
            raise AssertionError(f"unexpected method {method}")
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    return handler


@pytest.mark.asyncio
async def test_deploy_signs_sends_and_waits_for_receipt():
    sent: dict = {}
    receipt = {
        "status": "0x1",
        "contractAddress": DEPLOYED,
        "transactionHash": SENT_TX_HASH,
        "blockNumber": "0x10",
        "gasUsed": "0x100",
    }
    client = make_client(
        deploy_handler([None, receipt], sent),
        private_key=TEST_PRIVATE_KEY,
        receipt_poll_interval=0.0,
        receipt_timeout=5.0,
    )
    signer = Account.from_key(TEST_PRIVATE_KEY).address

    result = await client.deploy_four_meme_token(
        name="Meme",
        symbol="MEME",
        decimals=18,
        total_supply=1000 * 10**18,
        owner_address=WALLET,
    )

    assert result.token_address == to_checksum_address(DEPLOYED)
    assert result.tx_hash == SENT_TX_HASH
    assert result.block_number == 16
    assert result.gas_used == 256
    assert sent["nonce_params"] == [signer, "pending"]
    assert sent["estimate"]["from"] == signer
    ctor_args = encode(
        FOUR_MEME_CONSTRUCTOR_TYPES,
        ["Meme", "MEME", 18, 1000 * 10**18, to_checksum_address(WALLET)],
    )
    assert sent["estimate"]["data"].endswith(ctor_args.hex())
    assert sent["raw"].startswith("0x") and not sent["raw"].startswith("0x0x")
    assert Account.recover_transaction(sent["raw"]) == signer


@pytest.mark.asyncio
async def test_deploy_reverted_receipt():
    receipt = {"status": "0x0", "contractAddress": DEPLOYED, "transactionHash": SENT_TX_HASH}
    client = make_client(
        deploy_handler([receipt], {}),
        private_key=TEST_PRIVATE_KEY,
        receipt_poll_interval=0.0,
    )
    with pytest.raises(ExecutionRevertedError):
        await client.deploy_four_meme_token(
            name="Meme", symbol="MEME", decimals=18, total_supply=1, owner_address=WALLET
        )


@pytest.mark.asyncio
async def test_deploy_receipt_without_contract_address():
    receipt = {"status": "0x1", "contractAddress": None, "transactionHash": SENT_TX_HASH}
    client = make_client(
        deploy_handler([receipt], {}),
        private_key=TEST_PRIVATE_KEY,
        receipt_poll_interval=0.0,
    )
    with pytest.raises(BscApiError) as excinfo:
        await client.deploy_four_meme_token(
            name="Meme", symbol="MEME", decimals=18, total_supply=1, owner_address=WALLET
        )
    assert str(excinfo.value) == "Failed to get deployment receipt."


@pytest.mark.asyncio
async def test_wait_for_receipt_times_out():
    client = make_client(deploy_handler([], {}))
    with pytest.raises(DeploymentTimeoutError):
        await client.wait_for_receipt(SENT_TX_HASH, timeout=0.0, poll_interval=0.0)


@pytest.mark.asyncio
async def test_deploy_without_key():
    client = make_client(deploy_handler([], {}))
    assert client.signer_address is None
    with pytest.raises(SignerUnavailableError) as excinfo:
        await client.deploy_four_meme_token(
            name="Meme", symbol="MEME", decimals=18, total_supply=1, owner_address=WALLET
        )
    assert "BSC_PRIVATE_KEY" in str(excinfo.value)


def test_invalid_key_reported_as_unavailable():
    client = BscRpcClient(BscConfig(private_key="not-a-key"))
    with pytest.raises(SignerUnavailableError):
        client._account()
