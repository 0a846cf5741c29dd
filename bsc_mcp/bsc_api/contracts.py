"""Contract interfaces used by the tools: BEP-20 reads and the Four.meme token."""

from __future__ import annotations

from typing import Any, Dict, List

from eth_utils import function_signature_to_4byte_selector

BALANCE_OF_SELECTOR = function_signature_to_4byte_selector("balanceOf(address)")
DECIMALS_SELECTOR = function_signature_to_4byte_selector("decimals()")
SYMBOL_SELECTOR = function_signature_to_4byte_selector("symbol()")


def _fn(name: str, inputs: List[tuple[str, str]], outputs: List[str], mutability: str = "view") -> Dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "stateMutability": mutability,
        "inputs": [{"name": arg, "type": typ} for arg, typ in inputs],
        "outputs": [{"name": "", "type": typ} for typ in outputs],
    }


def _event(name: str, inputs: List[tuple[str, str, bool]]) -> Dict[str, Any]:
    return {
        "type": "event",
        "name": name,
        "anonymous": False,
        "inputs": [{"name": arg, "type": typ, "indexed": indexed} for arg, typ, indexed in inputs],
    }


FOUR_MEME_TOKEN_ABI: List[Dict[str, Any]] = [
    {
        "type": "constructor",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "_name", "type": "string"},
            {"name": "_symbol", "type": "string"},
            {"name": "_decimals", "type": "uint8"},
            {"name": "_initialSupply", "type": "uint256"},
            {"name": "_owner", "type": "address"},
        ],
    },
    _fn("name", [], ["string"]),
    _fn("symbol", [], ["string"]),
    _fn("decimals", [], ["uint8"]),
    _fn("totalSupply", [], ["uint256"]),
    _fn("balanceOf", [("account", "address")], ["uint256"]),
    _fn("transfer", [("recipient", "address"), ("amount", "uint256")], ["bool"], "nonpayable"),
    _fn("allowance", [("owner", "address"), ("spender", "address")], ["uint256"]),
    _fn("approve", [("spender", "address"), ("amount", "uint256")], ["bool"], "nonpayable"),
    _fn(
        "transferFrom",
        [("sender", "address"), ("recipient", "address"), ("amount", "uint256")],
        ["bool"],
        "nonpayable",
    ),
    _event("Transfer", [("from", "address", True), ("to", "address", True), ("value", "uint256", False)]),
    _event("Approval", [("owner", "address", True), ("spender", "address", True), ("value", "uint256", False)]),
]


def constructor_input_types(abi: List[Dict[str, Any]]) -> List[str]:
    """Return the ABI types of the constructor arguments, in order."""
    for entry in abi:
        if entry.get("type") == "constructor":
            return [arg["type"] for arg in entry.get("inputs", [])]
    return []


FOUR_MEME_CONSTRUCTOR_TYPES = constructor_input_types(FOUR_MEME_TOKEN_ABI)

FOUR_MEME_TOKEN_BYTECODE = (
    "0x608060405234801561001057600080fd5b50604051610a64380380610a648339818101604052608081101561003357"
    "600080fd5b81019080805160405193929190846401000000008211156100535760006000fd5b83820191506020820185"
    "811115610069576000600080fd5b825186602082028301116401000000008211171561008757600080fd5b8083526020"
    "830192505050908051906020019080838360005b838110156100bb5780820151818401526020810190506100a0565b50"
    "505050905090810190601f1680156100e85780820380516001836020036101000a031916815260200191505b50604052"
    "602001805160405193929190846401000000008211156101085760006000fd5b83820191506020820185811115610120"
    "5760006000fd5b825186602082028301116401000000008211171561013c57600080fd5b808352602083019250505090"
    "8051906020019080838360005b83811015610170578082015181840152602081019050610155565b5050505090509081"
    "0190601f16801561019d5780820380516001836020036101000a031916815260200191505b5060405260200160006002"
    "02013590602001600060020201359050856000600091505080519060200190610272929190610299565b508460016000"
    "6101000a81549081010260026000190116109055504608060240160405180986000905984600260006101000a8154816"
    "fffffffffffffffffffffffffffffffffffff0219169083600a0b021790555082600360006101000a815490810102600"
    "2600019011690550861031f565b82400581840091505b5090600f018254600181010460008390048302610c208131602"
    "660006c01000000000000000000000000871682860681858881608001526034860152603301528760a09091528101600"
    "083015481600285015490848801015181870101918487900191600d01929161026881f35b50905050816004908051906"
    "0200190506102c99291906103bf565b505050505050505050806001600050819055503373fffffffffffffffffffffff"
    "fffffffffffffffff16600073ffffffffffffffffffffffffffffffffffffffff168273fffffffffffffffffffffffff"
    "fffffffffffffff167fddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef8460405180926"
    "000825281601001526020016000905081900390a4505b600581540160005560bf565b828054600181600116156101000"
    "203166002900490600052602060002090601f016020900481019282600f1061069d57805985557ffffffffffffffffff"
    "fffff000000000000000000000000000000000000000000825550602080900360020281017ffffffffffffffffffffff"
    "f0000000000000000000000000000000000000000006000905550602090500383602060008501549182600085015b828"
    "1101561088e5735603982830101526020810190506108bf565b50505050600f01600084015490820110610ac95781925"
    "05050611054815b60009392505050565b60009392505050565bfea365627a7a72305820d8a9b4f5c8a5d9a52eda15c70"
    "a17e06380bbaa0bcc6a699b8b68381cff05da8c6c6578706572696d656e74616cf564736f6c634300060c0033")
