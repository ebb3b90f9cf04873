"""Calldata encoding for the batch relayer library.

Encodes (and decodes) the relayer library functions used by the composer:
batchSwap, exitPool, joinPool, the token unwrappers and multicall. Pool
`userData` for joins is encoded here as well.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from eth_abi import decode, encode  # type: ignore[attr-defined]
from eth_utils import keccak

from relayer_sdk.errors import RelayerSDKError
from relayer_sdk.models.relayer import (
    BatchSwapStep,
    ExitPoolRequest,
    FundManagement,
    JoinPoolRequest,
    OutputReference,
    PoolKind,
    SwapType,
)
from relayer_sdk.models.types import normalize_address

# Weighted and legacy stable pools share join kind 1
JOIN_KIND_EXACT_TOKENS_IN_FOR_BPT_OUT = 1


@dataclass(frozen=True)
class RelayerFunction:
    """ABI of one relayer library function.

    Attributes:
        name: Solidity function name
        params: (name, ABI type) pairs in call order
    """

    name: str
    params: tuple[tuple[str, str], ...]

    @property
    def types(self) -> list[str]:
        return [abi_type for _, abi_type in self.params]

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.types)})"

    @property
    def selector(self) -> bytes:
        return keccak(text=self.signature)[:4]


_SWAP_STEP = "(bytes32,uint256,uint256,uint256,bytes)"
_FUNDS = "(address,bool,address,bool)"
_POOL_REQUEST = "(address[],uint256[],bytes,bool)"
_OUTPUT_REFERENCE = "(uint256,uint256)"

RELAYER_FUNCTIONS: dict[str, RelayerFunction] = {
    f.name: f
    for f in (
        RelayerFunction(
            "batchSwap",
            (
                ("kind", "uint8"),
                ("swaps", f"{_SWAP_STEP}[]"),
                ("assets", "address[]"),
                ("funds", _FUNDS),
                ("limits", "int256[]"),
                ("deadline", "uint256"),
                ("value", "uint256"),
                ("outputReferences", f"{_OUTPUT_REFERENCE}[]"),
            ),
        ),
        RelayerFunction(
            "exitPool",
            (
                ("poolId", "bytes32"),
                ("kind", "uint8"),
                ("sender", "address"),
                ("recipient", "address"),
                ("request", _POOL_REQUEST),
                ("outputReferences", f"{_OUTPUT_REFERENCE}[]"),
            ),
        ),
        RelayerFunction(
            "joinPool",
            (
                ("poolId", "bytes32"),
                ("kind", "uint8"),
                ("sender", "address"),
                ("recipient", "address"),
                ("request", _POOL_REQUEST),
                ("value", "uint256"),
                ("outputReference", "uint256"),
            ),
        ),
        RelayerFunction(
            "unwrapAaveStaticToken",
            (
                ("staticToken", "address"),
                ("sender", "address"),
                ("recipient", "address"),
                ("amount", "uint256"),
                ("toUnderlying", "bool"),
                ("outputReference", "uint256"),
            ),
        ),
        RelayerFunction(
            "unwrapYearnVaultToken",
            (
                ("vaultToken", "address"),
                ("sender", "address"),
                ("recipient", "address"),
                ("amount", "uint256"),
                ("outputReference", "uint256"),
            ),
        ),
        RelayerFunction(
            "unwrapERC4626",
            (
                ("wrappedToken", "address"),
                ("sender", "address"),
                ("recipient", "address"),
                ("amount", "uint256"),
                ("outputReference", "uint256"),
            ),
        ),
        RelayerFunction("multicall", (("data", "bytes[]"),)),
    )
}

_FUNCTIONS_BY_SELECTOR = {f.selector: f for f in RELAYER_FUNCTIONS.values()}


class CalldataDecodeError(RelayerSDKError, ValueError):
    """Calldata does not match any known relayer function."""

    pass


@dataclass(frozen=True)
class DecodedCall:
    """Relayer call decoded back into named arguments.

    Addresses are lowercase, byte values are 0x-prefixed hex and structs are
    tuples in ABI order.
    """

    function: str
    args: dict[str, Any]


def _address(address: str) -> bytes:
    return bytes.fromhex(normalize_address(address)[2:])


def _hex_bytes(value: str) -> bytes:
    return bytes.fromhex(value[2:] if value.startswith("0x") else value)


def _output_references(refs: Sequence[OutputReference]) -> list[tuple[int, int]]:
    return [(ref.index, ref.key) for ref in refs]


def encode_function(name: str, values: Sequence[Any]) -> str:
    """ABI-encode a call to a relayer library function.

    Raises:
        KeyError: If the function is unknown
    """
    function = RELAYER_FUNCTIONS[name]
    return "0x" + (function.selector + encode(function.types, list(values))).hex()


def encode_batch_swap(
    swap_type: SwapType,
    swaps: Sequence[BatchSwapStep],
    assets: Sequence[str],
    funds: FundManagement,
    limits: Sequence[int | str],
    deadline: int,
    value: int,
    output_references: Sequence[OutputReference],
) -> str:
    return encode_function(
        "batchSwap",
        [
            int(swap_type),
            [
                (
                    _hex_bytes(s.pool_id),
                    s.asset_in_index,
                    s.asset_out_index,
                    int(s.amount),
                    _hex_bytes(s.user_data),
                )
                for s in swaps
            ],
            [_address(a) for a in assets],
            (
                _address(funds.sender),
                funds.from_internal_balance,
                _address(funds.recipient),
                funds.to_internal_balance,
            ),
            [int(limit) for limit in limits],
            deadline,
            value,
            _output_references(output_references),
        ],
    )


def encode_exit_pool(
    pool_id: str,
    pool_kind: PoolKind,
    sender: str,
    recipient: str,
    exit_pool_request: ExitPoolRequest,
    output_references: Sequence[OutputReference],
) -> str:
    return encode_function(
        "exitPool",
        [
            _hex_bytes(pool_id),
            int(pool_kind),
            _address(sender),
            _address(recipient),
            (
                [_address(a) for a in exit_pool_request.assets],
                [int(a) for a in exit_pool_request.min_amounts_out],
                _hex_bytes(exit_pool_request.user_data),
                exit_pool_request.to_internal_balance,
            ),
            _output_references(output_references),
        ],
    )


def encode_join_pool(
    pool_id: str,
    pool_kind: PoolKind,
    sender: str,
    recipient: str,
    join_pool_request: JoinPoolRequest,
    value: int,
    output_reference: int,
) -> str:
    return encode_function(
        "joinPool",
        [
            _hex_bytes(pool_id),
            int(pool_kind),
            _address(sender),
            _address(recipient),
            (
                [_address(a) for a in join_pool_request.assets],
                [int(a) for a in join_pool_request.max_amounts_in],
                _hex_bytes(join_pool_request.user_data),
                join_pool_request.from_internal_balance,
            ),
            value,
            output_reference,
        ],
    )


def encode_unwrap_aave_static_token(
    static_token: str,
    sender: str,
    recipient: str,
    amount: int,
    to_underlying: bool,
    output_reference: int,
) -> str:
    return encode_function(
        "unwrapAaveStaticToken",
        [
            _address(static_token),
            _address(sender),
            _address(recipient),
            amount,
            to_underlying,
            output_reference,
        ],
    )


def encode_unwrap_yearn_vault_token(
    vault_token: str, sender: str, recipient: str, amount: int, output_reference: int
) -> str:
    return encode_function(
        "unwrapYearnVaultToken",
        [_address(vault_token), _address(sender), _address(recipient), amount, output_reference],
    )


def encode_unwrap_erc4626(
    wrapped_token: str, sender: str, recipient: str, amount: int, output_reference: int
) -> str:
    return encode_function(
        "unwrapERC4626",
        [_address(wrapped_token), _address(sender), _address(recipient), amount, output_reference],
    )


def encode_multicall(calls: Sequence[str]) -> str:
    return encode_function("multicall", [[_hex_bytes(c) for c in calls]])


def encode_join_exact_tokens_in_for_bpt_out(
    amounts_in: Sequence[int | str], min_bpt_out: int | str
) -> str:
    """userData for an EXACT_TOKENS_IN_FOR_BPT_OUT join (weighted and legacy stable)."""
    data = encode(
        ["uint256", "uint256[]", "uint256"],
        [JOIN_KIND_EXACT_TOKENS_IN_FOR_BPT_OUT, [int(a) for a in amounts_in], int(min_bpt_out)],
    )
    return "0x" + data.hex()


def _normalize_decoded(value: Any, abi_type: str) -> Any:
    if abi_type.endswith("[]"):
        item_type = abi_type[:-2]
        return [_normalize_decoded(v, item_type) for v in value]
    if abi_type.startswith("("):
        component_types = _split_tuple_type(abi_type)
        return tuple(_normalize_decoded(v, t) for v, t in zip(value, component_types, strict=True))
    if abi_type == "address":
        return normalize_address(value)
    if abi_type.startswith("bytes"):
        return "0x" + value.hex()
    return value


def _split_tuple_type(abi_type: str) -> list[str]:
    """Split "(a,(b,c)[],d)" into ["a", "(b,c)[]", "d"]."""
    inner = abi_type[1:-1]
    parts: list[str] = []
    depth = 0
    current = ""
    for char in inner:
        if char == "," and depth == 0:
            parts.append(current)
            current = ""
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        current += char
    if current:
        parts.append(current)
    return parts


def decode_relayer_call(calldata: str) -> DecodedCall:
    """Decode relayer library calldata into named arguments.

    Raises:
        CalldataDecodeError: If the selector is unknown
    """
    data = _hex_bytes(calldata)
    function = _FUNCTIONS_BY_SELECTOR.get(data[:4])
    if function is None:
        raise CalldataDecodeError(f"Unknown selector 0x{data[:4].hex()}")
    values = decode(function.types, data[4:])
    return DecodedCall(
        function=function.name,
        args={
            name: _normalize_decoded(value, abi_type)
            for (name, abi_type), value in zip(function.params, values, strict=True)
        },
    )


def decode_multicall(calldata: str) -> list[DecodedCall]:
    """Decode a multicall and each of its sub-calls."""
    outer = decode_relayer_call(calldata)
    if outer.function != "multicall":
        raise CalldataDecodeError(f"Expected multicall, got {outer.function}")
    return [decode_relayer_call(call) for call in outer.args["data"]]


__all__ = [
    "RELAYER_FUNCTIONS",
    "CalldataDecodeError",
    "DecodedCall",
    "RelayerFunction",
    "decode_multicall",
    "decode_relayer_call",
    "encode_batch_swap",
    "encode_exit_pool",
    "encode_function",
    "encode_join_exact_tokens_in_for_bpt_out",
    "encode_join_pool",
    "encode_multicall",
    "encode_unwrap_aave_static_token",
    "encode_unwrap_erc4626",
    "encode_unwrap_yearn_vault_token",
]
