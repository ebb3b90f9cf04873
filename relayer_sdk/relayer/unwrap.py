"""Unwrap calls for yield-bearing wrapped tokens.

Each UnwrapType member has exactly one encoder. Supporting a new protocol
means adding a member and its entry in _ENCODERS; the import-time check
below refuses a member without one.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from relayer_sdk.models.pools import Pool, PoolType
from relayer_sdk.models.relayer import OutputReference, UnwrapType
from relayer_sdk.models.types import normalize_address

from .chained_reference import to_chained_reference
from .encoding import (
    encode_unwrap_aave_static_token,
    encode_unwrap_erc4626,
    encode_unwrap_yearn_vault_token,
)

if TYPE_CHECKING:
    from relayer_sdk.config import RelayerConfig

UnwrapEncoder = Callable[[str, str, str, int, int], str]


def _encode_aave(
    wrapped_token: str, sender: str, recipient: str, amount: int, output_reference: int
) -> str:
    # Static aTokens unwrap straight to the underlying asset
    return encode_unwrap_aave_static_token(
        wrapped_token, sender, recipient, amount, True, output_reference
    )


_ENCODERS: dict[UnwrapType, UnwrapEncoder] = {
    UnwrapType.AAVE: _encode_aave,
    UnwrapType.YEARN: encode_unwrap_yearn_vault_token,
    UnwrapType.ERC4626: encode_unwrap_erc4626,
}

if set(_ENCODERS) != set(UnwrapType):
    raise RuntimeError("Every UnwrapType needs an encoder")


def encode_unwrap(
    unwrap_type: UnwrapType,
    wrapped_token: str,
    sender: str,
    recipient: str,
    amount: int,
    output_reference: int,
) -> str:
    """Encode the unwrap call for `unwrap_type`.

    Args:
        unwrap_type: Wrapping protocol
        wrapped_token: Token to unwrap
        sender: Holder of the wrapped tokens (normally the relayer)
        recipient: Receiver of the underlying tokens
        amount: Literal amount or chained reference
        output_reference: Chained reference storing the unwrapped amount (0 = none)
    """
    return _ENCODERS[unwrap_type](wrapped_token, sender, recipient, amount, output_reference)


_POOL_TYPE_UNWRAP = {
    PoolType.AAVE_LINEAR: UnwrapType.AAVE,
    PoolType.YEARN_LINEAR: UnwrapType.YEARN,
    PoolType.ERC4626_LINEAR: UnwrapType.ERC4626,
}


def resolve_unwrap_type(linear_pool: Pool, config: RelayerConfig) -> UnwrapType:
    """Wrapping protocol of a linear pool.

    Resolution order: configured factory address, then the pool type tag,
    then the configured default.
    """
    if linear_pool.factory is not None:
        from_factory = config.unwrap_type_for_factory(linear_pool.factory)
        if from_factory is not None:
            return from_factory
    return _POOL_TYPE_UNWRAP.get(linear_pool.pool_type, config.default_unwrap_type)


@dataclass(frozen=True)
class UnwrapPlan:
    """Unwrap calls chained to a batch swap's outputs.

    Attributes:
        calls: Encoded unwrap calls, in wrapped-token order
        swap_output_references: References the batch swap must store
    """

    calls: list[str] = field(default_factory=list)
    swap_output_references: list[OutputReference] = field(default_factory=list)


def encode_unwrap_calls(
    wrapped_tokens: Sequence[str],
    unwrap_types: Sequence[UnwrapType],
    assets: Sequence[str],
    sender: str,
    recipient: str,
    first_key: int = 0,
) -> UnwrapPlan:
    """Chain one unwrap call to each wrapped token present in `assets`.

    Wrapped tokens the router did not route through are skipped. Each
    present token takes two keys: one for the swap output at its asset
    index, one for the unwrapped amount.

    Args:
        wrapped_tokens: Tokens to unwrap
        unwrap_types: Protocol per wrapped token
        assets: Batch swap asset list
        sender: Holder of the wrapped tokens (normally the relayer)
        recipient: Receiver of the underlying tokens
        first_key: First chained reference key to allocate
    """
    calls: list[str] = []
    swap_output_references: list[OutputReference] = []
    asset_indexes = {normalize_address(a): i for i, a in enumerate(assets)}
    key = first_key
    for wrapped_token, unwrap_type in zip(wrapped_tokens, unwrap_types, strict=True):
        index = asset_indexes.get(normalize_address(wrapped_token))
        if index is None:
            continue
        swap_key = to_chained_reference(key)
        unwrapped_key = to_chained_reference(key + 1)
        key += 2
        swap_output_references.append(OutputReference(index=index, key=swap_key))
        calls.append(
            encode_unwrap(unwrap_type, wrapped_token, sender, recipient, swap_key, unwrapped_key)
        )
    return UnwrapPlan(
        calls=calls,
        swap_output_references=swap_output_references,
    )
