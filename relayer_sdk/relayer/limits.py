"""Slippage helpers and batch swap limits.

Slippage is an 18-decimal fraction: 1% = 10**16.
"""

from __future__ import annotations

from collections.abc import Sequence

from relayer_sdk.constants import ONE
from relayer_sdk.math.fixed_point import div_trunc
from relayer_sdk.models.relayer import SwapType
from relayer_sdk.models.types import is_same_address


def subtract_slippage(amount: int | str, slippage: int | str) -> int:
    """amount * (1 - slippage), rounded down. Used for worst-case minimums."""
    return int(amount) * (ONE - int(slippage)) // ONE


def add_slippage(amount: int | str, slippage: int | str) -> int:
    """amount * (1 + slippage), rounded down. Used for tolerant maximums."""
    return int(amount) * (ONE + int(slippage)) // ONE


def get_limits_for_slippage(
    tokens_in: Sequence[str],
    tokens_out: Sequence[str],
    swap_type: SwapType,
    deltas: Sequence[int | str],
    assets: Sequence[str],
    slippage: int | str,
) -> list[int]:
    """Build batch swap limits from router deltas.

    Limits are signed: positive is the most the vault may take, negative is
    the least it must send back. Intermediate hop assets stay at 0.

    - exact-in: slippage reduces the amount received for tokens out
    - exact-out: slippage raises the amount sent for tokens in

    Division truncates toward zero, as the contract-side BigNumber math does,
    so negative limits round toward zero.
    """
    limits = [0] * len(assets)
    for i, asset in enumerate(assets):
        delta = int(deltas[i])
        if any(is_same_address(asset, token) for token in tokens_in):
            if swap_type == SwapType.SWAP_EXACT_OUT:
                limits[i] += div_trunc(delta * (ONE + int(slippage)), ONE)
            else:
                limits[i] += delta
        if any(is_same_address(asset, token) for token in tokens_out):
            if swap_type == SwapType.SWAP_EXACT_IN:
                limits[i] += div_trunc(delta * (ONE - int(slippage)), ONE)
            else:
                limits[i] += delta
    return limits
