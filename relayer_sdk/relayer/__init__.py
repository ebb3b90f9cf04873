"""Batch relayer call composition.

The Relayer composer plus its building blocks: chained references, calldata
encoding, swap limits, unwrap calls and per-call pool indexes.
"""

from .chained_reference import (
    from_chained_reference,
    is_chained_reference,
    to_chained_reference,
)
from .encoding import (
    DecodedCall,
    decode_multicall,
    decode_relayer_call,
    encode_batch_swap,
    encode_exit_pool,
    encode_join_exact_tokens_in_for_bpt_out,
    encode_join_pool,
    encode_multicall,
)
from .indexes import PoolIndex
from .limits import add_slippage, get_limits_for_slippage, subtract_slippage
from .relayer import Relayer
from .router import SwapRouter
from .unwrap import UnwrapPlan, encode_unwrap, encode_unwrap_calls, resolve_unwrap_type

__all__ = [
    "DecodedCall",
    "PoolIndex",
    "Relayer",
    "SwapRouter",
    "UnwrapPlan",
    "add_slippage",
    "decode_multicall",
    "decode_relayer_call",
    "encode_batch_swap",
    "encode_exit_pool",
    "encode_join_exact_tokens_in_for_bpt_out",
    "encode_join_pool",
    "encode_multicall",
    "encode_unwrap",
    "encode_unwrap_calls",
    "from_chained_reference",
    "get_limits_for_slippage",
    "is_chained_reference",
    "resolve_unwrap_type",
    "subtract_slippage",
    "to_chained_reference",
]
