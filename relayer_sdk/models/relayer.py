"""Models for relayer inputs, router results and produced transactions.

Vault structs (swap steps, fund management, join/exit requests) are pydantic
models so router output can be validated on the way in. Values internal to
one composition (output references, nested pool descriptors) are frozen
dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

from pydantic import BaseModel, Field

from relayer_sdk.constants import EMPTY_USER_DATA
from relayer_sdk.models.pools import Pool
from relayer_sdk.models.types import Address, Bytes, Bytes32, Int256, Uint256


class SwapType(IntEnum):
    """Vault batch swap kind."""

    SWAP_EXACT_IN = 0
    SWAP_EXACT_OUT = 1


class PoolKind(IntEnum):
    """Relayer library pool kind, selects how userData is decoded on-chain."""

    WEIGHTED = 0
    LEGACY_STABLE = 1
    COMPOSABLE_STABLE = 2
    COMPOSABLE_STABLE_V2 = 3


class JoinType(str, Enum):
    EXACT_IN = "exact-in"
    EXACT_OUT = "exact-out"


class UnwrapType(str, Enum):
    """Wrapping protocol of a linear pool's wrapped token."""

    AAVE = "aave"
    YEARN = "yearn"
    ERC4626 = "erc4626"


_MODEL_CONFIG = {"populate_by_name": True, "frozen": True}


class BatchSwapStep(BaseModel):
    """One leg of a vault batch swap.

    `amount` is either a literal amount or a chained reference.
    """

    pool_id: Bytes32 = Field(alias="poolId")
    asset_in_index: int = Field(alias="assetInIndex", ge=0)
    asset_out_index: int = Field(alias="assetOutIndex", ge=0)
    amount: Uint256
    user_data: Bytes = Field(default=EMPTY_USER_DATA, alias="userData")

    model_config = _MODEL_CONFIG


class FundManagement(BaseModel):
    sender: Address
    from_internal_balance: bool = Field(default=False, alias="fromInternalBalance")
    recipient: Address
    to_internal_balance: bool = Field(default=False, alias="toInternalBalance")

    model_config = _MODEL_CONFIG


class ExitPoolRequest(BaseModel):
    assets: list[Address]
    min_amounts_out: list[Uint256] = Field(alias="minAmountsOut")
    user_data: Bytes = Field(alias="userData")
    to_internal_balance: bool = Field(default=False, alias="toInternalBalance")

    model_config = _MODEL_CONFIG


class JoinPoolRequest(BaseModel):
    assets: list[Address]
    max_amounts_in: list[Uint256] = Field(alias="maxAmountsIn")
    user_data: Bytes = Field(alias="userData")
    from_internal_balance: bool = Field(default=False, alias="fromInternalBalance")

    model_config = _MODEL_CONFIG


class FetchPoolsInput(BaseModel):
    """Router pool-fetching preference for one query."""

    fetch_pools: bool = Field(default=True, alias="fetchPools")
    fetch_on_chain: bool = Field(default=False, alias="fetchOnChain")

    model_config = _MODEL_CONFIG


class QueryBatchSwapResult(BaseModel):
    """Router answer for a batch swap query.

    Attributes:
        swaps: Swap legs found by the router
        assets: Flat asset list indexed by the swap legs
        deltas: Vault deltas per asset (positive = sent to vault)
        return_amounts: Amount per requested output token (exact-in) or
            input token (exact-out). Sign follows the router.
    """

    swaps: list[BatchSwapStep]
    assets: list[Address]
    deltas: list[Int256]
    return_amounts: list[Int256] = Field(alias="returnAmounts")

    model_config = _MODEL_CONFIG


class TransactionData(BaseModel):
    """Produced multicall descriptor.

    Attributes:
        function: Relayer function to call (always "multicall")
        params: Ordered hex calldata of each sub-call
        outputs: Named amount lists (e.g. "amountsOut") as decimal strings
    """

    function: str = "multicall"
    params: list[Bytes]
    outputs: dict[str, list[str]] = Field(default_factory=dict)

    model_config = _MODEL_CONFIG

    def encode(self) -> str:
        """Full calldata for `multicall(bytes[])`."""
        from relayer_sdk.relayer.encoding import encode_multicall

        return encode_multicall(self.params)


class ExitAndBatchSwapInput(BaseModel):
    """Parameters for chaining a pool exit with a batch swap.

    Attributes:
        exiter: Address used to exit the pool
        swap_recipient: Address that receives the final tokens
        pool_id: Id of the pool being exited
        exit_tokens: Tokens received from the exit, in `getPoolTokens` order
        user_data: Encoded exitPool userData
        expected_amounts_out: Expected amounts of exit_tokens
        final_tokens_out: Tokens to swap into
        slippage: 18-decimal fraction, e.g. 5% = 50000000000000000
        fetch_pools: Router pool-fetching preference; the relayer config
            default when omitted
        unwrap: Unwrap every final token to its underlying after the swap
        relayer: Relayer address, required when unwrapping (the swap pays the
            relayer, which unwraps on behalf of swap_recipient)
    """

    exiter: Address
    swap_recipient: Address = Field(alias="swapRecipient")
    pool_id: Bytes32 = Field(alias="poolId")
    exit_tokens: list[Address] = Field(alias="exitTokens")
    user_data: Bytes = Field(alias="userData")
    expected_amounts_out: list[Uint256] = Field(alias="expectedAmountsOut")
    final_tokens_out: list[Address] = Field(alias="finalTokensOut")
    slippage: Uint256
    fetch_pools: FetchPoolsInput | None = Field(default=None, alias="fetchPools")
    unwrap: bool = False
    relayer: Address | None = None

    model_config = _MODEL_CONFIG


class JoinToken(BaseModel):
    address: Address
    amount: Uint256

    model_config = _MODEL_CONFIG


class BatchRelayerJoinPool(BaseModel):
    """Parameters for a join that may route through nested pools.

    Attributes:
        pool_id: Id of the pool being joined
        join_type: exact-in or exact-out
        tokens: Tokens and amounts supplied by the caller
        bpt_out: Minimum BPT to receive
        slippage: 18-decimal fraction applied to the nested swap limits
        funds: Funding info for the swap and the join
        fetch_pools: Router pool-fetching preference; the relayer config
            default when omitted
    """

    pool_id: Bytes32 = Field(alias="poolId")
    join_type: JoinType = Field(default=JoinType.EXACT_IN, alias="joinType")
    tokens: list[JoinToken]
    bpt_out: Uint256 = Field(alias="bptOut")
    slippage: Uint256
    funds: FundManagement
    fetch_pools: FetchPoolsInput | None = Field(default=None, alias="fetchPools")

    model_config = _MODEL_CONFIG


@dataclass(frozen=True)
class OutputReference:
    """Stores the asset at `index` of a call's output under chained reference `key`."""

    index: int
    key: int


@dataclass(frozen=True)
class NestedLinearPool:
    """Linear pool found one level below a pool being joined.

    Attributes:
        pool: The linear pool
        main_token: Underlying token swapped into the linear pool
        pool_token_address: BPT held by the outer pool (the linear pool's own
            BPT, or the composable stable pool wrapping it)
    """

    pool: Pool
    main_token: str
    pool_token_address: str
