"""Batch relayer composer.

Builds multicalls in which later calls consume the outputs of earlier ones
through chained references: exit -> swap (-> unwrap), nested swap -> join,
and swap -> unwrap.

Each composing call snapshots the router's pools into a PoolIndex once at
entry and awaits only the router query; everything else is synchronous.
Errors are raised before anything is returned, so a batch is never partial.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from relayer_sdk.config import DEFAULT_CONFIG, RelayerConfig
from relayer_sdk.constants import ONE
from relayer_sdk.errors import (
    InputLengthMismatchError,
    TokenNotFoundError,
    UnsupportedOperationError,
    UnsupportedPoolTypeError,
)
from relayer_sdk.models.pools import Pool, PoolType
from relayer_sdk.models.relayer import (
    BatchRelayerJoinPool,
    BatchSwapStep,
    ExitAndBatchSwapInput,
    ExitPoolRequest,
    FetchPoolsInput,
    FundManagement,
    JoinPoolRequest,
    JoinType,
    NestedLinearPool,
    OutputReference,
    PoolKind,
    SwapType,
    TransactionData,
    UnwrapType,
)
from relayer_sdk.models.types import normalize_address, parse_units

from .chained_reference import to_chained_reference
from .encoding import (
    encode_batch_swap,
    encode_exit_pool,
    encode_join_exact_tokens_in_for_bpt_out,
    encode_join_pool,
)
from .indexes import PoolIndex
from .limits import add_slippage, get_limits_for_slippage, subtract_slippage
from .router import SwapRouter
from .unwrap import encode_unwrap_calls, resolve_unwrap_type

logger = structlog.get_logger()

# Pools joinable with EXACT_TOKENS_IN_FOR_BPT_OUT userData
_JOIN_POOL_KINDS = {
    PoolType.WEIGHTED: PoolKind.WEIGHTED,
    PoolType.INVESTMENT: PoolKind.WEIGHTED,
    PoolType.LIQUIDITY_BOOTSTRAPPING: PoolKind.WEIGHTED,
    PoolType.STABLE: PoolKind.LEGACY_STABLE,
    PoolType.META_STABLE: PoolKind.LEGACY_STABLE,
}


def _check_lengths(name_a: str, a: Sequence[object], name_b: str, b: Sequence[object]) -> None:
    if len(a) != len(b):
        raise InputLengthMismatchError(
            f"{name_a} has {len(a)} entries but {name_b} has {len(b)}"
        )


def _rate(linear_pool: Pool) -> int:
    """Wrapped-to-underlying rate of a linear pool, 18 decimals."""
    return parse_units(linear_pool.wrapped_token.price_rate, 18)


class Relayer:
    """Composes batch relayer multicalls.

    Args:
        router: Path-finding collaborator, also the source of pool data
        config: Composer settings. Defaults to DEFAULT_CONFIG.
    """

    def __init__(self, router: SwapRouter, config: RelayerConfig | None = None) -> None:
        self.router = router
        self.config = config if config is not None else DEFAULT_CONFIG

    # =========================================================================
    # Pool data
    # =========================================================================

    async def fetch_pools(self) -> bool:
        """Refresh the router's pool data."""
        return await self.router.fetch_pools()

    def get_pools(self) -> list[Pool]:
        return self.router.get_pools()

    def pool_index(self) -> PoolIndex:
        """Snapshot the router's current pools into read-only lookups."""
        return PoolIndex.from_pools(self.get_pools())

    # =========================================================================
    # Call builders
    # =========================================================================

    @staticmethod
    def construct_exit_call(
        pool_id: str,
        pool_kind: PoolKind,
        sender: str,
        recipient: str,
        assets: Sequence[str],
        min_amounts_out: Sequence[int | str],
        user_data: str,
        to_internal_balance: bool,
        output_references: Sequence[OutputReference],
    ) -> str:
        request = ExitPoolRequest(
            assets=list(assets),
            min_amounts_out=[str(a) for a in min_amounts_out],
            user_data=user_data,
            to_internal_balance=to_internal_balance,
        )
        return encode_exit_pool(pool_id, pool_kind, sender, recipient, request, output_references)

    def encode_swap_unwrap(
        self,
        wrapped_tokens: Sequence[str],
        swap_type: SwapType,
        swaps: Sequence[BatchSwapStep],
        assets: Sequence[str],
        funds: FundManagement,
        limits: Sequence[int],
        unwrap_type: UnwrapType | None = None,
    ) -> list[str]:
        """Batch swap followed by unwraps of the wrapped tokens it outputs.

        The swap stores each wrapped token's output under a chained reference
        that the matching unwrap call spends. `funds.recipient` must be the
        relayer; the underlying tokens go to `funds.sender`.

        Args:
            unwrap_type: Protocol for all wrapped tokens. When omitted, each
                token's protocol comes from its linear pool.

        Raises:
            LinearPoolNotFoundError: If unwrap_type is omitted and a wrapped
                token has no linear pool
        """
        plan = encode_unwrap_calls(
            wrapped_tokens,
            self._unwrap_types(self.pool_index(), wrapped_tokens, unwrap_type),
            assets,
            sender=funds.recipient,
            recipient=funds.sender,
        )
        encoded_batch_swap = encode_batch_swap(
            swap_type,
            swaps,
            assets,
            funds,
            limits,
            self.config.deadline,
            0,
            plan.swap_output_references,
        )
        return [encoded_batch_swap, *plan.calls]

    def _unwrap_types(
        self, index: PoolIndex, wrapped_tokens: Sequence[str], unwrap_type: UnwrapType | None
    ) -> list[UnwrapType]:
        if unwrap_type is not None:
            return [unwrap_type] * len(wrapped_tokens)
        return [
            resolve_unwrap_type(index.get_linear_pool_for_wrapped_token(t), self.config)
            for t in wrapped_tokens
        ]

    # =========================================================================
    # Compositions
    # =========================================================================

    async def exit_pool_and_batch_swap(self, params: ExitAndBatchSwapInput) -> TransactionData:
        """Chain a pool exit with a batch swap to the final tokens.

        The exit pays into internal balance and stores each exit token's
        amount under chained reference i. Swap legs spending an exit token use
        that reference, so the swap consumes the real exit output. With
        `unwrap`, every final token is unwrapped by the relayer and the
        underlying is sent to the swap recipient.

        Returns:
            Multicall whose `amountsOut` are the expected (not worst-case)
            amounts of the final tokens, or of their underlying when unwrapping

        Raises:
            InputLengthMismatchError: If exit tokens and expected amounts differ in length
            PoolNotFoundError: If the exited pool is unknown
            TokenNotFoundError: If a token is not held by any known pool
            LinearPoolNotFoundError: If unwrapping a token no linear pool wraps
            UnsupportedOperationError: If unwrapping without a relayer address
        """
        _check_lengths(
            "exit_tokens", params.exit_tokens, "expected_amounts_out", params.expected_amounts_out
        )
        index = self.pool_index()
        index.get_pool(params.pool_id)
        exit_tokens = [index.require_token(t) for t in params.exit_tokens]
        final_tokens = [index.require_token(t) for t in params.final_tokens_out]

        unwrap_pools: list[Pool] = []
        if params.unwrap:
            if params.relayer is None:
                raise UnsupportedOperationError("Unwrapping requires the relayer address")
            unwrap_pools = [index.get_linear_pool_for_wrapped_token(t) for t in final_tokens]

        slippage = int(params.slippage)
        min_amounts_out = [subtract_slippage(a, slippage) for a in params.expected_amounts_out]

        exit_references = [
            OutputReference(index=i, key=to_chained_reference(i)) for i in range(len(exit_tokens))
        ]
        exit_call = self.construct_exit_call(
            pool_id=params.pool_id,
            pool_kind=PoolKind.WEIGHTED,
            sender=params.exiter,
            recipient=params.exiter,
            assets=exit_tokens,
            min_amounts_out=min_amounts_out,
            user_data=params.user_data,
            # The swap spends from internal balance
            to_internal_balance=True,
            output_references=exit_references,
        )

        # Worst-case amounts size the path search
        query = await self.router.query_batch_swap(
            exit_tokens,
            final_tokens,
            SwapType.SWAP_EXACT_IN,
            [str(a) for a in min_amounts_out],
            params.fetch_pools or self.config.fetch_pools,
        )

        exit_positions = {token: i for i, token in enumerate(exit_tokens)}
        swaps: list[BatchSwapStep] = []
        for swap in query.swaps:
            position = exit_positions.get(normalize_address(query.assets[swap.asset_in_index]))
            # Zero-amount legs continue a multihop path and must stay zero
            if position is not None and int(swap.amount) != 0:
                swap = swap.model_copy(update={"amount": str(exit_references[position].key)})
            swaps.append(swap)

        # The exit may return more than the minimum; widen the limit for it
        deltas = [int(d) for d in query.deltas]
        asset_positions = {normalize_address(a): i for i, a in enumerate(query.assets)}
        for i, exit_token in enumerate(exit_tokens):
            asset_index = asset_positions.get(exit_token)
            if asset_index is not None:
                deltas[asset_index] = add_slippage(params.expected_amounts_out[i], slippage)

        # Slippage already applied through the exit minimums
        limits = get_limits_for_slippage(
            exit_tokens, final_tokens, SwapType.SWAP_EXACT_IN, deltas, query.assets, 0
        )

        funds = FundManagement(
            sender=params.exiter,
            from_internal_balance=True,
            recipient=params.relayer if params.unwrap else params.swap_recipient,
            to_internal_balance=False,
        )

        swap_references: list[OutputReference] = []
        unwrap_calls: list[str] = []
        if params.unwrap:
            plan = encode_unwrap_calls(
                final_tokens,
                [resolve_unwrap_type(p, self.config) for p in unwrap_pools],
                query.assets,
                sender=funds.recipient,
                recipient=params.swap_recipient,
                first_key=len(exit_tokens),
            )
            swap_references = plan.swap_output_references
            unwrap_calls = plan.calls

        encoded_batch_swap = encode_batch_swap(
            SwapType.SWAP_EXACT_IN,
            swaps,
            query.assets,
            funds,
            limits,
            self.config.deadline,
            0,
            swap_references,
        )

        amounts_out = [add_slippage(abs(int(r)), slippage) for r in query.return_amounts]
        if params.unwrap:
            amounts_out = [
                amount * _rate(pool) // ONE
                for amount, pool in zip(amounts_out, unwrap_pools, strict=True)
            ]

        calls = [exit_call, encoded_batch_swap, *unwrap_calls]
        logger.debug(
            "exit_pool_and_batch_swap_composed",
            pool_id=params.pool_id,
            exit_tokens=len(exit_tokens),
            swaps=len(swaps),
            unwraps=len(unwrap_calls),
        )
        return TransactionData(
            params=calls,
            outputs={"amountsOut": [str(a) for a in amounts_out]},
        )

    async def join_pool(self, params: BatchRelayerJoinPool) -> TransactionData:
        """Join a pool, first swapping main tokens into nested pool BPTs.

        Nested linear pools (directly held, or inside a held composable
        stable pool) are found one level deep. Main tokens are swapped into
        the nested BPTs and the join spends the swap outputs through chained
        references. A nested BPT the router expects to return nothing is
        joined with a literal zero instead.

        Returns:
            Multicall with `bptOut` (the minimum BPT) and `amountsIn` (the
            join's max amounts, literal or chained reference)

        Raises:
            PoolNotFoundError: If the pool is unknown
            UnsupportedPoolTypeError: If the pool cannot be joined this way
            UnsupportedOperationError: For exact-out joins through nested pools
            TokenNotFoundError: If a supplied token is neither a pool token
                nor the main token of a nested pool
        """
        index = self.pool_index()
        pool = index.get_pool(params.pool_id)
        pool_kind = _JOIN_POOL_KINDS.get(pool.pool_type)
        if pool_kind is None:
            raise UnsupportedPoolTypeError(
                f"Cannot join {pool.pool_type.value} pool {pool.id} through the relayer"
            )

        nested = index.nested_linear_pools(pool)
        supplied = {index.require_token(t.address): t.amount for t in params.tokens}
        main_tokens = {n.main_token for n in nested}
        for token in supplied:
            if token not in pool.tokens_list and token not in main_tokens:
                raise TokenNotFoundError(f"Token {token} is not joinable into pool {pool.id}")

        calls: list[str] = []
        nested_amounts: dict[str, str] = {}
        if nested:
            if params.join_type == JoinType.EXACT_OUT:
                raise UnsupportedOperationError(
                    "Exact-out joins through nested pools are not supported"
                )
            encoded_batch_swap, nested_amounts = await self._swap_into_nested_pools(
                params, nested, supplied
            )
            calls.append(encoded_batch_swap)

        amounts_in = [
            supplied.get(token, nested_amounts.get(token, "0")) for token in pool.tokens_list
        ]
        encoded_join = encode_join_pool(
            pool.id,
            pool_kind,
            params.funds.sender,
            params.funds.recipient,
            JoinPoolRequest(
                assets=pool.tokens_list,
                max_amounts_in=amounts_in,
                user_data=encode_join_exact_tokens_in_for_bpt_out(amounts_in, params.bpt_out),
                from_internal_balance=params.funds.from_internal_balance,
            ),
            0,
            0,
        )
        calls.append(encoded_join)

        logger.debug(
            "join_pool_composed",
            pool_id=pool.id,
            pool_type=pool.pool_type.value,
            nested_pools=len(nested),
            calls=len(calls),
        )
        return TransactionData(
            params=calls,
            outputs={"bptOut": [params.bpt_out], "amountsIn": amounts_in},
        )

    async def _swap_into_nested_pools(
        self,
        params: BatchRelayerJoinPool,
        nested: Sequence[NestedLinearPool],
        supplied: dict[str, str],
    ) -> tuple[str, dict[str, str]]:
        """Batch swap main tokens -> nested BPTs.

        Returns:
            Encoded batch swap, and per nested BPT the amount the join should
            use: the chained reference of its swap output, or "0"
        """
        tokens_in = [n.main_token for n in nested]
        tokens_out = [n.pool_token_address for n in nested]
        amounts = [supplied.get(token, "0") for token in tokens_in]

        query = await self.router.query_batch_swap(
            tokens_in,
            tokens_out,
            SwapType.SWAP_EXACT_IN,
            amounts,
            params.fetch_pools or self.config.fetch_pools,
        )
        limits = get_limits_for_slippage(
            tokens_in,
            tokens_out,
            SwapType.SWAP_EXACT_IN,
            query.deltas,
            query.assets,
            params.slippage,
        )

        # Several nested pairs may share one BPT; its asset slot holds the total
        returned: dict[str, int] = {}
        for token_out, amount in zip(tokens_out, query.return_amounts, strict=True):
            returned[token_out] = returned.get(token_out, 0) + abs(int(amount))

        asset_positions = {normalize_address(a): i for i, a in enumerate(query.assets)}
        output_references: list[OutputReference] = []
        nested_amounts: dict[str, str] = {}
        for token_out, total in returned.items():
            asset_index = asset_positions.get(token_out)
            if total == 0 or asset_index is None:
                nested_amounts[token_out] = "0"
                continue
            key = to_chained_reference(asset_index)
            output_references.append(OutputReference(index=asset_index, key=key))
            nested_amounts[token_out] = str(key)

        encoded_batch_swap = encode_batch_swap(
            SwapType.SWAP_EXACT_IN,
            query.swaps,
            query.assets,
            params.funds,
            limits,
            self.config.deadline,
            0,
            output_references,
        )
        return encoded_batch_swap, nested_amounts

    async def swap_unwrap_exact_in(
        self,
        tokens_in: Sequence[str],
        wrapped_tokens: Sequence[str],
        amounts_in: Sequence[str],
        rates: Sequence[str],
        funds: FundManagement,
        slippage: str,
        unwrap_type: UnwrapType | None = None,
        fetch_pools: FetchPoolsInput | None = None,
    ) -> TransactionData:
        """Swap tokens_in to wrapped tokens and unwrap them to the underlying.

        Args:
            tokens_in: Tokens swapped in
            wrapped_tokens: Wrapped tokens swapped into, then unwrapped
            amounts_in: Amount per token in
            rates: Wrapped-to-underlying rate per wrapped token (18 decimals)
            funds: Swap funding. `recipient` must be the relayer.
            slippage: 18-decimal fraction applied to the swap limits
            unwrap_type: Protocol for all wrapped tokens. When omitted, each
                token's protocol comes from its linear pool.
            fetch_pools: Router pool-fetching preference

        Returns:
            Multicall whose `amountsOut` are the unwrapped amounts
        """
        _check_lengths("tokens_in", tokens_in, "amounts_in", amounts_in)
        _check_lengths("wrapped_tokens", wrapped_tokens, "rates", rates)

        query = await self.router.query_batch_swap(
            tokens_in,
            wrapped_tokens,
            SwapType.SWAP_EXACT_IN,
            amounts_in,
            fetch_pools or self.config.fetch_pools,
        )
        limits = get_limits_for_slippage(
            tokens_in, wrapped_tokens, SwapType.SWAP_EXACT_IN, query.deltas, query.assets, slippage
        )
        calls = self.encode_swap_unwrap(
            wrapped_tokens,
            SwapType.SWAP_EXACT_IN,
            query.swaps,
            query.assets,
            funds,
            limits,
            unwrap_type,
        )
        amounts_unwrapped = [
            abs(int(amount)) * int(rate) // ONE
            for amount, rate in zip(query.return_amounts, rates, strict=True)
        ]
        return TransactionData(
            params=calls, outputs={"amountsOut": [str(a) for a in amounts_unwrapped]}
        )

    async def swap_unwrap_exact_out(
        self,
        tokens_in: Sequence[str],
        wrapped_tokens: Sequence[str],
        amounts_unwrapped: Sequence[str],
        rates: Sequence[str],
        funds: FundManagement,
        slippage: str,
        unwrap_type: UnwrapType | None = None,
        fetch_pools: FetchPoolsInput | None = None,
    ) -> TransactionData:
        """Swap tokens_in for exact wrapped amounts and unwrap them.

        `amounts_unwrapped` are the underlying amounts wanted; they are
        converted to wrapped amounts with `amount * 1e18 / rate`.

        Returns:
            Multicall whose `amountsIn` are the amounts of tokens_in
        """
        _check_lengths("wrapped_tokens", wrapped_tokens, "amounts_unwrapped", amounts_unwrapped)
        _check_lengths("wrapped_tokens", wrapped_tokens, "rates", rates)

        amounts_wrapped = [
            str(int(amount) * ONE // int(rate))
            for amount, rate in zip(amounts_unwrapped, rates, strict=True)
        ]
        query = await self.router.query_batch_swap(
            tokens_in,
            wrapped_tokens,
            SwapType.SWAP_EXACT_OUT,
            amounts_wrapped,
            fetch_pools or self.config.fetch_pools,
        )
        limits = get_limits_for_slippage(
            tokens_in, wrapped_tokens, SwapType.SWAP_EXACT_OUT, query.deltas, query.assets, slippage
        )
        calls = self.encode_swap_unwrap(
            wrapped_tokens,
            SwapType.SWAP_EXACT_OUT,
            query.swaps,
            query.assets,
            funds,
            limits,
            unwrap_type,
        )
        return TransactionData(
            params=calls, outputs={"amountsIn": [str(a) for a in query.return_amounts]}
        )
