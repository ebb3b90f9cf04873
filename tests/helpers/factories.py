"""Factory functions for creating test objects.

Usage:
    from tests.helpers import make_pool, make_token
    # or
    from tests.helpers.factories import make_stable_pool, StaticRouter

    pool = make_stable_pool(balances=("1000", "1000"))
"""

from collections.abc import Sequence

from relayer_sdk.models import (
    BatchSwapStep,
    FetchPoolsInput,
    Pool,
    PoolToken,
    PoolType,
    QueryBatchSwapResult,
    SwapType,
)
from tests.helpers.constants import (
    BB_A_DAI,
    BB_A_DAI_ID,
    BB_A_USD,
    BB_A_USD_ID,
    BB_A_USDC,
    BB_A_USDC_ID,
    BOOSTED_POOL,
    BOOSTED_POOL_ID,
    DAI,
    STABLE_POOL,
    STABLE_POOL_ID,
    SWAP_POOL,
    SWAP_POOL_ID,
    USDC,
    WA_DAI,
    WA_USDC,
    WEIGHTED_POOL,
    WEIGHTED_POOL_ID,
    WETH,
)


def make_token(
    address: str,
    balance: str = "1000",
    decimals: int = 18,
    price_rate: str = "1",
) -> PoolToken:
    """Create a pool token with human-unit balance."""
    return PoolToken(address=address, balance=balance, decimals=decimals, price_rate=price_rate)


def make_pool(
    pool_id: str,
    address: str,
    pool_type: PoolType,
    tokens: Sequence[PoolToken],
    amp: str | None = None,
    total_shares: str = "0",
    factory: str | None = None,
    main_index: int | None = None,
    wrapped_index: int | None = None,
) -> Pool:
    """Create a pool snapshot.

    Args:
        pool_id: 32-byte pool id
        address: Pool (BPT) address
        pool_type: Pool type tag
        tokens: Pool tokens in pool order
        amp: Amplification parameter, unscaled (stable pools only)
        total_shares: BPT supply in human units
        factory: Factory address (linear pools)
        main_index: Main token index (linear pools)
        wrapped_index: Wrapped token index (linear pools)

    Returns:
        Pool instance ready for testing
    """
    return Pool(
        id=pool_id,
        address=address,
        pool_type=pool_type,
        tokens=tuple(tokens),
        amp=amp,
        total_shares=total_shares,
        factory=factory,
        main_index=main_index,
        wrapped_index=wrapped_index,
    )


def make_stable_pool(
    balances: Sequence[str] = ("1000", "1000"),
    decimals: Sequence[int] = (18, 6),
    amp: str = "100",
    total_shares: str = "2000",
    pool_type: PoolType = PoolType.STABLE,
) -> Pool:
    """DAI/USDC stable pool. ComposableStable pools also list their own BPT."""
    addresses = [DAI, USDC]
    tokens = [
        make_token(addr, balance, dec)
        for addr, balance, dec in zip(addresses, balances, decimals, strict=True)
    ]
    if pool_type in (PoolType.COMPOSABLE_STABLE, PoolType.STABLE_PHANTOM):
        tokens.append(make_token(STABLE_POOL, "2596148429267413.814265248164610048"))
    return make_pool(
        STABLE_POOL_ID,
        STABLE_POOL,
        pool_type,
        tokens,
        amp=amp,
        total_shares=total_shares,
    )


def make_linear_pool(
    pool_id: str,
    address: str,
    main_token: str,
    wrapped_token: str,
    pool_type: PoolType = PoolType.AAVE_LINEAR,
    price_rate: str = "1",
    factory: str | None = None,
) -> Pool:
    """Linear pool with tokens [main, wrapped, own BPT]."""
    return make_pool(
        pool_id,
        address,
        pool_type,
        [
            make_token(main_token),
            make_token(wrapped_token, price_rate=price_rate),
            make_token(address, "5192296858534827.628530496329220095"),
        ],
        factory=factory,
        main_index=0,
        wrapped_index=1,
    )


def boosted_pools(
    dai_unwrap_type: PoolType = PoolType.AAVE_LINEAR,
    wa_dai_rate: str = "1",
    factory: str | None = None,
) -> list[Pool]:
    """Pools around a bb-a-USD boosted setup.

    - WEIGHTED_POOL: DAI/USDC weighted pool (exit source)
    - SWAP_POOL: DAI/USDC/WETH weighted pool (swap venue)
    - BB_A_DAI, BB_A_USDC: linear pools wrapping waDAI and waUSDC
    - BB_A_USD: composable stable pool of the two linear BPTs
    - BOOSTED_POOL: bb-a-USD/WETH weighted pool (join target)
    """
    return [
        make_pool(
            WEIGHTED_POOL_ID,
            WEIGHTED_POOL,
            PoolType.WEIGHTED,
            [make_token(DAI), make_token(USDC, decimals=6)],
        ),
        make_pool(
            SWAP_POOL_ID,
            SWAP_POOL,
            PoolType.WEIGHTED,
            [make_token(DAI), make_token(USDC, decimals=6), make_token(WETH)],
        ),
        make_linear_pool(
            BB_A_DAI_ID, BB_A_DAI, DAI, WA_DAI, dai_unwrap_type, wa_dai_rate, factory
        ),
        make_linear_pool(
            BB_A_USDC_ID, BB_A_USDC, USDC, WA_USDC, PoolType.ERC4626_LINEAR, "1.05"
        ),
        make_pool(
            BB_A_USD_ID,
            BB_A_USD,
            PoolType.COMPOSABLE_STABLE,
            [make_token(BB_A_DAI), make_token(BB_A_USD), make_token(BB_A_USDC)],
            amp="1472",
            total_shares="2000",
        ),
        make_pool(
            BOOSTED_POOL_ID,
            BOOSTED_POOL,
            PoolType.WEIGHTED,
            [make_token(BB_A_USD), make_token(WETH)],
        ),
    ]


def make_query_result(
    swaps: Sequence[tuple[str, int, int, int | str]],
    assets: Sequence[str],
    deltas: Sequence[int],
    return_amounts: Sequence[int],
) -> QueryBatchSwapResult:
    """Router result from (pool_id, asset_in_index, asset_out_index, amount) legs."""
    return QueryBatchSwapResult(
        swaps=[
            BatchSwapStep(
                pool_id=pool_id,
                asset_in_index=asset_in,
                asset_out_index=asset_out,
                amount=amount,
            )
            for pool_id, asset_in, asset_out, amount in swaps
        ],
        assets=list(assets),
        deltas=[str(d) for d in deltas],
        return_amounts=[str(r) for r in return_amounts],
    )


class StaticRouter:
    """Router double answering every query with a fixed result.

    Usage:
        router = StaticRouter(pools, result=make_query_result(...))
        relayer = Relayer(router)
        ...
        assert router.queries[0]["amounts"] == ["99", "198"]
    """

    def __init__(
        self,
        pools: list[Pool],
        result: QueryBatchSwapResult | None = None,
    ) -> None:
        self.pools = pools
        self.result = result
        self.queries: list[dict] = []  # Track calls for assertions
        self.fetch_count = 0

    async def query_batch_swap(
        self,
        tokens_in: Sequence[str],
        tokens_out: Sequence[str],
        swap_type: SwapType,
        amounts: Sequence[str],
        fetch_pools: FetchPoolsInput,
    ) -> QueryBatchSwapResult:
        self.queries.append(
            {
                "tokens_in": list(tokens_in),
                "tokens_out": list(tokens_out),
                "swap_type": swap_type,
                "amounts": list(amounts),
                "fetch_pools": fetch_pools,
            }
        )
        if self.result is None:
            raise AssertionError("StaticRouter was queried but has no result")
        return self.result

    async def fetch_pools(self) -> bool:
        self.fetch_count += 1
        return True

    def get_pools(self) -> list[Pool]:
        return self.pools
