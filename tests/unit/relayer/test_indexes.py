"""Tests for per-call pool lookups and nested pool discovery."""

import pytest

from relayer_sdk.errors import LinearPoolNotFoundError, PoolNotFoundError, TokenNotFoundError
from relayer_sdk.models import PoolType
from relayer_sdk.relayer import PoolIndex
from tests.helpers import boosted_pools, make_pool, make_token
from tests.helpers.constants import (
    BB_A_DAI,
    BB_A_DAI_ID,
    BB_A_USD,
    BB_A_USDC,
    BOOSTED_POOL_ID,
    DAI,
    SWAP_POOL_ID,
    UNKNOWN_POOL_ID,
    UNKNOWN_TOKEN,
    USDC,
    WA_DAI,
    WA_USDC,
    WEIGHTED_POOL,
    WEIGHTED_POOL_ID,
    WETH,
)


class TestLookups:
    def test_get_pool(self, pool_index: PoolIndex) -> None:
        assert pool_index.get_pool(BB_A_DAI_ID).address == BB_A_DAI
        assert pool_index.get_pool(BB_A_DAI_ID.upper().replace("0X", "0x")).id == BB_A_DAI_ID

    def test_get_pool_not_found(self, pool_index: PoolIndex) -> None:
        with pytest.raises(PoolNotFoundError, match=UNKNOWN_POOL_ID):
            pool_index.get_pool(UNKNOWN_POOL_ID)

    def test_not_found_is_lookup_error(self, pool_index: PoolIndex) -> None:
        with pytest.raises(LookupError):
            pool_index.get_pool(UNKNOWN_POOL_ID)

    def test_linear_pool_for_wrapped_token(self, pool_index: PoolIndex) -> None:
        assert pool_index.get_linear_pool_for_wrapped_token(WA_USDC).address == BB_A_USDC

    def test_linear_pool_not_found(self, pool_index: PoolIndex) -> None:
        with pytest.raises(LinearPoolNotFoundError):
            pool_index.get_linear_pool_for_wrapped_token(DAI)

    def test_require_token(self, pool_index: PoolIndex) -> None:
        assert pool_index.require_token(WETH.upper().replace("0X", "0x")) == WETH

    def test_require_token_not_found(self, pool_index: PoolIndex) -> None:
        with pytest.raises(TokenNotFoundError):
            pool_index.require_token(UNKNOWN_TOKEN)

    def test_maps_are_read_only(self, pool_index: PoolIndex) -> None:
        with pytest.raises(TypeError):
            pool_index.pools_by_id["0x"] = pool_index.get_pool(SWAP_POOL_ID)  # type: ignore[index]

    def test_snapshot_independent_of_source_list(self) -> None:
        pools = boosted_pools()
        index = PoolIndex.from_pools(pools)
        pools.clear()
        assert index.get_pool(SWAP_POOL_ID).id == SWAP_POOL_ID


class TestNestedLinearPools:
    def test_through_composable_stable(self, pool_index: PoolIndex) -> None:
        """bb-a-USD/WETH pool: both linear pools inside bb-a-USD are found."""
        nested = pool_index.nested_linear_pools(pool_index.get_pool(BOOSTED_POOL_ID))

        assert [(n.main_token, n.pool_token_address) for n in nested] == [
            (DAI, BB_A_USD),
            (USDC, BB_A_USD),
        ]
        assert nested[0].pool.wrapped_token.address == WA_DAI

    def test_direct_linear_bpt(self) -> None:
        pools = [
            *boosted_pools(),
            make_pool(
                WEIGHTED_POOL_ID,
                WEIGHTED_POOL,
                PoolType.WEIGHTED,
                [make_token(BB_A_DAI), make_token(WETH)],
            ),
        ]
        index = PoolIndex.from_pools(pools)

        nested = index.nested_linear_pools(index.get_pool(WEIGHTED_POOL_ID))

        assert len(nested) == 1
        assert nested[0].main_token == DAI
        assert nested[0].pool_token_address == BB_A_DAI

    def test_plain_pool_has_none(self, pool_index: PoolIndex) -> None:
        assert pool_index.nested_linear_pools(pool_index.get_pool(SWAP_POOL_ID)) == []

    def test_own_bpt_not_followed(self, pool_index: PoolIndex) -> None:
        """A linear pool lists its own BPT; that is not nesting."""
        assert pool_index.nested_linear_pools(pool_index.get_pool(BB_A_DAI_ID)) == []
