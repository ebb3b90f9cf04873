"""Read-only pool lookups for one composition.

A PoolIndex is built once from the router's current pool list when a
composing call starts, and every lookup in that call goes through it. Keys
are lowercase addresses and pool ids.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from relayer_sdk.errors import LinearPoolNotFoundError, PoolNotFoundError, TokenNotFoundError
from relayer_sdk.models.pools import BPT_HOLDING_POOL_TYPES, Pool
from relayer_sdk.models.relayer import NestedLinearPool
from relayer_sdk.models.types import normalize_address


@dataclass(frozen=True)
class PoolIndex:
    """Point-in-time lookup maps over a pool list.

    Attributes:
        pools_by_id: Pool id -> pool
        pools_by_address: Pool address (its BPT) -> pool
        linear_pools_by_address: Linear pool BPT -> linear pool
        linear_pools_by_wrapped_token: Wrapped token -> issuing linear pool
        composable_stable_pools_by_address: Composable stable BPT -> pool
        tokens: Every token held by any pool
    """

    pools_by_id: Mapping[str, Pool]
    pools_by_address: Mapping[str, Pool]
    linear_pools_by_address: Mapping[str, Pool]
    linear_pools_by_wrapped_token: Mapping[str, Pool]
    composable_stable_pools_by_address: Mapping[str, Pool]
    tokens: frozenset[str]

    @classmethod
    def from_pools(cls, pools: Iterable[Pool]) -> PoolIndex:
        by_id: dict[str, Pool] = {}
        by_address: dict[str, Pool] = {}
        linear: dict[str, Pool] = {}
        linear_by_wrapped: dict[str, Pool] = {}
        composable: dict[str, Pool] = {}
        tokens: set[str] = set()

        for pool in pools:
            address = normalize_address(pool.address)
            by_id[pool.id.lower()] = pool
            by_address[address] = pool
            tokens.update(pool.tokens_list)
            if pool.is_linear:
                linear[address] = pool
                linear_by_wrapped[normalize_address(pool.wrapped_token.address)] = pool
            elif pool.pool_type in BPT_HOLDING_POOL_TYPES:
                composable[address] = pool

        return cls(
            pools_by_id=MappingProxyType(by_id),
            pools_by_address=MappingProxyType(by_address),
            linear_pools_by_address=MappingProxyType(linear),
            linear_pools_by_wrapped_token=MappingProxyType(linear_by_wrapped),
            composable_stable_pools_by_address=MappingProxyType(composable),
            tokens=frozenset(tokens),
        )

    def get_pool(self, pool_id: str) -> Pool:
        """Pool with the given id.

        Raises:
            PoolNotFoundError: If no pool has this id
        """
        pool = self.pools_by_id.get(pool_id.lower())
        if pool is None:
            raise PoolNotFoundError(f"No pool found with id: {pool_id}")
        return pool

    def get_linear_pool_for_wrapped_token(self, wrapped_token: str) -> Pool:
        """Linear pool issuing `wrapped_token`.

        Raises:
            LinearPoolNotFoundError: If no linear pool wraps this token
        """
        pool = self.linear_pools_by_wrapped_token.get(normalize_address(wrapped_token))
        if pool is None:
            raise LinearPoolNotFoundError(f"No linear pool found for wrapped token: {wrapped_token}")
        return pool

    def require_token(self, token: str) -> str:
        """Normalized token address, if some pool holds it.

        Raises:
            TokenNotFoundError: If no pool holds the token
        """
        address = normalize_address(token)
        if address not in self.tokens:
            raise TokenNotFoundError(f"Token not found in any pool: {token}")
        return address

    def nested_linear_pools(self, pool: Pool) -> list[NestedLinearPool]:
        """Linear pools one level below `pool`.

        A pool token that is a linear pool BPT maps to that linear pool. A
        pool token that is a composable stable BPT maps every linear pool
        inside it, with the composable BPT as the token the outer pool holds.
        Deeper nesting is not followed.
        """
        nested: list[NestedLinearPool] = []
        pool_address = normalize_address(pool.address)
        for token in pool.tokens_list:
            if token == pool_address:
                continue
            linear_pool = self.linear_pools_by_address.get(token)
            if linear_pool is not None:
                nested.append(self._nested(linear_pool, token))
                continue
            composable = self.composable_stable_pools_by_address.get(token)
            if composable is None:
                continue
            for inner_token in composable.tokens_list:
                inner_linear = self.linear_pools_by_address.get(inner_token)
                if inner_linear is not None:
                    nested.append(self._nested(inner_linear, token))
        return nested

    @staticmethod
    def _nested(linear_pool: Pool, pool_token_address: str) -> NestedLinearPool:
        return NestedLinearPool(
            pool=linear_pool,
            main_token=normalize_address(linear_pool.main_token.address),
            pool_token_address=pool_token_address,
        )
