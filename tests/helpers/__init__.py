"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Token, pool and account addresses
- factories: Pool snapshot builders and a static router double
"""

from tests.helpers.constants import DAI, RELAYER, USDC, USDT, WETH
from tests.helpers.factories import (
    StaticRouter,
    boosted_pools,
    make_linear_pool,
    make_pool,
    make_query_result,
    make_stable_pool,
    make_token,
)

__all__ = [
    # Constants
    "WETH",
    "USDC",
    "DAI",
    "USDT",
    "RELAYER",
    # Factories
    "StaticRouter",
    "boosted_pools",
    "make_linear_pool",
    "make_pool",
    "make_query_result",
    "make_stable_pool",
    "make_token",
]
