"""Pytest configuration and fixtures."""

from collections.abc import Iterator

import pytest
import structlog

from relayer_sdk.config import RelayerConfig
from relayer_sdk.models import Pool, PoolType
from relayer_sdk.relayer import PoolIndex, Relayer
from tests.helpers import StaticRouter, boosted_pools, make_stable_pool


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Undo logging configuration made by a test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def stable_pool() -> Pool:
    """Balanced DAI/USDC stable pool, amp 100, supply equal to its invariant."""
    return make_stable_pool()


@pytest.fixture
def composable_stable_pool() -> Pool:
    """Balanced DAI/USDC composable stable pool (holds its own BPT)."""
    return make_stable_pool(pool_type=PoolType.COMPOSABLE_STABLE)


@pytest.fixture
def pools() -> list[Pool]:
    """Boosted pool setup (see boosted_pools)."""
    return boosted_pools()


@pytest.fixture
def pool_index(pools: list[Pool]) -> PoolIndex:
    return PoolIndex.from_pools(pools)


@pytest.fixture
def config() -> RelayerConfig:
    return RelayerConfig()


@pytest.fixture
def static_router(pools: list[Pool]) -> StaticRouter:
    """Router over the boosted setup with no canned result."""
    return StaticRouter(pools)


@pytest.fixture
def relayer(static_router: StaticRouter, config: RelayerConfig) -> Relayer:
    return Relayer(static_router, config)
