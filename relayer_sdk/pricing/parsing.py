"""Stable pool snapshot parsing.

Converts a subgraph-style pool snapshot (human-unit strings) into the
scaled integers the stable math operates on.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from relayer_sdk.constants import ONE
from relayer_sdk.errors import InvalidScalingFactorError, UnsupportedPoolTypeError
from relayer_sdk.math.fixed_point import Bfp
from relayer_sdk.models.pools import Pool, PoolToken
from relayer_sdk.models.types import normalize_address, parse_units

logger = structlog.get_logger()


@dataclass(frozen=True)
class StablePoolInfo:
    """Scaled view of a stable pool with its own BPT removed.

    Attributes:
        tokens: Token addresses without BPT, in pool order
        amp_with_precision: A * AMP_PRECISION
        scaling_factors: Per-token factor in 1e18 units, including price rate
        upscaled_balances: Balances normalized to 18 decimals
        total_shares: BPT supply in wei
    """

    tokens: tuple[str, ...]
    amp_with_precision: int
    scaling_factors: tuple[int, ...]
    upscaled_balances: tuple[Bfp, ...]
    total_shares: int


def scaling_factor_for(token: PoolToken) -> int:
    """10^(18 - decimals) * price_rate, expressed in 1e18 units.

    Raises:
        InvalidScalingFactorError: If the factor is not positive
    """
    factor = parse_units(token.price_rate, 36 - token.decimals)
    if factor <= 0:
        raise InvalidScalingFactorError(
            f"Scaling factor must be positive for {token.address}, got {factor}"
        )
    return factor


def upscale(amount: int, scaling_factor: int) -> Bfp:
    """Scale a raw token amount to 18 decimals (rounding down)."""
    if scaling_factor <= 0:
        raise InvalidScalingFactorError(f"Scaling factor must be positive, got {scaling_factor}")
    return Bfp.from_wei(amount * scaling_factor // ONE)


def tokens_without_bpt(pool: Pool) -> tuple[PoolToken, ...]:
    """Pool tokens with the pool's own BPT removed.

    Detection: BPT token address == pool address
    """
    if not pool.holds_own_bpt:
        return pool.tokens
    pool_address = normalize_address(pool.address)
    return tuple(t for t in pool.tokens if normalize_address(t.address) != pool_address)


def parse_pool_info(pool: Pool) -> StablePoolInfo:
    """Parse a stable pool snapshot into scaled, BPT-filtered values.

    Raises:
        UnsupportedPoolTypeError: If the pool has no amplification parameter
        InvalidScalingFactorError: If a token's scaling factor is not positive
    """
    if pool.amp is None:
        raise UnsupportedPoolTypeError(
            f"Pool {pool.id} ({pool.pool_type.value}) has no amplification parameter"
        )

    tokens = tokens_without_bpt(pool)
    scaling_factors = tuple(scaling_factor_for(t) for t in tokens)
    balances = tuple(
        upscale(parse_units(t.balance, t.decimals), factor)
        for t, factor in zip(tokens, scaling_factors, strict=True)
    )

    info = StablePoolInfo(
        tokens=tuple(normalize_address(t.address) for t in tokens),
        amp_with_precision=parse_units(pool.amp, 3),
        scaling_factors=scaling_factors,
        upscaled_balances=balances,
        total_shares=parse_units(pool.total_shares, 18),
    )
    logger.debug(
        "stable_pool_parsed",
        pool_id=pool.id,
        token_count=len(info.tokens),
        amp=info.amp_with_precision,
    )
    return info
