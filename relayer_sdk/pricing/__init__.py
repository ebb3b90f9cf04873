"""Stable pool pricing: spot price, zero-price-impact BPT and price impact."""

from .parsing import StablePoolInfo, parse_pool_info, scaling_factor_for, upscale
from .price_impact import (
    StablePoolPriceImpact,
    bpt_zero_price_impact,
    calc_price_impact,
    price_impact_to_percent,
)
from .stable_math import bpt_spot_price, calculate_invariant

__all__ = [
    "StablePoolInfo",
    "StablePoolPriceImpact",
    "bpt_spot_price",
    "bpt_zero_price_impact",
    "calc_price_impact",
    "calculate_invariant",
    "parse_pool_info",
    "price_impact_to_percent",
    "scaling_factor_for",
    "upscale",
]
