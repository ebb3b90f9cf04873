"""Price impact for stable pool joins and exits.

The zero-price-impact BPT amount values every token at its marginal spot
price; comparing it with the BPT actually minted (join) or burned (exit)
gives the price impact.

Shared by Stable, MetaStable, StablePhantom and ComposableStable pools. The
latter two register their own BPT as a pool token, so amounts are checked
against the token list without BPT.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

import structlog

from relayer_sdk.constants import ONE
from relayer_sdk.errors import InputLengthMismatchError, ZeroBaselineError
from relayer_sdk.math.fixed_point import Bfp
from relayer_sdk.models.pools import Pool

from .parsing import parse_pool_info, upscale
from .stable_math import bpt_spot_price

logger = structlog.get_logger()


def bpt_zero_price_impact(pool: Pool, token_amounts: Sequence[int]) -> int:
    """BPT amount for joining with `token_amounts` at zero price impact.

    Args:
        pool: Stable pool snapshot
        token_amounts: Raw amounts (token decimals), one per non-BPT token

    Returns:
        BPT amount in wei

    Raises:
        InputLengthMismatchError: If the amount count does not match the
            pool's non-BPT token count
    """
    info = parse_pool_info(pool)
    if len(token_amounts) != len(info.upscaled_balances):
        raise InputLengthMismatchError(
            f"Expected {len(info.upscaled_balances)} token amounts, got {len(token_amounts)}"
        )

    balances = list(info.upscaled_balances)
    total = Bfp(0)
    for i, amount in enumerate(token_amounts):
        if amount == 0:
            continue
        price = bpt_spot_price(info.amp_with_precision, balances, info.total_shares, i)
        total = total.add(price.mul_down(upscale(amount, info.scaling_factors[i])))
    return total.value


def calc_price_impact(actual_amount: int, baseline_amount: int, is_join: bool) -> int:
    """Signed price impact as an 18-decimal fraction.

    join: 1 - actual / baseline  (fewer BPT minted than at zero impact)
    exit: 1 - baseline / actual  (more BPT burned than at zero impact)

    Raises:
        ZeroBaselineError: If the divisor is zero
    """
    if is_join:
        numerator, divisor = actual_amount, baseline_amount
    else:
        numerator, divisor = baseline_amount, actual_amount
    if divisor == 0:
        raise ZeroBaselineError("Cannot compute price impact against a zero amount")
    return ONE - (numerator * ONE) // divisor


def price_impact_to_percent(price_impact: int) -> Decimal:
    """Convert an 18-decimal fraction to a percentage, e.g. 10^16 -> 1."""
    return Decimal(price_impact) * 100 / Decimal(ONE)


class StablePoolPriceImpact:
    """Price impact calculator for stable pool families."""

    def bpt_zero_price_impact(self, pool: Pool, token_amounts: Sequence[int]) -> int:
        return bpt_zero_price_impact(pool, token_amounts)

    def calc_price_impact(
        self,
        pool: Pool,
        token_amounts: Sequence[str],
        bpt_amount: str,
        is_join: bool,
    ) -> str:
        """Price impact of joining/exiting with `token_amounts` for `bpt_amount`.

        Returns:
            Signed 18-decimal fraction as decimal string
        """
        baseline = bpt_zero_price_impact(pool, [int(a) for a in token_amounts])
        impact = calc_price_impact(int(bpt_amount), baseline, is_join)
        logger.debug(
            "price_impact_calculated",
            pool_id=pool.id,
            is_join=is_join,
            bpt_amount=bpt_amount,
            bpt_zero_price_impact=str(baseline),
            price_impact=str(impact),
        )
        return str(impact)
