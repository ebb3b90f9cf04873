"""Balancer stable pool math for price estimates.

Balances are 18-decimal scaled integers (Bfp) with the pool's own BPT
removed. The amplification parameter carries AMP_PRECISION.
"""

from relayer_sdk.constants import AMP_PRECISION
from relayer_sdk.errors import StableInvariantDidNotConverge
from relayer_sdk.math.fixed_point import Bfp

# Maximum iterations for Newton-Raphson convergence
_STABLE_MAX_ITERATIONS = 255


def calculate_invariant(amp: int, balances: list[Bfp]) -> Bfp:
    """Calculate StableSwap invariant D using Newton-Raphson iteration.

    Uses Balancer's parameterization where the Newton-Raphson formula uses
    A*n (not A*n^n). The n^n factor is incorporated through the iterative
    d_p calculation.

    Algorithm:
        1. Initial guess: D = sum(balances)
        2. Iterate until |D_new - D_old| <= 1 wei
        3. Max iterations: 255

    An all-zero pool has invariant zero.

    Raises:
        StableInvariantDidNotConverge: If iteration doesn't converge
        ZeroDivisionError: If some but not all balances are zero
    """
    n_coins = len(balances)
    sum_balances = sum(b.value for b in balances)
    if sum_balances == 0:
        return Bfp(0)

    d_prev = sum_balances
    amp_times_n = amp * n_coins

    for _ in range(_STABLE_MAX_ITERATIONS):
        # d_p = D^(n+1) / (n^n * prod(balances)), built one balance at a time
        d_p = d_prev
        for bal in balances:
            d_p = (d_p * d_prev) // (n_coins * bal.value)

        numerator = ((amp_times_n * sum_balances) // AMP_PRECISION + d_p * n_coins) * d_prev
        denominator = ((amp_times_n - AMP_PRECISION) * d_prev) // AMP_PRECISION + (
            n_coins + 1
        ) * d_p
        d_new = numerator // denominator

        if abs(d_new - d_prev) <= 1:
            return Bfp(d_new)
        d_prev = d_new

    raise StableInvariantDidNotConverge(
        f"Stable invariant did not converge after {_STABLE_MAX_ITERATIONS} iterations"
    )


def bpt_spot_price(amp: int, balances: list[Bfp], bpt_supply: int, token_index: int) -> Bfp:
    """Marginal BPT minted per unit of `balances[token_index]` added.

    Implicit differentiation of the invariant, written as a quadratic in
    x = balances[token_index]:

        G(x, D) = a*x^2 + a*S*x + (1 - a)*D*x - D_P*D = 0

    where a = amp * n, S is the sum of the other balances and
    D_P = D^n / (n^n * prod(other balances)). Then

        dD/dx = G_x / -G_D
        G_x   = 2*a*x + a*S + (1 - a)*D
        -G_D  = (n + 1)*D_P - (1 - a)*x

    and the BPT price is supply * dD/dx / D. Both partials are kept in
    AMP_PRECISION units so the ratio is exact up to the final divisions.

    Args:
        amp: Amplification parameter (scaled by AMP_PRECISION)
        balances: Upscaled balances without BPT
        bpt_supply: BPT total supply in wei
        token_index: Token whose marginal price is requested

    Returns:
        Spot price as 18-decimal fixed point (BPT per token)

    Raises:
        IndexError: If token_index is out of range
    """
    n_coins = len(balances)
    if token_index < 0 or token_index >= n_coins:
        raise IndexError(f"token_index {token_index} out of range for {n_coins} tokens")

    invariant = calculate_invariant(amp, balances).value

    sum_others = 0
    d_p = invariant // n_coins
    for j, bal in enumerate(balances):
        if j == token_index:
            continue
        sum_others += bal.value
        d_p = (d_p * invariant) // (n_coins * bal.value)

    x = balances[token_index].value
    alpha = amp * n_coins
    beta = alpha * sum_others
    gamma = AMP_PRECISION - alpha

    partial_x = 2 * alpha * x + beta + gamma * invariant
    minus_partial_d = d_p * (n_coins + 1) * AMP_PRECISION - gamma * x

    return Bfp.from_wei((partial_x * bpt_supply) // minus_partial_d).div_up(Bfp(invariant))
