"""18-decimal fixed point used by the stable pool pricing.

Values are integers scaled by 10^18, rounded the way Balancer's
FixedPoint.sol rounds. Price impact is signed, so signed division in the
limit helpers goes through div_trunc rather than floor division.
"""

from __future__ import annotations

from typing import ClassVar

from relayer_sdk.constants import ONE

__all__ = ["Bfp", "div_trunc"]


def div_trunc(a: int, b: int) -> int:
    """Integer division with truncation toward zero (matching Solidity/JS BigInt).

    Python's // operator rounds toward negative infinity. For limits built
    from negative deltas the EVM-style truncation is what the contracts see.

    Raises:
        ZeroDivisionError: If b is zero

    Examples:
        Python: -7 // 3 = -3
        Solidity: -7 / 3 = -2
    """
    if b == 0:
        raise ZeroDivisionError("Division by zero in div_trunc")
    if (a >= 0) == (b >= 0):
        return a // b
    return -(abs(a) // abs(b))


class Bfp:
    """Scaled balance or price; 1.5 is Bfp(1_500_000_000_000_000_000)."""

    ONE: ClassVar[int] = ONE

    __slots__ = ("value",)
    __hash__ = None  # type: ignore[assignment]

    def __init__(self, value: int) -> None:
        self.value = value

    @classmethod
    def from_wei(cls, wei: int) -> Bfp:
        return cls(wei)

    def mul_down(self, other: Bfp) -> Bfp:
        """Product rounded toward zero, for weighting balances by price."""
        return Bfp((self.value * other.value) // self.ONE)

    def div_up(self, other: Bfp) -> Bfp:
        """Quotient rounded up, as the spot price divides by the invariant."""
        if other.value == 0:
            raise ZeroDivisionError("Bfp division by zero")
        scaled = self.value * self.ONE
        if scaled == 0:
            return Bfp(0)
        return Bfp((scaled - 1) // other.value + 1)

    def add(self, other: Bfp) -> Bfp:
        return Bfp(self.value + other.value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bfp):
            return NotImplemented
        return self.value == other.value

    def __repr__(self) -> str:
        return f"Bfp({self.value})"
