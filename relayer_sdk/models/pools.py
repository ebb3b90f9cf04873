"""Pydantic models for pool snapshots returned by the router.

Field names follow the subgraph schema (camelCase aliases). Balances and
total shares are human-unit decimal strings, as the subgraph serves them.
"""

from enum import Enum

from pydantic import BaseModel, Field

from relayer_sdk.models.types import Address, Bytes32, normalize_address


class PoolType(str, Enum):
    """Pool type tag as reported by the subgraph."""

    WEIGHTED = "Weighted"
    INVESTMENT = "Investment"
    LIQUIDITY_BOOTSTRAPPING = "LiquidityBootstrapping"
    STABLE = "Stable"
    META_STABLE = "MetaStable"
    STABLE_PHANTOM = "StablePhantom"
    COMPOSABLE_STABLE = "ComposableStable"
    LINEAR = "Linear"
    AAVE_LINEAR = "AaveLinear"
    ERC4626_LINEAR = "ERC4626Linear"
    YEARN_LINEAR = "YearnLinear"
    ELEMENT = "Element"
    GYRO2 = "Gyro2"
    GYRO3 = "Gyro3"


LINEAR_POOL_TYPES = frozenset(
    {PoolType.LINEAR, PoolType.AAVE_LINEAR, PoolType.ERC4626_LINEAR, PoolType.YEARN_LINEAR}
)

# Pools whose own BPT is registered as one of their tokens
BPT_HOLDING_POOL_TYPES = frozenset({PoolType.STABLE_PHANTOM, PoolType.COMPOSABLE_STABLE})


class PoolToken(BaseModel):
    """One token of a pool snapshot."""

    address: Address
    balance: str = Field(description="Balance in human units, e.g. '1250.5'")
    # Exotic tokens may use more than 18 decimals; uint256 caps at 77 digits
    decimals: int = Field(default=18, ge=0, le=77)
    price_rate: str = Field(default="1", alias="priceRate")
    symbol: str | None = None

    model_config = {"populate_by_name": True, "frozen": True}


class Pool(BaseModel):
    """Immutable snapshot of one liquidity pool at query time."""

    id: Bytes32
    address: Address
    pool_type: PoolType = Field(alias="poolType")
    tokens: tuple[PoolToken, ...]
    swap_fee: str = Field(default="0", alias="swapFee")
    total_shares: str = Field(default="0", alias="totalShares")
    amp: str | None = None
    main_index: int | None = Field(default=None, alias="mainIndex")
    wrapped_index: int | None = Field(default=None, alias="wrappedIndex")
    factory: Address | None = None

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def tokens_list(self) -> list[str]:
        """Token addresses (lowercase) in pool order."""
        return [normalize_address(t.address) for t in self.tokens]

    @property
    def is_linear(self) -> bool:
        return self.pool_type in LINEAR_POOL_TYPES

    @property
    def holds_own_bpt(self) -> bool:
        return self.pool_type in BPT_HOLDING_POOL_TYPES

    @property
    def main_token(self) -> PoolToken:
        """Main (underlying) token of a linear pool. Index defaults to 0."""
        return self.tokens[self.main_index or 0]

    @property
    def wrapped_token(self) -> PoolToken:
        """Wrapped (yield-bearing) token of a linear pool. Index defaults to 1."""
        index = self.wrapped_index if self.wrapped_index is not None else 1
        return self.tokens[index]

    def get_token(self, address: str) -> PoolToken | None:
        address_norm = normalize_address(address)
        for token in self.tokens:
            if normalize_address(token.address) == address_norm:
                return token
        return None
