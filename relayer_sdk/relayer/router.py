"""Router collaborator interface.

The composer never routes on its own. A router finds swap paths, reports
expected deltas and owns the pool data cache; anything satisfying
SwapRouter can be plugged into a Relayer.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from relayer_sdk.models.pools import Pool
from relayer_sdk.models.relayer import FetchPoolsInput, QueryBatchSwapResult, SwapType


@runtime_checkable
class SwapRouter(Protocol):
    """Path-finding oracle used by the composer."""

    async def query_batch_swap(
        self,
        tokens_in: Sequence[str],
        tokens_out: Sequence[str],
        swap_type: SwapType,
        amounts: Sequence[str],
        fetch_pools: FetchPoolsInput,
    ) -> QueryBatchSwapResult:
        """Find swaps converting tokens_in to tokens_out.

        For exact-in queries `amounts` are per token in; for exact-out they
        are per token out.
        """
        ...

    async def fetch_pools(self) -> bool:
        """Refresh the router's pool data. Returns False if fetching failed."""
        ...

    def get_pools(self) -> list[Pool]:
        """Pools currently known to the router."""
        ...
