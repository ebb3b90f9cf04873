"""Pydantic models for pool snapshots, relayer inputs and transactions."""

from relayer_sdk.models.pools import Pool, PoolToken, PoolType
from relayer_sdk.models.relayer import (
    BatchRelayerJoinPool,
    BatchSwapStep,
    ExitAndBatchSwapInput,
    ExitPoolRequest,
    FetchPoolsInput,
    FundManagement,
    JoinPoolRequest,
    JoinToken,
    JoinType,
    NestedLinearPool,
    OutputReference,
    PoolKind,
    QueryBatchSwapResult,
    SwapType,
    TransactionData,
    UnwrapType,
)

__all__ = [
    "BatchRelayerJoinPool",
    "BatchSwapStep",
    "ExitAndBatchSwapInput",
    "ExitPoolRequest",
    "FetchPoolsInput",
    "FundManagement",
    "JoinPoolRequest",
    "JoinToken",
    "JoinType",
    "NestedLinearPool",
    "OutputReference",
    "Pool",
    "PoolKind",
    "PoolToken",
    "PoolType",
    "QueryBatchSwapResult",
    "SwapType",
    "TransactionData",
    "UnwrapType",
]
