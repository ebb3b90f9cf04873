"""Configuration for the relayer SDK."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

import structlog

from relayer_sdk.constants import MAX_UINT256
from relayer_sdk.models.relayer import FetchPoolsInput, UnwrapType
from relayer_sdk.models.types import is_valid_address, normalize_address

_TRUTHY = ("true", "1", "yes")


@dataclass(frozen=True)
class RelayerConfig:
    """Composer settings.

    Attributes:
        default_unwrap_type: Protocol assumed for linear pools whose factory
            and pool type are both unknown
        linear_pool_factories: Linear pool factory address -> wrapping protocol
        deadline: Batch swap deadline (default: no deadline)
        fetch_pools: Router pool-fetching preference when callers give none
    """

    default_unwrap_type: UnwrapType = UnwrapType.AAVE
    linear_pool_factories: Mapping[str, UnwrapType] = field(default_factory=dict)
    deadline: int = MAX_UINT256
    fetch_pools: FetchPoolsInput = field(default_factory=FetchPoolsInput)

    def __post_init__(self) -> None:
        normalized = {normalize_address(k): v for k, v in self.linear_pool_factories.items()}
        object.__setattr__(self, "linear_pool_factories", normalized)

    def unwrap_type_for_factory(self, factory: str) -> UnwrapType | None:
        return self.linear_pool_factories.get(normalize_address(factory))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RelayerConfig:
        """Build a config from environment variables.

        - RELAYER_DEFAULT_UNWRAP_TYPE: aave | yearn | erc4626 (default: aave)
        - RELAYER_LINEAR_FACTORIES: comma-separated `address=type` pairs
        - RELAYER_DEADLINE: batch swap deadline (default: max uint256)
        - RELAYER_FETCH_POOLS: refresh router pools per query (default: true)
        - RELAYER_FETCH_ONCHAIN: use on-chain balances (default: false)

        Raises:
            ValueError: If a value cannot be parsed
        """
        env = os.environ if environ is None else environ

        factories: dict[str, UnwrapType] = {}
        for entry in env.get("RELAYER_LINEAR_FACTORIES", "").split(","):
            if not entry.strip():
                continue
            address, _, unwrap_type = entry.partition("=")
            address = address.strip()
            if not is_valid_address(address):
                raise ValueError(f"Invalid factory address in RELAYER_LINEAR_FACTORIES: {address}")
            factories[address] = UnwrapType(unwrap_type.strip().lower())

        return cls(
            default_unwrap_type=UnwrapType(
                env.get("RELAYER_DEFAULT_UNWRAP_TYPE", UnwrapType.AAVE.value).lower()
            ),
            linear_pool_factories=factories,
            deadline=int(env.get("RELAYER_DEADLINE", str(MAX_UINT256))),
            fetch_pools=FetchPoolsInput(
                fetch_pools=env.get("RELAYER_FETCH_POOLS", "true").lower() in _TRUTHY,
                fetch_on_chain=env.get("RELAYER_FETCH_ONCHAIN", "false").lower() in _TRUTHY,
            ),
        )


# Default configuration instance
DEFAULT_CONFIG = RelayerConfig()


def configure_logging(verbose: bool = False) -> None:
    """Configure structlog console output at INFO, or DEBUG when verbose."""
    log_level = logging.DEBUG if verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )
