"""Balancer batch relayer SDK - Python Implementation."""

from relayer_sdk.config import DEFAULT_CONFIG, RelayerConfig, configure_logging
from relayer_sdk.pricing import StablePoolPriceImpact
from relayer_sdk.relayer import Relayer, SwapRouter

__version__ = "0.1.0"
__all__ = [
    "DEFAULT_CONFIG",
    "Relayer",
    "RelayerConfig",
    "StablePoolPriceImpact",
    "SwapRouter",
    "__version__",
    "configure_logging",
]
