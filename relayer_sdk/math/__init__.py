"""Mathematical utilities for the relayer SDK.

- Bfp: 18-decimal fixed-point arithmetic (Balancer-style)
- div_trunc: integer division truncating toward zero (EVM semantics)
"""

from relayer_sdk.math.fixed_point import Bfp, div_trunc

__all__ = ["Bfp", "div_trunc"]
