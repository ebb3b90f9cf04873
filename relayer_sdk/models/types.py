"""Shared type definitions for relayer SDK models.

Amounts travel as decimal strings (the form routers and subgraphs use) and
are converted to int only at the math boundary.
"""

from decimal import Decimal, InvalidOperation, localcontext
from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from relayer_sdk.constants import MAX_UINT256

INT256_MIN = -(2**255)
INT256_MAX = 2**255 - 1


def _to_int(value: Any, kind: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{kind} must be string or int, got bool")
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        raise ValueError(f"{kind} must be string or int, got {type(value).__name__}")
    try:
        return int(value)
    except ValueError as err:
        raise ValueError(f"{kind} must be a decimal integer string: '{value}'") from err


def validate_uint256(value: Any) -> str:
    """Validate that a value is a valid uint256 and return it as decimal string.

    Raises:
        ValueError: If value is not a non-negative integer within uint256 range
    """
    int_value = _to_int(value, "Uint256")
    if int_value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if int_value > MAX_UINT256:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")
    return str(int_value)


def validate_int256(value: Any) -> str:
    """Validate that a value is a valid int256 and return it as decimal string."""
    int_value = _to_int(value, "Int256")
    if not INT256_MIN <= int_value <= INT256_MAX:
        raise ValueError(f"Int256 out of range: {value}")
    return str(int_value)


# Ethereum address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]

# 256-bit unsigned integer as decimal string (validated)
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]

# 256-bit signed integer as decimal string (vault deltas and limits)
Int256 = Annotated[
    str,
    BeforeValidator(validate_int256),
    Field(description="256-bit signed integer as decimal string"),
]

# Arbitrary hex bytes
Bytes = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]*$")]

# Vault pool id (32 bytes)
Bytes32 = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{64}$")]


def normalize_address(address: str) -> str:
    """Normalize an Ethereum address to lowercase with 0x prefix."""
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr
    return addr


def is_valid_address(address: str) -> bool:
    if not isinstance(address, str):
        return False
    if not address.startswith("0x") or len(address) != 42:
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False


def is_same_address(address1: str, address2: str) -> bool:
    """Case-insensitive address comparison."""
    return normalize_address(address1) == normalize_address(address2)


def parse_units(value: str | Decimal, decimals: int) -> int:
    """Convert a human-unit decimal string into an integer of `decimals` precision.

    Digits beyond `decimals` places are truncated, matching how balances read
    from a subgraph are brought onto the EVM scale.

    Raises:
        ValueError: If value is not a decimal number
    """
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError) as err:
        raise ValueError(f"Invalid decimal amount: {value!r}") from err
    if not amount.is_finite():
        raise ValueError(f"Invalid decimal amount: {value!r}")
    with localcontext() as ctx:
        ctx.prec = 100
        return int(amount.scaleb(decimals))
