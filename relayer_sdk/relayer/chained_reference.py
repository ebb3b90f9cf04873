"""Chained references.

A chained reference is a uint256 amount whose top 16 bits are 0xba10. The
relayer replaces it at execution time with the value stored under the same
key by an earlier call of the multicall. The low 240 bits hold the key.

Wire format: 0x + "ba10" + zero padding + big-endian key, 64 hex digits.
No real token amount reaches 0xba10 << 240, so references cannot be
mistaken for amounts.
"""

from relayer_sdk.constants import CHAINED_REFERENCE_KEY_BITS, CHAINED_REFERENCE_PREFIX
from relayer_sdk.errors import InvalidChainedReferenceError

CHAINED_REFERENCE_BASE = int(CHAINED_REFERENCE_PREFIX, 16) << CHAINED_REFERENCE_KEY_BITS
MAX_CHAINED_REFERENCE_KEY = (1 << CHAINED_REFERENCE_KEY_BITS) - 1
_PREFIX_MASK = ((1 << 256) - 1) ^ MAX_CHAINED_REFERENCE_KEY


def to_chained_reference(key: int) -> int:
    """Map a key to its chained reference.

    Raises:
        InvalidChainedReferenceError: If key is negative or does not fit in 240 bits
    """
    if not 0 <= key <= MAX_CHAINED_REFERENCE_KEY:
        raise InvalidChainedReferenceError(f"Chained reference key out of range: {key}")
    return CHAINED_REFERENCE_BASE + key


def is_chained_reference(value: int | str) -> bool:
    """Check whether an amount (int or decimal string) is a chained reference."""
    amount = int(value)
    if amount < 0 or amount.bit_length() > 256:
        return False
    return amount & _PREFIX_MASK == CHAINED_REFERENCE_BASE


def from_chained_reference(value: int | str) -> int:
    """Recover the key of a chained reference.

    Raises:
        InvalidChainedReferenceError: If value does not carry the prefix
    """
    if not is_chained_reference(value):
        raise InvalidChainedReferenceError(f"Not a chained reference: {value}")
    return int(value) & MAX_CHAINED_REFERENCE_KEY


def to_hex(reference: int) -> str:
    """Render a reference as 0x-prefixed 32-byte hex."""
    return f"0x{reference:064x}"
