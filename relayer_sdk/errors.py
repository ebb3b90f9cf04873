"""Relayer SDK error classes.

Three families of errors are raised by the SDK:
- input-shape errors (argument arrays that do not line up)
- not-found errors (unknown pool, linear pool or token)
- arithmetic errors (zero divisors, non-converging iterations)

All of them are fatal to the current call; no partial result is returned.
"""


class RelayerSDKError(Exception):
    """Base error for SDK operations."""

    pass


class InputLengthMismatchError(RelayerSDKError, ValueError):
    """Argument arrays have mismatched lengths."""

    pass


class InvalidChainedReferenceError(RelayerSDKError, ValueError):
    """Value is not a chained reference, or the key is out of range."""

    pass


class UnsupportedPoolTypeError(RelayerSDKError, ValueError):
    """Operation is not available for this pool type."""

    pass


class UnsupportedOperationError(RelayerSDKError, ValueError):
    """Combination of arguments has no supported composition."""

    pass


class PoolNotFoundError(RelayerSDKError, LookupError):
    """No pool found with the given id."""

    pass


class LinearPoolNotFoundError(RelayerSDKError, LookupError):
    """No linear pool issues the given wrapped token."""

    pass


class TokenNotFoundError(RelayerSDKError, LookupError):
    """Token is not present in any known pool."""

    pass


class ZeroBaselineError(RelayerSDKError, ZeroDivisionError):
    """Price impact requested against a zero amount."""

    pass


class StableInvariantDidNotConverge(RelayerSDKError, ArithmeticError):
    """Newton-Raphson iteration for stable invariant D did not converge."""

    pass


class InvalidScalingFactorError(RelayerSDKError, ValueError):
    """Scaling factor must be positive."""

    pass
