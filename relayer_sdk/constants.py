"""Protocol constants for the relayer SDK."""

# 18-decimal fixed-point one (WeiPerEther)
ONE = 10**18

MAX_UINT256 = 2**256 - 1

# Stable pool amplification parameters carry three decimals of precision
AMP_PRECISION = 1000

# Chained references live in the top 16 bits of a uint256 amount
CHAINED_REFERENCE_PREFIX = "ba10"
CHAINED_REFERENCE_KEY_BITS = 256 - 4 * len(CHAINED_REFERENCE_PREFIX)

# Empty userData for batch swap steps
EMPTY_USER_DATA = "0x"
