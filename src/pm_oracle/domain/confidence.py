"""Oracle confidence gate.

A reading passes iff  confidence * 10000 <= abs_price * max_confidence_bps.
Both sides are u64 * small constant, evaluated in u128.
"""

from src.pm_common.checked_math import checked_mul_u128, fits_u64
from src.pm_common.errors import InvalidOracleConfidenceError, InvalidOraclePriceError

BPS_DENOMINATOR = 10_000
DEFAULT_MAX_CONFIDENCE_BPS = 500  # 5%


def check_confidence(
    confidence: int,
    abs_price: int,
    max_confidence_bps: int = DEFAULT_MAX_CONFIDENCE_BPS,
) -> None:
    """Raise InvalidOracleConfidenceError if the interval is too wide."""
    if not fits_u64(confidence):
        raise InvalidOraclePriceError(f"confidence {confidence} outside u64")
    if not fits_u64(abs_price):
        raise InvalidOraclePriceError(f"abs price {abs_price} outside u64")
    if not (0 <= max_confidence_bps <= BPS_DENOMINATOR):
        raise ValueError(f"max_confidence_bps must be in [0, 10000], got {max_confidence_bps}")

    lhs = checked_mul_u128(confidence, BPS_DENOMINATOR, "confidence bound")
    rhs = checked_mul_u128(abs_price, max_confidence_bps, "price bound")
    if lhs > rhs:
        raise InvalidOracleConfidenceError(confidence, abs_price)
