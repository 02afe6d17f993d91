"""Fixed-point price normalizer.

Converts an oracle (price, exponent) pair into the unsigned fixed-point scale
strike prices are stored in. Convention: the exponent alone is applied, no
extra rescale, so (42_000, -2) -> 4_200_000. A market's strike_price must be
quoted in the same scale.

    exponent < 0 : price * 10**|exponent|
    exponent > 0 : price // 10**exponent
    exponent = 0 : price

Intermediates are i128; the result must fit u64.
"""

from src.pm_common.checked_math import (
    I32_MAX,
    I32_MIN,
    checked_mul_i128,
    checked_pow10_i128,
    fits_i64,
    to_u64,
)
from src.pm_common.errors import InvalidOraclePriceError


def normalize_price(raw_price: int, exponent: int) -> int:
    """Return the normalized u64 price or raise InvalidOraclePrice / Overflow.

    Negative prices are rejected outright: truncating division would
    otherwise turn e.g. (-5, 1) into a valid-looking 0.
    """
    if not fits_i64(raw_price):
        raise InvalidOraclePriceError(f"price {raw_price} outside i64")
    if not (I32_MIN <= exponent <= I32_MAX):
        raise InvalidOraclePriceError(f"exponent {exponent} outside i32")
    if raw_price == 0:
        raise InvalidOraclePriceError("price is zero")
    if raw_price < 0:
        raise InvalidOraclePriceError(f"negative price {raw_price}e{exponent}")

    if exponent < 0:
        scaled = checked_mul_i128(raw_price, checked_pow10_i128(-exponent), "scaled price")
    elif exponent > 0:
        scaled = raw_price // checked_pow10_i128(exponent)
    else:
        scaled = raw_price
    return to_u64(scaled, "normalized price")
