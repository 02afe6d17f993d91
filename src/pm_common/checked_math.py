"""Fixed-width checked integer arithmetic.

All pools, stakes, prices and payouts are int. No float, no Decimal.
Python ints never wrap, so every width the ledger relies on is enforced
explicitly here: a result outside its declared range raises
ArithmeticOverflowError instead of being truncated.
"""

from src.pm_common.errors import ArithmeticOverflowError

U64_MAX = (1 << 64) - 1
U128_MAX = (1 << 128) - 1
I32_MIN = -(1 << 31)
I32_MAX = (1 << 31) - 1
I64_MIN = -(1 << 63)
I64_MAX = (1 << 63) - 1
I128_MIN = -(1 << 127)
I128_MAX = (1 << 127) - 1


def fits_u64(value: int) -> bool:
    return 0 <= value <= U64_MAX


def fits_i64(value: int) -> bool:
    return I64_MIN <= value <= I64_MAX


def to_u64(value: int, what: str = "value") -> int:
    """Narrow a wide intermediate to u64 (try_into semantics)."""
    if not fits_u64(value):
        raise ArithmeticOverflowError(f"{what}={value} does not fit u64")
    return value


def checked_add_u64(a: int, b: int, what: str = "sum") -> int:
    return to_u64(a + b, what)


def checked_add_u128(a: int, b: int, what: str = "sum") -> int:
    result = a + b
    if not (0 <= result <= U128_MAX):
        raise ArithmeticOverflowError(f"{what}={result} does not fit u128")
    return result


def checked_mul_u128(a: int, b: int, what: str = "product") -> int:
    result = a * b
    if not (0 <= result <= U128_MAX):
        raise ArithmeticOverflowError(f"{what} does not fit u128")
    return result


def checked_mul_i128(a: int, b: int, what: str = "product") -> int:
    result = a * b
    if not (I128_MIN <= result <= I128_MAX):
        raise ArithmeticOverflowError(f"{what} does not fit i128")
    return result


def checked_add_i64(a: int, b: int, what: str = "timestamp") -> int:
    result = a + b
    if not fits_i64(result):
        raise ArithmeticOverflowError(f"{what}={result} does not fit i64")
    return result


def checked_sub_i64(a: int, b: int, what: str = "timestamp") -> int:
    result = a - b
    if not fits_i64(result):
        raise ArithmeticOverflowError(f"{what}={result} does not fit i64")
    return result


def checked_pow10_i128(exponent: int) -> int:
    """10**exponent as i128; exponents past 38 overflow."""
    if exponent < 0:
        raise ValueError(f"exponent must be non-negative, got {exponent}")
    # 10**38 < 2**127 - 1 < 10**39
    if exponent > 38:
        raise ArithmeticOverflowError(f"10^{exponent} does not fit i128")
    return 10**exponent
