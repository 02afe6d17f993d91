"""Parimutuel payout calculator.

Winners split the entire pool (both sides) pro rata to their share of the
winning side:

    payout = amount * (yes_pool + no_pool) // winner_pool

All intermediates are u128; the result is narrowed back to u64. Integer
division rounds down, so the sum of all payouts never exceeds the total pool
(rounding loss is at most one unit per winning position).
"""

from src.pm_common.checked_math import checked_add_u128, checked_mul_u128, to_u64
from src.pm_common.enums import Outcome
from src.pm_common.errors import DivideByZeroError


def compute_payout(amount: int, yes_pool: int, no_pool: int, outcome: Outcome) -> int:
    if outcome is Outcome.YES:
        winner_pool = yes_pool
    elif outcome is Outcome.NO:
        winner_pool = no_pool
    else:
        raise ValueError(f"no payout for outcome {outcome.value}")

    total_pool = checked_add_u128(yes_pool, no_pool, "total pool")
    numerator = checked_mul_u128(amount, total_pool, "payout numerator")
    if winner_pool == 0:
        raise DivideByZeroError(f"{outcome.value} pool is empty")
    return to_u64(numerator // winner_pool, "payout")
