"""Market lifecycle state machine.

    PENDING --resolve_market--> YES | NO
    PENDING --(now >= expiry + max_delay)--> refundable (derived, not stored)
    REFUNDED                               refundable (set outside this engine)

Timeline for one market:

    created ... betting_closes_at ... expiry ... resolvable_at ... refundable_at
                (expiry - cutoff)               (expiry + grace)  (expiry + max_delay)

Every function here is pure: it validates or computes, and the caller
decides when to commit. Nothing mutates a Market until all checks pass.
"""

from src.pm_common.checked_math import (
    I64_MAX,
    checked_add_i64,
    checked_add_u64,
    checked_sub_i64,
    fits_u64,
)
from src.pm_common.enums import Outcome, Side
from src.pm_common.errors import (
    ArithmeticOverflowError,
    BettingClosedError,
    InvalidConfigError,
    MarketAlreadyResolvedError,
    MarketNotExpiredError,
    ResolutionWindowClosedError,
)
from src.pm_market.domain.models import Market

MAX_ASSET_NAME_LEN = 64


def _check_duration(name: str, value: int) -> None:
    if not (0 <= value <= I64_MAX):
        raise InvalidConfigError(f"{name}={value} must be in [0, {I64_MAX}]")


def build_market(
    *,
    address: str,
    creator: str,
    asset_name: str,
    strike_price: int,
    duration_secs: int,
    cutoff_buffer_secs: int,
    grace_secs: int,
    max_delay_secs: int,
    keeper: str,
    oracle_ref: str,
    now: int,
) -> Market:
    """Validate a market config and return a new PENDING market.

    Raises InvalidConfigError for any malformed input, including timestamp
    arithmetic that would overflow i64.
    """
    if not asset_name or len(asset_name) > MAX_ASSET_NAME_LEN:
        raise InvalidConfigError(
            f"asset_name must be 1-{MAX_ASSET_NAME_LEN} chars, got {len(asset_name)}"
        )
    if not keeper:
        raise InvalidConfigError("keeper_id is required")
    if not oracle_ref:
        raise InvalidConfigError("oracle_id is required")
    if not fits_u64(strike_price):
        raise InvalidConfigError(f"strike_price={strike_price} outside u64")
    if duration_secs <= 0:
        raise InvalidConfigError(f"duration_secs must be > 0, got {duration_secs}")
    _check_duration("duration_secs", duration_secs)
    _check_duration("cutoff_buffer_secs", cutoff_buffer_secs)
    _check_duration("grace_secs", grace_secs)
    _check_duration("max_delay_secs", max_delay_secs)
    if max_delay_secs <= grace_secs:
        raise InvalidConfigError(
            f"max_delay_secs ({max_delay_secs}) must exceed grace_secs ({grace_secs})"
        )

    try:
        expiry_ts = checked_add_i64(now, duration_secs, "expiry_ts")
        checked_sub_i64(expiry_ts, cutoff_buffer_secs, "betting cutoff")
        checked_add_i64(expiry_ts, grace_secs, "resolution start")
        checked_add_i64(expiry_ts, max_delay_secs, "refund start")
    except ArithmeticOverflowError as e:
        raise InvalidConfigError(e.message) from e

    return Market(
        address=address,
        asset_name=asset_name,
        strike_price=strike_price,
        expiry_ts=expiry_ts,
        cutoff_buffer_secs=cutoff_buffer_secs,
        grace_secs=grace_secs,
        max_delay_secs=max_delay_secs,
        creator=creator,
        keeper=keeper,
        oracle_ref=oracle_ref,
    )


def check_betting_open(market: Market, now: int) -> None:
    if market.outcome is not Outcome.PENDING or now > market.betting_closes_at:
        raise BettingClosedError(market.address)


def pool_after_stake(market: Market, side: Side, amount: int) -> int:
    """New total for the side's pool; raises Overflow past u64."""
    current = market.yes_pool if side is Side.YES else market.no_pool
    return checked_add_u64(current, amount, f"{side.value.lower()}_pool")


def set_pool(market: Market, side: Side, total: int) -> None:
    current = market.yes_pool if side is Side.YES else market.no_pool
    if total < current:
        raise ValueError(f"pool totals never decrease: {current} -> {total}")
    if side is Side.YES:
        market.yes_pool = total
    else:
        market.no_pool = total


def check_resolvable(market: Market, now: int) -> None:
    if market.outcome.is_terminal:
        raise MarketAlreadyResolvedError(market.address, market.outcome.value)
    if now < market.resolvable_at:
        raise MarketNotExpiredError(market.address, market.resolvable_at)
    if now >= market.refundable_at:
        raise ResolutionWindowClosedError(market.address)


def decide_outcome(market: Market, settlement_price: int) -> Outcome:
    """Asset strictly above strike resolves YES; at or below resolves NO."""
    return Outcome.YES if settlement_price > market.strike_price else Outcome.NO


def apply_resolution(market: Market, settlement_price: int, now: int) -> Outcome:
    check_resolvable(market, now)
    outcome = decide_outcome(market, settlement_price)
    market.outcome = outcome
    market.settlement_price = settlement_price
    market.resolved_at = now
    return outcome


def is_refund_eligible(market: Market, now: int) -> bool:
    if market.outcome is Outcome.REFUNDED:
        return True
    return market.outcome is Outcome.PENDING and now >= market.refundable_at
