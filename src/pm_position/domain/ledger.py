"""Position ledger rules: stake accumulation, side consistency, single claim."""

from dataclasses import replace

from src.pm_common.checked_math import checked_add_u64
from src.pm_common.enums import Outcome, Side
from src.pm_common.errors import (
    AlreadyClaimedError,
    InvalidSideForPayoutError,
    SideMismatchError,
)
from src.pm_position.domain.models import Position


def stake(
    existing: Position | None,
    *,
    address: str,
    owner: str,
    market_ref: str,
    side: Side,
    amount: int,
) -> Position:
    """Return the position as it will look after this stake.

    `existing` is None when storage has no record at `address`; the caller
    inserts the returned object in that case and updates it otherwise.
    The stored object is never mutated here.
    """
    if existing is None:
        return Position(
            address=address,
            owner=owner,
            market_ref=market_ref,
            side=side,
            amount=amount,
            claimed=False,
        )
    if existing.side is not side:
        raise SideMismatchError(existing.side.value, side.value)
    return replace(existing, amount=checked_add_u64(existing.amount, amount, "position amount"))


def check_unclaimed(position: Position) -> None:
    if position.claimed:
        raise AlreadyClaimedError(position.address)


def check_winning_side(position: Position, outcome: Outcome) -> None:
    if position.side.as_outcome() is not outcome:
        raise InvalidSideForPayoutError(position.side.value, outcome.value)


def mark_claimed(position: Position) -> None:
    """Flip claimed false -> true. Called only after the transfer succeeded."""
    check_unclaimed(position)
    position.claimed = True
