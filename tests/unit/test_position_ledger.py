"""Unit tests for position stake accumulation and claim rules."""

import pytest

from src.pm_common.checked_math import U64_MAX
from src.pm_common.enums import Outcome, Side
from src.pm_common.errors import (
    AlreadyClaimedError,
    ArithmeticOverflowError,
    InvalidSideForPayoutError,
    SideMismatchError,
)
from src.pm_position.domain import ledger
from src.pm_position.domain.models import Position


def _stake(existing: Position | None, side: Side, amount: int) -> Position:
    return ledger.stake(
        existing, address="pos", owner="bob", market_ref="mkt", side=side, amount=amount
    )


def test_first_stake_creates_position() -> None:
    p = _stake(None, Side.YES, 100)
    assert p == Position("pos", "bob", "mkt", Side.YES, 100, claimed=False)


def test_same_side_accumulates_without_mutating_stored() -> None:
    stored = _stake(None, Side.NO, 100)
    updated = _stake(stored, Side.NO, 50)
    assert updated.amount == 150
    assert stored.amount == 100


def test_opposite_side_rejected() -> None:
    stored = _stake(None, Side.YES, 100)
    with pytest.raises(SideMismatchError):
        _stake(stored, Side.NO, 1)


def test_amount_overflow() -> None:
    stored = _stake(None, Side.YES, U64_MAX)
    with pytest.raises(ArithmeticOverflowError):
        _stake(stored, Side.YES, 1)


def test_claim_only_once() -> None:
    p = _stake(None, Side.YES, 1)
    ledger.mark_claimed(p)
    assert p.claimed is True
    with pytest.raises(AlreadyClaimedError):
        ledger.check_unclaimed(p)
    with pytest.raises(AlreadyClaimedError):
        ledger.mark_claimed(p)


def test_winning_side_check() -> None:
    p = _stake(None, Side.NO, 1)
    ledger.check_winning_side(p, Outcome.NO)
    with pytest.raises(InvalidSideForPayoutError):
        ledger.check_winning_side(p, Outcome.YES)
