"""Unit tests for the market lifecycle state machine."""

import pytest

from src.pm_common.checked_math import I64_MAX, U64_MAX
from src.pm_common.enums import Outcome, Side
from src.pm_common.errors import (
    ArithmeticOverflowError,
    BettingClosedError,
    InvalidConfigError,
    MarketAlreadyResolvedError,
    MarketNotExpiredError,
    ResolutionWindowClosedError,
)
from src.pm_market.domain import lifecycle
from src.pm_market.domain.models import Market

NOW = 1_700_000_000


def _build(**kwargs) -> Market:
    defaults = dict(
        address="mkt",
        creator="alice",
        asset_name="BTC",
        strike_price=4_200_000,
        duration_secs=3600,
        cutoff_buffer_secs=60,
        grace_secs=30,
        max_delay_secs=600,
        keeper="keeper-1",
        oracle_ref="BTC/USD",
        now=NOW,
    )
    defaults.update(kwargs)
    return lifecycle.build_market(**defaults)


class TestBuildMarket:
    def test_valid_config(self) -> None:
        m = _build()
        assert m.outcome is Outcome.PENDING
        assert m.expiry_ts == NOW + 3600
        assert m.betting_closes_at == NOW + 3540
        assert m.resolvable_at == NOW + 3630
        assert m.refundable_at == NOW + 4200
        assert (m.yes_pool, m.no_pool) == (0, 0)
        assert m.settlement_price is None

    @pytest.mark.parametrize("duration", [0, -1])
    def test_non_positive_duration(self, duration: int) -> None:
        with pytest.raises(InvalidConfigError):
            _build(duration_secs=duration)

    @pytest.mark.parametrize("field", ["cutoff_buffer_secs", "grace_secs", "max_delay_secs"])
    def test_negative_durations(self, field: str) -> None:
        with pytest.raises(InvalidConfigError):
            _build(**{field: -1})

    def test_duration_above_i64(self) -> None:
        with pytest.raises(InvalidConfigError):
            _build(duration_secs=I64_MAX + 1)

    def test_expiry_overflow_becomes_invalid_config(self) -> None:
        with pytest.raises(InvalidConfigError) as exc_info:
            _build(duration_secs=I64_MAX - NOW + 1)
        assert isinstance(exc_info.value.__cause__, ArithmeticOverflowError)

    def test_refund_start_overflow(self) -> None:
        with pytest.raises(InvalidConfigError):
            _build(duration_secs=I64_MAX - NOW - 100, max_delay_secs=200, grace_secs=0)

    def test_empty_resolution_window(self) -> None:
        with pytest.raises(InvalidConfigError):
            _build(grace_secs=600, max_delay_secs=600)

    def test_strike_outside_u64(self) -> None:
        with pytest.raises(InvalidConfigError):
            _build(strike_price=U64_MAX + 1)

    @pytest.mark.parametrize("name", ["", "X" * 65])
    def test_asset_name_length(self, name: str) -> None:
        with pytest.raises(InvalidConfigError):
            _build(asset_name=name)

    def test_asset_name_at_max_length(self) -> None:
        assert _build(asset_name="X" * 64).asset_name == "X" * 64

    def test_missing_keeper_or_oracle(self) -> None:
        with pytest.raises(InvalidConfigError):
            _build(keeper="")
        with pytest.raises(InvalidConfigError):
            _build(oracle_ref="")


class TestBettingWindow:
    def test_open_up_to_cutoff_inclusive(self) -> None:
        m = _build()
        lifecycle.check_betting_open(m, m.betting_closes_at)

    def test_closed_after_cutoff(self) -> None:
        m = _build()
        with pytest.raises(BettingClosedError):
            lifecycle.check_betting_open(m, m.betting_closes_at + 1)

    def test_closed_once_resolved(self) -> None:
        m = _build()
        m.outcome = Outcome.NO
        with pytest.raises(BettingClosedError):
            lifecycle.check_betting_open(m, NOW)

    def test_pool_after_stake_does_not_mutate(self) -> None:
        m = _build()
        assert lifecycle.pool_after_stake(m, Side.YES, 100) == 100
        assert m.yes_pool == 0

    def test_pool_overflow(self) -> None:
        m = _build()
        m.no_pool = U64_MAX
        with pytest.raises(ArithmeticOverflowError):
            lifecycle.pool_after_stake(m, Side.NO, 1)

    def test_pools_never_decrease(self) -> None:
        m = _build()
        lifecycle.set_pool(m, Side.YES, 10)
        with pytest.raises(ValueError):
            lifecycle.set_pool(m, Side.YES, 9)


class TestResolution:
    def test_not_expired_before_grace(self) -> None:
        m = _build()
        with pytest.raises(MarketNotExpiredError):
            lifecycle.check_resolvable(m, m.resolvable_at - 1)

    def test_resolvable_at_grace_boundary(self) -> None:
        m = _build()
        lifecycle.check_resolvable(m, m.resolvable_at)

    def test_window_closed_at_max_delay(self) -> None:
        m = _build()
        with pytest.raises(ResolutionWindowClosedError):
            lifecycle.check_resolvable(m, m.refundable_at)

    def test_above_strike_is_yes(self) -> None:
        m = _build()
        assert lifecycle.apply_resolution(m, 4_200_001, m.resolvable_at) is Outcome.YES
        assert m.settlement_price == 4_200_001
        assert m.resolved_at == m.resolvable_at

    def test_equal_to_strike_is_no(self) -> None:
        m = _build()
        assert lifecycle.apply_resolution(m, 4_200_000, m.resolvable_at) is Outcome.NO

    def test_second_resolution_fails(self) -> None:
        m = _build()
        lifecycle.apply_resolution(m, 1, m.resolvable_at)
        with pytest.raises(MarketAlreadyResolvedError):
            lifecycle.apply_resolution(m, 9_999_999, m.resolvable_at)
        assert m.outcome is Outcome.NO

    @pytest.mark.parametrize("outcome", [Outcome.YES, Outcome.NO, Outcome.REFUNDED])
    def test_terminal_outcomes_not_resolvable(self, outcome: Outcome) -> None:
        m = _build()
        m.outcome = outcome
        assert outcome.is_terminal
        with pytest.raises(MarketAlreadyResolvedError):
            lifecycle.check_resolvable(m, m.resolvable_at)

    def test_pending_is_not_terminal(self) -> None:
        assert not Outcome.PENDING.is_terminal


class TestRefundEligibility:
    def test_pending_before_max_delay(self) -> None:
        m = _build()
        assert not lifecycle.is_refund_eligible(m, m.refundable_at - 1)

    def test_pending_at_max_delay(self) -> None:
        m = _build()
        assert lifecycle.is_refund_eligible(m, m.refundable_at)

    def test_resolved_market_never_refundable(self) -> None:
        m = _build()
        m.outcome = Outcome.YES
        assert not lifecycle.is_refund_eligible(m, m.refundable_at + 10**6)

    def test_refunded_market_always_refundable(self) -> None:
        m = _build()
        m.outcome = Outcome.REFUNDED
        assert lifecycle.is_refund_eligible(m, NOW)
