# tests/unit/test_market_service.py
"""Unit tests for MarketApplicationService using mock repository."""
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.pm_common.enums import Outcome
from src.pm_common.errors import MarketNotFoundError
from src.pm_market.application.service import MarketApplicationService
from src.pm_market.domain.models import Market


def _make_market(**kwargs) -> Market:
    defaults = dict(
        address="mkt", asset_name="BTC", strike_price=4_200_000, expiry_ts=1_000,
        cutoff_buffer_secs=60, grace_secs=30, max_delay_secs=600,
        creator="alice", keeper="keeper-1", oracle_ref="BTC/USD",
    )
    defaults.update(kwargs)
    return Market(**defaults)


@pytest.fixture
def db():
    return MagicMock()


@pytest.fixture
def mock_repo():
    return MagicMock()


class TestListMarkets:
    async def test_returns_items(self, db, mock_repo):
        mock_repo.list_markets = AsyncMock(
            return_value=[_make_market(address=f"m{i}") for i in range(3)]
        )
        svc = MarketApplicationService(repo=mock_repo)

        resp = await svc.list_markets(db, outcome=None, limit=20)

        assert [i.address for i in resp.items] == ["m0", "m1", "m2"]
        mock_repo.list_markets.assert_awaited_once_with(db, None, 20)

    async def test_passes_outcome_filter(self, db, mock_repo):
        mock_repo.list_markets = AsyncMock(return_value=[])
        svc = MarketApplicationService(repo=mock_repo)
        await svc.list_markets(db, outcome=Outcome.NO, limit=5)
        mock_repo.list_markets.assert_awaited_once_with(db, Outcome.NO, 5)


class TestGetMarket:
    async def test_detail_includes_derived_windows(self, db, mock_repo):
        mock_repo.get_market = AsyncMock(
            return_value=_make_market(yes_pool=100, no_pool=300)
        )
        svc = MarketApplicationService(repo=mock_repo)

        detail = await svc.get_market(db, "mkt")

        assert detail.betting_closes_at == 940
        assert detail.resolvable_at == 1_030
        assert detail.refundable_at == 1_600
        assert detail.total_pool == 400
        assert detail.outcome == "PENDING"

    async def test_not_found(self, db, mock_repo):
        mock_repo.get_market = AsyncMock(return_value=None)
        svc = MarketApplicationService(repo=mock_repo)
        with pytest.raises(MarketNotFoundError):
            await svc.get_market(db, "nope")
