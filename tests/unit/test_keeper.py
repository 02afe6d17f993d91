"""Unit tests for the keeper runner, driven through in-memory fakes."""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from src.pm_common.enums import Outcome
from src.pm_keeper.keeper import Keeper
from src.pm_settlement.application.schemas import CreateMarketRequest

KEEPER = "keeper-1"


class _SessionFactory:
    """Mimics async_sessionmaker: calling it yields an async context manager."""

    def __init__(self, db) -> None:
        self._db = db
        self.opened = 0

    def __call__(self):
        self.opened += 1
        return self

    async def __aenter__(self):
        return self._db

    async def __aexit__(self, *exc) -> bool:
        return False


async def _create(service, db, creator: str, feed: str) -> str:
    req = CreateMarketRequest(
        asset_name="BTC",
        strike_price=4_200_000,
        duration_secs=3600,
        cutoff_buffer_secs=60,
        grace_secs=30,
        max_delay_secs=600,
        keeper_id=KEEPER,
        oracle_id=feed,
    )
    return (await service.create_market(db, creator, req)).address


@pytest.fixture
def keeper(db, service, markets, clock):
    return Keeper(
        _SessionFactory(db),
        keeper_id=KEEPER,
        service=service,
        market_repo=markets,
        clock=clock,
        poll_interval_secs=0,
    )


async def test_nothing_due(keeper, service, db):
    await _create(service, db, "alice", "BTC/USD")
    assert await keeper.run_once() == (0, 0)


async def test_resolves_due_market(keeper, service, db, markets, oracle, clock):
    market_id = await _create(service, db, "alice", "BTC/USD")
    clock.now = markets.committed[market_id].resolvable_at
    oracle.publish("BTC/USD", 43_000, -2)

    assert await keeper.run_once() == (1, 0)
    assert markets.committed[market_id].outcome is Outcome.YES


async def test_one_failure_does_not_stop_the_rest(keeper, service, db, markets, oracle, clock):
    good = await _create(service, db, "alice", "BTC/USD")
    stale = await _create(service, db, "eve", "ETH/USD")
    clock.now = markets.committed[good].resolvable_at
    oracle.publish("BTC/USD", 41_000, -2)

    assert await keeper.run_once() == (1, 1)
    assert markets.committed[good].outcome is Outcome.NO
    assert markets.committed[stale].outcome is Outcome.PENDING


async def test_database_error_on_one_market_does_not_stop_the_rest(
    keeper, service, db, markets, oracle, clock
):
    first = await _create(service, db, "alice", "BTC/USD")
    second = await _create(service, db, "eve", "BTC/USD")
    clock.now = markets.committed[first].resolvable_at
    oracle.publish("BTC/USD", 43_000, -2)

    resolve = service.resolve_market

    async def deadlock_on_first(session, caller, market_id):
        if market_id == first:
            raise OperationalError("UPDATE markets", {}, Exception("deadlock detected"))
        return await resolve(session, caller, market_id)

    with patch.object(service, "resolve_market", side_effect=deadlock_on_first):
        assert await keeper.run_once() == (1, 1)

    assert markets.committed[first].outcome is Outcome.PENDING
    assert markets.committed[second].outcome is Outcome.YES


async def test_markets_of_other_keepers_ignored(service, db, markets, oracle, clock):
    market_id = await _create(service, db, "alice", "BTC/USD")
    clock.now = markets.committed[market_id].resolvable_at
    oracle.publish("BTC/USD", 43_000, -2)
    other = Keeper(
        _SessionFactory(db), keeper_id="keeper-2", service=service, market_repo=markets,
        clock=clock,
    )
    assert await other.run_once() == (0, 0)


async def test_past_max_delay_not_listed(keeper, service, db, markets, oracle, clock):
    market_id = await _create(service, db, "alice", "BTC/USD")
    clock.now = markets.committed[market_id].refundable_at
    oracle.publish("BTC/USD", 43_000, -2)
    assert await keeper.run_once() == (0, 0)


def test_keeper_id_required(db, service, markets):
    with pytest.raises(ValueError):
        Keeper(_SessionFactory(db), keeper_id="", service=service, market_repo=markets)
