"""In-memory fakes of the repository, ledger and oracle Protocols.

Writes are staged until FakeSession.commit() and discarded by rollback(),
so service tests can observe all-or-nothing behaviour without PostgreSQL.
"""

import copy

import pytest

from src.pm_common.enums import Outcome, Side
from src.pm_market.domain.models import Market
from src.pm_oracle.domain.models import PriceReading
from src.pm_position.domain.models import Position
from src.pm_settlement.application.service import SettlementService

PROGRAM_ID = "test-program"
T0 = 1_700_000_000


class _TxStore:
    def __init__(self) -> None:
        self.committed: dict = {}
        self.staged: dict = {}

    def view(self) -> dict:
        merged = dict(self.committed)
        merged.update(self.staged)
        return merged

    def read(self, key):
        value = self.view().get(key)
        return copy.deepcopy(value)

    def write(self, key, value) -> None:
        self.staged[key] = copy.deepcopy(value)

    def commit(self) -> None:
        self.committed.update(self.staged)
        self.staged.clear()

    def rollback(self) -> None:
        self.staged.clear()


class FakeMarketRepo(_TxStore):
    async def get_market(self, db, address, for_update=False):
        return self.read(address)

    async def insert_market(self, db, market: Market) -> bool:
        if market.address in self.view():
            return False
        self.write(market.address, market)
        return True

    async def update_market(self, db, market: Market) -> None:
        self.write(market.address, market)

    async def list_markets(self, db, outcome, limit):
        markets = [m for m in self.view().values() if outcome is None or m.outcome is outcome]
        return copy.deepcopy(markets[:limit])

    async def list_resolvable_markets(self, db, keeper, now):
        return copy.deepcopy([
            m for m in self.view().values()
            if m.outcome is Outcome.PENDING
            and m.keeper == keeper
            and m.resolvable_at <= now < m.refundable_at
        ])


class FakePositionRepo(_TxStore):
    async def get_position(self, db, address, for_update=False):
        return self.read(address)

    async def insert_position(self, db, position: Position) -> None:
        self.write(position.address, position)

    async def update_position(self, db, position: Position) -> None:
        self.write(position.address, position)

    async def sum_stakes(self, db, market_ref):
        yes = no = 0
        for p in self.view().values():
            if p.market_ref != market_ref:
                continue
            if p.side is Side.YES:
                yes += p.amount
            else:
                no += p.amount
        return yes, no


class FakeLedger(_TxStore):
    """address -> [owner, balance]; journal mirrors ledger_entries."""

    def __init__(self) -> None:
        super().__init__()
        self.journal: list[tuple] = []
        self.fail_transfers = False

    def fund(self, address: str, amount: int) -> None:
        self.committed[address] = [address, amount]

    def balance(self, address: str) -> int:
        entry = self.view().get(address)
        return 0 if entry is None else entry[1]

    async def open_vault(self, db, vault, custodian) -> None:
        if vault not in self.view():
            self.write(vault, [custodian, 0])

    async def transfer(
        self, db, source, destination, amount, authority, reference_type, reference_id
    ) -> bool:
        return self._move(source, destination, amount, authority, reference_type)

    async def transfer_as_custodian(
        self, db, vault, destination, amount, custodian, reference_type, reference_id
    ) -> bool:
        return self._move(vault, destination, amount, custodian, reference_type)

    def _move(self, source, destination, amount, authority, reference_type) -> bool:
        if self.fail_transfers:
            return False
        src = self.read(source)
        if src is None or src[0] != authority or src[1] < amount:
            return False
        dst = self.read(destination) or [destination, 0]
        src[1] -= amount
        dst[1] += amount
        self.write(source, src)
        self.write(destination, dst)
        self.journal.append((reference_type, source, destination, amount))
        return True


class FakeOracle:
    def __init__(self) -> None:
        self.readings: dict[str, PriceReading] = {}

    def publish(self, feed_id: str, price: int, exponent: int, confidence: int = 0) -> None:
        self.readings[feed_id] = PriceReading(
            feed_id=feed_id,
            price=price,
            exponent=exponent,
            confidence=confidence,
            publish_time=T0,
        )

    async def get_latest_price(self, db, feed_id):
        return self.readings.get(feed_id)


class FakeSession:
    def __init__(self, *stores: _TxStore) -> None:
        self._stores = stores
        self.commits = 0
        self.rollbacks = 0

    async def commit(self) -> None:
        for s in self._stores:
            s.commit()
        self.commits += 1

    async def rollback(self) -> None:
        for s in self._stores:
            s.rollback()
        self.rollbacks += 1


class Clock:
    def __init__(self, now: int = T0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def markets() -> FakeMarketRepo:
    return FakeMarketRepo()


@pytest.fixture
def positions() -> FakePositionRepo:
    return FakePositionRepo()


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def oracle() -> FakeOracle:
    return FakeOracle()


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def db(markets, positions, ledger) -> FakeSession:
    return FakeSession(markets, positions, ledger)


@pytest.fixture
def service(markets, positions, ledger, oracle, clock) -> SettlementService:
    return SettlementService(
        market_repo=markets,
        position_repo=positions,
        ledger=ledger,
        oracle=oracle,
        clock=clock,
        program_id=PROGRAM_ID,
        max_confidence_bps=500,
    )
