"""MarketRepository: concrete implementation of MarketRepositoryProtocol.

All queries use raw text() SQL (no ORM).
u64 columns are NUMERIC(20,0); asyncpg hands them back as Decimal, so the
row mapper converts to int.
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import Outcome
from src.pm_market.domain.models import Market

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_COLUMNS = """
    address, asset_name, strike_price, expiry_ts,
    cutoff_buffer_secs, grace_secs, max_delay_secs,
    creator, keeper, oracle_ref, outcome,
    yes_pool, no_pool, settlement_price, resolved_at
"""

_GET_MARKET_SQL = text(f"SELECT {_COLUMNS} FROM markets WHERE address = :address")

_GET_MARKET_FOR_UPDATE_SQL = text(
    f"SELECT {_COLUMNS} FROM markets WHERE address = :address FOR UPDATE"
)

_INSERT_MARKET_SQL = text("""
    INSERT INTO markets
        (address, asset_name, strike_price, expiry_ts,
         cutoff_buffer_secs, grace_secs, max_delay_secs,
         creator, keeper, oracle_ref, outcome, yes_pool, no_pool)
    VALUES
        (:address, :asset_name, :strike_price, :expiry_ts,
         :cutoff_buffer_secs, :grace_secs, :max_delay_secs,
         :creator, :keeper, :oracle_ref, :outcome, :yes_pool, :no_pool)
    ON CONFLICT (address) DO NOTHING
    RETURNING address
""")

# Config columns are immutable: only lifecycle and pool fields are written.
_UPDATE_MARKET_SQL = text("""
    UPDATE markets
    SET outcome = :outcome,
        yes_pool = :yes_pool,
        no_pool = :no_pool,
        settlement_price = :settlement_price,
        resolved_at = :resolved_at
    WHERE address = :address
""")

_LIST_MARKETS_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM markets
    WHERE CAST(:outcome AS TEXT) IS NULL OR outcome = CAST(:outcome AS TEXT)
    ORDER BY expiry_ts DESC, address
    LIMIT :limit
""")

_LIST_RESOLVABLE_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM markets
    WHERE outcome = 'PENDING'
      AND keeper = :keeper
      AND expiry_ts + grace_secs <= :now
      AND expiry_ts + max_delay_secs > :now
    ORDER BY expiry_ts
""")

# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_market(row: object) -> Market:
    settlement_price = row.settlement_price  # type: ignore[attr-defined]
    resolved_at = row.resolved_at  # type: ignore[attr-defined]
    return Market(
        address=row.address,  # type: ignore[attr-defined]
        asset_name=row.asset_name,  # type: ignore[attr-defined]
        strike_price=int(row.strike_price),  # type: ignore[attr-defined]
        expiry_ts=int(row.expiry_ts),  # type: ignore[attr-defined]
        cutoff_buffer_secs=int(row.cutoff_buffer_secs),  # type: ignore[attr-defined]
        grace_secs=int(row.grace_secs),  # type: ignore[attr-defined]
        max_delay_secs=int(row.max_delay_secs),  # type: ignore[attr-defined]
        creator=row.creator,  # type: ignore[attr-defined]
        keeper=row.keeper,  # type: ignore[attr-defined]
        oracle_ref=row.oracle_ref,  # type: ignore[attr-defined]
        outcome=Outcome(row.outcome),  # type: ignore[attr-defined]
        yes_pool=int(row.yes_pool),  # type: ignore[attr-defined]
        no_pool=int(row.no_pool),  # type: ignore[attr-defined]
        settlement_price=int(settlement_price) if settlement_price is not None else None,
        resolved_at=int(resolved_at) if resolved_at is not None else None,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class MarketRepository:
    """Concrete repository. Writes run inside the caller's transaction."""

    async def get_market(
        self, db: AsyncSession, address: str, for_update: bool = False
    ) -> Market | None:
        sql = _GET_MARKET_FOR_UPDATE_SQL if for_update else _GET_MARKET_SQL
        row = (await db.execute(sql, {"address": address})).fetchone()
        return _row_to_market(row) if row else None

    async def insert_market(self, db: AsyncSession, market: Market) -> bool:
        result = await db.execute(
            _INSERT_MARKET_SQL,
            {
                "address": market.address,
                "asset_name": market.asset_name,
                "strike_price": market.strike_price,
                "expiry_ts": market.expiry_ts,
                "cutoff_buffer_secs": market.cutoff_buffer_secs,
                "grace_secs": market.grace_secs,
                "max_delay_secs": market.max_delay_secs,
                "creator": market.creator,
                "keeper": market.keeper,
                "oracle_ref": market.oracle_ref,
                "outcome": market.outcome.value,
                "yes_pool": market.yes_pool,
                "no_pool": market.no_pool,
            },
        )
        return result.fetchone() is not None

    async def update_market(self, db: AsyncSession, market: Market) -> None:
        await db.execute(
            _UPDATE_MARKET_SQL,
            {
                "address": market.address,
                "outcome": market.outcome.value,
                "yes_pool": market.yes_pool,
                "no_pool": market.no_pool,
                "settlement_price": market.settlement_price,
                "resolved_at": market.resolved_at,
            },
        )

    async def list_markets(
        self, db: AsyncSession, outcome: Outcome | None, limit: int
    ) -> list[Market]:
        result = await db.execute(
            _LIST_MARKETS_SQL,
            {"outcome": outcome.value if outcome else None, "limit": limit},
        )
        return [_row_to_market(row) for row in result.fetchall()]

    async def list_resolvable_markets(
        self, db: AsyncSession, keeper: str, now: int
    ) -> list[Market]:
        result = await db.execute(_LIST_RESOLVABLE_SQL, {"keeper": keeper, "now": now})
        return [_row_to_market(row) for row in result.fetchall()]
