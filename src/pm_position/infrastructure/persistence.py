"""PositionRepository: concrete implementation of PositionRepositoryProtocol.

Transaction ownership: the CALLER (SettlementService) commits or rolls back.
The positions table has a UNIQUE (market_ref, owner) constraint on top of the
derived primary key, so a racing second insert fails instead of duplicating.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import Side
from src.pm_position.domain.models import Position

_COLUMNS = "address, owner, market_ref, side, amount, claimed"

_GET_POSITION_SQL = text(f"SELECT {_COLUMNS} FROM positions WHERE address = :address")

_GET_POSITION_FOR_UPDATE_SQL = text(
    f"SELECT {_COLUMNS} FROM positions WHERE address = :address FOR UPDATE"
)

_INSERT_POSITION_SQL = text("""
    INSERT INTO positions (address, owner, market_ref, side, amount, claimed)
    VALUES (:address, :owner, :market_ref, :side, :amount, :claimed)
""")

# side, owner and market_ref are immutable; claimed may only go false -> true.
_UPDATE_POSITION_SQL = text("""
    UPDATE positions
    SET amount = :amount,
        claimed = :claimed
    WHERE address = :address
      AND (claimed = FALSE OR :claimed = TRUE)
""")

_SUM_STAKES_SQL = text("""
    SELECT
        COALESCE(SUM(amount) FILTER (WHERE side = 'YES'), 0) AS yes_total,
        COALESCE(SUM(amount) FILTER (WHERE side = 'NO'), 0)  AS no_total
    FROM positions
    WHERE market_ref = :market_ref
""")


def _row_to_position(row: object) -> Position:
    return Position(
        address=row.address,  # type: ignore[attr-defined]
        owner=row.owner,  # type: ignore[attr-defined]
        market_ref=row.market_ref,  # type: ignore[attr-defined]
        side=Side(row.side),  # type: ignore[attr-defined]
        amount=int(row.amount),  # type: ignore[attr-defined]
        claimed=bool(row.claimed),  # type: ignore[attr-defined]
    )


class PositionRepository:
    async def get_position(
        self, db: AsyncSession, address: str, for_update: bool = False
    ) -> Position | None:
        sql = _GET_POSITION_FOR_UPDATE_SQL if for_update else _GET_POSITION_SQL
        row = (await db.execute(sql, {"address": address})).fetchone()
        return _row_to_position(row) if row else None

    async def insert_position(self, db: AsyncSession, position: Position) -> None:
        await db.execute(
            _INSERT_POSITION_SQL,
            {
                "address": position.address,
                "owner": position.owner,
                "market_ref": position.market_ref,
                "side": position.side.value,
                "amount": position.amount,
                "claimed": position.claimed,
            },
        )

    async def update_position(self, db: AsyncSession, position: Position) -> None:
        await db.execute(
            _UPDATE_POSITION_SQL,
            {
                "address": position.address,
                "amount": position.amount,
                "claimed": position.claimed,
            },
        )

    async def sum_stakes(self, db: AsyncSession, market_ref: str) -> tuple[int, int]:
        row = (await db.execute(_SUM_STAKES_SQL, {"market_ref": market_ref})).fetchone()
        if row is None:
            return 0, 0
        return int(row.yes_total), int(row.no_total)

