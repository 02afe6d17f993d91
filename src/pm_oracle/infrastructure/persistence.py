"""PriceFeedRepository: read side of the append-only oracle_prices table.

Rows are appended by the external price publisher; this engine never writes.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_oracle.domain.models import PriceReading

_LATEST_PRICE_SQL = text("""
    SELECT feed_id, price, exponent, confidence, publish_time
    FROM oracle_prices
    WHERE feed_id = :feed_id
    ORDER BY publish_time DESC, id DESC
    LIMIT 1
""")


class PriceFeedRepository:
    async def get_latest_price(
        self, db: AsyncSession, feed_id: str
    ) -> PriceReading | None:
        row = (await db.execute(_LATEST_PRICE_SQL, {"feed_id": feed_id})).fetchone()
        if row is None:
            return None
        return PriceReading(
            feed_id=row.feed_id,
            price=int(row.price),
            exponent=int(row.exponent),
            confidence=int(row.confidence),
            publish_time=int(row.publish_time),
        )
