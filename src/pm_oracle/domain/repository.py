"""Oracle reader Protocol: the engine only ever reads published prices."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_oracle.domain.models import PriceReading


class OracleReaderProtocol(Protocol):
    async def get_latest_price(
        self, db: AsyncSession, feed_id: str
    ) -> PriceReading | None: ...
