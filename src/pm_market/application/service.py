"""MarketApplicationService: thin read-only composition layer.

No commit/rollback needed. The caller (router) passes the db session;
the service delegates to the repository.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import Outcome
from src.pm_common.errors import MarketNotFoundError
from src.pm_market.application.schemas import (
    MarketDetail,
    MarketListItem,
    MarketListResponse,
)
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import MarketRepository


class MarketApplicationService:
    def __init__(self, repo: MarketRepositoryProtocol | None = None) -> None:
        self._repo: MarketRepositoryProtocol = repo or MarketRepository()

    async def list_markets(
        self,
        db: AsyncSession,
        outcome: Outcome | None,
        limit: int,
    ) -> MarketListResponse:
        markets = await self._repo.list_markets(db, outcome, limit)
        return MarketListResponse(items=[MarketListItem.from_domain(m) for m in markets])

    async def get_market(self, db: AsyncSession, market_id: str) -> MarketDetail:
        market = await self._repo.get_market(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return MarketDetail.from_domain(market)
