# src/pm_market/domain/repository.py
"""Repository Protocol: dependency inversion for testability.

Unit tests inject a fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import Outcome
from src.pm_market.domain.models import Market


class MarketRepositoryProtocol(Protocol):
    async def get_market(
        self,
        db: AsyncSession,
        address: str,
        for_update: bool = False,
    ) -> Market | None: ...

    async def insert_market(self, db: AsyncSession, market: Market) -> bool:
        """Create-if-absent. Returns False if the address is already taken."""
        ...

    async def update_market(self, db: AsyncSession, market: Market) -> None: ...

    async def list_markets(
        self,
        db: AsyncSession,
        outcome: Outcome | None,
        limit: int,
    ) -> list[Market]: ...

    async def list_resolvable_markets(
        self,
        db: AsyncSession,
        keeper: str,
        now: int,
    ) -> list[Market]: ...
