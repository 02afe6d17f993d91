"""Repository Protocol: dependency inversion for testability.

Unit tests inject a fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_position.domain.models import Position


class PositionRepositoryProtocol(Protocol):
    async def get_position(
        self,
        db: AsyncSession,
        address: str,
        for_update: bool = False,
    ) -> Position | None: ...

    async def insert_position(self, db: AsyncSession, position: Position) -> None: ...

    async def update_position(self, db: AsyncSession, position: Position) -> None: ...

    async def sum_stakes(self, db: AsyncSession, market_ref: str) -> tuple[int, int]:
        """Return (total YES stake, total NO stake) across all positions."""
        ...
