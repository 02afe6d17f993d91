"""Market invariant verification after each bet."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_market.domain.models import Market
from src.pm_position.domain.repository import PositionRepositoryProtocol

logger = logging.getLogger(__name__)


async def verify_pool_conservation(
    market: Market,
    positions: PositionRepositoryProtocol,
    db: AsyncSession,
) -> None:
    """Raise AssertionError if a pool drifted from the stakes recorded against it.

    INV-1: yes_pool == sum(amount) over YES positions of this market
    INV-2: no_pool  == sum(amount) over NO positions of this market
    """
    yes_total, no_total = await positions.sum_stakes(db, market.address)

    assert market.yes_pool == yes_total, (
        f"INV-1 violated: yes_pool={market.yes_pool} != yes stakes={yes_total}"
    )
    assert market.no_pool == no_total, (
        f"INV-2 violated: no_pool={market.no_pool} != no stakes={no_total}"
    )

    logger.debug(
        "Invariants OK: market=%s, yes_pool=%d, no_pool=%d",
        market.address,
        market.yes_pool,
        market.no_pool,
    )
