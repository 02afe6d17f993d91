"""Keeper runner: resolves markets once their resolution window opens.

Each poll lists PENDING markets assigned to this keeper with
expiry + grace <= now < expiry + max_delay, then calls resolve_market for
each one in its own session. A failure on one market (an AppError such as a
stale oracle, or a database error such as a deadlock) is logged and the rest
continue; the market stays PENDING and is retried next poll.
"""

import asyncio
import logging
from collections.abc import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.pm_common.datetime_utils import unix_now
from src.pm_common.errors import AppError
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import MarketRepository
from src.pm_settlement.application.service import SettlementService

logger = logging.getLogger(__name__)


class Keeper:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        keeper_id: str,
        service: SettlementService | None = None,
        market_repo: MarketRepositoryProtocol | None = None,
        clock: Callable[[], int] = unix_now,
        poll_interval_secs: float = 15,
    ) -> None:
        if not keeper_id:
            raise ValueError("keeper_id is required (set KEEPER_ID)")
        self._session_factory = session_factory
        self._keeper_id = keeper_id
        self._service = service or SettlementService()
        self._markets: MarketRepositoryProtocol = market_repo or MarketRepository()
        self._clock = clock
        self._poll_interval = poll_interval_secs

    async def run_once(self) -> tuple[int, int]:
        """One poll. Returns (resolved, failed)."""
        async with self._session_factory() as db:
            due = await self._markets.list_resolvable_markets(db, self._keeper_id, self._clock())

        if not due:
            logger.debug("No markets ready to resolve")
            return 0, 0

        logger.info("Found %d market(s) to resolve", len(due))
        resolved = failed = 0
        for market in due:
            async with self._session_factory() as db:
                try:
                    result = await self._service.resolve_market(
                        db, self._keeper_id, market.address
                    )
                except AppError as e:
                    failed += 1
                    logger.warning(
                        "Resolve failed: market=%s code=%d %s", market.address, e.code, e.message
                    )
                    continue
                except (SQLAlchemyError, OSError):
                    failed += 1
                    logger.exception("Resolve errored: market=%s", market.address)
                    continue
            resolved += 1
            logger.info(
                "Resolved market=%s outcome=%s price=%d",
                result.market_id,
                result.outcome,
                result.settlement_price,
            )
        return resolved, failed

    async def run_forever(self) -> None:
        logger.info(
            "Keeper started: keeper=%s poll=%ss", self._keeper_id, self._poll_interval
        )
        while True:
            try:
                await self.run_once()
            except (SQLAlchemyError, OSError):
                logger.exception("Keeper poll failed; retrying next interval")
            await asyncio.sleep(self._poll_interval)
