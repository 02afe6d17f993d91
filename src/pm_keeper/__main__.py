"""Run with: python -m src.pm_keeper"""

import asyncio
import logging

import uvloop

from config.settings import settings
from src.pm_common.database import async_session_factory, engine
from src.pm_keeper.keeper import Keeper


async def main() -> None:
    keeper = Keeper(
        async_session_factory,
        keeper_id=settings.KEEPER_ID,
        poll_interval_secs=settings.KEEPER_POLL_INTERVAL_SECS,
    )
    try:
        await keeper.run_forever()
    finally:
        await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvloop.install()
    asyncio.run(main())
