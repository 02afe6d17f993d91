"""SettlementService: orchestrates the five state-changing operations.

Every operation follows the same shape:
  1. guards (signer, record authenticity, keeper / owner identity)
  2. lifecycle state checks, pure, nothing mutated yet
  3. all new values computed with checked arithmetic
  4. value movement through the transfer ledger
  5. persist records, commit

Any AppError (or anything else) rolls the whole transaction back.
Market and position rows are loaded FOR UPDATE, so two operations on the
same records serialize on the row lock.
"""

import logging
import uuid
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pm_clearing.domain.invariants import verify_pool_conservation
from src.pm_clearing.domain.payout import compute_payout
from src.pm_clearing.domain.repository import TransferLedgerProtocol
from src.pm_clearing.infrastructure.ledger import HoldingLedger
from src.pm_common.address import market_address, position_address, vault_address
from src.pm_common.checked_math import U64_MAX
from src.pm_common.datetime_utils import unix_now
from src.pm_common.enums import Outcome, Side, TransferReference
from src.pm_common.errors import (
    ArithmeticOverflowError,
    InvalidAmountError,
    InvalidOracleConfidenceError,
    InvalidOraclePriceError,
    MarketAlreadyExistsError,
    MarketNotFoundError,
    MarketNotResolvedError,
    OracleUnavailableError,
    PositionNotFoundError,
    RefundNotAllowedError,
    TransferFailedError,
)
from src.pm_market.application.schemas import MarketDetail
from src.pm_market.domain import lifecycle
from src.pm_market.domain.models import Market
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import MarketRepository
from src.pm_oracle.domain.confidence import check_confidence
from src.pm_oracle.domain.normalizer import normalize_price
from src.pm_oracle.domain.repository import OracleReaderProtocol
from src.pm_oracle.infrastructure.persistence import PriceFeedRepository
from src.pm_position.domain import ledger as position_ledger
from src.pm_position.domain.models import Position
from src.pm_position.domain.repository import PositionRepositoryProtocol
from src.pm_position.infrastructure.persistence import PositionRepository
from src.pm_settlement.application.guards import (
    require_keeper,
    require_position_owner,
    require_signer,
    verify_market_address,
    verify_position_address,
)
from src.pm_settlement.application.schemas import (
    BetResponse,
    ClaimResponse,
    CreateMarketRequest,
    PlaceBetRequest,
    PositionDetail,
    RefundResponse,
    ResolveResponse,
)

logger = logging.getLogger(__name__)


class SettlementService:
    def __init__(
        self,
        market_repo: MarketRepositoryProtocol | None = None,
        position_repo: PositionRepositoryProtocol | None = None,
        ledger: TransferLedgerProtocol | None = None,
        oracle: OracleReaderProtocol | None = None,
        clock: Callable[[], int] = unix_now,
        program_id: str | None = None,
        max_confidence_bps: int | None = None,
    ) -> None:
        self._markets: MarketRepositoryProtocol = market_repo or MarketRepository()
        self._positions: PositionRepositoryProtocol = position_repo or PositionRepository()
        self._ledger: TransferLedgerProtocol = ledger or HoldingLedger()
        self._oracle: OracleReaderProtocol = oracle or PriceFeedRepository()
        self._clock = clock
        self._program_id = program_id or settings.PROGRAM_ID
        self._max_confidence_bps = (
            settings.MAX_CONFIDENCE_BPS if max_confidence_bps is None else max_confidence_bps
        )

    # ------------------------------------------------------------------
    # Loaders
    # ------------------------------------------------------------------

    async def _load_market(self, db: AsyncSession, market_id: str) -> Market:
        market = await self._markets.get_market(db, market_id, for_update=True)
        if market is None:
            raise MarketNotFoundError(market_id)
        verify_market_address(self._program_id, market)
        return market

    async def _load_position(
        self, db: AsyncSession, market: Market, position_id: str
    ) -> Position:
        position = await self._positions.get_position(db, position_id, for_update=True)
        if position is None:
            raise PositionNotFoundError(position_id)
        verify_position_address(self._program_id, market, position)
        return position

    # ------------------------------------------------------------------
    # create_market
    # ------------------------------------------------------------------

    async def create_market(
        self, db: AsyncSession, caller: str, req: CreateMarketRequest
    ) -> MarketDetail:
        creator = require_signer(caller)
        try:
            address = market_address(self._program_id, creator)
            market = lifecycle.build_market(
                address=address,
                creator=creator,
                asset_name=req.asset_name,
                strike_price=req.strike_price,
                duration_secs=req.duration_secs,
                cutoff_buffer_secs=req.cutoff_buffer_secs,
                grace_secs=req.grace_secs,
                max_delay_secs=req.max_delay_secs,
                keeper=req.keeper_id,
                oracle_ref=req.oracle_id,
                now=self._clock(),
            )
            if not await self._markets.insert_market(db, market):
                raise MarketAlreadyExistsError(address)
            for side in (Side.YES, Side.NO):
                await self._ledger.open_vault(
                    db, vault_address(self._program_id, address, side), custodian=address
                )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Market created: market=%s asset=%s strike=%d expiry=%d keeper=%s",
            market.address,
            market.asset_name,
            market.strike_price,
            market.expiry_ts,
            market.keeper,
        )
        return MarketDetail.from_domain(market)

    # ------------------------------------------------------------------
    # place_bet
    # ------------------------------------------------------------------

    async def place_bet(
        self, db: AsyncSession, caller: str, market_id: str, req: PlaceBetRequest
    ) -> BetResponse:
        bettor = require_signer(caller)
        side = Side(req.side)
        if not (1 <= req.amount <= U64_MAX):
            raise InvalidAmountError(req.amount)

        try:
            market = await self._load_market(db, market_id)
            pos_address = position_address(self._program_id, market.address, bettor)
            existing = await self._positions.get_position(db, pos_address, for_update=True)
            if existing is not None:
                verify_position_address(self._program_id, market, existing)
                require_position_owner(existing, bettor)

            lifecycle.check_betting_open(market, self._clock())

            # Every new total is computed before value moves.
            new_pool = lifecycle.pool_after_stake(market, side, req.amount)
            position = position_ledger.stake(
                existing,
                address=pos_address,
                owner=bettor,
                market_ref=market.address,
                side=side,
                amount=req.amount,
            )

            vault = vault_address(self._program_id, market.address, side)
            moved = await self._ledger.transfer(
                db,
                source=bettor,
                destination=vault,
                amount=req.amount,
                authority=bettor,
                reference_type=TransferReference.BET,
                reference_id=uuid.uuid4().hex,
            )
            if not moved:
                raise TransferFailedError(bettor, vault, req.amount)

            lifecycle.set_pool(market, side, new_pool)
            if existing is None:
                await self._positions.insert_position(db, position)
            else:
                await self._positions.update_position(db, position)
            await self._markets.update_market(db, market)

            await verify_pool_conservation(market, self._positions, db)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Bet placed: market=%s position=%s side=%s amount=%d yes_pool=%d no_pool=%d",
            market.address,
            position.address,
            side.value,
            req.amount,
            market.yes_pool,
            market.no_pool,
        )
        return BetResponse(
            market_id=market.address,
            position=PositionDetail.from_domain(position),
            yes_pool=market.yes_pool,
            no_pool=market.no_pool,
        )

    # ------------------------------------------------------------------
    # resolve_market
    # ------------------------------------------------------------------

    async def resolve_market(
        self, db: AsyncSession, caller: str, market_id: str
    ) -> ResolveResponse:
        keeper = require_signer(caller)
        try:
            market = await self._load_market(db, market_id)
            require_keeper(market, keeper)

            now = self._clock()
            lifecycle.check_resolvable(market, now)

            settlement_price = await self._read_oracle(db, market)
            outcome = lifecycle.apply_resolution(market, settlement_price, now)
            await self._sweep_losing_vault(db, market, outcome)
            await self._markets.update_market(db, market)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Market resolved: market=%s outcome=%s price=%d strike=%d",
            market.address,
            outcome.value,
            settlement_price,
            market.strike_price,
        )
        return ResolveResponse(
            market_id=market.address,
            outcome=outcome.value,
            settlement_price=settlement_price,
            resolved_at=now,
        )

    async def _sweep_losing_vault(
        self, db: AsyncSession, market: Market, outcome: Outcome
    ) -> None:
        """Move the losing side's stakes into the winning vault.

        Payouts are drawn from the winning vault only, and pay out the whole
        pool, so it must hold yes_pool + no_pool before the first claim.
        """
        winning = Side.YES if outcome is Outcome.YES else Side.NO
        losing = Side.NO if winning is Side.YES else Side.YES
        amount = market.no_pool if losing is Side.NO else market.yes_pool
        if amount == 0:
            return
        source = vault_address(self._program_id, market.address, losing)
        destination = vault_address(self._program_id, market.address, winning)
        moved = await self._ledger.transfer_as_custodian(
            db,
            vault=source,
            destination=destination,
            amount=amount,
            custodian=market.address,
            reference_type=TransferReference.SWEEP,
            reference_id=market.address,
        )
        if not moved:
            raise TransferFailedError(source, destination, amount)

    async def _read_oracle(self, db: AsyncSession, market: Market) -> int:
        """Fetch, normalize and confidence-gate the latest reading."""
        reading = await self._oracle.get_latest_price(db, market.oracle_ref)
        if reading is None:
            logger.warning(
                "Oracle unavailable: market=%s oracle=%s", market.address, market.oracle_ref
            )
            raise OracleUnavailableError(market.oracle_ref)
        try:
            price = normalize_price(reading.price, reading.exponent)
            check_confidence(reading.confidence, abs(reading.price), self._max_confidence_bps)
        except (
            InvalidOraclePriceError,
            InvalidOracleConfidenceError,
            ArithmeticOverflowError,
        ) as e:
            logger.warning(
                "Oracle reading rejected: market=%s oracle=%s price=%d expo=%d conf=%d: %s",
                market.address,
                market.oracle_ref,
                reading.price,
                reading.exponent,
                reading.confidence,
                e.message,
            )
            raise
        return price

    # ------------------------------------------------------------------
    # claim_winnings
    # ------------------------------------------------------------------

    async def claim_winnings(
        self, db: AsyncSession, caller: str, market_id: str, position_id: str
    ) -> ClaimResponse:
        owner = require_signer(caller)
        try:
            market = await self._load_market(db, market_id)
            position = await self._load_position(db, market, position_id)
            if market.outcome not in (Outcome.YES, Outcome.NO):
                raise MarketNotResolvedError(market.address)
            require_position_owner(position, owner)
            position_ledger.check_unclaimed(position)
            position_ledger.check_winning_side(position, market.outcome)

            payout = compute_payout(
                position.amount, market.yes_pool, market.no_pool, market.outcome
            )
            vault = vault_address(self._program_id, market.address, position.side)
            moved = await self._ledger.transfer_as_custodian(
                db,
                vault=vault,
                destination=owner,
                amount=payout,
                custodian=market.address,
                reference_type=TransferReference.PAYOUT,
                reference_id=position.address,
            )
            if not moved:
                raise TransferFailedError(vault, owner, payout)

            position_ledger.mark_claimed(position)
            await self._positions.update_position(db, position)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Winnings claimed: market=%s position=%s payout=%d",
            market.address,
            position.address,
            payout,
        )
        return ClaimResponse(market_id=market.address, position_id=position.address, payout=payout)

    # ------------------------------------------------------------------
    # refund_unsettlable
    # ------------------------------------------------------------------

    async def refund_unsettlable(
        self, db: AsyncSession, caller: str, market_id: str, position_id: str
    ) -> RefundResponse:
        owner = require_signer(caller)
        try:
            market = await self._load_market(db, market_id)
            position = await self._load_position(db, market, position_id)
            if not lifecycle.is_refund_eligible(market, self._clock()):
                raise RefundNotAllowedError(market.address)
            require_position_owner(position, owner)
            position_ledger.check_unclaimed(position)

            vault = vault_address(self._program_id, market.address, position.side)
            moved = await self._ledger.transfer_as_custodian(
                db,
                vault=vault,
                destination=owner,
                amount=position.amount,
                custodian=market.address,
                reference_type=TransferReference.REFUND,
                reference_id=position.address,
            )
            if not moved:
                raise TransferFailedError(vault, owner, position.amount)

            position_ledger.mark_claimed(position)
            await self._positions.update_position(db, position)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Stake refunded: market=%s position=%s amount=%d",
            market.address,
            position.address,
            position.amount,
        )
        return RefundResponse(
            market_id=market.address, position_id=position.address, refunded=position.amount
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_position(
        self, db: AsyncSession, market_id: str, position_id: str
    ) -> PositionDetail:
        position = await self._positions.get_position(db, position_id)
        if position is None or position.market_ref != market_id:
            raise PositionNotFoundError(position_id)
        return PositionDetail.from_domain(position)
