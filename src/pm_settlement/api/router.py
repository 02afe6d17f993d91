"""pm_settlement REST endpoints (write side plus position read).

POST /markets                                                create_market
POST /markets/{market_id}/bets                               place_bet
POST /markets/{market_id}/resolve                            resolve_market (keeper)
POST /markets/{market_id}/positions/{position_id}/claim      claim_winnings
POST /markets/{market_id}/positions/{position_id}/refund     refund_unsettlable
GET  /markets/{market_id}/positions/{position_id}            position detail
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_caller_identity
from src.pm_settlement.application.schemas import CreateMarketRequest, PlaceBetRequest
from src.pm_settlement.application.service import SettlementService

router = APIRouter(prefix="/markets", tags=["settlement"])

_service = SettlementService()


@router.post("", status_code=201)
async def create_market(
    body: CreateMarketRequest,
    request: Request,
    caller: Annotated[str, Depends(get_caller_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.create_market(db, caller, body)
    return success_response(result.model_dump(), request)


@router.post("/{market_id}/bets")
async def place_bet(
    market_id: str,
    body: PlaceBetRequest,
    request: Request,
    caller: Annotated[str, Depends(get_caller_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.place_bet(db, caller, market_id, body)
    return success_response(result.model_dump(), request)


@router.post("/{market_id}/resolve")
async def resolve_market(
    market_id: str,
    request: Request,
    caller: Annotated[str, Depends(get_caller_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.resolve_market(db, caller, market_id)
    return success_response(result.model_dump(), request)


@router.post("/{market_id}/positions/{position_id}/claim")
async def claim_winnings(
    market_id: str,
    position_id: str,
    request: Request,
    caller: Annotated[str, Depends(get_caller_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.claim_winnings(db, caller, market_id, position_id)
    return success_response(result.model_dump(), request)


@router.post("/{market_id}/positions/{position_id}/refund")
async def refund_unsettlable(
    market_id: str,
    position_id: str,
    request: Request,
    caller: Annotated[str, Depends(get_caller_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.refund_unsettlable(db, caller, market_id, position_id)
    return success_response(result.model_dump(), request)


@router.get("/{market_id}/positions/{position_id}")
async def get_position(
    market_id: str,
    position_id: str,
    request: Request,
    caller: Annotated[str, Depends(get_caller_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_position(db, market_id, position_id)
    return success_response(result.model_dump(), request)
