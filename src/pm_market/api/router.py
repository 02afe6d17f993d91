"""pm_market REST endpoints (read side).

GET /markets               list, optionally filtered by outcome
GET /markets/{market_id}   full detail
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.enums import Outcome
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_caller_identity
from src.pm_market.application.service import MarketApplicationService

router = APIRouter(prefix="/markets", tags=["markets"])

_service = MarketApplicationService()


@router.get("")
async def list_markets(
    request: Request,
    caller: Annotated[str, Depends(get_caller_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    outcome: Outcome | None = Query(None, description="Filter by outcome"),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    result = await _service.list_markets(db, outcome, limit)
    return success_response(result.model_dump(), request)


@router.get("/{market_id}")
async def get_market(
    market_id: str,
    request: Request,
    caller: Annotated[str, Depends(get_caller_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_market(db, market_id)
    return success_response(result.model_dump(), request)
