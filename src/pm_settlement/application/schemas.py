# src/pm_settlement/application/schemas.py
from typing import Literal

from pydantic import BaseModel

from src.pm_position.domain.models import Position


class CreateMarketRequest(BaseModel):
    asset_name: str
    strike_price: int
    duration_secs: int
    cutoff_buffer_secs: int
    grace_secs: int
    max_delay_secs: int
    keeper_id: str
    oracle_id: str


class PlaceBetRequest(BaseModel):
    amount: int
    side: Literal["YES", "NO"]


class PositionDetail(BaseModel):
    address: str
    owner: str
    market_ref: str
    side: str
    amount: int
    claimed: bool

    @classmethod
    def from_domain(cls, p: Position) -> "PositionDetail":
        return cls(
            address=p.address,
            owner=p.owner,
            market_ref=p.market_ref,
            side=p.side.value,
            amount=p.amount,
            claimed=p.claimed,
        )


class BetResponse(BaseModel):
    market_id: str
    position: PositionDetail
    yes_pool: int
    no_pool: int


class ResolveResponse(BaseModel):
    market_id: str
    outcome: str
    settlement_price: int
    resolved_at: int


class ClaimResponse(BaseModel):
    market_id: str
    position_id: str
    payout: int


class RefundResponse(BaseModel):
    market_id: str
    position_id: str
    refunded: int
