"""Pydantic schemas for pm_market API responses."""

from pydantic import BaseModel

from src.pm_market.domain.models import Market


class MarketDetail(BaseModel):
    address: str
    asset_name: str
    strike_price: int
    expiry_ts: int
    cutoff_buffer_secs: int
    grace_secs: int
    max_delay_secs: int
    betting_closes_at: int
    resolvable_at: int
    refundable_at: int
    creator: str
    keeper: str
    oracle_ref: str
    outcome: str
    yes_pool: int
    no_pool: int
    total_pool: int
    settlement_price: int | None
    resolved_at: int | None

    @classmethod
    def from_domain(cls, m: Market) -> "MarketDetail":
        return cls(
            address=m.address,
            asset_name=m.asset_name,
            strike_price=m.strike_price,
            expiry_ts=m.expiry_ts,
            cutoff_buffer_secs=m.cutoff_buffer_secs,
            grace_secs=m.grace_secs,
            max_delay_secs=m.max_delay_secs,
            betting_closes_at=m.betting_closes_at,
            resolvable_at=m.resolvable_at,
            refundable_at=m.refundable_at,
            creator=m.creator,
            keeper=m.keeper,
            oracle_ref=m.oracle_ref,
            outcome=m.outcome.value,
            yes_pool=m.yes_pool,
            no_pool=m.no_pool,
            total_pool=m.total_pool,
            settlement_price=m.settlement_price,
            resolved_at=m.resolved_at,
        )


# ---------------------------------------------------------------------------
# Market list item (lightweight: no timing windows, no keeper/oracle refs)
# ---------------------------------------------------------------------------


class MarketListItem(BaseModel):
    address: str
    asset_name: str
    strike_price: int
    expiry_ts: int
    outcome: str
    yes_pool: int
    no_pool: int

    @classmethod
    def from_domain(cls, m: Market) -> "MarketListItem":
        return cls(
            address=m.address,
            asset_name=m.asset_name,
            strike_price=m.strike_price,
            expiry_ts=m.expiry_ts,
            outcome=m.outcome.value,
            yes_pool=m.yes_pool,
            no_pool=m.no_pool,
        )


class MarketListResponse(BaseModel):
    items: list[MarketListItem]
