"""Domain models for pm_market: pure dataclasses, no business logic."""

from dataclasses import dataclass

from src.pm_common.enums import Outcome


@dataclass
class Market:
    address: str                 # derive(program_id, "market", creator)
    asset_name: str
    strike_price: int            # u64, same scale as normalized oracle price
    expiry_ts: int               # i64 unix seconds
    cutoff_buffer_secs: int
    grace_secs: int
    max_delay_secs: int
    creator: str
    keeper: str
    oracle_ref: str
    outcome: Outcome = Outcome.PENDING
    yes_pool: int = 0            # u64, total historical stake, never decreases
    no_pool: int = 0             # u64, total historical stake, never decreases
    settlement_price: int | None = None
    resolved_at: int | None = None

    @property
    def betting_closes_at(self) -> int:
        return self.expiry_ts - self.cutoff_buffer_secs

    @property
    def resolvable_at(self) -> int:
        return self.expiry_ts + self.grace_secs

    @property
    def refundable_at(self) -> int:
        return self.expiry_ts + self.max_delay_secs

    @property
    def total_pool(self) -> int:
        return self.yes_pool + self.no_pool
