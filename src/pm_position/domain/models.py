"""Domain models for pm_position: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass

from src.pm_common.enums import Side


@dataclass
class Position:
    address: str        # derive(program_id, "userpos", market_ref, owner)
    owner: str
    market_ref: str
    side: Side          # fixed at first stake
    amount: int         # u64, cumulative stake
    claimed: bool = False
