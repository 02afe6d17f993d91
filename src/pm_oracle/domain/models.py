"""Domain models for pm_oracle: pure dataclasses, no business logic."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PriceReading:
    """One published oracle price: real_price = price * 10**exponent."""

    feed_id: str
    price: int        # i64
    exponent: int     # i32
    confidence: int   # u64, same scale as price
    publish_time: int  # unix seconds
