"""Domain models for pm_market — pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime

from src.pm_common.enums import Side


@dataclass
class Market:
    id: int
    start_price: int
    end_price: int                 # 0 until resolved
    total_up_stake: int
    total_down_stake: int
    start_block: int
    end_block: int                 # entry window is [start_block, end_block)
    resolved: bool
    fee_percentage: int            # snapshot of protocol fee at creation
    creator_id: str
    resolved_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    resolved_at: datetime | None = None

    @property
    def total_pool(self) -> int:
        return self.total_up_stake + self.total_down_stake


@dataclass
class Position:
    market_id: int
    user_id: str
    side: Side
    stake: int
    claimed: bool = False
    payout: int | None = None      # recorded at claim time
    fee: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    claimed_at: datetime | None = None


@dataclass
class MarketTotals:
    """Aggregates over every stored position of one market."""

    up_stake_sum: int
    down_stake_sum: int
    paid_out: int
    fees: int
    claimed_count: int
