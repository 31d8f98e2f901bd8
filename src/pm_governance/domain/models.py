"""Domain models for pm_governance — pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class ProtocolConfig:
    """Mutable economic parameters. Exactly one row exists (id = 1)."""

    oracle_id: str
    minimum_stake: int
    fee_percentage: int      # 0..100, snapshotted onto each market at creation
    next_market_id: int
    updated_at: datetime | None = None


@dataclass
class ContractBalance:
    custody_balance: int     # escrowed stakes not yet paid out
    treasury_balance: int    # fees not yet withdrawn

    @property
    def total(self) -> int:
        return self.custody_balance + self.treasury_balance


@dataclass
class MarketStats:
    market_id: int
    up_positions: int
    down_positions: int
    claimed_positions: int
    total_paid_out: int
    total_fees: int
