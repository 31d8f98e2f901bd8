"""Pydantic schemas for pm_governance API."""

from pydantic import BaseModel, Field

from src.pm_governance.domain.models import ContractBalance, MarketStats, ProtocolConfig


class SetOracleRequest(BaseModel):
    oracle_id: str = Field(..., max_length=64)


class SetMinimumStakeRequest(BaseModel):
    minimum_stake: int


class SetFeePercentageRequest(BaseModel):
    fee_percentage: int


class WithdrawFeesRequest(BaseModel):
    amount: int | None = Field(None, description="Defaults to the whole treasury")


class ProtocolConfigResponse(BaseModel):
    owner_id: str
    oracle_id: str
    minimum_stake: int
    fee_percentage: int
    next_market_id: int

    @classmethod
    def from_domain(cls, c: ProtocolConfig, owner_id: str) -> "ProtocolConfigResponse":
        return cls(
            owner_id=owner_id,
            oracle_id=c.oracle_id,
            minimum_stake=c.minimum_stake,
            fee_percentage=c.fee_percentage,
            next_market_id=c.next_market_id,
        )


class ContractBalanceResponse(BaseModel):
    custody_balance: int
    treasury_balance: int
    total_balance: int

    @classmethod
    def from_domain(cls, b: ContractBalance) -> "ContractBalanceResponse":
        return cls(
            custody_balance=b.custody_balance,
            treasury_balance=b.treasury_balance,
            total_balance=b.total,
        )


class WithdrawFeesResponse(BaseModel):
    withdrawn: int
    treasury_balance: int
    owner_balance: int


class MarketStatsResponse(BaseModel):
    market_id: int
    up_positions: int
    down_positions: int
    claimed_positions: int
    total_paid_out: int
    total_fees: int

    @classmethod
    def from_domain(cls, s: MarketStats) -> "MarketStatsResponse":
        return cls(
            market_id=s.market_id,
            up_positions=s.up_positions,
            down_positions=s.down_positions,
            claimed_positions=s.claimed_positions,
            total_paid_out=s.total_paid_out,
            total_fees=s.total_fees,
        )


class InvariantReport(BaseModel):
    ok: bool
    markets_checked: int
    violations: list[str]
