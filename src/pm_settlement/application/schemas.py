"""Pydantic schemas for pm_settlement API responses."""

from pydantic import BaseModel

from src.pm_common.enums import Side


class ClaimResponse(BaseModel):
    market_id: int
    user_id: str
    side: Side
    stake: int
    gross_winnings: int
    fee: int
    payout: int
