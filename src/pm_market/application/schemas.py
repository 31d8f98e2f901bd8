"""Pydantic schemas for pm_market API requests and responses.

Cursor format for markets: {"id": <last market id>} as Base64 JSON.
Market IDs are sequential so the id alone orders the page.
"""

import base64
import json
from datetime import datetime

from pydantic import BaseModel, Field

from src.pm_common.enums import MarketPhase, Side
from src.pm_market.domain.lifecycle import market_phase
from src.pm_market.domain.models import Market, Position
from src.pm_settlement.domain.payout import winning_side

# ---------------------------------------------------------------------------
# Cursor utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_market: Market) -> str:
    return base64.b64encode(json.dumps({"id": last_market.id}).encode()).decode()


def cursor_decode(cursor: str | None) -> int | None:
    """Decode cursor -> last market id, or None on error."""
    if cursor is None:
        return None
    try:
        data = json.loads(base64.b64decode(cursor.encode()).decode())
        return int(data["id"])
    except (ValueError, KeyError, TypeError):
        return None


def _iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt is not None else None


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


# Types only. Ranges and sides are checked by pm_market.domain.lifecycle,
# after the role checks.


class CreateMarketRequest(BaseModel):
    start_price: int
    start_block: int
    end_block: int


class MakePredictionRequest(BaseModel):
    side: str = Field(..., description="UP or DOWN")
    stake: int = Field(..., description="Stake in the smallest value unit")


class ResolveMarketRequest(BaseModel):
    end_price: int


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class MarketDetail(BaseModel):
    id: int
    phase: MarketPhase
    current_block: int
    start_price: int
    end_price: int
    total_up_stake: int
    total_down_stake: int
    total_pool: int
    start_block: int
    end_block: int
    resolved: bool
    winning_side: Side | None
    fee_percentage: int
    creator_id: str
    resolved_by: str | None
    created_at: str | None
    resolved_at: str | None

    @classmethod
    def from_domain(cls, m: Market, current_block: int) -> "MarketDetail":
        return cls(
            id=m.id,
            phase=market_phase(m, current_block),
            current_block=current_block,
            start_price=m.start_price,
            end_price=m.end_price,
            total_up_stake=m.total_up_stake,
            total_down_stake=m.total_down_stake,
            total_pool=m.total_pool,
            start_block=m.start_block,
            end_block=m.end_block,
            resolved=m.resolved,
            winning_side=winning_side(m.start_price, m.end_price) if m.resolved else None,
            fee_percentage=m.fee_percentage,
            creator_id=m.creator_id,
            resolved_by=m.resolved_by,
            created_at=_iso(m.created_at),
            resolved_at=_iso(m.resolved_at),
        )


class MarketListResponse(BaseModel):
    items: list[MarketDetail]
    next_cursor: str | None
    has_more: bool


class PositionDetail(BaseModel):
    market_id: int
    user_id: str
    side: Side
    stake: int
    claimed: bool
    payout: int | None
    fee: int | None
    claimed_at: str | None

    @classmethod
    def from_domain(cls, p: Position) -> "PositionDetail":
        return cls(
            market_id=p.market_id,
            user_id=p.user_id,
            side=p.side,
            stake=p.stake,
            claimed=p.claimed,
            payout=p.payout,
            fee=p.fee,
            claimed_at=_iso(p.claimed_at),
        )


class PredictionResponse(BaseModel):
    """Acknowledgement of an admitted entry."""

    success: bool = True
    position: PositionDetail
    total_up_stake: int
    total_down_stake: int
