"""Pari-mutuel payout math: winners split the whole pool pro rata, net of fee.

    gross  = floor(stake * total_pool / winning_pool)
    fee    = floor(gross * fee_percentage / 100)
    payout = gross - fee

Flooring guarantees the claims of one market never sum past its pool; the
flooring remainders (dust) stay in custody and are not claimable.
"""

from dataclasses import dataclass

from src.pm_common.amounts import percentage_floor, pro_rata_share
from src.pm_common.enums import Side
from src.pm_common.errors import InternalError, InvalidPredictionError
from src.pm_market.domain.models import Market, Position


@dataclass(frozen=True)
class PayoutBreakdown:
    gross: int
    fee: int
    payout: int


def winning_side(start_price: int, end_price: int) -> Side:
    """UP only if the final value strictly exceeds the start value.

    A tie (end_price == start_price) resolves to DOWN.
    """
    if end_price > start_price:
        return Side.UP
    return Side.DOWN


def compute_payout(
    stake: int,
    total_up_stake: int,
    total_down_stake: int,
    winner: Side,
    fee_percentage: int,
) -> PayoutBreakdown:
    total_pool = total_up_stake + total_down_stake
    winning_pool = total_up_stake if winner is Side.UP else total_down_stake
    if winning_pool == 0:
        raise InvalidPredictionError("winning side has no admitted stake")
    if stake > winning_pool:
        raise InternalError(
            f"stake {stake} exceeds winning pool {winning_pool}: accumulator out of sync"
        )
    gross = pro_rata_share(stake, total_pool, winning_pool)
    fee = percentage_floor(gross, fee_percentage)
    return PayoutBreakdown(gross=gross, fee=fee, payout=gross - fee)


def settle_position(market: Market, position: Position) -> PayoutBreakdown:
    """Payout for one position of a resolved market; losers are rejected."""
    winner = winning_side(market.start_price, market.end_price)
    if position.side is not winner:
        raise InvalidPredictionError(
            f"{position.side.value} lost in market {market.id}; nothing to claim"
        )
    return compute_payout(
        position.stake,
        market.total_up_stake,
        market.total_down_stake,
        winner,
        market.fee_percentage,
    )
