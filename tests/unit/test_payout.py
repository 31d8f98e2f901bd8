"""Tests for the pari-mutuel payout math."""

import pytest

from src.pm_common.enums import Side
from src.pm_common.errors import InternalError, InvalidPredictionError
from src.pm_settlement.domain.payout import (
    PayoutBreakdown,
    compute_payout,
    settle_position,
    winning_side,
)
from tests.factories import make_market, make_position


class TestWinningSide:
    def test_up_when_price_rises(self) -> None:
        assert winning_side(50_000, 60_000) is Side.UP

    def test_down_when_price_falls(self) -> None:
        assert winning_side(50_000, 40_000) is Side.DOWN

    def test_tie_resolves_down(self) -> None:
        assert winning_side(50_000, 50_000) is Side.DOWN


class TestComputePayout:
    def test_reference_scenario(self) -> None:
        result = compute_payout(1_000_000, 3_000_000, 1_000_000, Side.UP, 2)
        assert result == PayoutBreakdown(gross=1_333_333, fee=26_666, payout=1_306_667)

    def test_zero_fee(self) -> None:
        result = compute_payout(500, 1_000, 1_000, Side.DOWN, 0)
        assert result == PayoutBreakdown(gross=1_000, fee=0, payout=1_000)

    def test_one_sided_market_returns_stake_less_fee(self) -> None:
        result = compute_payout(1_000, 1_000, 0, Side.UP, 10)
        assert result.gross == 1_000
        assert result.fee == 100
        assert result.payout == 900

    def test_empty_winning_pool_rejected(self) -> None:
        with pytest.raises(InvalidPredictionError, match="no admitted stake"):
            compute_payout(1_000, 0, 5_000, Side.UP, 2)

    def test_stake_larger_than_pool_is_internal_error(self) -> None:
        with pytest.raises(InternalError):
            compute_payout(5_000, 1_000, 1_000, Side.UP, 2)

    def test_dust_stays_in_pool(self) -> None:
        stakes = [1, 1, 1]
        total_up, total_down = sum(stakes), 2
        paid = sum(
            compute_payout(s, total_up, total_down, Side.UP, 0).gross for s in stakes
        )
        # 3 * floor(5/3) = 3, leaving 2 units of dust
        assert paid == 3
        assert paid <= total_up + total_down

    def test_sum_of_claims_never_exceeds_pool(self) -> None:
        stakes = [1_000, 3_333, 7, 12_345, 999_999]
        total_up = sum(stakes)
        total_down = 1_234_567
        breakdowns = [compute_payout(s, total_up, total_down, Side.UP, 3) for s in stakes]
        distributed = sum(b.payout + b.fee for b in breakdowns)
        assert distributed <= total_up + total_down
        assert all(b.payout + b.fee == b.gross for b in breakdowns)


class TestSettlePosition:
    def _resolved_market(self, end_price: int = 60_000) -> object:
        return make_market(
            total_up_stake=3_000_000,
            total_down_stake=1_000_000,
            resolved=True,
            end_price=end_price,
        )

    def test_winner(self) -> None:
        result = settle_position(self._resolved_market(), make_position(side=Side.UP))
        assert result.payout == 1_306_667

    def test_loser_rejected(self) -> None:
        with pytest.raises(InvalidPredictionError, match="DOWN lost"):
            settle_position(
                self._resolved_market(), make_position(side=Side.DOWN, stake=1_000_000)
            )

    def test_tie_pays_down(self) -> None:
        market = self._resolved_market(end_price=50_000)
        result = settle_position(market, make_position(side=Side.DOWN, stake=1_000_000))
        # DOWN pool is 1,000,000: the single DOWN stake takes the whole 4,000,000 pool
        assert result.gross == 4_000_000
        assert result.fee == 80_000

    def test_uses_market_fee_snapshot(self) -> None:
        market = make_market(
            total_up_stake=1_000, total_down_stake=1_000,
            resolved=True, end_price=60_000, fee_percentage=10,
        )
        result = settle_position(market, make_position(side=Side.UP, stake=1_000))
        assert result == PayoutBreakdown(gross=2_000, fee=200, payout=1_800)
