"""Tests for per-market and global conservation checks."""

from unittest.mock import AsyncMock, MagicMock

from src.pm_market.domain.models import MarketTotals
from src.pm_settlement.domain.global_invariants import verify_global_invariants
from src.pm_settlement.domain.invariants import check_market_invariants
from tests.factories import make_market


def _scalar(value: object) -> MagicMock:
    result = MagicMock()
    result.scalar_one.return_value = value
    result.scalar_one_or_none.return_value = value
    return result


class TestMarketInvariants:
    def test_consistent_open_market(self) -> None:
        market = make_market(total_up_stake=3_000, total_down_stake=1_000)
        totals = MarketTotals(3_000, 1_000, 0, 0, 0)
        assert check_market_invariants(market, totals) == []

    def test_consistent_after_claims(self) -> None:
        market = make_market(
            total_up_stake=3_000, total_down_stake=1_000, resolved=True, end_price=60_000
        )
        totals = MarketTotals(3_000, 1_000, paid_out=3_920, fees=79, claimed_count=2)
        assert check_market_invariants(market, totals) == []

    def test_accumulator_drift(self) -> None:
        market = make_market(total_up_stake=3_000, total_down_stake=1_000)
        totals = MarketTotals(2_000, 1_500, 0, 0, 0)

        violations = check_market_invariants(market, totals)

        assert len(violations) == 2
        assert "total_up_stake" in violations[0]
        assert "total_down_stake" in violations[1]

    def test_overpaid_pool(self) -> None:
        market = make_market(
            total_up_stake=100, total_down_stake=100, resolved=True, end_price=1
        )
        totals = MarketTotals(100, 100, paid_out=190, fees=20, claimed_count=1)

        violations = check_market_invariants(market, totals)

        assert len(violations) == 1
        assert "> pool=200" in violations[0]

    def test_resolved_without_end_price(self) -> None:
        market = make_market(resolved=True, end_price=0)
        assert len(check_market_invariants(market, MarketTotals(0, 0, 0, 0, 0))) == 1

    def test_claims_before_resolution(self) -> None:
        market = make_market(total_up_stake=10)
        totals = MarketTotals(10, 0, 0, 0, claimed_count=1)

        violations = check_market_invariants(market, totals)

        assert any("not resolved" in v for v in violations)


class TestGlobalInvariants:
    async def test_balanced(self) -> None:
        db = AsyncMock()
        # balances 10_000 == net deposits 10_000; custody 4_000 == staked - distributed
        db.execute.side_effect = [_scalar(10_000), _scalar(10_000), _scalar(4_000), _scalar(4_000)]

        assert await verify_global_invariants(db) == []

    async def test_value_created_from_nothing(self) -> None:
        db = AsyncMock()
        db.execute.side_effect = [_scalar(10_050), _scalar(10_000), _scalar(4_000), _scalar(4_000)]

        violations = await verify_global_invariants(db)

        assert len(violations) == 1
        assert "INV-G1" in violations[0]

    async def test_custody_mismatch(self) -> None:
        db = AsyncMock()
        db.execute.side_effect = [_scalar(10_000), _scalar(10_000), _scalar(3_990), _scalar(4_000)]

        violations = await verify_global_invariants(db)

        assert len(violations) == 1
        assert "INV-G2" in violations[0]

    async def test_missing_custody_account_counts_as_zero(self) -> None:
        db = AsyncMock()
        db.execute.side_effect = [_scalar(0), _scalar(0), _scalar(None), _scalar(0)]

        assert await verify_global_invariants(db) == []
