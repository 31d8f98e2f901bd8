"""Per-market invariant checks over committed state.

INV-1: total_up_stake   == sum of UP position stakes
INV-2: total_down_stake == sum of DOWN position stakes
INV-3: paid_out + fees  <= total pool
INV-4: end_price > 0 iff resolved
INV-5: no claims before resolution
"""

import logging

from src.pm_market.domain.models import Market, MarketTotals

logger = logging.getLogger(__name__)


def check_market_invariants(market: Market, totals: MarketTotals) -> list[str]:
    """Return a list of violation strings (empty when the market is consistent)."""
    violations: list[str] = []
    if market.total_up_stake != totals.up_stake_sum:
        violations.append(
            f"INV-1 violated: market={market.id} total_up_stake={market.total_up_stake} "
            f"!= sum(UP stakes)={totals.up_stake_sum}"
        )
    if market.total_down_stake != totals.down_stake_sum:
        violations.append(
            f"INV-2 violated: market={market.id} total_down_stake={market.total_down_stake} "
            f"!= sum(DOWN stakes)={totals.down_stake_sum}"
        )
    distributed = totals.paid_out + totals.fees
    if distributed > market.total_pool:
        violations.append(
            f"INV-3 violated: market={market.id} paid_out({totals.paid_out}) + "
            f"fees({totals.fees}) = {distributed} > pool={market.total_pool}"
        )
    if market.resolved != (market.end_price > 0):
        violations.append(
            f"INV-4 violated: market={market.id} resolved={market.resolved} "
            f"end_price={market.end_price}"
        )
    if not market.resolved and totals.claimed_count > 0:
        violations.append(
            f"INV-5 violated: market={market.id} has {totals.claimed_count} claims "
            f"but is not resolved"
        )

    for v in violations:
        logger.error(v)
    if not violations:
        logger.debug(
            "Invariants OK: market=%s, pool=%d, distributed=%d",
            market.id, market.total_pool, distributed,
        )
    return violations
