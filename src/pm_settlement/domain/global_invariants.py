# src/pm_settlement/domain/global_invariants.py
"""Global conservation invariants.

INV-G1: sum of every account balance == net funding (FUNDING ledger rows)
INV-G2: custody balance == sum over markets of (pool - paid_out - fees)
"""
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.domain.constants import PROTOCOL_CUSTODY_ID

logger = logging.getLogger(__name__)

_ALL_BALANCES_SQL = text(
    "SELECT COALESCE(SUM(available_balance), 0) FROM accounts"
)
_NET_DEPOSIT_SQL = text("""
    SELECT COALESCE(SUM(amount), 0)
    FROM ledger_entries
    WHERE reference_type = 'FUNDING'
""")
_CUSTODY_SQL = text(
    "SELECT COALESCE(available_balance, 0) FROM accounts WHERE user_id = :custody_id"
)
_OPEN_OBLIGATIONS_SQL = text("""
    SELECT
        (SELECT COALESCE(SUM(total_up_stake + total_down_stake), 0) FROM markets)
      - (SELECT COALESCE(SUM(COALESCE(payout, 0) + COALESCE(fee, 0)), 0) FROM positions)
""")


async def verify_global_invariants(db: AsyncSession) -> list[str]:
    """Check INV-G1 and INV-G2. Returns list of violation strings."""
    violations: list[str] = []
    all_balances = (await db.execute(_ALL_BALANCES_SQL)).scalar_one()
    net_deposits = (await db.execute(_NET_DEPOSIT_SQL)).scalar_one()
    if all_balances != net_deposits:
        violations.append(
            f"INV-G1 violated: account_balances({all_balances}) != net_deposits({net_deposits})"
        )

    custody = (
        await db.execute(_CUSTODY_SQL, {"custody_id": PROTOCOL_CUSTODY_ID})
    ).scalar_one_or_none() or 0
    obligations = (await db.execute(_OPEN_OBLIGATIONS_SQL)).scalar_one()
    if custody != obligations:
        violations.append(
            f"INV-G2 violated: custody({custody}) != staked - distributed({obligations})"
        )

    for v in violations:
        logger.error(v)
    return violations
