"""ProtocolConfigRepository — raw text() SQL over the single protocol_config row.

allocate_market_id serialises market creation on the config row lock, so IDs
are handed out 0, 1, 2, ... with no gaps among committed markets.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.domain.constants import PROTOCOL_CUSTODY_ID, PROTOCOL_TREASURY_ID
from src.pm_common.errors import InternalError
from src.pm_governance.domain.models import ContractBalance, MarketStats, ProtocolConfig

_CONFIG_COLUMNS = "oracle_id, minimum_stake, fee_percentage, next_market_id, updated_at"

_GET_CONFIG_SQL = text(f"SELECT {_CONFIG_COLUMNS} FROM protocol_config WHERE id = 1")

_ALLOCATE_MARKET_ID_SQL = text("""
    UPDATE protocol_config
    SET next_market_id = next_market_id + 1
    WHERE id = 1
    RETURNING next_market_id - 1 AS market_id
""")

_SET_ORACLE_SQL = text(f"""
    UPDATE protocol_config SET oracle_id = :value, updated_at = NOW()
    WHERE id = 1
    RETURNING {_CONFIG_COLUMNS}
""")

_SET_MINIMUM_STAKE_SQL = text(f"""
    UPDATE protocol_config SET minimum_stake = :value, updated_at = NOW()
    WHERE id = 1
    RETURNING {_CONFIG_COLUMNS}
""")

_SET_FEE_PERCENTAGE_SQL = text(f"""
    UPDATE protocol_config SET fee_percentage = :value, updated_at = NOW()
    WHERE id = 1
    RETURNING {_CONFIG_COLUMNS}
""")

_SYSTEM_BALANCES_SQL = text("""
    SELECT user_id, available_balance
    FROM accounts
    WHERE user_id IN (:custody_id, :treasury_id)
""")

_MARKET_STATS_SQL = text("""
    SELECT
        COUNT(*) FILTER (WHERE side = 'UP')   AS up_positions,
        COUNT(*) FILTER (WHERE side = 'DOWN') AS down_positions,
        COUNT(*) FILTER (WHERE claimed)       AS claimed_positions,
        COALESCE(SUM(payout), 0)              AS total_paid_out,
        COALESCE(SUM(fee), 0)                 AS total_fees
    FROM positions
    WHERE market_id = :market_id
""")


def _row_to_config(row: object) -> ProtocolConfig:
    return ProtocolConfig(
        oracle_id=row.oracle_id,  # type: ignore[attr-defined]
        minimum_stake=row.minimum_stake,  # type: ignore[attr-defined]
        fee_percentage=row.fee_percentage,  # type: ignore[attr-defined]
        next_market_id=row.next_market_id,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class ProtocolConfigRepository:
    async def get_config(self, db: AsyncSession) -> ProtocolConfig:
        row = (await db.execute(_GET_CONFIG_SQL)).fetchone()
        if row is None:
            raise InternalError("protocol_config row missing, run migrations")
        return _row_to_config(row)

    async def allocate_market_id(self, db: AsyncSession) -> int:
        row = (await db.execute(_ALLOCATE_MARKET_ID_SQL)).fetchone()
        if row is None:
            raise InternalError("protocol_config row missing, run migrations")
        return int(row.market_id)

    async def set_oracle(self, db: AsyncSession, oracle_id: str) -> ProtocolConfig:
        return await self._update(db, _SET_ORACLE_SQL, oracle_id)

    async def set_minimum_stake(self, db: AsyncSession, minimum_stake: int) -> ProtocolConfig:
        return await self._update(db, _SET_MINIMUM_STAKE_SQL, minimum_stake)

    async def set_fee_percentage(self, db: AsyncSession, fee_percentage: int) -> ProtocolConfig:
        return await self._update(db, _SET_FEE_PERCENTAGE_SQL, fee_percentage)

    async def get_contract_balance(self, db: AsyncSession) -> ContractBalance:
        rows = (
            await db.execute(
                _SYSTEM_BALANCES_SQL,
                {"custody_id": PROTOCOL_CUSTODY_ID, "treasury_id": PROTOCOL_TREASURY_ID},
            )
        ).fetchall()
        balances = {row.user_id: row.available_balance for row in rows}
        return ContractBalance(
            custody_balance=balances.get(PROTOCOL_CUSTODY_ID, 0),
            treasury_balance=balances.get(PROTOCOL_TREASURY_ID, 0),
        )

    async def get_market_stats(self, db: AsyncSession, market_id: int) -> MarketStats:
        row = (await db.execute(_MARKET_STATS_SQL, {"market_id": market_id})).fetchone()
        return MarketStats(
            market_id=market_id,
            up_positions=int(row.up_positions) if row else 0,
            down_positions=int(row.down_positions) if row else 0,
            claimed_positions=int(row.claimed_positions) if row else 0,
            total_paid_out=int(row.total_paid_out) if row else 0,
            total_fees=int(row.total_fees) if row else 0,
        )

    async def _update(self, db: AsyncSession, sql: object, value: object) -> ProtocolConfig:
        row = (await db.execute(sql, {"value": value})).fetchone()  # type: ignore[arg-type]
        if row is None:
            raise InternalError("protocol_config row missing, run migrations")
        return _row_to_config(row)
