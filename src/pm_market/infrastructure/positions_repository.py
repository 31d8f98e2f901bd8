# src/pm_market/infrastructure/positions_repository.py
"""PositionRepository — the Position Store, keyed by (market_id, user_id).

upsert_position only adds to an existing row when the side matches; a side
mismatch returns no row. mark_claimed only flips claimed once.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import Side
from src.pm_market.domain.models import MarketTotals, Position

_POSITION_COLUMNS = """
    market_id, user_id, side, stake, claimed, payout, fee,
    created_at, updated_at, claimed_at
"""

_GET_SQL = text(f"""
    SELECT {_POSITION_COLUMNS}
    FROM positions
    WHERE market_id = :market_id AND user_id = :user_id
""")

_GET_FOR_UPDATE_SQL = text(f"""
    SELECT {_POSITION_COLUMNS}
    FROM positions
    WHERE market_id = :market_id AND user_id = :user_id
    FOR UPDATE
""")

_UPSERT_SQL = text(f"""
    INSERT INTO positions (market_id, user_id, side, stake)
    VALUES (:market_id, :user_id, :side, :stake)
    ON CONFLICT (market_id, user_id) DO UPDATE
        SET stake = positions.stake + EXCLUDED.stake,
            updated_at = NOW()
        WHERE positions.side = EXCLUDED.side
          AND positions.claimed = FALSE
    RETURNING {_POSITION_COLUMNS}
""")

_MARK_CLAIMED_SQL = text(f"""
    UPDATE positions
    SET claimed = TRUE,
        payout = :payout,
        fee = :fee,
        claimed_at = NOW(),
        updated_at = NOW()
    WHERE market_id = :market_id AND user_id = :user_id AND claimed = FALSE
    RETURNING {_POSITION_COLUMNS}
""")

_TOTALS_SQL = text("""
    SELECT
        COALESCE(SUM(stake) FILTER (WHERE side = 'UP'), 0)   AS up_stake_sum,
        COALESCE(SUM(stake) FILTER (WHERE side = 'DOWN'), 0) AS down_stake_sum,
        COALESCE(SUM(payout), 0)                             AS paid_out,
        COALESCE(SUM(fee), 0)                                AS fees,
        COUNT(*) FILTER (WHERE claimed)                      AS claimed_count
    FROM positions
    WHERE market_id = :market_id
""")


def _row_to_position(row: object) -> Position:
    return Position(
        market_id=row.market_id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        side=Side(row.side),  # type: ignore[attr-defined]
        stake=row.stake,  # type: ignore[attr-defined]
        claimed=row.claimed,  # type: ignore[attr-defined]
        payout=row.payout,  # type: ignore[attr-defined]
        fee=row.fee,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
        claimed_at=row.claimed_at,  # type: ignore[attr-defined]
    )


class PositionRepository:
    async def get_position(
        self, db: AsyncSession, market_id: int, user_id: str
    ) -> Position | None:
        row = (
            await db.execute(_GET_SQL, {"market_id": market_id, "user_id": user_id})
        ).fetchone()
        return _row_to_position(row) if row else None

    async def get_position_for_update(
        self, db: AsyncSession, market_id: int, user_id: str
    ) -> Position | None:
        row = (
            await db.execute(_GET_FOR_UPDATE_SQL, {"market_id": market_id, "user_id": user_id})
        ).fetchone()
        return _row_to_position(row) if row else None

    async def upsert_position(
        self, db: AsyncSession, market_id: int, user_id: str, side: Side, stake: int
    ) -> Position | None:
        row = (
            await db.execute(
                _UPSERT_SQL,
                {"market_id": market_id, "user_id": user_id, "side": side.value, "stake": stake},
            )
        ).fetchone()
        return _row_to_position(row) if row else None

    async def mark_claimed(
        self, db: AsyncSession, market_id: int, user_id: str, payout: int, fee: int
    ) -> Position | None:
        row = (
            await db.execute(
                _MARK_CLAIMED_SQL,
                {"market_id": market_id, "user_id": user_id, "payout": payout, "fee": fee},
            )
        ).fetchone()
        return _row_to_position(row) if row else None

    async def get_market_totals(self, db: AsyncSession, market_id: int) -> MarketTotals:
        row = (await db.execute(_TOTALS_SQL, {"market_id": market_id})).fetchone()
        if row is None:
            return MarketTotals(0, 0, 0, 0, 0)
        return MarketTotals(
            up_stake_sum=int(row.up_stake_sum),
            down_stake_sum=int(row.down_stake_sum),
            paid_out=int(row.paid_out),
            fees=int(row.fees),
            claimed_count=int(row.claimed_count),
        )
