"""MarketRepository — the Market Record Store.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
Markets are never deleted; the only mutations are stake accumulation while
unresolved and the single resolve transition.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import MarketPhase, Side
from src.pm_common.errors import InternalError, MarketNotFoundError
from src.pm_market.domain.models import Market

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_MARKET_COLUMNS = """
    id, start_price, end_price,
    total_up_stake, total_down_stake,
    start_block, end_block, resolved,
    fee_percentage, creator_id, resolved_by,
    created_at, updated_at, resolved_at
"""

_INSERT_MARKET_SQL = text(f"""
    INSERT INTO markets
        (id, start_price, start_block, end_block, fee_percentage, creator_id)
    VALUES
        (:market_id, :start_price, :start_block, :end_block, :fee_percentage, :creator_id)
    RETURNING {_MARKET_COLUMNS}
""")

_GET_MARKET_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM markets
    WHERE id = :market_id
""")

_GET_MARKET_FOR_UPDATE_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM markets
    WHERE id = :market_id
    FOR UPDATE
""")

# Phase is derived from the current block, mirroring lifecycle.market_phase.
_LIST_MARKETS_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM markets
    WHERE
        (CAST(:cursor_id AS BIGINT) IS NULL OR id < CAST(:cursor_id AS BIGINT))
        AND (
            CAST(:phase AS TEXT) IS NULL
            OR CAST(:phase AS TEXT) = CASE
                WHEN resolved THEN 'RESOLVED'
                WHEN :current_block < start_block THEN 'PENDING'
                WHEN :current_block < end_block THEN 'OPEN'
                ELSE 'AWAITING_RESOLUTION'
            END
        )
    ORDER BY id DESC
    LIMIT :limit
""")

_LIST_ALL_MARKETS_SQL = text(f"SELECT {_MARKET_COLUMNS} FROM markets ORDER BY id")

_ADD_UP_STAKE_SQL = text(f"""
    UPDATE markets
    SET total_up_stake = total_up_stake + :amount,
        updated_at = NOW()
    WHERE id = :market_id AND resolved = FALSE
    RETURNING {_MARKET_COLUMNS}
""")

_ADD_DOWN_STAKE_SQL = text(f"""
    UPDATE markets
    SET total_down_stake = total_down_stake + :amount,
        updated_at = NOW()
    WHERE id = :market_id AND resolved = FALSE
    RETURNING {_MARKET_COLUMNS}
""")

_RESOLVE_SQL = text(f"""
    UPDATE markets
    SET end_price = :end_price,
        resolved = TRUE,
        resolved_by = :resolved_by,
        resolved_at = NOW(),
        updated_at = NOW()
    WHERE id = :market_id AND resolved = FALSE
    RETURNING {_MARKET_COLUMNS}
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_market(row: object) -> Market:
    return Market(
        id=row.id,  # type: ignore[attr-defined]
        start_price=row.start_price,  # type: ignore[attr-defined]
        end_price=row.end_price,  # type: ignore[attr-defined]
        total_up_stake=row.total_up_stake,  # type: ignore[attr-defined]
        total_down_stake=row.total_down_stake,  # type: ignore[attr-defined]
        start_block=row.start_block,  # type: ignore[attr-defined]
        end_block=row.end_block,  # type: ignore[attr-defined]
        resolved=row.resolved,  # type: ignore[attr-defined]
        fee_percentage=row.fee_percentage,  # type: ignore[attr-defined]
        creator_id=row.creator_id,  # type: ignore[attr-defined]
        resolved_by=row.resolved_by,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
        resolved_at=row.resolved_at,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class MarketRepository:
    """Concrete repository. Caller owns the transaction."""

    async def insert_market(
        self,
        db: AsyncSession,
        market_id: int,
        start_price: int,
        start_block: int,
        end_block: int,
        fee_percentage: int,
        creator_id: str,
    ) -> Market:
        result = await db.execute(
            _INSERT_MARKET_SQL,
            {
                "market_id": market_id,
                "start_price": start_price,
                "start_block": start_block,
                "end_block": end_block,
                "fee_percentage": fee_percentage,
                "creator_id": creator_id,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Market insert returned no rows: this should never happen")
        return _row_to_market(row)

    async def get_market_by_id(self, db: AsyncSession, market_id: int) -> Market | None:
        result = await db.execute(_GET_MARKET_SQL, {"market_id": market_id})
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def get_market_for_update(
        self, db: AsyncSession, market_id: int
    ) -> Market | None:
        """Row-locks the market until the caller's transaction ends."""
        result = await db.execute(_GET_MARKET_FOR_UPDATE_SQL, {"market_id": market_id})
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def list_markets(
        self,
        db: AsyncSession,
        phase: MarketPhase | None,
        current_block: int,
        cursor_id: int | None,
        limit: int,
    ) -> list[Market]:
        result = await db.execute(
            _LIST_MARKETS_SQL,
            {
                "phase": phase.value if phase is not None else None,
                "current_block": current_block,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        return [_row_to_market(row) for row in result.fetchall()]

    async def list_all_markets(self, db: AsyncSession) -> list[Market]:
        result = await db.execute(_LIST_ALL_MARKETS_SQL)
        return [_row_to_market(row) for row in result.fetchall()]

    async def add_stake(
        self, db: AsyncSession, market_id: int, side: Side, amount: int
    ) -> Market:
        sql = _ADD_UP_STAKE_SQL if side is Side.UP else _ADD_DOWN_STAKE_SQL
        result = await db.execute(sql, {"market_id": market_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            # Only reachable if the row lock was not taken first.
            raise MarketNotFoundError(market_id)
        return _row_to_market(row)

    async def resolve(
        self, db: AsyncSession, market_id: int, end_price: int, resolved_by: str
    ) -> Market | None:
        """Returns None when the market was already resolved (or does not exist)."""
        result = await db.execute(
            _RESOLVE_SQL,
            {"market_id": market_id, "end_price": end_price, "resolved_by": resolved_by},
        )
        row = result.fetchone()
        return _row_to_market(row) if row else None
