# src/pm_market/domain/repository.py
"""Repository Protocols — the Market Record Store and the Position Store.

Unit tests inject a mock (or an in-memory fake) that conforms to these
Protocols. Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import MarketPhase, Side
from src.pm_market.domain.models import Market, MarketTotals, Position


class MarketRepositoryProtocol(Protocol):
    async def insert_market(
        self,
        db: AsyncSession,
        market_id: int,
        start_price: int,
        start_block: int,
        end_block: int,
        fee_percentage: int,
        creator_id: str,
    ) -> Market: ...

    async def get_market_by_id(self, db: AsyncSession, market_id: int) -> Market | None: ...

    async def get_market_for_update(
        self, db: AsyncSession, market_id: int
    ) -> Market | None: ...

    async def list_markets(
        self,
        db: AsyncSession,
        phase: MarketPhase | None,
        current_block: int,
        cursor_id: int | None,
        limit: int,
    ) -> list[Market]: ...

    async def list_all_markets(self, db: AsyncSession) -> list[Market]: ...

    async def add_stake(
        self, db: AsyncSession, market_id: int, side: Side, amount: int
    ) -> Market: ...

    async def resolve(
        self, db: AsyncSession, market_id: int, end_price: int, resolved_by: str
    ) -> Market | None: ...


class PositionRepositoryProtocol(Protocol):
    async def get_position(
        self, db: AsyncSession, market_id: int, user_id: str
    ) -> Position | None: ...

    async def get_position_for_update(
        self, db: AsyncSession, market_id: int, user_id: str
    ) -> Position | None: ...

    async def upsert_position(
        self, db: AsyncSession, market_id: int, user_id: str, side: Side, stake: int
    ) -> Position | None: ...

    async def mark_claimed(
        self, db: AsyncSession, market_id: int, user_id: str, payout: int, fee: int
    ) -> Position | None: ...

    async def get_market_totals(self, db: AsyncSession, market_id: int) -> MarketTotals: ...
