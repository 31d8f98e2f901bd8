"""MarketLifecycleService — create, enter and resolve markets.

Each mutating method is one transaction: the market row is locked, the block
is read, every precondition is checked, and only then are balances and
records written. Any error rolls the whole transaction back.

enter (make_prediction) is NOT idempotent: every successful call escrows a
fresh stake.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.domain.constants import PROTOCOL_CUSTODY_ID
from src.pm_account.domain.repository import AccountRepositoryProtocol
from src.pm_account.infrastructure.persistence import AccountRepository
from src.pm_common.block_clock import BlockClock, get_block_clock
from src.pm_common.enums import LedgerEntryType, MarketPhase, Side
from src.pm_common.errors import (
    InvalidPredictionError,
    MarketClosedError,
    MarketNotFoundError,
    PositionNotFoundError,
)
from src.pm_governance.domain.authorization import require_oracle, require_owner
from src.pm_governance.domain.repository import ProtocolConfigRepositoryProtocol
from src.pm_governance.infrastructure.persistence import ProtocolConfigRepository
from src.pm_market.application.schemas import (
    MarketDetail,
    MarketListResponse,
    PositionDetail,
    PredictionResponse,
    cursor_decode,
    cursor_encode,
)
from src.pm_market.domain.lifecycle import (
    ensure_accepting_entries,
    ensure_compatible_reentry,
    ensure_resolvable,
    parse_side,
    validate_market_params,
    validate_stake,
)
from src.pm_market.domain.repository import (
    MarketRepositoryProtocol,
    PositionRepositoryProtocol,
)
from src.pm_market.infrastructure.persistence import MarketRepository
from src.pm_market.infrastructure.positions_repository import PositionRepository

logger = logging.getLogger(__name__)


class MarketLifecycleService:
    def __init__(
        self,
        markets: MarketRepositoryProtocol | None = None,
        positions: PositionRepositoryProtocol | None = None,
        config_repo: ProtocolConfigRepositoryProtocol | None = None,
        accounts: AccountRepositoryProtocol | None = None,
        clock: BlockClock | None = None,
    ) -> None:
        self._markets: MarketRepositoryProtocol = markets or MarketRepository()
        self._positions: PositionRepositoryProtocol = positions or PositionRepository()
        self._config: ProtocolConfigRepositoryProtocol = config_repo or ProtocolConfigRepository()
        self._accounts: AccountRepositoryProtocol = accounts or AccountRepository()
        self._clock: BlockClock = clock or get_block_clock()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create_market(
        self,
        db: AsyncSession,
        caller_id: str,
        start_price: int,
        start_block: int,
        end_block: int,
    ) -> MarketDetail:
        require_owner(caller_id)
        validate_market_params(start_price, start_block, end_block)
        try:
            config = await self._config.get_config(db)
            market_id = await self._config.allocate_market_id(db)
            market = await self._markets.insert_market(
                db,
                market_id=market_id,
                start_price=start_price,
                start_block=start_block,
                end_block=end_block,
                fee_percentage=config.fee_percentage,
                creator_id=caller_id,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Market created: id=%d start_price=%d window=[%d, %d) fee=%d%%",
            market.id, start_price, start_block, end_block, market.fee_percentage,
        )
        return MarketDetail.from_domain(market, self._clock.current_block())

    async def make_prediction(
        self,
        db: AsyncSession,
        market_id: int,
        caller_id: str,
        side: Side | str,
        stake: int,
    ) -> PredictionResponse:
        side = parse_side(side)
        try:
            market = await self._markets.get_market_for_update(db, market_id)
            if market is None:
                raise MarketNotFoundError(market_id)
            ensure_accepting_entries(market, self._clock.current_block())

            config = await self._config.get_config(db)
            validate_stake(stake, config.minimum_stake)
            existing = await self._positions.get_position_for_update(db, market_id, caller_id)
            ensure_compatible_reentry(existing, side)

            await self._accounts.transfer(
                db,
                from_user_id=caller_id,
                to_user_id=PROTOCOL_CUSTODY_ID,
                amount=stake,
                debit_type=LedgerEntryType.STAKE_ESCROW,
                credit_type=LedgerEntryType.STAKE_CUSTODY_IN,
                ref_type="MARKET",
                ref_id=str(market_id),
            )
            position = await self._positions.upsert_position(
                db, market_id, caller_id, side, stake
            )
            if position is None:
                raise InvalidPredictionError(
                    f"position of {caller_id} in market {market_id} cannot take {side.value}"
                )
            market = await self._markets.add_stake(db, market_id, side, stake)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Position entered: market=%d user=%s side=%s stake=%d position_stake=%d",
            market_id, caller_id, side.value, stake, position.stake,
        )
        return PredictionResponse(
            position=PositionDetail.from_domain(position),
            total_up_stake=market.total_up_stake,
            total_down_stake=market.total_down_stake,
        )

    async def resolve_market(
        self,
        db: AsyncSession,
        market_id: int,
        caller_id: str,
        end_price: int,
    ) -> MarketDetail:
        try:
            config = await self._config.get_config(db)
            require_oracle(caller_id, config)
            market = await self._markets.get_market_for_update(db, market_id)
            if market is None:
                raise MarketNotFoundError(market_id)
            current_block = self._clock.current_block()
            ensure_resolvable(market, current_block, end_price)

            resolved = await self._markets.resolve(db, market_id, end_price, caller_id)
            if resolved is None:
                raise MarketClosedError(market_id, "market already resolved")
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        detail = MarketDetail.from_domain(resolved, current_block)
        logger.info(
            "Market resolved: id=%d start_price=%d end_price=%d winner=%s pool=%d",
            market_id, resolved.start_price, end_price,
            detail.winning_side.value if detail.winning_side else None, resolved.total_pool,
        )
        return detail

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    async def get_market(self, db: AsyncSession, market_id: int) -> MarketDetail:
        market = await self._markets.get_market_by_id(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return MarketDetail.from_domain(market, self._clock.current_block())

    async def list_markets(
        self,
        db: AsyncSession,
        phase: MarketPhase | None,
        cursor: str | None,
        limit: int,
    ) -> MarketListResponse:
        current_block = self._clock.current_block()
        cursor_id = cursor_decode(cursor)

        # Fetch limit+1 to detect has_more without COUNT(*)
        markets = await self._markets.list_markets(
            db, phase, current_block, cursor_id, limit + 1
        )
        has_more = len(markets) > limit
        page = markets[:limit]

        items = [MarketDetail.from_domain(m, current_block) for m in page]
        next_cursor = cursor_encode(page[-1]) if has_more and page else None
        return MarketListResponse(items=items, next_cursor=next_cursor, has_more=has_more)

    async def get_user_prediction(
        self, db: AsyncSession, market_id: int, user_id: str
    ) -> PositionDetail:
        market = await self._markets.get_market_by_id(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        position = await self._positions.get_position(db, market_id, user_id)
        if position is None:
            raise PositionNotFoundError(market_id, user_id)
        return PositionDetail.from_domain(position)
