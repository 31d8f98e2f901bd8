"""SettlementService — one-time claim of winnings from a resolved market.

The payout transfer, the fee transfer and the claimed flag are written in one
transaction. A second claim on the same position fails with AlreadyClaimed
instead of paying again.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.domain.constants import PROTOCOL_CUSTODY_ID, PROTOCOL_TREASURY_ID
from src.pm_account.domain.repository import AccountRepositoryProtocol
from src.pm_account.infrastructure.persistence import AccountRepository
from src.pm_common.enums import LedgerEntryType
from src.pm_common.errors import (
    AlreadyClaimedError,
    MarketNotFoundError,
    PositionNotFoundError,
)
from src.pm_market.domain.lifecycle import ensure_claimable
from src.pm_market.domain.repository import (
    MarketRepositoryProtocol,
    PositionRepositoryProtocol,
)
from src.pm_market.infrastructure.persistence import MarketRepository
from src.pm_market.infrastructure.positions_repository import PositionRepository
from src.pm_settlement.application.schemas import ClaimResponse
from src.pm_settlement.domain.payout import settle_position

logger = logging.getLogger(__name__)


class SettlementService:
    def __init__(
        self,
        markets: MarketRepositoryProtocol | None = None,
        positions: PositionRepositoryProtocol | None = None,
        accounts: AccountRepositoryProtocol | None = None,
    ) -> None:
        self._markets: MarketRepositoryProtocol = markets or MarketRepository()
        self._positions: PositionRepositoryProtocol = positions or PositionRepository()
        self._accounts: AccountRepositoryProtocol = accounts or AccountRepository()

    async def claim_winnings(
        self, db: AsyncSession, market_id: int, caller_id: str
    ) -> ClaimResponse:
        try:
            market = await self._markets.get_market_for_update(db, market_id)
            if market is None:
                raise MarketNotFoundError(market_id)
            ensure_claimable(market)

            position = await self._positions.get_position_for_update(db, market_id, caller_id)
            if position is None:
                raise PositionNotFoundError(market_id, caller_id)
            if position.claimed:
                raise AlreadyClaimedError(market_id, caller_id)

            breakdown = settle_position(market, position)

            claimed = await self._positions.mark_claimed(
                db, market_id, caller_id, breakdown.payout, breakdown.fee
            )
            if claimed is None:
                raise AlreadyClaimedError(market_id, caller_id)
            if breakdown.payout > 0:
                await self._accounts.transfer(
                    db,
                    from_user_id=PROTOCOL_CUSTODY_ID,
                    to_user_id=caller_id,
                    amount=breakdown.payout,
                    debit_type=LedgerEntryType.CLAIM_CUSTODY_OUT,
                    credit_type=LedgerEntryType.CLAIM_PAYOUT,
                    ref_type="MARKET",
                    ref_id=str(market_id),
                )
            if breakdown.fee > 0:
                await self._accounts.transfer(
                    db,
                    from_user_id=PROTOCOL_CUSTODY_ID,
                    to_user_id=PROTOCOL_TREASURY_ID,
                    amount=breakdown.fee,
                    debit_type=LedgerEntryType.FEE_CUSTODY_OUT,
                    credit_type=LedgerEntryType.FEE_REVENUE,
                    ref_type="MARKET",
                    ref_id=str(market_id),
                )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Winnings claimed: market=%d user=%s stake=%d gross=%d fee=%d payout=%d",
            market_id, caller_id, position.stake,
            breakdown.gross, breakdown.fee, breakdown.payout,
        )
        return ClaimResponse(
            market_id=market_id,
            user_id=caller_id,
            side=position.side,
            stake=position.stake,
            gross_winnings=breakdown.gross,
            fee=breakdown.fee,
            payout=breakdown.payout,
        )
