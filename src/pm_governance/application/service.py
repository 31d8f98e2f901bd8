# src/pm_governance/application/service.py
"""Governance service — owner-gated parameter setters, fee withdrawal and audits."""
import logging
from collections.abc import Awaitable

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pm_account.domain.constants import PROTOCOL_TREASURY_ID
from src.pm_account.domain.repository import AccountRepositoryProtocol
from src.pm_account.infrastructure.persistence import AccountRepository
from src.pm_common.amounts import validate_percentage, validate_positive
from src.pm_common.enums import LedgerEntryType
from src.pm_common.errors import (
    InsufficientBalanceError,
    InvalidParameterError,
    MarketNotFoundError,
)
from src.pm_governance.application.schemas import (
    ContractBalanceResponse,
    InvariantReport,
    MarketStatsResponse,
    ProtocolConfigResponse,
    WithdrawFeesResponse,
)
from src.pm_governance.domain.authorization import require_owner
from src.pm_governance.domain.models import ProtocolConfig
from src.pm_governance.domain.repository import ProtocolConfigRepositoryProtocol
from src.pm_governance.infrastructure.persistence import ProtocolConfigRepository
from src.pm_market.domain.repository import MarketRepositoryProtocol, PositionRepositoryProtocol
from src.pm_market.infrastructure.persistence import MarketRepository
from src.pm_market.infrastructure.positions_repository import PositionRepository
from src.pm_settlement.domain.global_invariants import verify_global_invariants
from src.pm_settlement.domain.invariants import check_market_invariants

logger = logging.getLogger(__name__)


class GovernanceService:
    def __init__(
        self,
        config_repo: ProtocolConfigRepositoryProtocol | None = None,
        accounts: AccountRepositoryProtocol | None = None,
        markets: MarketRepositoryProtocol | None = None,
        positions: PositionRepositoryProtocol | None = None,
    ) -> None:
        self._config: ProtocolConfigRepositoryProtocol = config_repo or ProtocolConfigRepository()
        self._accounts: AccountRepositoryProtocol = accounts or AccountRepository()
        self._markets: MarketRepositoryProtocol = markets or MarketRepository()
        self._positions: PositionRepositoryProtocol = positions or PositionRepository()

    async def get_config(self, db: AsyncSession) -> ProtocolConfigResponse:
        config = await self._config.get_config(db)
        return ProtocolConfigResponse.from_domain(config, settings.PROTOCOL_OWNER_ID)

    async def set_oracle(
        self, db: AsyncSession, caller_id: str, oracle_id: str
    ) -> ProtocolConfigResponse:
        require_owner(caller_id)
        if not oracle_id:
            raise InvalidParameterError("oracle_id must not be empty")
        config = await self._commit_update(db, self._config.set_oracle(db, oracle_id))
        logger.info("Oracle changed to %s by %s", oracle_id, caller_id)
        return ProtocolConfigResponse.from_domain(config, settings.PROTOCOL_OWNER_ID)

    async def set_minimum_stake(
        self, db: AsyncSession, caller_id: str, minimum_stake: int
    ) -> ProtocolConfigResponse:
        require_owner(caller_id)
        try:
            validate_positive("minimum_stake", minimum_stake)
        except ValueError as e:
            raise InvalidParameterError(str(e)) from None
        config = await self._commit_update(db, self._config.set_minimum_stake(db, minimum_stake))
        logger.info("Minimum stake set to %d by %s", minimum_stake, caller_id)
        return ProtocolConfigResponse.from_domain(config, settings.PROTOCOL_OWNER_ID)

    async def set_fee_percentage(
        self, db: AsyncSession, caller_id: str, fee_percentage: int
    ) -> ProtocolConfigResponse:
        require_owner(caller_id)
        try:
            validate_percentage(fee_percentage)
        except ValueError as e:
            raise InvalidParameterError(str(e)) from None
        config = await self._commit_update(db, self._config.set_fee_percentage(db, fee_percentage))
        logger.info("Fee percentage set to %d by %s", fee_percentage, caller_id)
        return ProtocolConfigResponse.from_domain(config, settings.PROTOCOL_OWNER_ID)

    async def withdraw_fees(
        self, db: AsyncSession, caller_id: str, amount: int | None = None
    ) -> WithdrawFeesResponse:
        """Move accumulated fees from the treasury to the owner's account."""
        require_owner(caller_id)
        try:
            balance = await self._config.get_contract_balance(db)
            if amount is None:
                if balance.treasury_balance == 0:
                    raise InvalidParameterError("treasury is empty")
                to_withdraw = balance.treasury_balance
            elif amount <= 0:
                raise InvalidParameterError(f"amount must be positive, got {amount}")
            else:
                to_withdraw = amount
            if to_withdraw > balance.treasury_balance:
                raise InsufficientBalanceError(to_withdraw, balance.treasury_balance)
            transfer = await self._accounts.transfer(
                db,
                from_user_id=PROTOCOL_TREASURY_ID,
                to_user_id=caller_id,
                amount=to_withdraw,
                debit_type=LedgerEntryType.TREASURY_WITHDRAWAL,
                credit_type=LedgerEntryType.FEE_WITHDRAWAL_RECEIPT,
                ref_type="TREASURY",
                ref_id=PROTOCOL_TREASURY_ID,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Fees withdrawn: amount=%d owner=%s", to_withdraw, caller_id)
        return WithdrawFeesResponse(
            withdrawn=to_withdraw,
            treasury_balance=transfer.debit.balance_after,
            owner_balance=transfer.credit.balance_after,
        )

    async def get_contract_balance(self, db: AsyncSession) -> ContractBalanceResponse:
        balance = await self._config.get_contract_balance(db)
        return ContractBalanceResponse.from_domain(balance)

    async def get_market_stats(
        self, db: AsyncSession, caller_id: str, market_id: int
    ) -> MarketStatsResponse:
        require_owner(caller_id)
        market = await self._markets.get_market_by_id(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        stats = await self._config.get_market_stats(db, market_id)
        return MarketStatsResponse.from_domain(stats)

    async def verify_all_invariants(self, db: AsyncSession, caller_id: str) -> InvariantReport:
        """Run per-market (INV-1..5) and global (INV-G1/G2) checks."""
        require_owner(caller_id)
        violations: list[str] = []
        markets = await self._markets.list_all_markets(db)
        for market in markets:
            totals = await self._positions.get_market_totals(db, market.id)
            violations.extend(check_market_invariants(market, totals))
        violations.extend(await verify_global_invariants(db))
        return InvariantReport(
            ok=len(violations) == 0,
            markets_checked=len(markets),
            violations=violations,
        )

    async def _commit_update(
        self, db: AsyncSession, update: Awaitable[ProtocolConfig]
    ) -> ProtocolConfig:
        try:
            config = await update
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return config
