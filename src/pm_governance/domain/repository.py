"""Repository Protocol for the protocol_config row and treasury-side reads."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_governance.domain.models import ContractBalance, MarketStats, ProtocolConfig


class ProtocolConfigRepositoryProtocol(Protocol):
    async def get_config(self, db: AsyncSession) -> ProtocolConfig: ...

    async def allocate_market_id(self, db: AsyncSession) -> int: ...

    async def set_oracle(self, db: AsyncSession, oracle_id: str) -> ProtocolConfig: ...

    async def set_minimum_stake(self, db: AsyncSession, minimum_stake: int) -> ProtocolConfig: ...

    async def set_fee_percentage(self, db: AsyncSession, fee_percentage: int) -> ProtocolConfig: ...

    async def get_contract_balance(self, db: AsyncSession) -> ContractBalance: ...

    async def get_market_stats(self, db: AsyncSession, market_id: int) -> MarketStats: ...
