"""AccountApplicationService: balances, simulated funding and ledger history.

Deposit and withdrawal are the only ways value enters or leaves the system;
every other movement is a transfer between accounts. Both commit on success
and roll back on any error.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.application.schemas import (
    BalanceChangeResponse,
    BalanceResponse,
    LedgerEntryItem,
    LedgerResponse,
    cursor_decode,
    cursor_encode,
)
from src.pm_account.domain.models import Posting
from src.pm_account.domain.repository import AccountRepositoryProtocol
from src.pm_account.infrastructure.persistence import AccountRepository
from src.pm_common.enums import LedgerEntryType
from src.pm_common.errors import AccountNotFoundError

logger = logging.getLogger(__name__)

FUNDING_REFERENCE = "FUNDING"


class AccountApplicationService:
    def __init__(self, repo: AccountRepositoryProtocol | None = None) -> None:
        self._repo: AccountRepositoryProtocol = repo or AccountRepository()

    async def get_balance(self, db: AsyncSession, user_id: str) -> BalanceResponse:
        account = await self._repo.get_account_by_user_id(db, user_id)
        if account is None:
            raise AccountNotFoundError(user_id)
        return BalanceResponse(user_id=user_id, available_balance=account.available_balance)

    async def deposit(self, db: AsyncSession, user_id: str, amount: int) -> BalanceChangeResponse:
        posting = Posting(
            user_id=user_id,
            entry_type=LedgerEntryType.DEPOSIT,
            amount=amount,
            reference_type=FUNDING_REFERENCE,
            description="Simulated deposit",
        )
        return await self._fund(db, posting)

    async def withdraw(self, db: AsyncSession, user_id: str, amount: int) -> BalanceChangeResponse:
        posting = Posting(
            user_id=user_id,
            entry_type=LedgerEntryType.WITHDRAW,
            amount=-amount,
            reference_type=FUNDING_REFERENCE,
            description="Simulated withdrawal",
        )
        return await self._fund(db, posting)

    async def list_ledger(
        self,
        db: AsyncSession,
        user_id: str,
        cursor: str | None,
        limit: int,
        entry_type: str | None,
    ) -> LedgerResponse:
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        entries = await self._repo.list_ledger_entries(
            db, user_id, cursor_decode(cursor), limit + 1, entry_type
        )
        page = entries[:limit]
        has_more = len(entries) > limit
        return LedgerResponse(
            items=[LedgerEntryItem.from_domain(e) for e in page],
            next_cursor=cursor_encode(page[-1].id) if has_more and page else None,
            has_more=has_more,
        )

    async def _fund(self, db: AsyncSession, posting: Posting) -> BalanceChangeResponse:
        try:
            entry = await self._repo.post(db, posting)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "%s: user=%s amount=%d balance=%d",
            posting.entry_type.value, posting.user_id, posting.amount, entry.balance_after,
        )
        return BalanceChangeResponse.from_entry(entry)
