"""Repository Protocol for accounts and the ledger.

``post`` is the single balance-mutating primitive; ``transfer`` pairs two
postings. Unit tests inject a mock or the in-memory fake.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.domain.models import Account, LedgerEntry, Posting, Transfer
from src.pm_common.enums import LedgerEntryType


class AccountRepositoryProtocol(Protocol):
    async def get_account_by_user_id(
        self, db: AsyncSession, user_id: str
    ) -> Account | None: ...

    async def post(self, db: AsyncSession, posting: Posting) -> LedgerEntry: ...

    async def transfer(
        self,
        db: AsyncSession,
        from_user_id: str,
        to_user_id: str,
        amount: int,
        debit_type: LedgerEntryType,
        credit_type: LedgerEntryType,
        ref_type: str,
        ref_id: str,
    ) -> Transfer: ...

    async def list_ledger_entries(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]: ...
