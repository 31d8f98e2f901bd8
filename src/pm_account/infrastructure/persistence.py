"""AccountRepository: postings applied with one statement each.

A posting updates the balance and appends its ledger row in a single
``WITH ... UPDATE ... RETURNING`` / ``INSERT ... SELECT`` statement. The
balance guard lives in the UPDATE's WHERE clause, so a debit that would go
negative matches no row and nothing is written.

Transaction ownership: the CALLER (application service) commits or rolls back.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.domain.models import Account, LedgerEntry, Posting, Transfer
from src.pm_common.enums import LedgerEntryType
from src.pm_common.errors import AccountNotFoundError, InsufficientBalanceError, InternalError

_POST_SQL = text("""
    WITH moved AS (
        UPDATE accounts
        SET available_balance = available_balance + :amount
        WHERE user_id = :user_id
          AND available_balance + :amount >= 0
        RETURNING user_id, available_balance
    )
    INSERT INTO ledger_entries
        (user_id, entry_type, amount, balance_after,
         reference_type, reference_id, description)
    SELECT user_id, CAST(:entry_type AS VARCHAR), :amount, available_balance,
           CAST(:reference_type AS VARCHAR), CAST(:reference_id AS VARCHAR),
           CAST(:description AS VARCHAR)
    FROM moved
    RETURNING id, user_id, entry_type, amount, balance_after,
              reference_type, reference_id, description, created_at
""")

_GET_ACCOUNT_SQL = text("""
    SELECT user_id, available_balance, created_at, updated_at
    FROM accounts
    WHERE user_id = :user_id
""")

_LIST_LEDGER_SQL = text("""
    SELECT id, user_id, entry_type, amount, balance_after,
           reference_type, reference_id, description, created_at
    FROM ledger_entries
    WHERE user_id = :user_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < CAST(:cursor_id AS BIGINT))
      AND (CAST(:entry_type AS TEXT) IS NULL OR entry_type = CAST(:entry_type AS TEXT))
    ORDER BY id DESC
    LIMIT :limit
""")


def _row_to_ledger(row: object) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        entry_type=row.entry_type,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        balance_after=row.balance_after,  # type: ignore[attr-defined]
        reference_type=row.reference_type,  # type: ignore[attr-defined]
        reference_id=row.reference_id,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class AccountRepository:
    async def get_account_by_user_id(
        self, db: AsyncSession, user_id: str
    ) -> Account | None:
        row = (await db.execute(_GET_ACCOUNT_SQL, {"user_id": user_id})).fetchone()
        if row is None:
            return None
        return Account(
            user_id=row.user_id,
            available_balance=row.available_balance,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    async def post(self, db: AsyncSession, posting: Posting) -> LedgerEntry:
        if posting.amount == 0:
            raise InternalError(f"Zero-amount posting for {posting.user_id}")
        result = await db.execute(
            _POST_SQL,
            {
                "user_id": posting.user_id,
                "amount": posting.amount,
                "entry_type": posting.entry_type.value,
                "reference_type": posting.reference_type,
                "reference_id": posting.reference_id,
                "description": posting.description,
            },
        )
        row = result.fetchone()
        if row is None:
            # No row moved: the account is missing or the debit would overdraw it.
            account = await self.get_account_by_user_id(db, posting.user_id)
            if account is None:
                raise AccountNotFoundError(posting.user_id)
            raise InsufficientBalanceError(-posting.amount, account.available_balance)
        return _row_to_ledger(row)

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
    ) -> Transfer:
        """Debit first so a short payer aborts before anything is credited."""
        if amount <= 0:
            raise InternalError(f"Transfer amount must be positive, got {amount}")
        debit = await self.post(
            db,
            Posting(
                from_user_id, debit_type, -amount, ref_type, ref_id,
                f"{debit_type.value} to {to_user_id}",
            ),
        )
        credit = await self.post(
            db,
            Posting(
                to_user_id, credit_type, amount, ref_type, ref_id,
                f"{credit_type.value} from {from_user_id}",
            ),
        )
        return Transfer(debit=debit, credit=credit)

    async def list_ledger_entries(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]:
        result = await db.execute(
            _LIST_LEDGER_SQL,
            {
                "user_id": user_id,
                "cursor_id": cursor_id,
                "entry_type": entry_type,
                "limit": limit,
            },
        )
        return [_row_to_ledger(row) for row in result.fetchall()]
