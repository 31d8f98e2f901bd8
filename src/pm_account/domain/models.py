"""Value-holding records. Every balance change is one Posting and one ledger row."""

from dataclasses import dataclass
from datetime import datetime

from src.pm_common.enums import LedgerEntryType


@dataclass
class Account:
    user_id: str             # user UUID, or PROTOCOL_CUSTODY / PROTOCOL_TREASURY
    available_balance: int   # smallest value unit, never negative
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class Posting:
    """A signed movement against one account: credit > 0, debit < 0."""

    user_id: str
    entry_type: LedgerEntryType
    amount: int
    reference_type: str
    reference_id: str | None = None
    description: str | None = None


@dataclass
class LedgerEntry:
    id: int
    user_id: str
    entry_type: str
    amount: int
    balance_after: int
    reference_type: str | None = None
    reference_id: str | None = None
    description: str | None = None
    created_at: datetime | None = None


@dataclass
class Transfer:
    """The two ledger rows of one movement between accounts."""

    debit: LedgerEntry
    credit: LedgerEntry

    @property
    def amount(self) -> int:
        return self.credit.amount
