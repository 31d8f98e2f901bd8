"""Pydantic schemas for the account API.

Ledger cursor: Base64 JSON ``{"id": <last ledger id>}``; pages run newest first.
"""

import base64
import json

from pydantic import BaseModel, Field

from src.pm_account.domain.models import LedgerEntry
from src.pm_common.enums import LedgerEntryType


def cursor_encode(last_id: int) -> str:
    return base64.b64encode(json.dumps({"id": last_id}).encode()).decode()


def cursor_decode(cursor: str | None) -> int | None:
    """Last seen ledger id, or None for a missing or unreadable cursor."""
    if cursor is None:
        return None
    try:
        return int(json.loads(base64.b64decode(cursor.encode()).decode())["id"])
    except (ValueError, KeyError, TypeError):
        return None


class FundingRequest(BaseModel):
    amount: int = Field(..., gt=0, description="Smallest value unit")


class BalanceResponse(BaseModel):
    user_id: str
    available_balance: int


class BalanceChangeResponse(BaseModel):
    """Result of a deposit or withdrawal; amount is signed like the ledger row."""

    available_balance: int
    amount: int
    ledger_entry_id: int

    @classmethod
    def from_entry(cls, entry: LedgerEntry) -> "BalanceChangeResponse":
        return cls(
            available_balance=entry.balance_after,
            amount=entry.amount,
            ledger_entry_id=entry.id,
        )


class LedgerEntryItem(BaseModel):
    id: int
    entry_type: LedgerEntryType
    amount: int
    balance_after: int
    reference_type: str | None
    reference_id: str | None
    description: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, e: LedgerEntry) -> "LedgerEntryItem":
        return cls(
            id=e.id,
            entry_type=LedgerEntryType(e.entry_type),
            amount=e.amount,
            balance_after=e.balance_after,
            reference_type=e.reference_type,
            reference_id=e.reference_id,
            description=e.description,
            created_at=e.created_at.isoformat() if e.created_at else None,
        )


class LedgerResponse(BaseModel):
    items: list[LedgerEntryItem]
    next_cursor: str | None
    has_more: bool
