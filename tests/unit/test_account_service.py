"""Unit tests for AccountApplicationService using a mock repository."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.pm_account.application.schemas import (
    BalanceChangeResponse,
    BalanceResponse,
    LedgerResponse,
    cursor_decode,
    cursor_encode,
)
from src.pm_account.application.service import AccountApplicationService
from src.pm_account.domain.models import Account, LedgerEntry
from src.pm_common.enums import LedgerEntryType
from src.pm_common.errors import AccountNotFoundError, InsufficientBalanceError


def _make_account(available: int = 100_000) -> Account:
    return Account(
        user_id="user-1",
        available_balance=available,
        created_at=datetime.now(UTC),
        updated_at=datetime.now(UTC),
    )


def _make_ledger_entry(
    entry_id: int = 1,
    amount: int = 10_000,
    balance_after: int = 110_000,
    entry_type: str = "DEPOSIT",
) -> LedgerEntry:
    return LedgerEntry(
        id=entry_id,
        user_id="user-1",
        entry_type=entry_type,
        amount=amount,
        balance_after=balance_after,
        created_at=datetime.now(UTC),
    )


class TestGetBalance:
    async def test_returns_balance(self) -> None:
        mock_repo = AsyncMock()
        mock_repo.get_account_by_user_id.return_value = _make_account(150_000)
        svc = AccountApplicationService(repo=mock_repo)

        result = await svc.get_balance(MagicMock(), "user-1")

        assert isinstance(result, BalanceResponse)
        assert result.available_balance == 150_000

    async def test_missing_account(self) -> None:
        mock_repo = AsyncMock()
        mock_repo.get_account_by_user_id.return_value = None
        svc = AccountApplicationService(repo=mock_repo)

        with pytest.raises(AccountNotFoundError):
            await svc.get_balance(MagicMock(), "ghost")


class TestDeposit:
    async def test_posts_funding_credit(self) -> None:
        mock_repo = AsyncMock()
        mock_repo.post.return_value = _make_ledger_entry(1, 10_000, 110_000)
        svc = AccountApplicationService(repo=mock_repo)
        db = AsyncMock()

        result = await svc.deposit(db, "user-1", 10_000)

        posting = mock_repo.post.call_args.args[1]
        assert posting.entry_type is LedgerEntryType.DEPOSIT
        assert posting.amount == 10_000
        assert posting.reference_type == "FUNDING"
        assert isinstance(result, BalanceChangeResponse)
        assert result.amount == 10_000
        assert result.available_balance == 110_000
        assert result.ledger_entry_id == 1
        db.commit.assert_awaited_once()


class TestWithdraw:
    async def test_posting_is_negative(self) -> None:
        mock_repo = AsyncMock()
        mock_repo.post.return_value = _make_ledger_entry(2, -10_000, 90_000, "WITHDRAW")
        svc = AccountApplicationService(repo=mock_repo)
        db = AsyncMock()

        result = await svc.withdraw(db, "user-1", 10_000)

        posting = mock_repo.post.call_args.args[1]
        assert posting.entry_type is LedgerEntryType.WITHDRAW
        assert posting.amount == -10_000
        assert result.amount == -10_000
        assert result.available_balance == 90_000
        db.commit.assert_awaited_once()

    async def test_insufficient_balance_rolls_back(self) -> None:
        mock_repo = AsyncMock()
        mock_repo.post.side_effect = InsufficientBalanceError(10_000, 5)
        svc = AccountApplicationService(repo=mock_repo)
        db = AsyncMock()

        with pytest.raises(InsufficientBalanceError):
            await svc.withdraw(db, "user-1", 10_000)

        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()


class TestListLedger:
    async def test_empty(self) -> None:
        mock_repo = AsyncMock()
        mock_repo.list_ledger_entries.return_value = []
        svc = AccountApplicationService(repo=mock_repo)

        result = await svc.list_ledger(MagicMock(), "user-1", cursor=None, limit=20, entry_type=None)

        assert isinstance(result, LedgerResponse)
        assert result.items == []
        assert result.has_more is False

    async def test_next_cursor_when_full_page(self) -> None:
        mock_repo = AsyncMock()
        entries = [_make_ledger_entry(i, 1_000, 100_000) for i in range(21, 0, -1)]
        mock_repo.list_ledger_entries.return_value = entries
        svc = AccountApplicationService(repo=mock_repo)

        result = await svc.list_ledger(MagicMock(), "user-1", cursor=None, limit=20, entry_type=None)

        assert result.has_more is True
        assert len(result.items) == 20
        assert cursor_decode(result.next_cursor) == 2

    async def test_cursor_passed_to_repo(self) -> None:
        mock_repo = AsyncMock()
        mock_repo.list_ledger_entries.return_value = []
        svc = AccountApplicationService(repo=mock_repo)

        await svc.list_ledger(
            MagicMock(), "user-1", cursor=cursor_encode(50), limit=10, entry_type="CLAIM_PAYOUT"
        )

        args = mock_repo.list_ledger_entries.call_args.args
        assert args[2] == 50
        assert args[3] == 11
        assert args[4] == "CLAIM_PAYOUT"


class TestCursor:
    def test_garbage_cursor_is_none(self) -> None:
        assert cursor_decode("not-base64!") is None

    def test_none(self) -> None:
        assert cursor_decode(None) is None
