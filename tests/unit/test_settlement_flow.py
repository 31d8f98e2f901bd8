"""End-to-end market flows over in-memory repositories.

create -> enter -> resolve -> claim, with the block clock moved by hand.
"""

from unittest.mock import patch

import pytest

from src.pm_account.domain.constants import PROTOCOL_CUSTODY_ID, PROTOCOL_TREASURY_ID
from src.pm_common.enums import MarketPhase, Side
from src.pm_common.errors import (
    AlreadyClaimedError,
    InsufficientBalanceError,
    InvalidPredictionError,
    MarketClosedError,
    UnauthorizedError,
)
from src.pm_governance.application.service import GovernanceService
from src.pm_market.application.service import MarketLifecycleService
from src.pm_settlement.application.service import SettlementService
from tests.factories import ORACLE, OWNER
from tests.fakes import (
    FixedClock,
    InMemoryAccounts,
    InMemoryMarkets,
    InMemoryPositions,
    InMemoryProtocolConfig,
    fake_session,
)

ALICE, BOB, CAROL = "alice", "bob", "carol"


class Harness:
    def __init__(self) -> None:
        self.db = fake_session()
        self.clock = FixedClock(0)
        self.accounts = InMemoryAccounts()
        self.markets = InMemoryMarkets()
        self.positions = InMemoryPositions()
        self.config = InMemoryProtocolConfig(self.accounts, self.positions)
        for user in (OWNER, ORACLE, ALICE, BOB, CAROL):
            self.accounts.open(user, balance=5_000_000)
        self.lifecycle = MarketLifecycleService(
            markets=self.markets,
            positions=self.positions,
            config_repo=self.config,
            accounts=self.accounts,
            clock=self.clock,
        )
        self.settlement = SettlementService(
            markets=self.markets, positions=self.positions, accounts=self.accounts
        )
        self.governance = GovernanceService(
            config_repo=self.config,
            accounts=self.accounts,
            markets=self.markets,
            positions=self.positions,
        )

    async def create(self, start_price: int = 50_000) -> int:
        detail = await self.lifecycle.create_market(self.db, OWNER, start_price, 100, 200)
        return detail.id

    async def enter(self, market_id: int, user: str, side: Side, stake: int):
        return await self.lifecycle.make_prediction(self.db, market_id, user, side, stake)

    async def resolve(self, market_id: int, end_price: int):
        return await self.lifecycle.resolve_market(self.db, market_id, ORACLE, end_price)

    async def claim(self, market_id: int, user: str):
        return await self.settlement.claim_winnings(self.db, market_id, user)


@pytest.fixture
def proto() -> Harness:
    return Harness()


async def _three_party_market(proto: Harness, end_price: int) -> int:
    market_id = await proto.create()
    proto.clock.block = 150
    await proto.enter(market_id, ALICE, Side.UP, 1_000_000)
    await proto.enter(market_id, CAROL, Side.UP, 2_000_000)
    await proto.enter(market_id, BOB, Side.DOWN, 1_000_000)
    proto.clock.block = 200
    await proto.resolve(market_id, end_price)
    return market_id


class TestEntryWindow:
    @pytest.mark.parametrize(
        ("block", "admitted"), [(99, False), (100, True), (199, True), (200, False)]
    )
    async def test_window_is_half_open(self, proto: Harness, block: int, admitted: bool) -> None:
        market_id = await proto.create()
        proto.clock.block = block

        if admitted:
            resp = await proto.enter(market_id, ALICE, Side.UP, 10_000)
            assert resp.total_up_stake == 10_000
        else:
            with pytest.raises(MarketClosedError):
                await proto.enter(market_id, ALICE, Side.UP, 10_000)
            assert proto.accounts.balance(ALICE) == 5_000_000

    async def test_market_ids_are_sequential_from_zero(self, proto: Harness) -> None:
        assert [await proto.create() for _ in range(3)] == [0, 1, 2]


class TestEntries:
    async def test_stake_moves_into_custody(self, proto: Harness) -> None:
        market_id = await proto.create()
        proto.clock.block = 150

        await proto.enter(market_id, ALICE, Side.UP, 400_000)

        assert proto.accounts.balance(ALICE) == 4_600_000
        assert proto.accounts.balance(PROTOCOL_CUSTODY_ID) == 400_000

    async def test_same_side_reentry_accumulates(self, proto: Harness) -> None:
        market_id = await proto.create()
        proto.clock.block = 150

        await proto.enter(market_id, ALICE, Side.UP, 400_000)
        resp = await proto.enter(market_id, ALICE, Side.UP, 600_000)

        assert resp.position.stake == 1_000_000
        assert resp.total_up_stake == 1_000_000
        position = await proto.lifecycle.get_user_prediction(proto.db, market_id, ALICE)
        assert position.stake == 1_000_000

    async def test_side_switch_rejected_without_escrow(self, proto: Harness) -> None:
        market_id = await proto.create()
        proto.clock.block = 150
        await proto.enter(market_id, ALICE, Side.UP, 400_000)

        with pytest.raises(InvalidPredictionError):
            await proto.enter(market_id, ALICE, Side.DOWN, 400_000)

        assert proto.accounts.balance(ALICE) == 4_600_000
        market = await proto.lifecycle.get_market(proto.db, market_id)
        assert market.total_down_stake == 0

    async def test_insufficient_funds_leaves_totals_untouched(self, proto: Harness) -> None:
        market_id = await proto.create()
        proto.clock.block = 150

        with pytest.raises(InsufficientBalanceError):
            await proto.enter(market_id, ALICE, Side.UP, 5_000_001)

        market = await proto.lifecycle.get_market(proto.db, market_id)
        assert market.total_pool == 0
        assert proto.positions.rows == {}

    async def test_totals_match_position_sums(self, proto: Harness) -> None:
        market_id = await proto.create()
        proto.clock.block = 150
        await proto.enter(market_id, ALICE, Side.UP, 300_000)
        await proto.enter(market_id, BOB, Side.DOWN, 700_000)
        await proto.enter(market_id, ALICE, Side.UP, 200_000)

        market = await proto.lifecycle.get_market(proto.db, market_id)
        totals = await proto.positions.get_market_totals(proto.db, market_id)
        assert (market.total_up_stake, market.total_down_stake) == (500_000, 700_000)
        assert (totals.up_stake_sum, totals.down_stake_sum) == (500_000, 700_000)
        assert proto.accounts.balance(PROTOCOL_CUSTODY_ID) == market.total_pool


class TestResolution:
    async def test_not_before_end_block(self, proto: Harness) -> None:
        market_id = await proto.create()
        proto.clock.block = 199

        with pytest.raises(MarketClosedError):
            await proto.resolve(market_id, 51_000)

    async def test_only_oracle_resolves(self, proto: Harness) -> None:
        market_id = await proto.create()
        proto.clock.block = 250

        with pytest.raises(UnauthorizedError):
            await proto.lifecycle.resolve_market(proto.db, market_id, ALICE, 51_000)

    async def test_resolves_once(self, proto: Harness) -> None:
        market_id = await _three_party_market(proto, end_price=51_000)

        with pytest.raises(MarketClosedError):
            await proto.resolve(market_id, 49_000)

        market = await proto.lifecycle.get_market(proto.db, market_id)
        assert market.end_price == 51_000
        assert market.phase is MarketPhase.RESOLVED

    async def test_entries_rejected_after_resolution(self, proto: Harness) -> None:
        market_id = await _three_party_market(proto, end_price=51_000)
        proto.clock.block = 150

        with pytest.raises(MarketClosedError):
            await proto.enter(market_id, ALICE, Side.UP, 10_000)


class TestClaims:
    async def test_up_wins_pro_rata_net_of_fee(self, proto: Harness) -> None:
        market_id = await _three_party_market(proto, end_price=51_000)

        alice = await proto.claim(market_id, ALICE)
        carol = await proto.claim(market_id, CAROL)

        assert (alice.gross_winnings, alice.fee, alice.payout) == (1_333_333, 26_666, 1_306_667)
        assert (carol.gross_winnings, carol.fee, carol.payout) == (2_666_666, 53_333, 2_613_333)
        assert proto.accounts.balance(ALICE) == 4_000_000 + 1_306_667
        assert proto.accounts.balance(PROTOCOL_TREASURY_ID) == 26_666 + 53_333
        assert proto.accounts.balance(PROTOCOL_CUSTODY_ID) == 1

    async def test_tie_pays_down_side(self, proto: Harness) -> None:
        market_id = await _three_party_market(proto, end_price=50_000)

        bob = await proto.claim(market_id, BOB)

        assert bob.side is Side.DOWN
        assert bob.gross_winnings == 4_000_000
        assert bob.fee == 80_000
        assert proto.accounts.balance(PROTOCOL_CUSTODY_ID) == 0

    async def test_loser_has_nothing_to_claim(self, proto: Harness) -> None:
        market_id = await _three_party_market(proto, end_price=51_000)

        with pytest.raises(InvalidPredictionError):
            await proto.claim(market_id, BOB)
        assert proto.accounts.balance(BOB) == 4_000_000

    async def test_second_claim_rejected(self, proto: Harness) -> None:
        market_id = await _three_party_market(proto, end_price=51_000)
        await proto.claim(market_id, ALICE)

        with pytest.raises(AlreadyClaimedError):
            await proto.claim(market_id, ALICE)
        assert proto.accounts.balance(ALICE) == 4_000_000 + 1_306_667

    async def test_claim_before_resolution(self, proto: Harness) -> None:
        market_id = await proto.create()
        proto.clock.block = 150
        await proto.enter(market_id, ALICE, Side.UP, 1_000_000)

        with pytest.raises(MarketClosedError):
            await proto.claim(market_id, ALICE)

    async def test_claims_never_exceed_pool(self, proto: Harness) -> None:
        market_id = await proto.create()
        proto.clock.block = 150
        for user, stake in ((ALICE, 333_333), (CAROL, 333_334), (OWNER, 333_333)):
            await proto.enter(market_id, user, Side.UP, stake)
        await proto.enter(market_id, BOB, Side.DOWN, 1_000_001)
        proto.clock.block = 300
        await proto.resolve(market_id, 60_000)

        paid = 0
        for user in (ALICE, CAROL, OWNER):
            resp = await proto.claim(market_id, user)
            paid += resp.gross_winnings

        assert paid <= 2_000_001
        custody = proto.accounts.balance(PROTOCOL_CUSTODY_ID)
        assert custody == 2_000_001 - paid


class TestTreasury:
    async def test_owner_withdraws_collected_fees(self, proto: Harness) -> None:
        market_id = await _three_party_market(proto, end_price=51_000)
        await proto.claim(market_id, ALICE)
        await proto.claim(market_id, CAROL)

        resp = await proto.governance.withdraw_fees(proto.db, OWNER)

        assert resp.withdrawn == 79_999
        assert resp.treasury_balance == 0
        assert proto.accounts.balance(OWNER) == 5_000_000 + 79_999

    async def test_contract_balance_reports_custody_and_treasury(self, proto: Harness) -> None:
        market_id = await _three_party_market(proto, end_price=51_000)
        await proto.claim(market_id, ALICE)

        balance = await proto.governance.get_contract_balance(proto.db)

        assert balance.custody_balance == 4_000_000 - 1_333_333
        assert balance.treasury_balance == 26_666

    async def test_invariants_hold_after_full_settlement(self, proto: Harness) -> None:
        market_id = await _three_party_market(proto, end_price=51_000)
        await proto.claim(market_id, ALICE)
        await proto.claim(market_id, CAROL)

        with patch(
            "src.pm_governance.application.service.verify_global_invariants", return_value=[]
        ):
            report = await proto.governance.verify_all_invariants(proto.db, OWNER)

        assert report.ok
        assert report.markets_checked == 1
