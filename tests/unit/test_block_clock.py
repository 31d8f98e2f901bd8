"""Tests for the wall-clock block counter."""

from datetime import datetime, timedelta, timezone

import pytest

from src.pm_common.block_clock import WallClockBlockClock, get_block_clock, utc_now

GENESIS = datetime(2026, 1, 1, tzinfo=timezone.utc)


class TestWallClockBlockClock:
    def test_block_zero_at_genesis(self) -> None:
        clock = WallClockBlockClock(GENESIS, 12)
        assert clock.block_at(GENESIS) == 0

    def test_before_genesis_is_zero(self) -> None:
        clock = WallClockBlockClock(GENESIS, 12)
        assert clock.block_at(GENESIS - timedelta(days=1)) == 0

    def test_floors_partial_block(self) -> None:
        clock = WallClockBlockClock(GENESIS, 12)
        assert clock.block_at(GENESIS + timedelta(seconds=11)) == 0
        assert clock.block_at(GENESIS + timedelta(seconds=12)) == 1
        assert clock.block_at(GENESIS + timedelta(seconds=125)) == 10

    def test_monotonic(self) -> None:
        clock = WallClockBlockClock(GENESIS, 5)
        moments = [GENESIS + timedelta(seconds=s) for s in range(0, 100, 7)]
        blocks = [clock.block_at(m) for m in moments]
        assert blocks == sorted(blocks)

    def test_current_block_uses_now(self) -> None:
        clock = WallClockBlockClock(GENESIS, 12)
        before = clock.block_at(utc_now())
        assert clock.current_block() >= before

    def test_rejects_naive_genesis(self) -> None:
        with pytest.raises(ValueError):
            WallClockBlockClock(datetime(2026, 1, 1), 12)

    def test_defaults_from_settings(self) -> None:
        from config.settings import settings

        clock = WallClockBlockClock()
        start = settings.CHAIN_GENESIS_AT
        assert clock.block_at(start + timedelta(seconds=settings.BLOCK_INTERVAL_SECONDS)) == 1


def test_default_clock_is_shared() -> None:
    assert get_block_clock() is get_block_clock()
