"""UTC time and the monotonic block counter.

Entry windows and resolution eligibility are measured in blocks. A block is a
fixed-length slot of wall-clock time counted from CHAIN_GENESIS_AT, so the
counter is monotonic and cannot be influenced by callers.
"""

from datetime import datetime, timezone
from typing import Protocol

from config.settings import settings


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


class BlockClock(Protocol):
    def current_block(self) -> int: ...


class WallClockBlockClock:
    """Block height derived from wall-clock time. Never negative."""

    def __init__(
        self,
        genesis_at: datetime | None = None,
        interval_seconds: int | None = None,
    ) -> None:
        self._genesis_at = genesis_at or settings.CHAIN_GENESIS_AT
        self._interval = interval_seconds or settings.BLOCK_INTERVAL_SECONDS
        if self._genesis_at.tzinfo is None:
            raise ValueError("genesis_at must be timezone-aware")
        if self._interval <= 0:
            raise ValueError(f"interval_seconds must be positive, got {self._interval}")

    def block_at(self, moment: datetime) -> int:
        elapsed = (moment - self._genesis_at).total_seconds()
        if elapsed <= 0:
            return 0
        return int(elapsed // self._interval)

    def current_block(self) -> int:
        return self.block_at(utc_now())


_default_clock = WallClockBlockClock()


def get_block_clock() -> BlockClock:
    """Module-level default clock shared by all services."""
    return _default_clock
