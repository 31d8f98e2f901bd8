"""Market lifecycle rules as pure functions over Market state and a block height.

    PENDING --(start_block)--> OPEN --(end_block)--> AWAITING_RESOLUTION --(oracle)--> RESOLVED

Entries are legal only while OPEN, resolution only from AWAITING_RESOLUTION,
claims only once RESOLVED. There is no transition out of RESOLVED and no
cancellation path; a market the oracle never resolves stays
AWAITING_RESOLUTION.
"""

from src.pm_common.enums import MarketPhase, Side
from src.pm_common.errors import (
    InvalidParameterError,
    InvalidPredictionError,
    MarketClosedError,
)
from src.pm_market.domain.models import Market, Position


def validate_market_params(start_price: int, start_block: int, end_block: int) -> None:
    if isinstance(start_price, bool) or not isinstance(start_price, int) or start_price <= 0:
        raise InvalidParameterError(f"start_price must be positive, got {start_price!r}")
    if start_block < 0:
        raise InvalidParameterError(f"start_block must be non-negative, got {start_block}")
    if end_block <= start_block:
        raise InvalidParameterError(
            f"end_block ({end_block}) must be greater than start_block ({start_block})"
        )


def market_phase(market: Market, current_block: int) -> MarketPhase:
    if market.resolved:
        return MarketPhase.RESOLVED
    if current_block < market.start_block:
        return MarketPhase.PENDING
    if current_block < market.end_block:
        return MarketPhase.OPEN
    return MarketPhase.AWAITING_RESOLUTION


def parse_side(value: Side | str) -> Side:
    if isinstance(value, Side):
        return value
    try:
        return Side(value)
    except ValueError:
        raise InvalidPredictionError(f"side must be UP or DOWN, got {value!r}") from None


def ensure_accepting_entries(market: Market, current_block: int) -> None:
    phase = market_phase(market, current_block)
    if phase is MarketPhase.OPEN:
        return
    if phase is MarketPhase.PENDING:
        reason = f"entry window opens at block {market.start_block} (now {current_block})"
    elif phase is MarketPhase.RESOLVED:
        reason = "market already resolved"
    else:
        reason = f"entry window closed at block {market.end_block} (now {current_block})"
    raise MarketClosedError(market.id, reason)


def validate_stake(stake: int, minimum_stake: int) -> None:
    if isinstance(stake, bool) or not isinstance(stake, int):
        raise InvalidPredictionError(f"stake must be an integer, got {stake!r}")
    if stake < minimum_stake:
        raise InvalidPredictionError(f"stake {stake} is below the minimum of {minimum_stake}")


def ensure_compatible_reentry(existing: Position | None, side: Side) -> None:
    """A participant may add to their position but never switch sides."""
    if existing is not None and existing.side is not side:
        raise InvalidPredictionError(
            f"already holding a {existing.side.value} position in market {existing.market_id}"
        )


def ensure_resolvable(market: Market, current_block: int, end_price: int) -> None:
    if market.resolved:
        raise MarketClosedError(market.id, "market already resolved")
    if current_block < market.end_block:
        raise MarketClosedError(
            market.id,
            f"cannot resolve before block {market.end_block} (now {current_block})",
        )
    if isinstance(end_price, bool) or not isinstance(end_price, int) or end_price <= 0:
        raise InvalidParameterError(f"end_price must be positive, got {end_price!r}")


def ensure_claimable(market: Market) -> None:
    if not market.resolved:
        raise MarketClosedError(market.id, "market not yet resolved")
