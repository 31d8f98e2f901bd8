"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class Side(str, Enum):
    UP = "UP"
    DOWN = "DOWN"


class MarketPhase(str, Enum):
    """Derived from (resolved, start_block, end_block) and the current block."""

    PENDING = "PENDING"                          # before start_block
    OPEN = "OPEN"                                # [start_block, end_block)
    AWAITING_RESOLUTION = "AWAITING_RESOLUTION"  # window elapsed, no oracle report yet
    RESOLVED = "RESOLVED"                        # terminal


class LedgerEntryType(str, Enum):
    # Deposit/Withdraw
    DEPOSIT = "DEPOSIT"
    WITHDRAW = "WITHDRAW"
    # Stake escrow (user + custody paired)
    STAKE_ESCROW = "STAKE_ESCROW"
    STAKE_CUSTODY_IN = "STAKE_CUSTODY_IN"
    # Claim payout (user + custody paired)
    CLAIM_PAYOUT = "CLAIM_PAYOUT"
    CLAIM_CUSTODY_OUT = "CLAIM_CUSTODY_OUT"
    # Claim fee (custody + treasury paired)
    FEE_CUSTODY_OUT = "FEE_CUSTODY_OUT"
    FEE_REVENUE = "FEE_REVENUE"
    # Treasury withdrawal (treasury + owner paired)
    TREASURY_WITHDRAWAL = "TREASURY_WITHDRAWAL"
    FEE_WITHDRAWAL_RECEIPT = "FEE_WITHDRAWAL_RECEIPT"
