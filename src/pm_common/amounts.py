"""Integer arithmetic for stakes, pools and fees.

All prices, stakes and balances are non-negative ints in the smallest unit
of value. No float, no Decimal. Division always floors.
"""


def validate_positive(name: str, value: int) -> None:
    """Raise ValueError unless value is a strictly positive int."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")


def validate_percentage(value: int) -> None:
    """Validate that a fee percentage is in [0, 100]."""
    if isinstance(value, bool) or not isinstance(value, int) or not (0 <= value <= 100):
        raise ValueError(f"Percentage must be between 0 and 100, got {value!r}")


def pro_rata_share(stake: int, total_pool: int, winning_pool: int) -> int:
    """floor(stake * total_pool / winning_pool).

    The product is formed before dividing so no precision is lost; the
    remainder stays behind as dust.
    """
    if winning_pool <= 0:
        raise ZeroDivisionError("winning pool is empty")
    return (stake * total_pool) // winning_pool


def percentage_floor(amount: int, percentage: int) -> int:
    """floor(amount * percentage / 100): the protocol fee, rounded in the payer's favour."""
    if amount == 0 or percentage == 0:
        return 0
    return (amount * percentage) // 100
