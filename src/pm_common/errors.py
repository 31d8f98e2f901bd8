"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Account
  3xxx: Market
  5xxx: Position
  6xxx: Governance
  9xxx: System

Every error aborts the whole operation; services raise before the first write.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


class NotFoundError(AppError):
    """Unknown market or position."""


# --- 1xxx: Auth/User ---

class UsernameExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Username already exists", 409)


class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Email already exists", 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid username or password", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", 401)


# --- 2xxx: Account ---

class InsufficientBalanceError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: required {required}, available {available}",
            422,
        )


class AccountNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(2002, f"Account not found for user {user_id}", 404)


# --- 3xxx: Market ---

class MarketNotFoundError(NotFoundError):
    def __init__(self, market_id: int) -> None:
        super().__init__(3001, f"Market not found: {market_id}", 404)


class MarketClosedError(AppError):
    def __init__(self, market_id: int, reason: str) -> None:
        super().__init__(3002, f"Market {market_id} is closed: {reason}", 422)


class InvalidParameterError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3003, f"Invalid parameter: {detail}", 422)


# --- 5xxx: Position ---

class PositionNotFoundError(NotFoundError):
    def __init__(self, market_id: int, user_id: str) -> None:
        super().__init__(
            5001, f"No position in market {market_id} for user {user_id}", 404
        )


class InvalidPredictionError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(5002, f"Invalid prediction: {detail}", 422)


class AlreadyClaimedError(AppError):
    def __init__(self, market_id: int, user_id: str) -> None:
        super().__init__(
            5003, f"Winnings already claimed in market {market_id} by {user_id}", 409
        )


# --- 6xxx: Governance ---

class UnauthorizedError(AppError):
    def __init__(self, role: str) -> None:
        super().__init__(6001, f"Caller is not the protocol {role}", 403)


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
