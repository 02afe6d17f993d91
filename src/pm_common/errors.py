"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Identity / authorization
  2xxx: Value transfer
  3xxx: Market
  5xxx: Position
  6xxx: Oracle
  9xxx: System / arithmetic

Every error is raised before the current operation commits; the service
layer rolls the transaction back, so no partial state is ever observable.
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


# --- 1xxx: Identity / authorization ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Invalid or expired credentials", 401)


class InvalidKeeperError(AppError):
    def __init__(self, caller: str) -> None:
        super().__init__(1002, f"Caller {caller} is not the market keeper", 403)


class UnauthorizedError(AppError):
    def __init__(self, detail: str = "Caller does not own this record") -> None:
        super().__init__(1003, f"Unauthorized: {detail}", 403)


class AddressMismatchError(AppError):
    def __init__(self, kind: str, address: str) -> None:
        super().__init__(
            1004, f"{kind} address {address} does not match its derivation", 422
        )


# --- 2xxx: Value transfer ---

class TransferFailedError(AppError):
    def __init__(self, source: str, destination: str, amount: int) -> None:
        super().__init__(
            2001,
            f"Transfer of {amount} from {source} to {destination} failed",
            422,
        )


# --- 3xxx: Market ---

class MarketNotFoundError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3001, f"Market not found: {market_id}", 404)


class MarketAlreadyExistsError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3002, f"Market already exists: {market_id}", 409)


class InvalidConfigError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3003, f"Invalid market config: {detail}", 422)


class BettingClosedError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3004, f"Betting window has closed: {market_id}", 422)


class MarketNotExpiredError(AppError):
    def __init__(self, market_id: str, resolvable_at: int) -> None:
        super().__init__(
            3005, f"Market {market_id} cannot be resolved before {resolvable_at}", 422
        )


class MarketAlreadyResolvedError(AppError):
    def __init__(self, market_id: str, outcome: str) -> None:
        super().__init__(
            3006, f"Market {market_id} already resolved (outcome={outcome})", 409
        )


class MarketNotResolvedError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3007, f"Market outcome not resolved yet: {market_id}", 422)


class RefundNotAllowedError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3008, f"Refund not allowed for market {market_id}", 422)


class ResolutionWindowClosedError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(
            3009, f"Market {market_id} passed its max delay; only refunds remain", 422
        )


# --- 5xxx: Position ---

class PositionNotFoundError(AppError):
    def __init__(self, position_id: str) -> None:
        super().__init__(5001, f"Position not found: {position_id}", 404)


class InvalidAmountError(AppError):
    def __init__(self, amount: int) -> None:
        super().__init__(5002, f"Invalid stake amount: {amount}", 422)


class SideMismatchError(AppError):
    def __init__(self, existing: str, requested: str) -> None:
        super().__init__(
            5003, f"Position side is {existing}, cannot stake on {requested}", 422
        )


class AlreadyClaimedError(AppError):
    def __init__(self, position_id: str) -> None:
        super().__init__(5004, f"Position already claimed: {position_id}", 409)


class InvalidSideForPayoutError(AppError):
    def __init__(self, side: str, outcome: str) -> None:
        super().__init__(
            5005, f"Position side {side} has no payout for outcome {outcome}", 422
        )


# --- 6xxx: Oracle ---

class OracleUnavailableError(AppError):
    def __init__(self, oracle_id: str) -> None:
        super().__init__(6001, f"No price published by oracle {oracle_id}", 503)


class InvalidOraclePriceError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(6002, f"Invalid oracle price: {detail}", 422)


class InvalidOracleConfidenceError(AppError):
    def __init__(self, confidence: int, abs_price: int) -> None:
        super().__init__(
            6003,
            f"Oracle confidence {confidence} too wide for price {abs_price}",
            422,
        )


# --- 9xxx: System / arithmetic ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class ArithmeticOverflowError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9003, f"Math overflow: {detail}", 422)


class DivideByZeroError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9004, f"Divide by zero: {detail}", 422)
