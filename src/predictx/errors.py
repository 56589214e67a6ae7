"""Error taxonomy for the trading engine and its collaborators.

Every error is recoverable and raised before the first write to the ledger.
`code` is the machine-readable name surfaced to callers, `http_status` is used
by the API layer.
"""

from __future__ import annotations


class PredictXError(Exception):
    """Base application error."""

    code = "ERROR"
    http_status = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# --- Validation (rejected before any mutation) ---

class ValidationError(PredictXError):
    code = "VALIDATION_ERROR"
    http_status = 400


class InvalidSideError(ValidationError):
    code = "INVALID_SIDE"

    def __init__(self, side: object) -> None:
        super().__init__(f"Invalid side: {side!r} (expected YES or NO)")


class InvalidAmountError(ValidationError):
    code = "INVALID_AMOUNT"

    def __init__(self, amount: object, balance: object | None = None) -> None:
        if balance is None:
            msg = f"Invalid amount: {amount}"
        else:
            msg = f"Invalid amount: {amount} (available balance {balance})"
        super().__init__(msg)


class RegistrationError(ValidationError):
    code = "INVALID_REGISTRATION"


# --- Not found ---

class NotFoundError(PredictXError):
    code = "NOT_FOUND"
    http_status = 404


class MarketNotFoundError(NotFoundError):
    code = "MARKET_NOT_FOUND"

    def __init__(self, market_id: object) -> None:
        super().__init__(f"Market not found: {market_id}")


class PositionNotFoundError(NotFoundError):
    code = "POSITION_NOT_FOUND"

    def __init__(self, position_id: object) -> None:
        super().__init__(f"Position not found: {position_id}")


class UserNotFoundError(NotFoundError):
    code = "USER_NOT_FOUND"

    def __init__(self, user_id: object) -> None:
        super().__init__(f"User not found: {user_id}")


# --- Accounts ---

class UserExistsError(PredictXError):
    code = "USER_EXISTS"
    http_status = 409

    def __init__(self) -> None:
        super().__init__("User already exists")


class InvalidCredentialsError(PredictXError):
    code = "INVALID_CREDENTIALS"
    http_status = 401

    def __init__(self) -> None:
        super().__init__("Invalid credentials")
