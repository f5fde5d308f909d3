"""Application-level exceptions."""


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}", code="NOT_FOUND")


class RateFetchFailed(AppError):
    """Raised when the exchange rate provider cannot be reached or answers garbage.

    Recoverable: the rate cache stays empty and the next call fetches again.
    """

    def __init__(self, message: str):
        super().__init__(message, code="RATE_FETCH_FAILED")


class AuthenticationFailed(AppError):
    """Raised on bad credentials or a failed token refresh.

    Terminal for the current session; the user has to log in again.
    """

    def __init__(self, message: str):
        super().__init__(message, code="AUTHENTICATION_FAILED")


class BrokerRequestFailed(AppError):
    """Raised on a transient brokerage API error."""

    def __init__(self, message: str, symbol: str | None = None):
        self.symbol = symbol
        super().__init__(message, code="BROKER_REQUEST_FAILED")


class StoreWriteFailed(AppError):
    """Raised when the persistence layer rejects a write."""

    def __init__(self, message: str):
        super().__init__(message, code="STORE_WRITE_FAILED")


class DeserializationFailed(AppError):
    """Raised when a persisted row cannot be turned back into a domain object."""

    def __init__(self, table: str, identifier: str, reason: str):
        super().__init__(
            f"Malformed {table} row {identifier}: {reason}",
            code="DESERIALIZATION_FAILED",
        )


class OversellDetected(AppError):
    """Raised when a sell operation exceeds the quantity held."""

    def __init__(self, symbol: str, requested: str, available: str):
        self.symbol = symbol
        super().__init__(
            f"Oversell of {symbol}: requested {requested}, available {available}",
            code="OVERSELL_DETECTED",
        )
