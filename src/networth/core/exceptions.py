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


class QuoteUnavailable(AppError):
    """Raised when the quote feed cannot produce a price for a symbol."""

    def __init__(self, symbol: str, reason: str):
        self.symbol = symbol
        self.reason = reason
        super().__init__(f"Quote unavailable for {symbol}: {reason}", code="QUOTE_UNAVAILABLE")


class PersistenceError(AppError):
    """Raised when holdings or snapshots cannot be loaded or saved."""

    def __init__(self, message: str):
        super().__init__(message, code="PERSISTENCE_ERROR")
