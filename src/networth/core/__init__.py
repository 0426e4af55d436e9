"""Core utilities and shared functionality."""

from networth.core.timezone import (
    now_local,
    to_local,
    parse_datetime_local,
    LOCAL_TZ,
)
from networth.core.exceptions import (
    AppError,
    ValidationError,
    NotFoundError,
    QuoteUnavailable,
    PersistenceError,
)

__all__ = [
    "now_local",
    "to_local",
    "parse_datetime_local",
    "LOCAL_TZ",
    "AppError",
    "ValidationError",
    "NotFoundError",
    "QuoteUnavailable",
    "PersistenceError",
]
