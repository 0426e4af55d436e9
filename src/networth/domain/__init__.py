"""Domain layer - pure business models with no external dependencies."""

from networth.domain.models import (
    Holding,
    PortfolioSnapshot,
    Category,
    Currency,
    Market,
)

__all__ = [
    "Holding",
    "PortfolioSnapshot",
    "Category",
    "Currency",
    "Market",
]
