"""Repository layer - data access abstractions and implementations."""

from networth.repositories.protocols import PortfolioStore

__all__ = [
    "PortfolioStore",
]
