"""Repository protocol definitions (interfaces)."""

from networth.repositories.protocols.portfolio_store import PortfolioStore

__all__ = [
    "PortfolioStore",
]
