"""Portfolio store protocol."""

from typing import Protocol

from networth.domain.models import Holding, PortfolioSnapshot


class PortfolioStore(Protocol):
    """
    Interface for holdings and snapshot persistence.

    Each call is atomic for its caller: a save either fully replaces the
    stored list or raises PersistenceError and leaves it unchanged.
    """

    def load_holdings(self) -> list[Holding]:
        """Load all holdings (empty list if none were ever saved)."""
        ...

    def save_holdings(self, holdings: list[Holding]) -> None:
        """Replace the stored holdings set."""
        ...

    def load_snapshots(self) -> list[PortfolioSnapshot]:
        """Load the snapshot history, in append order."""
        ...

    def save_snapshots(self, snapshots: list[PortfolioSnapshot]) -> None:
        """Replace the stored snapshot history."""
        ...

    def clear_all(self) -> None:
        """Delete holdings and snapshots."""
        ...
