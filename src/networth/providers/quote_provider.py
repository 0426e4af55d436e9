"""Quote provider protocol."""

from decimal import Decimal
from typing import Protocol


class QuoteProvider(Protocol):
    """
    Protocol for live price feeds.

    Implementations fetch one market-qualified symbol per call and raise
    QuoteUnavailable on any failure; they never substitute a default price.
    """

    async def fetch_price(self, symbol: str) -> Decimal:
        """Fetch the regular market price for a symbol (e.g. "2330.TW", "AMD", "TWD=X")."""
        ...

    async def aclose(self) -> None:
        """Release network resources."""
        ...
