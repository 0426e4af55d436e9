"""Stub quote provider for offline/testing use."""

import random
from typing import Optional
from decimal import Decimal

from networth.core.exceptions import QuoteUnavailable


# Deterministic fake prices for common symbols
_STUB_PRICES: dict[str, Decimal] = {
    "2330.TW": Decimal("1050.00"),
    "0056.TW": Decimal("36.85"),
    "0050.TW": Decimal("185.40"),
    "AMD": Decimal("162.30"),
    "TSLA": Decimal("248.75"),
    "AAPL": Decimal("185.50"),
    "NVDA": Decimal("485.25"),
    "TWD=X": Decimal("31.20"),
}


class StubQuoteProvider:
    """
    Stub provider with deterministic fake data for offline operation.

    Uses predefined prices for common symbols; generates seeded random prices
    for unknown symbols unless strict=True, in which case unknown symbols are
    unavailable.
    """

    def __init__(self, seed: int = 42, prices: Optional[dict[str, Decimal]] = None, strict: bool = False):
        self._rng = random.Random(seed)
        self._prices = dict(_STUB_PRICES if prices is None else prices)
        self._strict = strict
        self.calls: list[str] = []

    async def fetch_price(self, symbol: str) -> Decimal:
        self.calls.append(symbol)
        key = symbol.upper()
        if key in self._prices:
            return self._prices[key]
        if self._strict:
            raise QuoteUnavailable(symbol, "unknown symbol")
        price = Decimal(str(50 + self._rng.random() * 200)).quantize(Decimal("0.01"))
        self._prices[key] = price
        return price

    async def aclose(self) -> None:
        return None
