"""Quote providers module."""

from networth.providers.quote_provider import QuoteProvider
from networth.providers.stub_provider import StubQuoteProvider
from networth.providers.yahoo_provider import YahooChartProvider

__all__ = [
    "QuoteProvider",
    "StubQuoteProvider",
    "YahooChartProvider",
]
