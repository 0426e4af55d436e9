"""Yahoo Finance chart endpoint provider."""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import httpx

from networth.core.exceptions import QuoteUnavailable

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://query1.finance.yahoo.com/v8/finance/chart"
DEFAULT_TIMEOUT_SECONDS = 10.0
USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
)


def parse_regular_market_price(payload: Any) -> Decimal:
    """
    Extract chart.result[0].meta.regularMarketPrice from a chart response.

    Raises ValueError when the field is missing or not a positive number.
    """
    try:
        meta = payload["chart"]["result"][0]["meta"]
        raw = meta["regularMarketPrice"]
    except (KeyError, IndexError, TypeError) as e:
        raise ValueError("missing regularMarketPrice") from e
    if isinstance(raw, bool) or not isinstance(raw, (int, float, str)):
        raise ValueError(f"non-numeric regularMarketPrice: {raw!r}")
    try:
        price = Decimal(str(raw))
    except InvalidOperation as e:
        raise ValueError(f"non-numeric regularMarketPrice: {raw!r}") from e
    if not price.is_finite() or price <= 0:
        raise ValueError(f"invalid regularMarketPrice: {raw!r}")
    return price


class YahooChartProvider:
    """Fetches prices and FX rates from the Yahoo Finance v8 chart API."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(
            timeout=timeout_seconds,
            headers={"User-Agent": USER_AGENT},
        )

    async def fetch_price(self, symbol: str) -> Decimal:
        url = f"{self._base_url}/{symbol}"
        params = {"interval": "1d", "range": "1d"}
        try:
            response = await self._client.get(url, params=params)
        except httpx.TimeoutException as e:
            raise QuoteUnavailable(symbol, "timeout") from e
        except httpx.HTTPError as e:
            raise QuoteUnavailable(symbol, f"transport error: {e}") from e

        if response.status_code < 200 or response.status_code >= 300:
            raise QuoteUnavailable(symbol, f"HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise QuoteUnavailable(symbol, "malformed body") from e

        try:
            price = parse_regular_market_price(payload)
        except ValueError as e:
            raise QuoteUnavailable(symbol, str(e)) from e

        logger.debug("Fetched %s = %s", symbol, price)
        return price

    async def aclose(self) -> None:
        await self._client.aclose()
