"""Quote cache: last known equity prices and the USD FX rate."""

import asyncio
import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable, Optional

from networth.core.exceptions import QuoteUnavailable
from networth.core.timezone import now_local
from networth.domain.models import Category, Holding, Market
from networth.domain.views import Quote
from networth.providers.quote_provider import QuoteProvider

logger = logging.getLogger(__name__)

DEFAULT_FX_SYMBOL = "TWD=X"
DEFAULT_FX_REFRESH_SECONDS = 300.0
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_SECONDS = 2.0


class QuoteCache:
    """
    Caches live prices from a QuoteProvider.

    Reads are synchronous and only ever return the last successfully fetched
    value (or None). Fetch failures are logged and leave cached values as
    they were. A newer fetch for a symbol cancels the one still in flight,
    and fetches for symbols no longer held are cancelled on the next
    holdings refresh.
    """

    def __init__(
        self,
        provider: QuoteProvider,
        fx_symbol: str = DEFAULT_FX_SYMBOL,
        fx_refresh_interval_seconds: float = DEFAULT_FX_REFRESH_SECONDS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._provider = provider
        self._fx_symbol = fx_symbol
        self._fx_interval = fx_refresh_interval_seconds
        self._max_attempts = max(max_attempts, 1)
        self._retry_delay = retry_delay_seconds
        self._clock = clock

        self._quotes: dict[str, Quote] = {}
        self._fx_rate: Optional[Decimal] = None
        self._fx_as_of: Optional[datetime] = None
        self._inflight: dict[str, asyncio.Task] = {}
        self._fx_task: Optional[asyncio.Task] = None

    @staticmethod
    def qualify_symbol(symbol: str, market: Market) -> str:
        """Return the ticker the feed expects, e.g. ("2330", TW) -> "2330.TW"."""
        key = symbol.strip().upper()
        suffix = market.quote_suffix
        if suffix and not key.endswith(suffix):
            key = f"{key}{suffix}"
        return key

    # Synchronous reads

    def current_price(self, symbol: str) -> Optional[Decimal]:
        """Last fetched price for a market-qualified symbol, or None."""
        quote = self._quotes.get(symbol.strip().upper())
        return quote.price if quote else None

    def quote(self, symbol: str) -> Optional[Quote]:
        return self._quotes.get(symbol.strip().upper())

    def current_fx_rate(self) -> Optional[Decimal]:
        """Last fetched USD -> reporting currency rate, or None."""
        return self._fx_rate

    @property
    def fx_as_of(self) -> Optional[datetime]:
        return self._fx_as_of

    @property
    def is_running(self) -> bool:
        return self._fx_task is not None and not self._fx_task.done()

    def clear(self) -> None:
        """Forget all cached equity quotes and drop in-flight fetches. The FX rate is kept."""
        self.cancel_inflight()
        self._quotes.clear()

    def cancel_inflight(self) -> None:
        """Cancel every equity fetch still running; their results are discarded."""
        for key, task in self._inflight.items():
            if not task.done():
                logger.debug("Cancelling fetch for %s", key)
                task.cancel()
        self._inflight.clear()

    # Fetching

    async def fetch_equity_price(self, symbol: str, market: Market) -> Decimal:
        """
        Fetch one equity price and store it.

        Raises QuoteUnavailable; the caller decides on a fallback.
        """
        key = self.qualify_symbol(symbol, market)
        price = await self._provider.fetch_price(key)
        self._store(key, price)
        return price

    async def refresh_symbol(self, symbol: str, market: Market) -> bool:
        """
        Best-effort refresh of one symbol. Returns True if a price was stored.

        Supersedes any fetch still in flight for the same symbol.
        """
        key = self.qualify_symbol(symbol, market)
        previous = self._inflight.get(key)
        if previous is not None and not previous.done():
            previous.cancel()

        task = asyncio.create_task(self._fetch_with_retry(key))
        self._inflight[key] = task
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            if self._inflight.get(key) is task:
                del self._inflight[key]

        if task.cancelled():
            logger.debug("Fetch for %s superseded", key)
            return False
        return task.result()

    async def refresh_holdings(self, holdings: Iterable[Holding]) -> set[str]:
        """
        Refresh prices for every equity holding with a symbol and market.

        Returns the market-qualified symbols refreshed successfully.
        """
        wanted: dict[str, tuple[str, Market]] = {}
        for holding in holdings:
            if holding.category != Category.EQUITY:
                continue
            symbol, market = holding.symbol, holding.market
            if not symbol or market is None:
                continue
            wanted[self.qualify_symbol(symbol, market)] = (symbol, market)

        for key, task in list(self._inflight.items()):
            if key not in wanted and not task.done():
                logger.debug("Dropping fetch for %s, no longer held", key)
                task.cancel()

        keys = list(wanted)
        results = await asyncio.gather(
            *(self.refresh_symbol(*wanted[key]) for key in keys),
        )
        return {key for key, ok in zip(keys, results) if ok}

    async def refresh_fx_rate(self) -> bool:
        """Fetch the FX rate. On failure the previous rate is retained."""
        try:
            rate = await self._provider.fetch_price(self._fx_symbol)
        except QuoteUnavailable as e:
            logger.warning("FX rate refresh failed, keeping %s: %s", self._fx_rate, e.reason)
            return False
        if rate <= 0:
            logger.warning("Ignoring non-positive FX rate %s for %s", rate, self._fx_symbol)
            return False
        self._fx_rate = rate
        self._fx_as_of = self._clock()
        logger.info("FX rate %s = %s", self._fx_symbol, rate)
        return True

    # Periodic refresh

    def start(self) -> None:
        """
        Start the periodic FX refresh on the running event loop.

        Fetches once immediately, then every fx_refresh_interval_seconds.
        """
        if self.is_running:
            return
        self._fx_task = asyncio.create_task(self._fx_loop())

    async def stop(self) -> None:
        """Cancel the FX timer and any in-flight fetches."""
        tasks = [t for t in self._inflight.values() if not t.done()]
        if self._fx_task is not None:
            tasks.append(self._fx_task)
            self._fx_task = None
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._inflight.clear()

    async def aclose(self) -> None:
        await self.stop()
        await self._provider.aclose()

    async def _fx_loop(self) -> None:
        while True:
            await self.refresh_fx_rate()
            await asyncio.sleep(self._fx_interval)

    async def _fetch_with_retry(self, key: str) -> bool:
        for attempt in range(1, self._max_attempts + 1):
            try:
                price = await self._provider.fetch_price(key)
            except QuoteUnavailable as e:
                logger.warning(
                    "Quote fetch for %s failed (attempt %d/%d): %s",
                    key, attempt, self._max_attempts, e.reason,
                )
                if attempt < self._max_attempts:
                    await asyncio.sleep(self._retry_delay)
                continue
            self._store(key, price)
            return True
        return False

    def _store(self, key: str, price: Decimal) -> None:
        self._quotes[key] = Quote(symbol=key, price=price, as_of=self._clock())
