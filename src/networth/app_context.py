"""Application context: builds every service once and wires them explicitly.

Consumers (the HTTP API, scripts, tests) receive the context or its services
as parameters; nothing is looked up from module-level singletons.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from networth.config.settings import Settings, get_settings, set_settings
from networth.core.exceptions import ValidationError
from networth.csv import CsvExporter, CsvImporter, CsvTemplateGenerator
from networth.providers import QuoteProvider, StubQuoteProvider, YahooChartProvider
from networth.repositories.sqlalchemy import (
    SqlAlchemyPortfolioStore,
    open_session,
    reset_database,
)
from networth.services import (
    HistoryTracker,
    HoldingService,
    QuoteCache,
    ValuationEngine,
)

logger = logging.getLogger(__name__)


def build_quote_provider(settings: Settings) -> QuoteProvider:
    """Create the quote provider named by settings.quote_provider."""
    name = settings.quote_provider.lower()
    if name == "yahoo":
        return YahooChartProvider(
            base_url=settings.quote_base_url,
            timeout_seconds=settings.quote_timeout_seconds,
        )
    if name == "stub":
        return StubQuoteProvider()
    raise ValidationError(f"Unknown quote provider: {settings.quote_provider}")


class AppContext:
    """
    Owns the process-wide service graph.

    Construct once at startup, call start() from the event loop to begin
    periodic FX refreshes and close() on shutdown.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[Session] = None,
        provider: Optional[QuoteProvider] = None,
    ):
        if settings is not None:
            set_settings(settings)
        self.settings = settings or get_settings()

        self._owns_session = session is None
        if session is None:
            if settings is not None:
                reset_database()
            session = open_session()
        self._session = session

        self.store = SqlAlchemyPortfolioStore(session)
        self.quote_cache = QuoteCache(
            provider=provider or build_quote_provider(self.settings),
            fx_symbol=self.settings.fx_symbol,
            fx_refresh_interval_seconds=self.settings.fx_refresh_interval_seconds,
            max_attempts=self.settings.quote_max_attempts,
            retry_delay_seconds=self.settings.quote_retry_delay_seconds,
        )
        self.valuation = ValuationEngine(
            quote_cache=self.quote_cache,
            currency_rates=self.settings.currency_rates,
        )
        self.history = HistoryTracker()
        self.csv_importer = CsvImporter()
        self.csv_exporter = CsvExporter()
        self.csv_template = CsvTemplateGenerator()
        self.holdings = HoldingService(
            store=self.store,
            quote_cache=self.quote_cache,
            valuation_engine=self.valuation,
            history_tracker=self.history,
            csv_importer=self.csv_importer,
            csv_exporter=self.csv_exporter,
        )

    async def start(self) -> None:
        """Start the FX timer and kick off a first quote refresh."""
        self.quote_cache.start()
        self.holdings.schedule_refresh()

    async def stop(self) -> None:
        """Cancel quote refreshes and the FX timer."""
        self.holdings.cancel_refresh()
        await self.quote_cache.stop()

    async def close(self) -> None:
        """Stop background work and release resources."""
        await self.stop()
        await self.quote_cache.aclose()
        self._session.close()
        if self._owns_session:
            reset_database()
        logger.info("Application context closed")
