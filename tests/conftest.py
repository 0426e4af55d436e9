"""
Pytest configuration and fixtures for net-worth tracker tests.

This module provides:
- In-memory SQLite database fixtures
- Deterministic, failing and gated quote providers
- Factory helpers for holdings
- Time helpers for the Asia/Taipei timezone
- Service and store fixtures
"""

import asyncio
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

import pytest
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient

from networth.app_context import AppContext
from networth.config.settings import Settings, reset_settings
from networth.core.exceptions import PersistenceError, QuoteUnavailable
from networth.core.timezone import LOCAL_TZ
from networth.csv import CsvExporter, CsvImporter, CsvTemplateGenerator
from networth.domain.models import (
    Category,
    Currency,
    Holding,
    IntValue,
    Market,
    PortfolioSnapshot,
    TextValue,
)
from networth.main import create_app
from networth.providers import StubQuoteProvider
from networth.repositories.sqlalchemy.database import Base, build_engine, init_db
from networth.repositories.sqlalchemy import SqlAlchemyPortfolioStore
from networth.services import (
    HistoryTracker,
    HoldingService,
    QuoteCache,
    ValuationEngine,
)


# =============================================================================
# TIMEZONE HELPERS
# =============================================================================


def local_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 10,
    minute: int = 0,
    second: int = 0,
) -> datetime:
    """Create a localized datetime in Asia/Taipei."""
    return LOCAL_TZ.localize(datetime(year, month, day, hour, minute, second))


class FakeClock:
    """Settable clock for deterministic timestamps."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed 'now' timestamp for deterministic tests."""
    return local_datetime(2025, 6, 15, 14, 30, 0)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_engine():
    """Create test database engine with shared in-memory SQLite."""
    # Reset settings for clean state
    reset_settings()

    engine = build_engine("sqlite:///:memory:")
    init_db(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_session(test_engine) -> Session:
    """Create test database session."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def portfolio_store(test_session) -> SqlAlchemyPortfolioStore:
    """Provide test PortfolioStore."""
    return SqlAlchemyPortfolioStore(test_session)


class FailingPortfolioStore:
    """Store whose writes always fail; reads return whatever was seeded."""

    def __init__(
        self,
        holdings: Optional[list[Holding]] = None,
        snapshots: Optional[list[PortfolioSnapshot]] = None,
        fail_loads: bool = False,
    ):
        self._holdings = list(holdings or [])
        self._snapshots = list(snapshots or [])
        self._fail_loads = fail_loads

    def load_holdings(self) -> list[Holding]:
        if self._fail_loads:
            raise PersistenceError("Stored holdings are corrupt")
        return list(self._holdings)

    def save_holdings(self, holdings: list[Holding]) -> None:
        raise PersistenceError("Disk full")

    def load_snapshots(self) -> list[PortfolioSnapshot]:
        if self._fail_loads:
            raise PersistenceError("Stored snapshots are corrupt")
        return list(self._snapshots)

    def save_snapshots(self, snapshots: list[PortfolioSnapshot]) -> None:
        raise PersistenceError("Disk full")

    def clear_all(self) -> None:
        raise PersistenceError("Disk full")


# =============================================================================
# QUOTE PROVIDER FIXTURES
# =============================================================================


FIXED_PRICES = {
    "2330.TW": Decimal("600"),
    "0056.TW": Decimal("36.85"),
    "AMD": Decimal("162.30"),
    "TSLA": Decimal("248.75"),
    "TWD=X": Decimal("32.00"),
}


class FailingQuoteProvider:
    """Quote provider that is always unavailable."""

    def __init__(self):
        self.calls: list[str] = []

    async def fetch_price(self, symbol: str) -> Decimal:
        self.calls.append(symbol)
        raise QuoteUnavailable(symbol, "network unavailable")

    async def aclose(self) -> None:
        return None


class FlakyQuoteProvider:
    """Fails the first `failures` calls for each symbol, then returns `price`."""

    def __init__(self, failures: int, price: Decimal = Decimal("100")):
        self._failures = failures
        self._price = price
        self.calls: list[str] = []

    async def fetch_price(self, symbol: str) -> Decimal:
        self.calls.append(symbol)
        if self.calls.count(symbol) <= self._failures:
            raise QuoteUnavailable(symbol, "HTTP 503")
        return self._price

    async def aclose(self) -> None:
        return None


class GatedQuoteProvider:
    """
    Blocks every fetch until released.

    release(symbol, price) completes the oldest pending fetch for symbol.
    """

    def __init__(self):
        self.calls: list[str] = []
        self._pending: dict[str, list[asyncio.Future]] = {}

    async def fetch_price(self, symbol: str) -> Decimal:
        self.calls.append(symbol)
        future = asyncio.get_running_loop().create_future()
        self._pending.setdefault(symbol, []).append(future)
        return await future

    def pending(self, symbol: str) -> int:
        return len([f for f in self._pending.get(symbol, []) if not f.done()])

    def release(self, symbol: str, price: Decimal) -> None:
        for future in self._pending.get(symbol, []):
            if not future.done():
                future.set_result(price)
                return

    async def aclose(self) -> None:
        return None


@pytest.fixture
def stub_provider() -> StubQuoteProvider:
    """Deterministic provider; unknown symbols are unavailable."""
    return StubQuoteProvider(prices=FIXED_PRICES, strict=True)


@pytest.fixture
def failing_provider() -> FailingQuoteProvider:
    return FailingQuoteProvider()


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def quote_cache(stub_provider, clock) -> QuoteCache:
    """Provide test QuoteCache with no retry delay."""
    return QuoteCache(
        provider=stub_provider,
        retry_delay_seconds=0,
        clock=clock,
    )


@pytest.fixture
def valuation_engine(quote_cache) -> ValuationEngine:
    """Provide test ValuationEngine."""
    return ValuationEngine(quote_cache=quote_cache)


@pytest.fixture
def history_tracker(clock) -> HistoryTracker:
    """Provide test HistoryTracker with a fixed clock."""
    return HistoryTracker(clock=clock)


@pytest.fixture
def csv_importer(clock) -> CsvImporter:
    return CsvImporter(clock=clock)


@pytest.fixture
def csv_exporter() -> CsvExporter:
    return CsvExporter()


@pytest.fixture
def csv_template_generator() -> CsvTemplateGenerator:
    return CsvTemplateGenerator()


@pytest.fixture
def holding_service(
    portfolio_store,
    quote_cache,
    valuation_engine,
    history_tracker,
    csv_importer,
    csv_exporter,
    clock,
) -> HoldingService:
    """Provide test HoldingService."""
    return HoldingService(
        store=portfolio_store,
        quote_cache=quote_cache,
        valuation_engine=valuation_engine,
        history_tracker=history_tracker,
        csv_importer=csv_importer,
        csv_exporter=csv_exporter,
        clock=clock,
    )


# =============================================================================
# FACTORY HELPERS
# =============================================================================


def make_cash(
    value: str,
    name: str = "Bank",
    currency: Currency = Currency.TWD,
    note: str = "",
    created_at: Optional[datetime] = None,
) -> Holding:
    """Cash holding with an optional currency override extra."""
    extras = {} if currency == Currency.TWD else {"currency": TextValue(currency.value)}
    return Holding(
        category=Category.CASH,
        name=name,
        value=Decimal(value),
        currency=currency,
        note=note,
        extras=extras,
        created_at=created_at or local_datetime(2025, 6, 5),
    )


def make_equity(
    symbol: str,
    shares: int,
    market: Market = Market.TW,
    nominal: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> Holding:
    """Equity holding carrying symbol, shares and market extras."""
    return Holding(
        category=Category.EQUITY,
        name=symbol,
        value=Decimal(nominal) if nominal is not None else Decimal(shares),
        extras={
            "symbol": TextValue(symbol),
            "shares": IntValue(shares),
            "market": TextValue(market.value),
        },
        created_at=created_at or local_datetime(2025, 6, 5),
    )


def make_holding(category: Category, value: str, name: str = "Item") -> Holding:
    return Holding(
        category=category,
        name=name,
        value=Decimal(value),
        created_at=local_datetime(2025, 6, 5),
    )


@pytest.fixture
def holding_factory() -> Callable[..., Holding]:
    return make_holding


# =============================================================================
# API TEST CLIENT FIXTURE
# =============================================================================


API_PRICES = {
    "2330.TW": Decimal("600"),
    "AMD": Decimal("162.30"),
}


@pytest.fixture
def api_context(test_session) -> AppContext:
    """AppContext on the test database with an offline quote provider."""
    return AppContext(
        settings=Settings(quote_provider="stub"),
        session=test_session,
        provider=StubQuoteProvider(prices=API_PRICES, strict=True),
    )


@pytest.fixture
def client(api_context) -> TestClient:
    """Provide FastAPI test client with test database."""
    app = create_app(api_context)
    with TestClient(app) as c:
        yield c


# =============================================================================
# SAMPLE DATA
# =============================================================================


@pytest.fixture
def sample_csv_content() -> str:
    """Sample valid CSV content for import testing."""
    return (
        "類別,名稱,數量,建立於,備註\n"
        "現金,台新銀行,30000,2025/6/5,包含餐費與交通\n"
        "台灣股票,2330.TW,200,2025/6/5,存股用\n"
        "美國股票,AMD,120,2025/6/5,\n"
        "房產,新莊街90號3樓,22000000,2025/6/5,\n"
        "房貸,新莊街90號3樓,5000000,2025/6/5,\n"
    )


# =============================================================================
# HELPER FUNCTIONS (exported for use in tests)
# =============================================================================


def assert_decimal_equal(
    actual: Decimal,
    expected: Decimal,
    tolerance: Decimal = Decimal("0.01"),
) -> None:
    """Assert two Decimals are equal within tolerance."""
    diff = abs(actual - expected)
    assert diff <= tolerance, f"Expected {expected}, got {actual} (diff={diff})"
