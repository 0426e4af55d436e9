"""Enumerations for domain models."""

from decimal import Decimal
from enum import Enum


class Category(str, Enum):
    """Holding categories. Only mortgage is a liability."""

    CASH = "cash"
    EQUITY = "equity"
    FUND = "fund"
    INSURANCE = "insurance"
    PROPERTY = "property"
    MORTGAGE = "mortgage"
    OTHER = "other"

    @property
    def label(self) -> str:
        """Display label."""
        return _CATEGORY_LABELS[self]

    @property
    def is_liability(self) -> bool:
        return self is Category.MORTGAGE

    @classmethod
    def assets(cls) -> list["Category"]:
        """All non-liability categories, in declaration order."""
        return [c for c in cls if not c.is_liability]


_CATEGORY_LABELS = {
    Category.CASH: "現金",
    Category.EQUITY: "股票",
    Category.FUND: "基金",
    Category.INSURANCE: "保險",
    Category.PROPERTY: "房產",
    Category.MORTGAGE: "房貸",
    Category.OTHER: "其他",
}


class Currency(str, Enum):
    """Supported currencies. TWD is the reporting currency."""

    TWD = "TWD"
    USD = "USD"
    JPY = "JPY"
    CNY = "CNY"
    EUR = "EUR"

    @property
    def default_rate(self) -> Decimal:
        """Static conversion factor to TWD, used until a live rate is known."""
        return _DEFAULT_RATES[self]


_DEFAULT_RATES = {
    Currency.TWD: Decimal("1"),
    Currency.USD: Decimal("31.5"),
    Currency.JPY: Decimal("0.21"),
    Currency.CNY: Decimal("4.3"),
    Currency.EUR: Decimal("33.8"),
}


class Market(str, Enum):
    """Equity markets. TW is domestic, US is foreign."""

    TW = "TW"
    US = "US"

    @property
    def is_domestic(self) -> bool:
        return self is Market.TW

    @property
    def quote_suffix(self) -> str:
        """Suffix the quote feed expects on tickers of this market."""
        return ".TW" if self is Market.TW else ""

    @property
    def quote_currency(self) -> Currency:
        """Currency prices in this market are quoted in."""
        return Currency.TWD if self is Market.TW else Currency.USD


class ValuationSource(str, Enum):
    """Where a holding's valuation came from."""

    LIVE = "live"  # shares x cached quote
    NOMINAL = "nominal"  # stored value


class ChangeKind(str, Enum):
    """State transitions announced to subscribers."""

    HOLDING_ADDED = "holding_added"
    HOLDING_UPDATED = "holding_updated"
    HOLDING_DELETED = "holding_deleted"
    IMPORTED = "imported"
    RESTORED = "restored"
    RESET = "reset"
    QUOTES_REFRESHED = "quotes_refreshed"
    ERROR = "error"
