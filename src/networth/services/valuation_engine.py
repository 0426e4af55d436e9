"""Valuation engine: currency-normalised totals with live-quote substitution."""

import logging
from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Optional

from networth.core.timezone import now_local
from networth.domain.models import Category, Currency, Holding, ValuationSource
from networth.domain.views import (
    AllocationItem,
    AllocationView,
    HoldingValuation,
    PortfolioValuation,
)
from networth.services.quote_cache import QuoteCache

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class ValuationEngine:
    """
    Values holdings in the reporting currency (TWD).

    All reads are synchronous and consult only the QuoteCache's last known
    values; the engine never triggers a fetch. Problems with a single holding
    (no live quote, missing extension fields, bad conversion factor) fall
    back to its nominal value and are reported as warnings.
    """

    def __init__(
        self,
        quote_cache: QuoteCache,
        currency_rates: Optional[dict[str, Decimal]] = None,
    ):
        self._quotes = quote_cache
        self._rate_overrides: dict[Currency, Decimal] = {}
        for code, rate in (currency_rates or {}).items():
            self._rate_overrides[Currency(code.upper())] = Decimal(str(rate))

    def conversion_factor(self, currency: Currency) -> Decimal:
        """
        Factor converting one unit of `currency` into the reporting currency.

        USD uses the live FX rate once one has been fetched.
        """
        if currency == Currency.TWD:
            return Decimal("1")
        if currency in self._rate_overrides:
            return self._rate_overrides[currency]
        if currency == Currency.USD:
            live = self._quotes.current_fx_rate()
            if live is not None:
                return live
        return currency.default_rate

    def value_holding(self, holding: Holding) -> HoldingValuation:
        """Value one holding in the reporting currency."""
        if holding.category == Category.EQUITY:
            return self._value_equity(holding)

        result = HoldingValuation(
            holding_id=holding.holding_id,
            category=holding.category,
            value=holding.value,
        )
        converted = self._convert(holding.value, holding.effective_currency, holding, result)
        if converted is not None:
            result.value = converted
        return result

    def evaluate(self, holdings: Iterable[Holding]) -> PortfolioValuation:
        """
        Value the whole holdings set.

        Every asset category appears in by_category (zero if empty); the
        mortgage total is subtracted from property and not reported on its
        own. total is the sum of by_category.
        """
        gross: dict[Category, Decimal] = defaultdict(lambda: ZERO)
        valuation = PortfolioValuation(as_of=now_local())

        for holding in holdings:
            item = self.value_holding(holding)
            gross[holding.category] += item.value
            valuation.holdings.append(item)
            valuation.warnings.extend(item.warnings)

        by_category = {category: gross[category] for category in Category.assets()}
        by_category[Category.PROPERTY] -= gross[Category.MORTGAGE]

        valuation.by_category = by_category
        valuation.total = sum(by_category.values(), ZERO)
        return valuation

    def total_by_category(self, holdings: Iterable[Holding]) -> dict[Category, Decimal]:
        """Per-category totals with mortgages netted against property."""
        return self.evaluate(holdings).by_category

    def total_net_worth(self, holdings: Iterable[Holding]) -> Decimal:
        """cash + equity + fund + insurance + other + (property - mortgage)."""
        return self.evaluate(holdings).total

    def total_value(self, holdings: Iterable[Holding], category: Category) -> Decimal:
        """
        Gross total of one category, live-quote aware for equities.

        Not netted: property returns the property value and mortgage the
        (positive) outstanding balance.
        """
        return sum(
            (self.value_holding(h).value for h in holdings if h.category == category),
            ZERO,
        )

    def allocation(self, holdings: Iterable[Holding]) -> AllocationView:
        """Share of each asset category in the gross asset total (liabilities excluded)."""
        holdings = list(holdings)
        totals = {c: self.total_value(holdings, c) for c in Category.assets()}
        gross_total = sum((v for v in totals.values() if v > 0), ZERO)

        items = []
        for category, value in totals.items():
            if value <= 0:
                continue
            percentage = (value / gross_total * 100).quantize(Decimal("0.01"))
            items.append(AllocationItem(category=category, value=value, percentage=percentage))
        items.sort(key=lambda item: item.value, reverse=True)

        return AllocationView(items=items, total_value=gross_total, as_of=now_local())

    def _value_equity(self, holding: Holding) -> HoldingValuation:
        result = HoldingValuation(
            holding_id=holding.holding_id,
            category=holding.category,
            value=holding.value,
        )
        symbol, shares, market = holding.symbol, holding.shares, holding.market
        if not symbol or shares is None or market is None:
            result.warnings.append(
                f"{holding.name}: missing symbol, shares or market; using nominal value"
            )
            return result

        key = QuoteCache.qualify_symbol(symbol, market)
        price = self._quotes.current_price(key)
        if price is None:
            # No live quote yet: nominal value is already in the reporting currency
            return result

        converted = self._convert(Decimal(shares) * price, market.quote_currency, holding, result)
        if converted is not None:
            result.value = converted
            result.source = ValuationSource.LIVE
        return result

    def _convert(
        self,
        amount: Decimal,
        currency: Currency,
        holding: Holding,
        result: HoldingValuation,
    ) -> Optional[Decimal]:
        """Convert to the reporting currency; None (plus a warning) if the factor is unusable."""
        factor = self.conversion_factor(currency)
        if factor <= 0:
            message = (
                f"{holding.name}: non-positive conversion factor {factor} for "
                f"{currency.value}; using nominal value unconverted"
            )
            logger.warning(message)
            result.warnings.append(message)
            return None
        return amount * factor
