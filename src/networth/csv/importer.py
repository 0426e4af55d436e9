"""CSV import functionality."""

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from pathlib import Path
from typing import Callable, Optional

from networth.core.exceptions import ValidationError
from networth.core.timezone import LOCAL_TZ, now_local
from networth.domain.models import (
    Category,
    Currency,
    Holding,
    IntValue,
    Market,
    TextValue,
)
from networth.domain.views import ImportSummary

logger = logging.getLogger(__name__)

# Header row: category, name, quantity, created, note
CSV_COLUMNS = ["類別", "名稱", "數量", "建立於", "備註"]
DATE_FORMAT = "%Y/%m/%d"

CASH_LABEL = "現金"
TW_STOCK_LABEL = "台灣股票"
US_STOCK_LABEL = "美國股票"
FUND_LABEL = "基金"
INSURANCE_LABEL = "保險"
PROPERTY_LABEL = "房產"
MORTGAGE_LABEL = "房貸"
OTHER_LABEL = "其他"

# Label -> (category, market for equities)
LABELS: dict[str, tuple[Category, Optional[Market]]] = {
    CASH_LABEL: (Category.CASH, None),
    TW_STOCK_LABEL: (Category.EQUITY, Market.TW),
    US_STOCK_LABEL: (Category.EQUITY, Market.US),
    FUND_LABEL: (Category.FUND, None),
    INSURANCE_LABEL: (Category.INSURANCE, None),
    "儲蓄險": (Category.INSURANCE, None),
    PROPERTY_LABEL: (Category.PROPERTY, None),
    MORTGAGE_LABEL: (Category.MORTGAGE, None),
    OTHER_LABEL: (Category.OTHER, None),
}

# Checked in this order against the note of cash rows
NOTE_CURRENCIES = [Currency.USD, Currency.JPY, Currency.CNY, Currency.EUR]


class CsvImporter:
    """
    CSV importer for holdings.

    Expected format: 類別,名稱,數量,建立於,備註 (category, name, quantity,
    created, note). Lines are split on plain commas; there is no quoting, so
    a comma inside a field shifts the columns. Rows that cannot be parsed are
    skipped and counted in the summary, never fatal to the batch.
    """

    def __init__(self, clock: Callable[[], datetime] = now_local):
        self._clock = clock

    def import_csv(self, path: str) -> tuple[list[Holding], ImportSummary]:
        """Import holdings from a UTF-8 CSV file."""
        file_path = Path(path)
        if not file_path.exists():
            raise ValidationError(f"File not found: {path}")
        return self.import_text(file_path.read_text(encoding="utf-8-sig"))

    def import_text(self, text: str) -> tuple[list[Holding], ImportSummary]:
        """
        Parse CSV text into holdings.

        The first line is always treated as the header and skipped.
        """
        summary = ImportSummary()
        holdings: list[Holding] = []

        lines = text.splitlines()
        for row_num, line in enumerate(lines[1:], start=2):  # Start at 2 (header is row 1)
            if not line.strip():
                continue
            try:
                holdings.append(self._parse_row(line.split(",")))
                summary.imported_count += 1
            except (ValueError, ArithmeticError, ValidationError) as e:
                summary.skipped_count += 1
                summary.errors.append(f"Row {row_num}: {e}")
                logger.debug("Skipping CSV row %d: %s", row_num, e)

        return holdings, summary

    def _parse_row(self, columns: list[str]) -> Holding:
        if len(columns) < len(CSV_COLUMNS):
            raise ValueError(f"expected {len(CSV_COLUMNS)} columns, got {len(columns)}")

        label, name, quantity_str, date_str, note = (c.strip() for c in columns[:5])

        if label not in LABELS:
            raise ValueError(f"unknown category label: {label!r}")
        category, market = LABELS[label]

        try:
            quantity = Decimal(quantity_str)
        except InvalidOperation:
            raise ValueError(f"invalid quantity: {quantity_str!r}")
        if not quantity.is_finite():
            raise ValueError(f"invalid quantity: {quantity_str!r}")

        created_at = self._parse_date(date_str)
        holding = Holding(
            category=category,
            name=name,
            note=note,
            created_at=created_at,
            updated_at=self._clock(),
        )

        if category == Category.EQUITY:
            shares = int(quantity.to_integral_value(rounding=ROUND_HALF_UP))
            holding.extras = {
                "isUSStock": TextValue("true" if market == Market.US else "false"),
                "shares": IntValue(shares),
                "symbol": TextValue(name),
                "market": TextValue(market.value),
            }
            # Placeholder until a live price arrives
            holding.value = Decimal(shares)
        elif category == Category.CASH:
            currency = next((c for c in NOTE_CURRENCIES if c.value in note), Currency.TWD)
            holding.currency = currency
            holding.extras = {"currency": TextValue(currency.value)}
            holding.value = quantity
        else:
            # Liabilities are stored as magnitudes
            holding.value = abs(quantity) if category.is_liability else quantity

        if holding.value < 0:
            raise ValueError(f"negative quantity: {quantity_str!r}")
        return holding

    def _parse_date(self, value: str) -> datetime:
        try:
            return LOCAL_TZ.localize(datetime.strptime(value, DATE_FORMAT))
        except ValueError:
            return self._clock()
