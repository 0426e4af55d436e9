"""CSV export functionality."""

from decimal import Decimal, ROUND_HALF_UP, localcontext
from pathlib import Path
from typing import Iterable

from networth.domain.models import Category, Currency, Holding, Market
from networth.csv.importer import (
    CASH_LABEL,
    CSV_COLUMNS,
    FUND_LABEL,
    INSURANCE_LABEL,
    MORTGAGE_LABEL,
    OTHER_LABEL,
    PROPERTY_LABEL,
    TW_STOCK_LABEL,
    US_STOCK_LABEL,
)

_CATEGORY_LABELS = {
    Category.CASH: CASH_LABEL,
    Category.FUND: FUND_LABEL,
    Category.INSURANCE: INSURANCE_LABEL,
    Category.PROPERTY: PROPERTY_LABEL,
    Category.MORTGAGE: MORTGAGE_LABEL,
    Category.OTHER: OTHER_LABEL,
}


def _clean(text: str) -> str:
    """Keep free text on one line and out of the column separators."""
    for line_break in ("\r\n", "\r", "\n"):
        text = text.replace(line_break, " ")
    return text.replace(",", "，")


def _whole(value: Decimal) -> str:
    # Quantizing needs one digit of precision per integer digit
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 2)
        return str(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class CsvExporter:
    """
    CSV exporter for holdings.

    Writes the same five-column format CsvImporter reads. Equities are
    written as ticker + share count under a market-specific label.
    """

    def export_text(self, holdings: Iterable[Holding]) -> str:
        lines = [",".join(CSV_COLUMNS)]
        for holding in holdings:
            lines.append(",".join(self._row(holding)))
        return "\n".join(lines) + "\n"

    def export_csv(self, holdings: Iterable[Holding], path: str) -> None:
        """
        Export holdings to a CSV file.

        Args:
            holdings: Holdings to write, in order
            path: Output file path
        """
        file_path = Path(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(self.export_text(holdings), encoding="utf-8")

    def _row(self, holding: Holding) -> list[str]:
        created = holding.created_at
        date_str = f"{created.year}/{created.month}/{created.day}"
        note = holding.note

        if holding.category == Category.EQUITY:
            label = US_STOCK_LABEL if holding.market == Market.US else TW_STOCK_LABEL
            name = holding.symbol or holding.name
            shares = holding.shares
            quantity = str(shares) if shares is not None else _whole(holding.value)
        else:
            label = _CATEGORY_LABELS[holding.category]
            name = holding.name
            quantity = _whole(holding.value)
            currency = holding.effective_currency
            if holding.category == Category.CASH and currency != Currency.TWD and currency.value not in note:
                note = f"{note} {currency.value}".strip()

        return [label, _clean(name), quantity, date_str, _clean(note)]
