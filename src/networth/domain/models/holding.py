"""Holding domain model and its typed extension values."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from networth.core.exceptions import ValidationError
from networth.core.timezone import now_local
from networth.domain.models.enums import Category, Currency, Market


@dataclass(frozen=True)
class TextValue:
    value: str


@dataclass(frozen=True)
class IntValue:
    value: int


@dataclass(frozen=True)
class DecimalValue:
    value: Decimal


ExtraValue = Union[TextValue, IntValue, DecimalValue]


def extra_as_text(extra: ExtraValue) -> str:
    """Render any extension value as text."""
    if isinstance(extra, TextValue):
        return extra.value
    if isinstance(extra, IntValue):
        return str(extra.value)
    if isinstance(extra, DecimalValue):
        return str(extra.value)
    raise TypeError(f"Unknown extension value: {extra!r}")


def extra_as_int(extra: ExtraValue) -> Optional[int]:
    """
    Read an extension value as an integer.

    Text is parsed leniently ("200", "200.0"); returns None when the value
    has no integral reading.
    """
    if isinstance(extra, IntValue):
        return extra.value
    if isinstance(extra, DecimalValue):
        if extra.value != extra.value.to_integral_value():
            return None
        return int(extra.value)
    if isinstance(extra, TextValue):
        try:
            parsed = Decimal(extra.value.strip())
        except InvalidOperation:
            return None
        if not parsed.is_finite() or parsed != parsed.to_integral_value():
            return None
        return int(parsed)
    raise TypeError(f"Unknown extension value: {extra!r}")


def extra_as_decimal(extra: ExtraValue) -> Optional[Decimal]:
    """Read an extension value as a Decimal, or None if it is not numeric."""
    if isinstance(extra, DecimalValue):
        return extra.value
    if isinstance(extra, IntValue):
        return Decimal(extra.value)
    if isinstance(extra, TextValue):
        try:
            parsed = Decimal(extra.value.strip())
        except InvalidOperation:
            return None
        return parsed if parsed.is_finite() else None
    raise TypeError(f"Unknown extension value: {extra!r}")


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Holding:
    """
    One tracked asset or liability.

    `value` is the nominal value and is never negative; liabilities are
    subtracted during aggregation, not stored with a sign.
    Category-specific facts live in `extras` (equity symbol/shares/market,
    cash currency override, property location, ...).
    """

    category: Category
    name: str
    value: Decimal = field(default_factory=lambda: Decimal("0"))
    currency: Currency = Currency.TWD
    note: str = ""
    extras: dict[str, ExtraValue] = field(default_factory=dict)
    holding_id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=now_local)
    updated_at: datetime = field(default_factory=now_local)

    def __post_init__(self) -> None:
        if isinstance(self.category, str):
            self.category = Category(self.category)
        if isinstance(self.currency, str):
            self.currency = Currency(self.currency)
        if not isinstance(self.value, Decimal):
            self.value = Decimal(str(self.value))
        if self.value < 0:
            raise ValidationError(f"Holding value must not be negative: {self.value}")

    @property
    def symbol(self) -> Optional[str]:
        """Ticker for equities; falls back to the display name."""
        extra = self.extras.get("symbol")
        if extra is not None:
            text = extra_as_text(extra).strip()
            if text:
                return text
        if self.category == Category.EQUITY and self.name.strip():
            return self.name.strip()
        return None

    @property
    def shares(self) -> Optional[int]:
        extra = self.extras.get("shares")
        return extra_as_int(extra) if extra is not None else None

    @property
    def market(self) -> Optional[Market]:
        """
        Market tag for equities.

        An explicit `market` extra wins; otherwise the legacy `isUSStock`
        flag written by the CSV importer decides.
        """
        extra = self.extras.get("market")
        if extra is not None:
            try:
                return Market(extra_as_text(extra).strip().upper())
            except ValueError:
                return None
        flag = self.extras.get("isUSStock")
        if flag is not None:
            return Market.US if extra_as_text(flag).strip().lower() == "true" else Market.TW
        return None

    @property
    def effective_currency(self) -> Currency:
        """Currency of the nominal value, honouring a cash `currency` override."""
        if self.category == Category.CASH:
            extra = self.extras.get("currency")
            if extra is not None:
                try:
                    return Currency(extra_as_text(extra).strip().upper())
                except ValueError:
                    pass
        return self.currency

    def touch(self) -> None:
        """Mark the holding as updated now."""
        self.updated_at = now_local()
