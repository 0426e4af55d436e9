"""View models for valuation, history and import outputs."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from networth.domain.models.enums import Category, ChangeKind, ValuationSource


@dataclass
class Quote:
    """Last known market price for a symbol."""

    symbol: str
    price: Decimal
    as_of: datetime


@dataclass
class HoldingValuation:
    """Valuation of a single holding in the reporting currency."""

    holding_id: str
    category: Category
    value: Decimal
    source: ValuationSource = ValuationSource.NOMINAL
    warnings: list[str] = field(default_factory=list)


@dataclass
class PortfolioValuation:
    """
    Valuation of the whole holdings set.

    by_category has one entry per asset category; mortgages are already
    subtracted from the property bucket and have no key of their own.
    """

    by_category: dict[Category, Decimal] = field(default_factory=dict)
    total: Decimal = field(default_factory=lambda: Decimal("0"))
    holdings: list[HoldingValuation] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    as_of: Optional[datetime] = None


@dataclass
class AllocationItem:
    """Single item in allocation breakdown."""

    category: Category
    value: Decimal
    percentage: Decimal


@dataclass
class AllocationView:
    """Gross asset allocation breakdown."""

    items: list[AllocationItem] = field(default_factory=list)
    total_value: Decimal = field(default_factory=lambda: Decimal("0"))
    as_of: Optional[datetime] = None


@dataclass
class GrowthPoint:
    """Period-over-period growth between two consecutive snapshots."""

    taken_at: datetime
    total_value: Decimal
    growth_rate: Decimal


@dataclass
class ImportSummary:
    """Summary of CSV import operation."""

    imported_count: int = 0
    skipped_count: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class ChangeEvent:
    """Notification emitted after every state transition."""

    kind: ChangeKind
    holding_id: Optional[str] = None
    error: Optional[str] = None
