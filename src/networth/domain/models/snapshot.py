"""Portfolio snapshot model."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class PortfolioSnapshot:
    """
    Point-in-time total valuation in the reporting currency.

    Append-only: snapshots are never edited once recorded.
    growth_rate is a percentage relative to the previous month's baseline.
    """

    taken_at: datetime
    total_value: Decimal
    growth_rate: Decimal = field(default_factory=lambda: Decimal("0"))
