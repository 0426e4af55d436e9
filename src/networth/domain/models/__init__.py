"""Domain models package."""

from networth.domain.models.enums import (
    Category,
    Currency,
    Market,
    ValuationSource,
    ChangeKind,
)
from networth.domain.models.holding import (
    Holding,
    ExtraValue,
    TextValue,
    IntValue,
    DecimalValue,
    extra_as_text,
    extra_as_int,
    extra_as_decimal,
)
from networth.domain.models.snapshot import PortfolioSnapshot

__all__ = [
    "Category",
    "Currency",
    "Market",
    "ValuationSource",
    "ChangeKind",
    "Holding",
    "ExtraValue",
    "TextValue",
    "IntValue",
    "DecimalValue",
    "extra_as_text",
    "extra_as_int",
    "extra_as_decimal",
    "PortfolioSnapshot",
]
