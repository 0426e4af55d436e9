"""View models for service outputs."""

from networth.domain.views.portfolio import (
    Quote,
    HoldingValuation,
    PortfolioValuation,
    AllocationItem,
    AllocationView,
    GrowthPoint,
    ImportSummary,
    ChangeEvent,
)

__all__ = [
    "Quote",
    "HoldingValuation",
    "PortfolioValuation",
    "AllocationItem",
    "AllocationView",
    "GrowthPoint",
    "ImportSummary",
    "ChangeEvent",
]
