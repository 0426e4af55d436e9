"""Pydantic schemas for valuation and quote endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from networth.domain.models import Category, Market, ValuationSource


class HoldingValuationResponse(BaseModel):
    model_config = {"from_attributes": True}

    holding_id: str
    category: Category
    value: Decimal
    source: ValuationSource
    warnings: list[str]


class ValuationResponse(BaseModel):
    """Net worth with per-category breakdown (mortgages netted from property)."""

    total: Decimal
    by_category: dict[Category, Decimal]
    holdings: list[HoldingValuationResponse]
    warnings: list[str]
    as_of: Optional[datetime] = None


class CategoryTotalResponse(BaseModel):
    """Gross total for one category."""

    category: Category
    total: Decimal


class AllocationItemResponse(BaseModel):
    model_config = {"from_attributes": True}

    category: Category
    value: Decimal
    percentage: Decimal


class AllocationResponse(BaseModel):
    """Response schema for asset allocation."""

    items: list[AllocationItemResponse]
    total_value: Decimal
    as_of: Optional[datetime] = None


class QuoteResponse(BaseModel):
    """Response schema for a cached quote."""

    symbol: str
    market: Market
    price: Optional[Decimal] = None
    as_of: Optional[datetime] = None


class FxRateResponse(BaseModel):
    symbol: str
    rate: Optional[Decimal] = None
    as_of: Optional[datetime] = None


class RefreshResponse(BaseModel):
    """Symbols whose price was refreshed."""

    refreshed: list[str]
