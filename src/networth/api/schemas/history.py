"""Pydantic schemas for history endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from networth.domain.models import Category


class SnapshotResponse(BaseModel):
    model_config = {"from_attributes": True}

    taken_at: datetime
    total_value: Decimal
    growth_rate: Decimal


class SnapshotListResponse(BaseModel):
    snapshots: list[SnapshotResponse]
    count: int


class GrowthPointResponse(BaseModel):
    model_config = {"from_attributes": True}

    taken_at: datetime
    total_value: Decimal
    growth_rate: Decimal


class GrowthSeriesResponse(BaseModel):
    months: int
    points: list[GrowthPointResponse]


class MonthlyGrowthResponse(BaseModel):
    """Growth of the current net worth against last month's latest snapshot (percent)."""

    category: Optional[Category] = None
    current_total: Decimal
    growth_rate: Decimal
