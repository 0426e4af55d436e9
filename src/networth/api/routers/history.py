"""Net-worth history endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from networth.api.deps import get_holding_service
from networth.api.schemas.history import (
    GrowthPointResponse,
    GrowthSeriesResponse,
    MonthlyGrowthResponse,
    SnapshotListResponse,
    SnapshotResponse,
)
from networth.domain.models import Category
from networth.services import HoldingService

router = APIRouter(prefix="/history", tags=["history"])


@router.get("", response_model=SnapshotListResponse)
def list_snapshots(
    months: Optional[int] = Query(None, ge=1, le=600),
    service: HoldingService = Depends(get_holding_service),
):
    """Snapshots, oldest first; limited to the last `months` months when given."""
    if months is None:
        snapshots = sorted(service.snapshots(), key=lambda s: s.taken_at)
    else:
        snapshots = service.history_window(months)
    return SnapshotListResponse(
        snapshots=[SnapshotResponse.model_validate(s) for s in snapshots],
        count=len(snapshots),
    )


@router.get("/growth", response_model=GrowthSeriesResponse)
def get_growth_series(
    months: int = Query(12, ge=1, le=600),
    service: HoldingService = Depends(get_holding_service),
):
    points = service.growth_series(months)
    return GrowthSeriesResponse(
        months=months,
        points=[GrowthPointResponse.model_validate(p) for p in points],
    )


@router.get("/monthly-growth", response_model=MonthlyGrowthResponse)
def get_monthly_growth(
    category: Optional[Category] = Query(None),
    service: HoldingService = Depends(get_holding_service),
):
    """Growth against last month; for one category's gross total when `category` is given."""
    if category is None:
        return MonthlyGrowthResponse(
            current_total=service.total_net_worth(),
            growth_rate=service.monthly_growth_rate(),
        )
    return MonthlyGrowthResponse(
        category=category,
        current_total=service.total_value(category),
        growth_rate=service.category_growth_rate(category),
    )
