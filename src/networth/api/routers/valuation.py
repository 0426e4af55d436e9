"""Valuation endpoints: net worth, category totals and allocation."""

from fastapi import APIRouter, Depends

from networth.api.deps import get_holding_service
from networth.api.schemas.valuation import (
    AllocationItemResponse,
    AllocationResponse,
    CategoryTotalResponse,
    HoldingValuationResponse,
    ValuationResponse,
)
from networth.domain.models import Category
from networth.services import HoldingService

router = APIRouter(prefix="/valuation", tags=["valuation"])


@router.get("", response_model=ValuationResponse)
def get_valuation(service: HoldingService = Depends(get_holding_service)):
    """Net worth in TWD with the per-category breakdown."""
    valuation = service.valuation()
    return ValuationResponse(
        total=valuation.total,
        by_category=valuation.by_category,
        holdings=[HoldingValuationResponse.model_validate(h) for h in valuation.holdings],
        warnings=valuation.warnings,
        as_of=valuation.as_of,
    )


@router.get("/categories/{category}", response_model=CategoryTotalResponse)
def get_category_total(category: Category, service: HoldingService = Depends(get_holding_service)):
    """Gross total of one category; liabilities are reported as positive amounts."""
    return CategoryTotalResponse(category=category, total=service.total_value(category))


@router.get("/allocation", response_model=AllocationResponse)
def get_allocation(service: HoldingService = Depends(get_holding_service)):
    allocation = service.allocation()
    return AllocationResponse(
        items=[AllocationItemResponse.model_validate(i) for i in allocation.items],
        total_value=allocation.total_value,
        as_of=allocation.as_of,
    )
