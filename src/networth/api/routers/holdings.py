"""Holding CRUD endpoints."""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from networth.api.deps import get_holding_service
from networth.api.schemas.holding import (
    HoldingCreateRequest,
    HoldingListResponse,
    HoldingResponse,
    HoldingUpdateRequest,
    extras_to_domain,
)
from networth.core.exceptions import NotFoundError, ValidationError
from networth.domain.models import Category
from networth.services import HoldingCreate, HoldingService, HoldingUpdate

router = APIRouter(prefix="/holdings", tags=["holdings"])


@router.get("", response_model=HoldingListResponse)
def list_holdings(
    category: Optional[Category] = Query(None),
    sort: Optional[Literal["value", "date"]] = Query(None),
    ascending: bool = Query(False),
    service: HoldingService = Depends(get_holding_service),
):
    """
    List holdings, optionally filtered by category.
    sort: "value" or "date"; insertion order when omitted
    """
    if sort == "value":
        holdings = service.holdings_sorted_by_value(ascending=ascending)
    elif sort == "date":
        holdings = service.holdings_sorted_by_date(ascending=ascending)
    else:
        holdings = service.holdings()
    if category is not None:
        holdings = [h for h in holdings if h.category == category]
    return HoldingListResponse(
        holdings=[HoldingResponse.from_domain(h) for h in holdings],
        count=len(holdings),
    )


@router.get("/{holding_id}", response_model=HoldingResponse)
def get_holding(holding_id: str, service: HoldingService = Depends(get_holding_service)):
    try:
        return HoldingResponse.from_domain(service.get_holding(holding_id))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.post("", response_model=HoldingResponse, status_code=201)
async def create_holding(
    data: HoldingCreateRequest,
    service: HoldingService = Depends(get_holding_service),
):
    """Create a holding. A quote refresh starts in the background."""
    try:
        holding = service.add_holding(
            HoldingCreate(
                category=data.category,
                name=data.name,
                value=data.value,
                currency=data.currency,
                note=data.note,
                extras=extras_to_domain(data.extras),
                created_at=data.created_at,
            )
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    return HoldingResponse.from_domain(holding)


@router.patch("/{holding_id}", response_model=HoldingResponse)
async def update_holding(
    holding_id: str,
    data: HoldingUpdateRequest,
    service: HoldingService = Depends(get_holding_service),
):
    """Partially update a holding."""
    try:
        holding = service.update_holding(
            holding_id,
            HoldingUpdate(
                name=data.name,
                value=data.value,
                currency=data.currency,
                note=data.note,
                extras=extras_to_domain(data.extras),
            ),
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return HoldingResponse.from_domain(holding)


@router.delete("/{holding_id}", status_code=204)
async def delete_holding(holding_id: str, service: HoldingService = Depends(get_holding_service)):
    try:
        service.delete_holding(holding_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return Response(status_code=204)
