"""Pydantic schemas for API request/response."""

from networth.api.schemas.holding import (
    ExtraValueModel,
    HoldingCreateRequest,
    HoldingUpdateRequest,
    HoldingResponse,
    HoldingListResponse,
)
from networth.api.schemas.valuation import (
    HoldingValuationResponse,
    ValuationResponse,
    CategoryTotalResponse,
    AllocationItemResponse,
    AllocationResponse,
    QuoteResponse,
    FxRateResponse,
    RefreshResponse,
)
from networth.api.schemas.history import (
    SnapshotResponse,
    SnapshotListResponse,
    GrowthPointResponse,
    GrowthSeriesResponse,
    MonthlyGrowthResponse,
)
from networth.api.schemas.transfer import (
    CsvImportRequest,
    ImportSummaryResponse,
    BackupDocument,
)

__all__ = [
    "ExtraValueModel",
    "HoldingCreateRequest",
    "HoldingUpdateRequest",
    "HoldingResponse",
    "HoldingListResponse",
    "HoldingValuationResponse",
    "ValuationResponse",
    "CategoryTotalResponse",
    "AllocationItemResponse",
    "AllocationResponse",
    "QuoteResponse",
    "FxRateResponse",
    "RefreshResponse",
    "SnapshotResponse",
    "SnapshotListResponse",
    "GrowthPointResponse",
    "GrowthSeriesResponse",
    "MonthlyGrowthResponse",
    "CsvImportRequest",
    "ImportSummaryResponse",
    "BackupDocument",
]
