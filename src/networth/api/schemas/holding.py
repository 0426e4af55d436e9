"""Pydantic schemas for holding endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

from networth.domain.models import (
    Category,
    Currency,
    DecimalValue,
    ExtraValue,
    Holding,
    IntValue,
    TextValue,
)


class ExtraValueModel(BaseModel):
    """Typed extension value as it appears on the wire."""

    type: Literal["string", "integer", "decimal"]
    value: Union[str, int, Decimal]

    def to_domain(self) -> ExtraValue:
        if self.type == "string":
            return TextValue(str(self.value))
        if self.type == "integer":
            return IntValue(int(self.value))
        return DecimalValue(Decimal(str(self.value)))

    @classmethod
    def from_domain(cls, extra: ExtraValue) -> "ExtraValueModel":
        if isinstance(extra, TextValue):
            return cls(type="string", value=extra.value)
        if isinstance(extra, IntValue):
            return cls(type="integer", value=extra.value)
        return cls(type="decimal", value=extra.value)


def extras_to_domain(extras: Optional[dict[str, ExtraValueModel]]) -> Optional[dict[str, ExtraValue]]:
    if extras is None:
        return None
    return {key: model.to_domain() for key, model in extras.items()}


class HoldingCreateRequest(BaseModel):
    """Request schema for creating a holding."""

    category: Category = Field(..., description="Holding category")
    name: str = Field(..., min_length=1, max_length=255, description="Display name or ticker")
    value: Decimal = Field(default=Decimal("0"), ge=0, description="Nominal value")
    currency: Currency = Field(default=Currency.TWD, description="Currency of the nominal value")
    note: str = Field(default="", max_length=500)
    extras: dict[str, ExtraValueModel] = Field(default_factory=dict)
    created_at: Optional[datetime] = Field(
        default=None,
        description="Creation time (Asia/Taipei); defaults to now",
    )


class HoldingUpdateRequest(BaseModel):
    """Request schema for updating a holding (partial update)."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    value: Optional[Decimal] = Field(default=None, ge=0)
    currency: Optional[Currency] = None
    note: Optional[str] = Field(default=None, max_length=500)
    extras: Optional[dict[str, ExtraValueModel]] = None


class HoldingResponse(BaseModel):
    """Response schema for a single holding."""

    holding_id: str
    category: Category
    name: str
    value: Decimal
    currency: Currency
    note: str
    extras: dict[str, ExtraValueModel]
    symbol: Optional[str] = None
    shares: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, holding: Holding) -> "HoldingResponse":
        return cls(
            holding_id=holding.holding_id,
            category=holding.category,
            name=holding.name,
            value=holding.value,
            currency=holding.currency,
            note=holding.note,
            extras={k: ExtraValueModel.from_domain(v) for k, v in holding.extras.items()},
            symbol=holding.symbol,
            shares=holding.shares,
            created_at=holding.created_at,
            updated_at=holding.updated_at,
        )


class HoldingListResponse(BaseModel):
    """Response schema for listing holdings."""

    holdings: list[HoldingResponse]
    count: int
