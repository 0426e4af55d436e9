"""JSON codec for holdings and snapshots."""

from decimal import Decimal
from typing import Any

from networth.core.timezone import parse_datetime_local
from networth.domain.models import (
    DecimalValue,
    ExtraValue,
    Holding,
    IntValue,
    PortfolioSnapshot,
    TextValue,
)


def extra_to_dict(extra: ExtraValue) -> dict[str, Any]:
    """Encode an extension value as {"type": ..., "value": ...}."""
    if isinstance(extra, TextValue):
        return {"type": "string", "value": extra.value}
    if isinstance(extra, IntValue):
        return {"type": "integer", "value": extra.value}
    if isinstance(extra, DecimalValue):
        return {"type": "decimal", "value": str(extra.value)}
    raise TypeError(f"Unknown extension value: {extra!r}")


def extra_from_dict(data: dict[str, Any]) -> ExtraValue:
    kind = data.get("type")
    value = data.get("value")
    if kind == "string":
        return TextValue(str(value))
    if kind == "integer":
        return IntValue(int(value))
    if kind in ("decimal", "double"):
        return DecimalValue(Decimal(str(value)))
    raise ValueError(f"Unknown extension value type: {kind!r}")


def holding_to_dict(holding: Holding) -> dict[str, Any]:
    return {
        "id": holding.holding_id,
        "category": holding.category.value,
        "name": holding.name,
        "value": str(holding.value),
        "currency": holding.currency.value,
        "note": holding.note,
        "extras": {key: extra_to_dict(extra) for key, extra in holding.extras.items()},
        "created_at": holding.created_at.isoformat(),
        "updated_at": holding.updated_at.isoformat(),
    }


def holding_from_dict(data: dict[str, Any]) -> Holding:
    return Holding(
        holding_id=data["id"],
        category=data["category"],
        name=data["name"],
        value=Decimal(data["value"]),
        currency=data.get("currency", "TWD"),
        note=data.get("note", ""),
        extras={key: extra_from_dict(extra) for key, extra in data.get("extras", {}).items()},
        created_at=parse_datetime_local(data["created_at"]),
        updated_at=parse_datetime_local(data["updated_at"]),
    )


def snapshot_to_dict(snapshot: PortfolioSnapshot) -> dict[str, Any]:
    return {
        "taken_at": snapshot.taken_at.isoformat(),
        "total_value": str(snapshot.total_value),
        "growth_rate": str(snapshot.growth_rate),
    }


def snapshot_from_dict(data: dict[str, Any]) -> PortfolioSnapshot:
    return PortfolioSnapshot(
        taken_at=parse_datetime_local(data["taken_at"]),
        total_value=Decimal(data["total_value"]),
        growth_rate=Decimal(data.get("growth_rate", "0")),
    )
