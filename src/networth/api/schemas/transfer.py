"""Pydantic schemas for import/export and backup endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class CsvImportRequest(BaseModel):
    """CSV document to import, as text."""

    content: str = Field(..., description="CSV text including the header row")


class ImportSummaryResponse(BaseModel):
    """Response schema for CSV import summary."""

    model_config = {"from_attributes": True}

    imported_count: int
    skipped_count: int
    errors: list[str]


class BackupDocument(BaseModel):
    """Full backup of holdings and snapshots."""

    version: int
    created_at: str
    holdings: list[dict[str, Any]]
    snapshots: list[dict[str, Any]] = Field(default_factory=list)
