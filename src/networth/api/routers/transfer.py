"""CSV import/export, backup and reset endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import PlainTextResponse

from networth.api.deps import get_context, get_holding_service
from networth.api.schemas.transfer import (
    BackupDocument,
    CsvImportRequest,
    ImportSummaryResponse,
)
from networth.app_context import AppContext
from networth.core.exceptions import ValidationError
from networth.services import HoldingService

router = APIRouter(prefix="/transfer", tags=["transfer"])

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------


@router.post("/csv/import", response_model=ImportSummaryResponse)
async def import_csv(data: CsvImportRequest, service: HoldingService = Depends(get_holding_service)):
    """
    Append holdings parsed from a CSV document.

    Best-effort: unparseable rows are skipped and reported, valid rows are
    imported.
    """
    if not data.content.strip():
        raise HTTPException(status_code=400, detail="CSV content is empty.")
    summary = service.import_from_csv(data.content)
    return ImportSummaryResponse.model_validate(summary)


@router.get("/csv/export")
def export_csv(service: HoldingService = Depends(get_holding_service)):
    """Download holdings as a CSV file."""
    return PlainTextResponse(
        content=service.export_to_csv(),
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="holdings.csv"'},
    )


@router.get("/csv/template")
def csv_template(context: AppContext = Depends(get_context)):
    """Download a CSV template with example rows."""
    return PlainTextResponse(
        content=context.csv_template.template_text(),
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="holdings_template.csv"'},
    )


# ---------------------------------------------------------------------------
# Backup / Reset
# ---------------------------------------------------------------------------


@router.get("/backup", response_model=BackupDocument)
def create_backup(service: HoldingService = Depends(get_holding_service)):
    return BackupDocument(**service.create_backup())


@router.post("/backup/restore", status_code=204)
async def restore_backup(data: BackupDocument, service: HoldingService = Depends(get_holding_service)):
    """Replace all holdings and snapshots with a backup."""
    try:
        service.restore_backup(data.model_dump())
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    return Response(status_code=204)


@router.post("/reset", status_code=204)
async def reset_all(service: HoldingService = Depends(get_holding_service)):
    """Delete every holding, snapshot and cached quote."""
    service.reset_all()
    return Response(status_code=204)
