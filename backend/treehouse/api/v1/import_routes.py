"""CSV data import endpoints: templates, preview, execute, history, rollback."""
import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from treehouse.core.config import settings
from treehouse.core.deps import StaffOrAdmin
from treehouse.core.limiter import limiter
from treehouse.db.session import get_session
from treehouse.schemas.imports import (
    ImportHistoryOut,
    ImportHistoryPage,
    ImportHistorySummary,
    ImportPreview,
    ImportTypeInfo,
    RollbackResult,
)
from treehouse.services.data_import import CSV_TEMPLATES, DataImportError, ImportRunNotFoundError, RollbackStateError
from treehouse.services.data_import.parser import decode_upload
from treehouse.services.data_import.templates import optional_columns, required_columns, template_csv
from treehouse.services.import_rollback import rollback_import
from treehouse.services.import_runs import (
    execute_import,
    get_import_history,
    list_import_history,
    preview_import,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ─── Helpers ───

async def _read_csv_upload(file: UploadFile) -> str:
    name = file.filename or ""
    if file.content_type != "text/csv" and not name.lower().endswith(".csv"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only CSV files are allowed",
        )
    content = await file.read(settings.IMPORT_MAX_UPLOAD_BYTES + 1)
    if len(content) > settings.IMPORT_MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"CSV exceeds {settings.IMPORT_MAX_UPLOAD_BYTES} bytes",
        )
    return decode_upload(content)


# ─── GET /import/types ───

@router.get("/types", response_model=list[ImportTypeInfo], summary="List CSV import types and their columns")
async def list_import_types(current_user: StaffOrAdmin):
    return [
        ImportTypeInfo(
            import_type=import_type,
            required=required_columns(import_type),
            optional=optional_columns(import_type),
        )
        for import_type in CSV_TEMPLATES
    ]


# ─── GET /import/template/{import_type} ───

@router.get("/template/{import_type}", summary="Download a CSV template with an example row")
async def download_template(import_type: str, current_user: StaffOrAdmin):
    if import_type not in CSV_TEMPLATES:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")
    return Response(
        content=template_csv(import_type),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={import_type}_template.csv"},
    )


# ─── POST /import/preview ───

@router.post("/preview", response_model=ImportPreview, summary="Validate a CSV without saving anything")
@limiter.limit(settings.IMPORT_RATE_LIMIT)
async def preview(
    request: Request,
    current_user: StaffOrAdmin,
    import_type: Annotated[str, Form()],
    file: UploadFile = File(...),
):
    csv_text = await _read_csv_upload(file)
    try:
        result = preview_import(csv_text, import_type)
    except DataImportError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return ImportPreview(file_name=file.filename, **result)


# ─── POST /import/execute ───

@router.post(
    "/execute",
    response_model=ImportHistoryOut,
    status_code=status.HTTP_201_CREATED,
    summary="Import a CSV and record the run for rollback",
)
@limiter.limit(settings.IMPORT_RATE_LIMIT)
async def execute(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: StaffOrAdmin,
    import_type: Annotated[str, Form()],
    file: UploadFile = File(...),
):
    csv_text = await _read_csv_upload(file)
    try:
        history = await execute_import(db, csv_text, import_type, current_user.id, file.filename or "upload.csv")
    except DataImportError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Import failed: {exc}")
    return ImportHistoryOut.model_validate(history)


# ─── GET /import/history ───

@router.get("/history", response_model=ImportHistoryPage, summary="List import runs, newest first")
async def history_list(
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: StaffOrAdmin,
    page: Annotated[int, Query(ge=1)] = 1,
):
    result = await list_import_history(db, page=page)
    result["items"] = [ImportHistorySummary.model_validate(h) for h in result["items"]]
    return ImportHistoryPage(**result)


# ─── GET /import/history/{id} ───

@router.get("/history/{import_history_id}", response_model=ImportHistoryOut, summary="Import run detail")
async def history_detail(
    import_history_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: StaffOrAdmin,
):
    history = await get_import_history(db, import_history_id)
    if history is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Import history not found")
    return ImportHistoryOut.model_validate(history)


# ─── POST /import/rollback/{id} ───

@router.post("/rollback/{import_history_id}", response_model=RollbackResult, summary="Delete the records an import created")
async def rollback(
    import_history_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: StaffOrAdmin,
):
    try:
        result = await rollback_import(db, import_history_id)
    except ImportRunNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except RollbackStateError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Rollback failed: {exc}")
    logger.info("Rollback of %s requested by %s", import_history_id, current_user.email)
    return result
