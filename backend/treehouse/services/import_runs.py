"""Import runs: preview, execute and history queries.

A run is tracked by one ImportHistory row. execute_import always leaves that
row committed in a terminal state (completed or failed) before it returns
or raises.
"""
import logging
import math
import uuid
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from treehouse.core.config import settings
from treehouse.models.import_history import ImportHistory, ImportSource, ImportStatus
from treehouse.services import audit
from treehouse.services.data_import import get_importer, parse_csv, validate_row
from treehouse.services.data_import.base import line_number
from treehouse.services.data_import.parser import columns_of
from treehouse.services.data_import.templates import type_key

logger = logging.getLogger(__name__)


def preview_import(csv_text: str, import_type) -> dict:
    """Parse and validate every row without writing anything.

    Raises ParseError for malformed CSV. An unknown import type is not an
    error here: every row comes back invalid with "Unknown import type".
    """
    rows = parse_csv(csv_text)
    preview = {
        "total_rows": len(rows),
        "valid_rows": 0,
        "invalid_rows": 0,
        "errors": [],
        "sample": rows[: settings.IMPORT_PREVIEW_SAMPLE_SIZE],
        "columns": columns_of(rows),
    }
    for index, row in enumerate(rows):
        validation = validate_row(row, import_type)
        if validation.valid:
            preview["valid_rows"] += 1
        else:
            preview["invalid_rows"] += 1
            preview["errors"].append({
                "row": line_number(index),
                "errors": validation.errors,
                "data": row,
            })
    return preview


async def execute_import(
    db: AsyncSession,
    csv_text: str,
    import_type,
    user_id: uuid.UUID,
    file_name: str = "upload.csv",
) -> ImportHistory:
    """Run a CSV import and return its committed ImportHistory.

    Row-level problems are collected on the history; run-level ones
    (ParseError, UnsupportedImportTypeError, or anything unexpected) mark the
    run failed with a single row-0 error and are re-raised.
    """
    history = ImportHistory(
        import_type=type_key(import_type),
        imported_by=user_id,
        source=ImportSource.csv.value,
        file_name=file_name,
        status=ImportStatus.pending.value,
        errors=[],
        imported_records=[],
    )
    db.add(history)
    await db.commit()

    try:
        history.status = ImportStatus.processing.value
        await db.commit()
        rows = parse_csv(csv_text)
        history.total_rows = len(rows)
        importer = get_importer(import_type)
        logger.info(
            "Import %s started: type=%s rows=%d file=%s",
            history.id, history.import_type, len(rows), file_name,
        )
        result = await importer.import_rows(rows, db, user_id)
    except Exception as exc:
        await db.rollback()
        # rollback expired the run; reload it before recording the failure
        await db.refresh(history)
        history.status = ImportStatus.failed.value
        history.errors = [*(history.errors or []), {"row": 0, "data": None, "error": str(exc)}]
        history.completed_at = datetime.now(timezone.utc)
        await audit.log_import_event(db, history, "import.failed")
        await db.commit()
        logger.warning("Import %s failed: %s", history.id, exc)
        raise

    history.successful = result.successful
    history.failed = result.failed
    history.errors = result.errors
    history.imported_records = result.imported_records
    history.status = ImportStatus.completed.value
    history.completed_at = datetime.now(timezone.utc)
    await audit.log_import_event(db, history, "import.completed")
    await db.commit()
    logger.info(
        "Import %s completed: %d successful, %d failed",
        history.id, history.successful, history.failed,
    )
    return history


# ─── History ───

async def get_import_history(db: AsyncSession, import_history_id: uuid.UUID | str) -> ImportHistory | None:
    try:
        key = uuid.UUID(str(import_history_id))
    except ValueError:
        return None
    return await db.get(ImportHistory, key)


async def recent_imports(db: AsyncSession, limit: int = 10) -> list[ImportHistory]:
    stmt = select(ImportHistory).order_by(ImportHistory.started_at.desc()).limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_import_history(db: AsyncSession, page: int = 1, limit: int | None = None) -> dict:
    """Newest-first page of runs plus pagination metadata."""
    limit = limit or settings.IMPORT_HISTORY_PAGE_SIZE
    page = max(page, 1)
    total = (await db.execute(select(func.count()).select_from(ImportHistory))).scalar_one()
    stmt = (
        select(ImportHistory)
        .order_by(ImportHistory.started_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    items = list((await db.execute(stmt)).scalars().all())
    total_pages = math.ceil(total / limit) if total else 0
    return {
        "items": items,
        "total": total,
        "page": page,
        "total_pages": total_pages,
        "has_next_page": page < total_pages,
        "has_prev_page": page > 1,
    }
