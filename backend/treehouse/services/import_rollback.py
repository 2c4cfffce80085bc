"""Compensating deletes for an import run.

Imports are not wrapped in one transaction, so rollback is best-effort:
each manifest entry is deleted in its own savepoint, failures are reported
per record, and the run is marked rolled_back once every entry has been
attempted. A run can be rolled back only once.
"""
import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from treehouse.models.import_history import ImportHistory, ImportStatus
from treehouse.services import audit
from treehouse.services.data_import.errors import ImportRunNotFoundError, RollbackStateError
from treehouse.services.data_import.registry import get_store

logger = logging.getLogger(__name__)


async def _load_run(db: AsyncSession, import_history_id: uuid.UUID | str) -> ImportHistory:
    try:
        key = uuid.UUID(str(import_history_id))
    except ValueError:
        raise ImportRunNotFoundError(import_history_id) from None
    history = await db.get(ImportHistory, key)
    if history is None:
        raise ImportRunNotFoundError(import_history_id)
    return history


def _describe(exc: Exception) -> str:
    if isinstance(exc, KeyError) and exc.args:
        return str(exc.args[0])
    return str(exc)


async def rollback_import(db: AsyncSession, import_history_id: uuid.UUID | str) -> dict:
    """Delete every record the run created.

    Returns {"deleted": int, "errors": [{model, record_id, error}]}.
    Raises RollbackStateError (nothing mutated) when the run is missing or
    already rolled back.
    """
    history = await _load_run(db, import_history_id)
    if history.status == ImportStatus.rolled_back.value:
        raise RollbackStateError("Import already rolled back")

    before = {"status": history.status}
    deleted = 0
    errors: list[dict] = []

    # Newest first, so records created by a row's side effects outlive the rows that reference them
    for entry in reversed(history.imported_records or []):
        model = entry.get("model")
        record_id = entry.get("record_id")
        try:
            async with db.begin_nested():
                await get_store(model).delete_by_id(db, record_id)
        except Exception as exc:
            errors.append({"model": model, "record_id": record_id, "error": _describe(exc)})
        else:
            deleted += 1

    history.status = ImportStatus.rolled_back.value
    history.rolled_back_at = datetime.now(timezone.utc)
    await audit.log_import_event(db, history, "import.rolled_back", before=before)
    await db.commit()

    logger.info(
        "Import %s rolled back: %d deleted, %d errors",
        history.id, deleted, len(errors),
    )
    return {"deleted": deleted, "errors": errors}
