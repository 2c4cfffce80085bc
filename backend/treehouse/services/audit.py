"""Audit log helper: append-only writes to the audit_logs table."""
import json
import logging
import uuid
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from treehouse.models.audit import AuditLog

logger = logging.getLogger(__name__)


async def log(
    db: AsyncSession,
    action: str,
    entity_type: str,
    entity_id: uuid.UUID | str | None = None,
    actor_id: uuid.UUID | str | None = None,
    actor_email: str | None = None,
    before: Any | None = None,
    after: Any | None = None,
    notes: str | None = None,
) -> AuditLog:
    """Write a single audit log entry.

    Args:
        db: Async session; the caller owns the transaction.
        action: Short verb, e.g. 'import.completed', 'import.rolled_back'.
        entity_type: Domain name of the affected record, e.g. 'import_history'.
        entity_id: PK of the affected record.
        actor_id: User who performed the action (None for system actions).
        actor_email: Denormalised email (preserved if user is later deleted).
        before: Dict snapshot of state before the action (JSON-serialisable).
        after: Dict snapshot of state after the action.
        notes: Free-text annotation.
    """
    entry = AuditLog(
        actor_id=uuid.UUID(str(actor_id)) if actor_id else None,
        actor_email=actor_email,
        action=action,
        entity_type=entity_type,
        entity_id=uuid.UUID(str(entity_id)) if entity_id else None,
        before_state=json.dumps(before, default=str) if before is not None else None,
        after_state=json.dumps(after, default=str) if after is not None else None,
        notes=notes,
    )
    db.add(entry)
    await db.flush()  # get id without committing; caller controls the transaction
    logger.debug("Audit: %s %s/%s", action, entity_type, entity_id)
    return entry


async def log_import_event(db: AsyncSession, history, action: str, before: dict | None = None) -> AuditLog:
    """Audit an import run transition (completed, failed, rolled back).

    The snapshot carries counters and status only; row data stays on the
    ImportHistory row itself.
    """
    after = {
        "import_type": history.import_type,
        "status": history.status,
        "file_name": history.file_name,
        **history.stats,
        "records": len(history.imported_records or []),
    }
    return await log(
        db,
        action=action,
        entity_type="import_history",
        entity_id=history.id,
        actor_id=history.imported_by,
        before=before,
        after=after,
    )
