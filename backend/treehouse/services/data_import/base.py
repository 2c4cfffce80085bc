from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from treehouse.db.base import Base
from treehouse.services.data_import.errors import DuplicateRecordError, RowImportError
from treehouse.services.data_import.registry import EntityType, get_store
from treehouse.services.data_import.validation import validate_row

logger = logging.getLogger(__name__)

Row = dict[str, str]


def line_number(index: int) -> int:
    """0-based body row index -> 1-based CSV line (the header is line 1)."""
    return index + 2


@dataclass
class ImportResult:
    successful: int = 0
    failed: int = 0
    errors: list[dict[str, Any]] = field(default_factory=list)
    imported_records: list[dict[str, str]] = field(default_factory=list)

    def fail(self, row: int, data: Row, error: str) -> None:
        self.failed += 1
        self.errors.append({"row": row, "data": data, "error": error})

    def as_dict(self) -> dict:
        return {
            "successful": self.successful,
            "failed": self.failed,
            "errors": self.errors,
            "imported_records": self.imported_records,
        }


def manifest_entry(entity: EntityType, record_id: uuid.UUID) -> dict[str, str]:
    return {"model": entity.value, "record_id": str(record_id)}


@dataclass(frozen=True)
class DuplicatePolicy:
    """Reject a row when a record with the same natural key already exists."""

    model: type[Base]
    column: str
    key: Callable[[Row], str]
    message: str

    async def exists(self, db: AsyncSession, row: Row) -> bool:
        column = getattr(self.model, self.column)
        stmt = select(self.model.id).where(column == self.key(row)).limit(1)
        result = await db.execute(stmt)
        return result.first() is not None

    def violated_by(self, exc: IntegrityError) -> bool:
        """True when the error is the unique index on the natural key.

        PostgreSQL names the index (ix_members_email), SQLite the column
        (members.email); both say "unique".
        """
        table = self.model.__tablename__
        message = str(exc.orig)
        if "unique" not in message.lower():
            return False
        return f"ix_{table}_{self.column}" in message or f"{table}.{self.column}" in message


class BaseImporter:
    """Validate -> dedupe -> resolve -> create, one savepoint per row.

    Subclasses set `import_type`, `entity` and `duplicate_policy` and
    implement `build`; `resolve` and `after_create` are optional.
    """

    import_type: str
    entity: EntityType
    duplicate_policy: DuplicatePolicy | None = None

    async def import_rows(
        self, rows: Iterable[Row], db: AsyncSession, user_id: uuid.UUID | None = None
    ) -> ImportResult:
        res = ImportResult()
        for index, row in enumerate(rows):
            line = line_number(index)
            validation = validate_row(row, self.import_type)
            if not validation.valid:
                res.fail(line, row, ", ".join(validation.errors))
                continue
            try:
                async with db.begin_nested():
                    created = await self.import_row(row, db, user_id)
            except RowImportError as e:
                res.fail(line, row, str(e))
            except IntegrityError as e:
                res.fail(line, row, self.integrity_message(e))
            except Exception as e:
                logger.warning("%s import: row %d raised %s", self.import_type, line, e)
                res.fail(line, row, str(e))
            else:
                res.successful += 1
                res.imported_records.extend(created)
        return res

    async def import_row(
        self, row: Row, db: AsyncSession, user_id: uuid.UUID | None
    ) -> list[dict[str, str]]:
        """Create one row's records; returns their manifest entries, dependents last."""
        policy = self.duplicate_policy
        if policy is not None and await policy.exists(db, row):
            raise DuplicateRecordError(policy.message)
        refs = await self.resolve(row, db)
        record = await get_store(self.entity).create(db, **self.build(row, refs, user_id))
        side_records = await self.after_create(record, refs, db)
        return [*side_records, manifest_entry(self.entity, record.id)]

    def integrity_message(self, exc: IntegrityError) -> str:
        # A unique-index hit on the natural key is the same outcome as the pre-check
        policy = self.duplicate_policy
        if policy is not None and policy.violated_by(exc):
            return policy.message
        return str(exc.orig)

    async def resolve(self, row: Row, db: AsyncSession) -> dict[str, Any]:
        return {}

    def build(self, row: Row, refs: dict[str, Any], user_id: uuid.UUID | None) -> dict[str, Any]:
        raise NotImplementedError

    async def after_create(self, record: Base, refs: dict[str, Any], db: AsyncSession) -> list[dict[str, str]]:
        return []


def optional(row: Row, name: str) -> str | None:
    value = (row.get(name) or "").strip()
    return value or None
