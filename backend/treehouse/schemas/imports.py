"""Pydantic schemas for CSV import preview, history and rollback."""
import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class PreviewRowError(BaseModel):
    row: int
    errors: list[str]
    data: dict[str, str]


class ImportPreview(BaseModel):
    file_name: str | None = None
    total_rows: int
    valid_rows: int
    invalid_rows: int
    errors: list[PreviewRowError]
    sample: list[dict[str, str]]
    columns: list[str]


class ImportRowError(BaseModel):
    row: int
    data: dict[str, Any] | None = None
    error: str


class ImportedRecord(BaseModel):
    model: str
    record_id: str


class ImportStats(BaseModel):
    total_rows: int
    successful: int
    failed: int
    skipped: int


class ImportHistoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    import_type: str
    imported_by: uuid.UUID
    source: str
    file_name: str | None
    stats: ImportStats
    errors: list[ImportRowError]
    imported_records: list[ImportedRecord]
    status: str
    started_at: datetime
    completed_at: datetime | None
    rolled_back_at: datetime | None
    notes: str | None = None


class ImportHistorySummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    import_type: str
    file_name: str | None
    stats: ImportStats
    status: str
    started_at: datetime
    completed_at: datetime | None


class ImportHistoryPage(BaseModel):
    items: list[ImportHistorySummary]
    total: int
    page: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class RollbackError(BaseModel):
    model: str | None
    record_id: str | None
    error: str


class RollbackResult(BaseModel):
    deleted: int
    errors: list[RollbackError]


class ImportTypeInfo(BaseModel):
    import_type: str
    required: list[str]
    optional: list[str]
