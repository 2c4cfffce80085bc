import enum
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from treehouse.db.base import Base, UUIDMixin, utcnow


class ImportType(str, enum.Enum):
    members = "members"
    checkouts = "checkouts"
    donations = "donations"
    programs = "programs"
    attendees = "attendees"
    metrics = "metrics"


class ImportSource(str, enum.Enum):
    csv = "csv"
    knack = "knack"
    manual = "manual"
    api = "api"


class ImportStatus(str, enum.Enum):
    pending = "pending"
    processing = "processing"
    completed = "completed"
    failed = "failed"
    rolled_back = "rolled_back"


TERMINAL_STATUSES = (ImportStatus.completed, ImportStatus.failed, ImportStatus.rolled_back)


class ImportHistory(Base, UUIDMixin):
    """One row per import run; `imported_records` is the rollback manifest."""

    __tablename__ = "import_history"
    __table_args__ = (
        Index("ix_import_history_imported_by_started_at", "imported_by", "started_at"),
        Index("ix_import_history_type_status", "import_type", "status"),
    )

    # Kept as a plain string so runs with an unsupported type can still be recorded as failed
    import_type: Mapped[str] = mapped_column(String(50), nullable=False)
    imported_by: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    source: Mapped[str] = mapped_column(String(20), nullable=False, default=ImportSource.csv.value)
    file_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    total_rows: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    successful: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    failed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    skipped: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # [{row, data, error}]
    errors: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    # [{model, record_id}]
    imported_records: Mapped[list[dict[str, str]]] = mapped_column(JSON, nullable=False, default=list)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ImportStatus.pending.value
    )
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rolled_back_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    @property
    def stats(self) -> dict[str, int]:
        return {
            "total_rows": self.total_rows,
            "successful": self.successful,
            "failed": self.failed,
            "skipped": self.skipped,
        }

    @property
    def is_terminal(self) -> bool:
        return self.status in {s.value for s in TERMINAL_STATUSES}
