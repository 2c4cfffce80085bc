import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from treehouse.db.base import Base, TimestampMixin, UUIDMixin, utcnow


class Checkout(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "checkouts"

    member_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("members.id"), nullable=False, index=True
    )
    checkout_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )
    number_of_books: Mapped[int | None] = mapped_column(Integer, nullable=True)
    genres: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    weight: Mapped[float | None] = mapped_column(Float, nullable=True)  # legacy, pounds
    total_weight: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    recorded_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=True
    )
