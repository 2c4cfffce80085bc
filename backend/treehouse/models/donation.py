import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from treehouse.db.base import Base, TimestampMixin, UUIDMixin, utcnow

DONATION_TYPES = ("used", "new")


class Donation(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "donations"

    donation_type: Mapped[str] = mapped_column(String(20), nullable=False, default="used")
    donor_type: Mapped[str] = mapped_column(String(20), nullable=False, default="undisclosed")
    donor_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    member_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("members.id"), nullable=True, index=True
    )
    number_of_books: Mapped[int] = mapped_column(Integer, nullable=False)
    condition: Mapped[str | None] = mapped_column(String(50), nullable=True)
    genres: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    monetary_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    donated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )
    recorded_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=True
    )
