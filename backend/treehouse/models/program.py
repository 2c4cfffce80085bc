from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from treehouse.db.base import Base, TimestampMixin, UUIDMixin

TEMPLATE_TYPES = ("custom", "classroom", "workshop", "camp")


class Program(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "programs"

    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    template_type: Mapped[str] = mapped_column(String(50), nullable=False, default="custom")
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Classroom settings
    auto_sync_attendees: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    require_parent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    @property
    def syncs_attendees(self) -> bool:
        return self.template_type == "classroom" and bool(self.auto_sync_attendees)
