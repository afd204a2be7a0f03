from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventhub.database.db import Base

if TYPE_CHECKING:
    from eventhub.models.registrations import Registration


class Event(Base):
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    custom_question: Mapped[str | None] = mapped_column(String(500), nullable=True)
    # 0 means unlimited
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    booked_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    scheduled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    organizer_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    registrations: Mapped[list["Registration"]] = relationship(back_populates="event", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("capacity >= 0", name="ck_events_capacity_non_negative"),
        CheckConstraint("booked_count >= 0", name="ck_events_booked_count_non_negative"),
        CheckConstraint(
            "capacity = 0 OR booked_count <= capacity", name="ck_events_booked_count_within_capacity"
        ),
        Index("ix_events_scheduled_at", "scheduled_at"),
    )

    @property
    def remaining_capacity(self) -> int | None:
        if self.capacity == 0:
            return None
        return max(self.capacity - self.booked_count, 0)
