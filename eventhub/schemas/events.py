from datetime import datetime

from pydantic import BaseModel, Field


# ---------- Event ----------
class EventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    category: str | None = Field(default=None, max_length=64)
    location: str | None = Field(default=None, max_length=200)
    is_featured: bool = False
    custom_question: str | None = Field(default=None, max_length=500)
    # 0 means unlimited
    capacity: int = Field(default=0, ge=0)
    scheduled_at: datetime


class EventUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    category: str | None = Field(default=None, max_length=64)
    location: str | None = Field(default=None, max_length=200)
    is_featured: bool | None = None
    custom_question: str | None = Field(default=None, max_length=500)
    capacity: int | None = Field(default=None, ge=0)
    scheduled_at: datetime | None = None


class EventOut(BaseModel):
    id: int
    title: str
    description: str | None
    category: str | None
    location: str | None
    is_featured: bool
    custom_question: str | None
    capacity: int
    booked_count: int
    remaining_capacity: int | None
    scheduled_at: datetime
    organizer_id: int

    class Config:
        from_attributes = True


class EventSummary(BaseModel):
    id: int
    title: str
    category: str | None
    capacity: int
    booked_count: int
    remaining_capacity: int | None
    scheduled_at: datetime
    organizer_id: int

    class Config:
        from_attributes = True


class EventPage(BaseModel):
    items: list[EventOut]
    page: int
    page_size: int
    has_more: bool


class EventStatsOut(BaseModel):
    event_id: int
    capacity: int
    booked_count: int
    remaining_capacity: int | None
    registration_count: int


class ReconcileOut(BaseModel):
    event_id: int
    task_id: str | None
