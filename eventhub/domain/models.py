import enum
from dataclasses import dataclass
from datetime import datetime, timezone


class RegistrationStatus(str, enum.Enum):
    PENDING = "pending"


class TimeFilter(str, enum.Enum):
    UPCOMING = "upcoming"
    PAST = "past"
    ALL = "all"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything is stored in UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class Identity:
    id: int
    is_organizer: bool = False


@dataclass(frozen=True)
class EventRecord:
    id: int
    title: str
    capacity: int
    booked_count: int
    scheduled_at: datetime
    organizer_id: int
    category: str | None = None

    @property
    def is_unlimited(self) -> bool:
        return self.capacity == 0

    @property
    def remaining_capacity(self) -> int | None:
        if self.is_unlimited:
            return None
        return max(self.capacity - self.booked_count, 0)

    def has_started(self, now: datetime) -> bool:
        return as_utc(self.scheduled_at) <= now


@dataclass(frozen=True)
class RegistrationForm:
    full_name: str
    phone_number: str
    custom_answer: str | None = None


@dataclass(frozen=True)
class RegistrationRecord:
    id: int
    event_id: int
    user_id: int
    status: str
    created_at: datetime
    full_name: str
    phone_number: str
    custom_answer: str | None = None
    event: EventRecord | None = None
