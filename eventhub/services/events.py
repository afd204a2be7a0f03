import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import and_, delete, func, literal, or_, select, update
from sqlalchemy.orm import Session

from eventhub.core.errors import CapacityBelowRegistrations, EventNotFound, Forbidden
from eventhub.core.policy import can_create_events, can_manage
from eventhub.domain.models import Identity, TimeFilter, as_utc, utcnow
from eventhub.models.comments import Comment
from eventhub.models.events import Event
from eventhub.models.favorites import Favorite
from eventhub.models.registrations import Registration
from eventhub.stores.sql_store import event_record

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


@dataclass
class EventFilters:
    status: TimeFilter = TimeFilter.UPCOMING
    only_available: bool = False
    category: str | None = None
    organizer_id: int | None = None
    search: str | None = None
    page: int = 1
    page_size: int = 10


def get_event(db: Session, event_id: int) -> Event:
    event = db.get(Event, event_id, populate_existing=True)
    if event is None:
        raise EventNotFound(event_id)
    return event


def create_event(db: Session, identity: Identity | None, data: dict) -> Event:
    if not can_create_events(identity):
        raise Forbidden("Only organizers can create events.")

    data = dict(data)
    data["scheduled_at"] = as_utc(data["scheduled_at"])
    event = Event(**data, booked_count=0, organizer_id=identity.id)  # type: ignore[union-attr]
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Organizer %s created event %s", event.organizer_id, event.id)
    return event


def update_event(db: Session, identity: Identity | None, event_id: int, changes: dict) -> Event:
    event = get_event(db, event_id)
    if not can_manage(identity, event_record(event)):
        raise Forbidden()

    for field in ("title", "is_featured", "scheduled_at"):
        if field in changes and changes[field] is None:
            del changes[field]
    if "scheduled_at" in changes:
        changes["scheduled_at"] = as_utc(changes["scheduled_at"])
    capacity = changes.pop("capacity", None)
    if capacity is not None:
        # Checked against both the counter and the live rows, which can disagree after drift
        live_count = (
            select(func.count(Registration.id))
            .where(Registration.event_id == Event.id)
            .correlate(Event)
            .scalar_subquery()
        )
        stmt = (
            update(Event)
            .where(Event.id == event_id)
            .where(
                or_(
                    literal(capacity) == 0,
                    and_(Event.booked_count <= capacity, live_count <= capacity),
                )
            )
            .values(capacity=capacity)
            .execution_options(synchronize_session=False)
        )
        if db.execute(stmt).rowcount != 1:  # type: ignore[attr-defined]
            db.rollback()
            raise CapacityBelowRegistrations()

    for field, value in changes.items():
        setattr(event, field, value)
    db.commit()
    db.refresh(event)
    return event


def delete_event(db: Session, identity: Identity | None, event_id: int) -> None:
    event = get_event(db, event_id)
    if not can_manage(identity, event_record(event)):
        raise Forbidden()

    db.execute(delete(Comment).where(Comment.event_id == event_id))
    db.execute(delete(Favorite).where(Favorite.event_id == event_id))
    db.delete(event)
    db.commit()
    logger.info("Organizer %s deleted event %s", event.organizer_id, event_id)


def list_events(db: Session, filters: EventFilters, now: datetime | None = None) -> tuple[list[Event], bool]:
    """Return one page of events and whether another page follows."""
    now = now or utcnow()
    stmt = select(Event)

    if filters.status == TimeFilter.UPCOMING:
        stmt = stmt.where(Event.scheduled_at >= now)
    elif filters.status == TimeFilter.PAST:
        stmt = stmt.where(Event.scheduled_at < now)
    if filters.only_available:
        stmt = stmt.where(or_(Event.capacity == 0, Event.booked_count < Event.capacity))
    if filters.category:
        stmt = stmt.where(Event.category == filters.category)
    if filters.organizer_id is not None:
        stmt = stmt.where(Event.organizer_id == filters.organizer_id)
    if filters.search:
        pattern = filters.search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        stmt = stmt.where(Event.title.ilike(f"%{pattern}%", escape="\\"))

    page_size = min(max(filters.page_size, 1), MAX_PAGE_SIZE)
    offset = (max(filters.page, 1) - 1) * page_size
    # Fetch one extra row to know if there is a next page
    stmt = stmt.order_by(Event.scheduled_at, Event.id).offset(offset).limit(page_size + 1)

    events = list(db.scalars(stmt))
    return events[:page_size], len(events) > page_size


def featured_events(db: Session, limit: int = 3) -> list[Event]:
    stmt = (
        select(Event)
        .where(Event.is_featured.is_(True))
        .order_by(Event.scheduled_at, Event.id)
        .limit(limit)
    )
    return list(db.scalars(stmt))


def get_event_stats(db: Session, event_id: int) -> dict:
    event = get_event(db, event_id)

    registration_count = db.scalar(
        select(func.count(Registration.id)).where(Registration.event_id == event_id)
    )

    return {
        "event_id": event.id,
        "capacity": event.capacity,
        "booked_count": event.booked_count,
        "remaining_capacity": event.remaining_capacity,
        "registration_count": int(registration_count or 0),
    }


def recommended_events(db: Session, user_id: int, limit: int = 3, now: datetime | None = None) -> list[Event]:
    """Upcoming events in the categories the user registers for, minus ones they already joined."""
    now = now or utcnow()
    registered = select(Registration.event_id).where(Registration.user_id == user_id)
    categories = list(
        db.scalars(
            select(Event.category)
            .where(Event.id.in_(registered), Event.category.is_not(None))
            .distinct()
        )
    )
    if not categories:
        return []

    stmt = (
        select(Event)
        .where(
            Event.category.in_(categories),
            Event.id.not_in(registered),
            Event.scheduled_at >= now,
        )
        .order_by(Event.scheduled_at, Event.id)
        .limit(limit)
    )
    return list(db.scalars(stmt))
