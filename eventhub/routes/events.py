import logging

from fastapi import APIRouter, Depends, Query, Response, status
from kombu.exceptions import OperationalError as BrokerError
from sqlalchemy.orm import Session

from eventhub.core.errors import Forbidden, StoreUnavailable
from eventhub.core.policy import can_manage
from eventhub.database.db import get_db
from eventhub.domain.models import Identity, TimeFilter
from eventhub.routes.deps import get_identity, require_identity
from eventhub.schemas.events import (
    EventCreate,
    EventOut,
    EventPage,
    EventStatsOut,
    EventUpdate,
    ReconcileOut,
)
from eventhub.services import events as catalog
from eventhub.stores.sql_store import event_record
from eventhub.tasks import reconcile_event_capacity_task

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"])


@router.post("", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    db: Session = Depends(get_db),
    identity: Identity | None = Depends(get_identity),
):
    return catalog.create_event(db, identity, payload.model_dump())


@router.get("", response_model=EventPage)
def list_events(
    status_filter: TimeFilter = Query(default=TimeFilter.UPCOMING, alias="status"),
    availability: str = Query(default="all", pattern="^(all|available)$"),
    category: str | None = None,
    organizer_id: int | None = None,
    search: str | None = Query(default=None, max_length=200),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=catalog.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    filters = catalog.EventFilters(
        status=status_filter,
        only_available=availability == "available",
        category=category,
        organizer_id=organizer_id,
        search=search,
        page=page,
        page_size=page_size,
    )
    items, has_more = catalog.list_events(db, filters)
    return {"items": items, "page": page, "page_size": page_size, "has_more": has_more}


@router.get("/featured", response_model=list[EventOut])
def featured_events(limit: int = Query(default=3, ge=1, le=20), db: Session = Depends(get_db)):
    return catalog.featured_events(db, limit)


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: int, db: Session = Depends(get_db)):
    return catalog.get_event(db, event_id)


@router.patch("/{event_id}", response_model=EventOut)
def update_event(
    event_id: int,
    payload: EventUpdate,
    db: Session = Depends(get_db),
    identity: Identity | None = Depends(get_identity),
):
    return catalog.update_event(db, identity, event_id, payload.model_dump(exclude_unset=True))


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: int,
    db: Session = Depends(get_db),
    identity: Identity | None = Depends(get_identity),
):
    catalog.delete_event(db, identity, event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{event_id}/stats", response_model=EventStatsOut)
def event_stats(event_id: int, db: Session = Depends(get_db)):
    return catalog.get_event_stats(db, event_id)


@router.post("/{event_id}/reconcile", response_model=ReconcileOut, status_code=status.HTTP_202_ACCEPTED)
def reconcile_event(
    event_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_identity),
):
    event = catalog.get_event(db, event_id)
    if not can_manage(identity, event_record(event)):
        raise Forbidden()

    # enqueue durable background work to recount the event's registrations
    try:
        result = reconcile_event_capacity_task.delay(event_id)
    except BrokerError as exc:
        logger.warning("Could not enqueue reconciliation for event %s: %s", event_id, exc)
        raise StoreUnavailable() from exc
    return {"event_id": event_id, "task_id": getattr(result, "id", None)}
